"""Domain entities for provider link resolution.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class HostKind(str, Enum):
    """Closed set of known provider families.

    Every kind except ``AGGREGATOR`` and ``UNKNOWN`` is bound to exactly one
    host resolver.
    """

    AGGREGATOR = "aggregator"
    GATED_REDIRECT = "gated_redirect"
    HUBDRIVE = "hubdrive"
    HUBCLOUD = "hubcloud"
    GDFLIX = "gdflix"
    PIXELDRAIN = "pixeldrain"
    GOFILE = "gofile"
    PACKED_EMBED = "packed_embed"
    BASE64_REDIRECT = "base64_redirect"
    UNKNOWN = "unknown"

    @property
    def is_provider(self) -> bool:
        """True for families that a fan-out page may link to."""
        return self not in (HostKind.AGGREGATOR, HostKind.UNKNOWN)


class OutcomeStatus(str, Enum):
    TERMINAL = "terminal"
    INTERMEDIATE = "intermediate"
    FAILED = "failed"


@dataclass(frozen=True)
class IntermediateURL:
    """A scraped URL together with the host family it was classified as."""

    url: str
    host: HostKind = HostKind.UNKNOWN


@dataclass(frozen=True)
class ResolutionAttempt:
    """Outcome of one resolver invocation (one hop).

    ``urls`` holds terminal URLs for ``TERMINAL``, next hops for
    ``INTERMEDIATE`` and, for ``FAILED``, the best URL the resolver could
    fall back to (usually empty).
    """

    url: str
    host: HostKind
    status: OutcomeStatus
    urls: tuple[str, ...] = ()
    reason: str | None = None
    duration_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def terminal(
        cls,
        url: str,
        host: HostKind,
        urls: list[str] | tuple[str, ...],
        *,
        started: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ResolutionAttempt:
        return cls(
            url=url,
            host=host,
            status=OutcomeStatus.TERMINAL,
            urls=tuple(urls),
            duration_ms=_elapsed_ms(started),
            metadata=metadata or {},
        )

    @classmethod
    def intermediate(
        cls,
        url: str,
        host: HostKind,
        next_urls: list[str] | tuple[str, ...],
        *,
        started: float | None = None,
    ) -> ResolutionAttempt:
        return cls(
            url=url,
            host=host,
            status=OutcomeStatus.INTERMEDIATE,
            urls=tuple(next_urls),
            duration_ms=_elapsed_ms(started),
        )

    @classmethod
    def failed(
        cls,
        url: str,
        host: HostKind,
        reason: str,
        *,
        fallback_urls: list[str] | tuple[str, ...] = (),
        started: float | None = None,
    ) -> ResolutionAttempt:
        return cls(
            url=url,
            host=host,
            status=OutcomeStatus.FAILED,
            urls=tuple(fallback_urls),
            reason=reason,
            duration_ms=_elapsed_ms(started),
        )


@dataclass(frozen=True)
class GatePayload:
    """Decoded data from a gated redirector page."""

    token: str  # opaque continuation token ("data")
    continuation_host: str  # follow-up endpoint ("wp_http1")
    wait_seconds: float  # mandatory wait announced by the gate ("total_time")


@dataclass(frozen=True)
class ResolvedLink:
    """Engine output for one original link.

    ``terminal_urls`` is never empty when produced by the orchestrator:
    on total failure it holds the original URL and ``degraded`` is set.
    """

    original_url: str
    terminal_urls: tuple[str, ...]
    degraded: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def fallback(cls, url: str) -> ResolvedLink:
        """Best-effort result that hands the original URL back."""
        return cls(original_url=url, terminal_urls=(url,), degraded=True)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "originalLink": self.original_url,
            "terminalURLs": list(self.terminal_urls),
            "degraded": self.degraded,
        }
        if self.metadata:
            data["metadata"] = self.metadata
        return data


@dataclass(frozen=True)
class LinkRequest:
    """One scraped link: a human-facing label (quality/size) and its URL."""

    url: str
    label: str = ""


@dataclass(frozen=True)
class LinkResolution:
    """A ``LinkRequest`` paired with its resolution, ready for serialization."""

    request: LinkRequest
    result: ResolvedLink

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.request.label, **self.result.to_dict()}


def _elapsed_ms(started: float | None) -> float:
    if started is None:
        return 0.0
    return round((time.perf_counter() - started) * 1000.0, 2)
