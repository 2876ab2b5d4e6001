"""Shared base for host resolvers: timing and failure containment."""

from __future__ import annotations

import time
from typing import ClassVar

import httpx
import structlog

from resolvarr.domain.entities.resolution import HostKind, ResolutionAttempt
from resolvarr.domain.exceptions import ResolutionError

log = structlog.get_logger(__name__)


class HostResolver:
    """Base class implementing ``HostResolverPort``.

    Subclasses set ``host_kind`` and implement ``_resolve``. Whatever
    ``_resolve`` raises is turned into a ``FAILED`` attempt here, so one
    broken provider never affects sibling resolutions.
    """

    host_kind: ClassVar[HostKind] = HostKind.UNKNOWN

    def __init__(self, http_client: httpx.AsyncClient, *, timeout: float = 15.0) -> None:
        self._http = http_client
        self._timeout = timeout

    @property
    def kind(self) -> HostKind:
        return self.host_kind

    async def _resolve(self, url: str, started: float) -> ResolutionAttempt:
        raise NotImplementedError

    async def resolve(self, url: str) -> ResolutionAttempt:
        started = time.perf_counter()
        host = self.host_kind.value
        try:
            attempt = await self._resolve(url, started)
        except ResolutionError as exc:
            log.warning(
                "hoster_resolve_failed", host=host, url=url, error=exc.describe()
            )
            return ResolutionAttempt.failed(
                url, self.host_kind, exc.describe(), started=started
            )
        except httpx.HTTPError as exc:
            log.warning(
                "hoster_resolve_http_error", host=host, url=url, error=str(exc)
            )
            return ResolutionAttempt.failed(
                url, self.host_kind, f"NetworkFailure: {exc}", started=started
            )
        except Exception as exc:
            log.exception("hoster_resolve_error", host=host, url=url)
            return ResolutionAttempt.failed(
                url, self.host_kind, f"{type(exc).__name__}: {exc}", started=started
            )

        log.info(
            "hoster_resolve_success",
            host=host,
            status=attempt.status.value,
            count=len(attempt.urls),
            duration_ms=attempt.duration_ms,
        )
        return attempt
