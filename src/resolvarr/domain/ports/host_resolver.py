"""Port for resolving one intermediate URL by one hop."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from resolvarr.domain.entities.resolution import HostKind, ResolutionAttempt


@runtime_checkable
class HostResolverPort(Protocol):
    """Resolves an intermediate URL of one provider family.

    Implementations handle site-specific extraction logic (page markup,
    AJAX endpoints, metadata APIs, URL rewriting). They never raise:
    every failure is reported as a ``FAILED`` attempt.
    """

    @property
    def kind(self) -> HostKind:
        """Provider family this resolver handles."""
        ...

    async def resolve(self, url: str) -> ResolutionAttempt:
        """Resolve *url* by one hop."""
        ...
