"""Batch link resolution use case.

Scraped ``(label, url)`` pairs for one content item -> resolved records,
in input order.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol

import structlog

from resolvarr.domain.entities.resolution import (
    LinkRequest,
    LinkResolution,
    ResolvedLink,
)

log = structlog.get_logger(__name__)


class _LinkResolver(Protocol):
    """Resolves one URL; never raises."""

    async def resolve(
        self, url: str, hop_budget: int | None = None
    ) -> ResolvedLink: ...


class ResolveLinksUseCase:
    """Resolves every link of a content item with bounded concurrency."""

    def __init__(self, *, resolver: _LinkResolver, max_concurrent: int = 8) -> None:
        self._resolver = resolver
        self._max_concurrent = max(1, max_concurrent)

    async def execute(
        self,
        requests: list[LinkRequest],
        *,
        hop_budget: int | None = None,
    ) -> list[LinkResolution]:
        if not requests:
            return []

        started = time.perf_counter()
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _resolve_one(req: LinkRequest) -> LinkResolution:
            async with semaphore:
                result = await self._resolver.resolve(req.url, hop_budget)
            return LinkResolution(request=req, result=result)

        results = await asyncio.gather(*(_resolve_one(req) for req in requests))

        log.info(
            "resolve_links_finished",
            links=len(requests),
            degraded=sum(1 for r in results if r.result.degraded),
            duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
        )
        return list(results)
