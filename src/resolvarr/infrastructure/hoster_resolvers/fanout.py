"""Aggregator pages: one source link fanning out to many provider links."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import httpx
import structlog

from resolvarr.domain.entities.resolution import HostKind, ResolvedLink
from resolvarr.domain.exceptions import PatternNotFound, ResolutionError
from resolvarr.infrastructure.common.html_selectors import (
    extract_links,
    is_absolute_http,
    parse_html,
)

from ._http import fetch_page
from .classification import HostTable, is_excluded

log = structlog.get_logger(__name__)

# Link-list containers used when no anchor matches a known provider.
_FALLBACK_CONTAINERS = (
    "#content_for_display a.link",
    ".entry-content a",
    ".download-links-div a",
)

BranchResolver = Callable[[str, int], Awaitable[ResolvedLink]]


class FanOutCoordinator:
    """Discovers provider links on an aggregator page and resolves each.

    Branches run concurrently and are isolated: a failing branch is logged
    and contributes nothing, it never cancels or fails its siblings.
    """

    host_kind = HostKind.AGGREGATOR

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        host_table: HostTable,
        *,
        timeout: float = 15.0,
    ) -> None:
        self._http = http_client
        self._hosts = host_table
        self._timeout = timeout

    async def discover(self, url: str) -> list[str]:
        """Provider links on the aggregator page, in document order."""
        page = await fetch_page(self._http, url, timeout=self._timeout)
        page_url = str(page.url)
        root = parse_html(page.text)

        links = [
            link["href"]
            for link in extract_links(root, "a[href]", base_url=page_url)
            if self._hosts.classify(link["href"]).is_provider
            and not is_excluded(link["href"])
        ]
        if not links:
            links = [
                link["href"]
                for link in extract_links(root, *_FALLBACK_CONTAINERS, base_url=page_url)
                if is_absolute_http(link["href"])
                and not is_excluded(link["href"])
                and link["href"] != page_url
            ]
            if links:
                log.debug("fanout_container_fallback", url=url, count=len(links))
        if not links:
            raise PatternNotFound("no provider links on aggregator page")
        return list(dict.fromkeys(links))

    async def resolve(
        self,
        url: str,
        hop_budget: int,
        resolve_branch: BranchResolver,
    ) -> ResolvedLink:
        """Resolve every discovered link with ``hop_budget - 1`` hops left."""
        try:
            links = await self.discover(url)
        except ResolutionError as exc:
            log.warning("fanout_discovery_failed", url=url, error=exc.describe())
            return ResolvedLink(
                original_url=url,
                terminal_urls=(url,),
                degraded=True,
                metadata={"reason": exc.describe()},
            )

        log.info("fanout_started", url=url, branches=len(links))
        results = await asyncio.gather(
            *(resolve_branch(link, hop_budget - 1) for link in links),
            return_exceptions=True,
        )

        terminals: list[str] = []
        best_known: list[str] = []
        for link, result in zip(links, results):
            if isinstance(result, BaseException):
                log.warning(
                    "fanout_branch_error",
                    url=url,
                    branch=link,
                    error=f"{type(result).__name__}: {result}",
                )
                best_known.append(link)
            elif result.degraded:
                best_known.extend(result.terminal_urls)
            else:
                terminals.extend(result.terminal_urls)

        succeeded = bool(terminals)
        log.info(
            "fanout_finished",
            url=url,
            branches=len(links),
            terminals=len(terminals),
            degraded=not succeeded,
        )
        if succeeded:
            return ResolvedLink(url, tuple(dict.fromkeys(terminals)))
        return ResolvedLink(url, tuple(dict.fromkeys(best_known)) or (url,), degraded=True)
