"""GDFlix/GDTot link-list resolver.

A GDFlix file page is a list of mirror buttons. Every button target whose
host belongs to a known provider family becomes a next hop.
"""

from __future__ import annotations

from urllib.parse import urlparse

import httpx

from resolvarr.domain.entities.resolution import HostKind, ResolutionAttempt
from resolvarr.domain.exceptions import PatternNotFound
from resolvarr.infrastructure.common.html_selectors import (
    extract_links,
    is_absolute_http,
    parse_html,
)

from ._base import HostResolver
from ._http import fetch_page
from .classification import HostTable, is_excluded


class GDFlixResolver(HostResolver):
    """Collects provider links from GDFlix pages."""

    host_kind = HostKind.GDFLIX

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        host_table: HostTable,
        *,
        timeout: float = 15.0,
    ) -> None:
        super().__init__(http_client, timeout=timeout)
        self._hosts = host_table

    def _is_mirror(self, href: str, page_url: str, file_id: str) -> bool:
        if not is_absolute_http(href) or is_excluded(href):
            return False
        if href.rstrip("/") == page_url.rstrip("/"):
            return False
        # Links back to the same file on the same host are navigation.
        if file_id and file_id in href and self._hosts.classify(href) is self.host_kind:
            return False
        return self._hosts.classify(href).is_provider

    async def _resolve(self, url: str, started: float) -> ResolutionAttempt:
        page = await fetch_page(self._http, url, timeout=self._timeout)
        page_url = str(page.url)
        file_id = urlparse(page_url).path.rstrip("/").rsplit("/", 1)[-1]

        links = [
            link["href"]
            for link in extract_links(
                parse_html(page.text), "a, button", base_url=page_url
            )
            if self._is_mirror(link["href"], page_url, file_id)
        ]
        if not links:
            raise PatternNotFound("no mirror links on page")
        return ResolutionAttempt.intermediate(
            url, self.host_kind, list(dict.fromkeys(links)), started=started
        )
