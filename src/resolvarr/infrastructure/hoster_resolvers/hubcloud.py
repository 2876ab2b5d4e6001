"""HubCloud / VCloud two-hop gateway resolver.

Hop 1: the file page links to a gateway page, either through a download
anchor or an inline ``var url = '…'`` assignment.
Hop 2: the gateway page lists server buttons. Terminal links are picked
with ordered fallbacks:

1. anchors pointing at a CDN host or a media file,
2. server buttons (``btn-danger`` 10Gbps / ``btn-success`` Server 1, …),
3. any anchor whose text mentions download/fast.

Each picked link gets one HEAD request without automatic redirects so a
single redirect (e.g. a signed CDN hand-off) is resolved.
"""

from __future__ import annotations

import asyncio
import re
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup

from resolvarr.domain.entities.resolution import HostKind, ResolutionAttempt
from resolvarr.domain.exceptions import NetworkFailure, PatternNotFound
from resolvarr.infrastructure.common.html_selectors import (
    extract_attr,
    extract_links,
    is_absolute_http,
    parse_html,
)

from ._base import HostResolver
from ._http import fetch_page, request
from .classification import is_excluded

log = structlog.get_logger(__name__)

_INLINE_URL_RE = re.compile(r"""var\s+url\s*=\s*['"`]([^'"`]+)['"`]""")
_GATEWAY_PHP_RE = re.compile(r"""['"`](https?://[^'"`]*hubcloud\.php[^'"`]*)['"`]""")

_MEDIA_URL_RE = re.compile(r"\.(mp4|mkv|avi|mov|m3u8|webm|mpd)(\?|$)", re.IGNORECASE)
_CDN_MARKERS = ("hubcdn", "r2.dev", "workers.dev", "oreao-cdn", "pixeldrain")
_SERVER_LABEL_RE = re.compile(r"(fls|10\s*gbps|pixelverse|server)", re.IGNORECASE)
_DOWNLOAD_TEXT_RE = re.compile(r"(download|fast)", re.IGNORECASE)

_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def _find_gateway_url(url: str, html: str, root: BeautifulSoup) -> str | None:
    m = _INLINE_URL_RE.search(html) or _GATEWAY_PHP_RE.search(html)
    if m:
        return urljoin(url, m.group(1))

    href = extract_attr(
        root, "a#download", "href", "a#download-link", "#download-link", "a.btn-primary"
    )
    if href:
        return urljoin(url, href)

    for link in extract_links(root, "a[href]", base_url=url):
        if "download" in link["text"].lower():
            return link["href"]
    return None


def _candidate_links(page_url: str, root: BeautifulSoup) -> list[str]:
    links = [
        link
        for link in extract_links(root, "a[href]", base_url=page_url)
        if is_absolute_http(link["href"])
        and not is_excluded(link["href"])
        and link["href"] != page_url
    ]

    cdn = [
        link["href"]
        for link in links
        if _MEDIA_URL_RE.search(link["href"])
        or any(marker in link["href"] for marker in _CDN_MARKERS)
    ]
    if cdn:
        return list(dict.fromkeys(cdn))

    buttons = {
        str(tag.get("href"))
        for tag in root.select("a.btn-danger[href], a.btn-success[href]")
    }
    servers = [
        link["href"]
        for link in links
        if link["href"] in buttons or _SERVER_LABEL_RE.search(link["text"])
    ]
    if servers:
        return list(dict.fromkeys(servers))

    return list(
        dict.fromkeys(
            link["href"] for link in links if _DOWNLOAD_TEXT_RE.search(link["text"])
        )
    )


class HubCloudResolver(HostResolver):
    """Resolves HubCloud/VCloud pages through their gateway page."""

    host_kind = HostKind.HUBCLOUD

    async def _resolve(self, url: str, started: float) -> ResolutionAttempt:
        page = await fetch_page(self._http, url, timeout=self._timeout)
        gateway = _find_gateway_url(url, page.text, parse_html(page.text))
        if not gateway:
            raise PatternNotFound("no gateway link on file page")

        log.debug("hubcloud_gateway_found", url=url, gateway=gateway)
        gateway_page = await fetch_page(
            self._http, gateway, timeout=self._timeout, headers={"Referer": url}
        )
        gateway_url = str(gateway_page.url)
        candidates = _candidate_links(gateway_url, parse_html(gateway_page.text))
        if not candidates:
            raise PatternNotFound("no download link on gateway page")

        terminals = await asyncio.gather(
            *(self._follow_once(link, gateway_url) for link in candidates)
        )
        return ResolutionAttempt.terminal(
            url,
            self.host_kind,
            list(dict.fromkeys(terminals)),
            started=started,
        )

    async def _follow_once(self, link: str, referer: str) -> str:
        """Resolve at most one redirect of *link* via HEAD."""
        try:
            resp = await request(
                self._http,
                "HEAD",
                link,
                timeout=self._timeout,
                headers={"Referer": referer},
                follow_redirects=False,
                require_success=False,
            )
        except NetworkFailure as exc:
            log.debug("hubcloud_head_failed", url=link, error=str(exc))
            return link

        location = resp.headers.get("location")
        if resp.status_code in _REDIRECT_STATUSES and location:
            target = urljoin(link, location)
            if is_absolute_http(target):
                return target
        return link
