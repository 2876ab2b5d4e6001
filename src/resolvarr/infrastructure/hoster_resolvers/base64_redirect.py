"""Base64 redirect wrappers (AMP caches, blog redirectors).

The real target is usually embedded as a base64 run in the wrapper URL.
When it is not, the wrapper is fetched: a changed final URL is the target,
otherwise the page is scanned for links to file-host families.
"""

from __future__ import annotations

import re

import httpx
import structlog

from resolvarr.domain.entities.resolution import HostKind, ResolutionAttempt
from resolvarr.domain.exceptions import DecodeFailure, PatternNotFound
from resolvarr.infrastructure.common.html_selectors import (
    extract_links,
    is_absolute_http,
    parse_html,
)
from resolvarr.infrastructure.transforms.text import base64_decode

from ._base import HostResolver
from ._http import fetch_page
from .classification import HostTable, is_excluded

log = structlog.get_logger(__name__)

_MIN_RUN = 30
_B64_RUN_RE = re.compile(rf"[A-Za-z0-9+/]{{{_MIN_RUN},}}=*")

# Families a wrapper page may hand off to.
_FILE_HOST_KINDS = frozenset(
    {HostKind.HUBDRIVE, HostKind.HUBCLOUD, HostKind.GDFLIX, HostKind.PIXELDRAIN}
)


def _candidates(run: str) -> list[str]:
    # A run may swallow preceding path segments ("c/s/<payload>").
    starts = [0] + [i + 1 for i, ch in enumerate(run) if ch == "/"]
    return [run[start:] for start in starts if len(run) - start >= _MIN_RUN]


def decode_wrapped_url(url: str) -> str | None:
    """First base64 run in *url* that decodes to an http(s) URL."""
    for match in _B64_RUN_RE.finditer(url):
        for candidate in _candidates(match.group(0)):
            try:
                decoded = base64_decode(candidate).strip()
            except DecodeFailure:
                continue
            if is_absolute_http(decoded):
                return decoded
    return None


class Base64RedirectResolver(HostResolver):
    """Unwraps base64-encoded or HTTP-redirecting wrapper URLs."""

    host_kind = HostKind.BASE64_REDIRECT

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        host_table: HostTable,
        *,
        timeout: float = 15.0,
    ) -> None:
        super().__init__(http_client, timeout=timeout)
        self._hosts = host_table

    def _file_host_links(self, html: str, page_url: str) -> list[str]:
        links = [
            link["href"]
            for link in extract_links(parse_html(html), "a", base_url=page_url)
            if not is_excluded(link["href"])
            and self._hosts.classify(link["href"]) in _FILE_HOST_KINDS
        ]
        return list(dict.fromkeys(links))

    async def _resolve(self, url: str, started: float) -> ResolutionAttempt:
        decoded = decode_wrapped_url(url)
        if decoded:
            log.debug("base64_redirect_decoded", url=url, target=decoded)
            return ResolutionAttempt.intermediate(
                url, self.host_kind, [decoded], started=started
            )

        resp = await fetch_page(self._http, url, timeout=self._timeout)
        final_url = str(resp.url)
        if final_url != url and not is_excluded(final_url):
            log.debug("base64_redirect_followed", url=url, target=final_url)
            return ResolutionAttempt.intermediate(
                url, self.host_kind, [final_url], started=started
            )

        links = self._file_host_links(resp.text, final_url)
        if not links:
            raise PatternNotFound("no target encoded, redirected to or linked")
        log.debug("base64_redirect_page_links", url=url, count=len(links))
        return ResolutionAttempt.intermediate(
            url, self.host_kind, links, started=started
        )
