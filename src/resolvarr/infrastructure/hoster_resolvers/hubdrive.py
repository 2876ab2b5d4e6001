"""HubDrive-style resolver (hubdrive, katdrive, drivemanga).

Resolution order:
1. Direct download anchor on the file page (``a#dllink`` / ``a#ddl``).
2. AJAX direct-download endpoint:
       POST {origin}/ajax.php?ajax=direct-download   body: id={file_id}
       → {"code": "200", "data": {"gd": "https://..."}}
3. The ``/newdl`` page, scanned for the ddl button or CDN/download anchors.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urljoin, urlparse

import httpx
import structlog

from resolvarr.domain.entities.resolution import HostKind, ResolutionAttempt
from resolvarr.domain.exceptions import PatternNotFound, ResolutionError
from resolvarr.infrastructure.common.html_selectors import (
    extract_attr,
    extract_links,
    extract_text,
    is_absolute_http,
    parse_html,
)

from ._base import HostResolver
from ._http import fetch_page, origin_of, request

log = structlog.get_logger(__name__)

_FILE_PATH_RE = re.compile(r"/file/([A-Za-z0-9_-]+)")

_DIRECT_SELECTORS = ("a#dllink", "a#ddl", "#ddl a")

# Anchor targets on /newdl that point at the actual file.
_DOWNLOAD_MARKERS = ("oreao-cdn", "/download/", "pixeldrain")


def _extract_file_id(url: str, html_root: Any) -> str | None:
    """File id from ``#down-id``, a hidden ``id`` input, or the URL path."""
    file_id = extract_text(html_root, "#down-id")
    if file_id:
        return file_id
    file_id = extract_attr(html_root, "input[name='id']", "value")
    if file_id:
        return file_id
    path = urlparse(url).path
    m = _FILE_PATH_RE.search(path)
    if m:
        return m.group(1)
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    return segment or None


def _lift_direct_link(obj: Any) -> str:
    """Validate the AJAX response and return ``data.gd``."""
    if not isinstance(obj, dict):
        raise PatternNotFound("direct-download response is not an object")
    if str(obj.get("code")) != "200":
        raise PatternNotFound(f"direct-download code {obj.get('code')!r}")
    data = obj.get("data")
    link = data.get("gd") if isinstance(data, dict) else None
    if not isinstance(link, str) or not is_absolute_http(link):
        raise PatternNotFound("direct-download response has no 'data.gd' link")
    return link


def _cookie_header(resp: httpx.Response) -> str:
    return "; ".join(f"{name}={value}" for name, value in resp.cookies.items())


class HubDriveResolver(HostResolver):
    """Resolves HubDrive file pages to direct download URLs."""

    host_kind = HostKind.HUBDRIVE

    async def _resolve(self, url: str, started: float) -> ResolutionAttempt:
        page = await fetch_page(self._http, url, timeout=self._timeout)
        root = parse_html(page.text)

        direct = extract_attr(root, _DIRECT_SELECTORS[0], "href", *_DIRECT_SELECTORS[1:])
        if direct:
            log.debug("hubdrive_direct_anchor", url=url)
            return ResolutionAttempt.terminal(
                url, self.host_kind, [urljoin(url, direct)], started=started
            )

        origin = origin_of(url)
        cookies = _cookie_header(page)

        file_id = _extract_file_id(url, root)
        if file_id:
            try:
                link = await self._ajax_direct_download(url, origin, file_id, cookies)
            except ResolutionError as exc:
                log.info("hubdrive_ajax_failed", url=url, error=exc.describe())
            else:
                return ResolutionAttempt.terminal(
                    url, self.host_kind, [link], started=started
                )

        links = await self._scan_newdl(url, origin, cookies)
        if not links:
            raise PatternNotFound("no direct download link on file or /newdl page")
        return ResolutionAttempt.terminal(url, self.host_kind, links, started=started)

    async def _ajax_direct_download(
        self, url: str, origin: str, file_id: str, cookies: str
    ) -> str:
        headers = {
            "Referer": url,
            "X-Requested-With": "XMLHttpRequest",
        }
        if cookies:
            headers["Cookie"] = cookies
        resp = await request(
            self._http,
            "POST",
            f"{origin}/ajax.php?ajax=direct-download",
            timeout=self._timeout,
            headers=headers,
            data={"id": file_id},
        )
        try:
            data = resp.json()
        except ValueError as exc:
            raise PatternNotFound("direct-download response is not JSON") from exc
        return _lift_direct_link(data)

    async def _scan_newdl(self, url: str, origin: str, cookies: str) -> list[str]:
        headers = {"Referer": url}
        if cookies:
            headers["Cookie"] = cookies
        resp = await fetch_page(
            self._http, f"{origin}/newdl", timeout=self._timeout, headers=headers
        )
        root = parse_html(resp.text)

        found: list[str] = []
        ddl = extract_attr(root, "#ddl", "href")
        if ddl:
            found.append(urljoin(origin + "/", ddl))
        for link in extract_links(root, "a, button", base_url=origin + "/"):
            href = link["href"]
            if any(marker in href for marker in _DOWNLOAD_MARKERS):
                found.append(href)
        return [u for u in dict.fromkeys(found) if is_absolute_http(u)]
