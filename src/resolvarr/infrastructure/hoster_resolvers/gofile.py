"""GoFile resolver via the GoFile content API.

GoFile URLs follow the pattern:
    https://gofile.io/d/{contentId}

Content is listed via:
    GET https://api.gofile.io/contents/{contentId}
    (Bearer token auth + Origin/Referer headers)

When no account token is configured, a guest token is requested per call:
    POST https://api.gofile.io/accounts → {"status": "ok", "data": {"token": "..."}}
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

import httpx
import structlog

from resolvarr.domain.entities.resolution import HostKind, ResolutionAttempt
from resolvarr.domain.exceptions import NetworkFailure, PatternNotFound

from ._base import HostResolver
from ._http import request

log = structlog.get_logger(__name__)

_CONTENT_ID_RE = re.compile(r"^/d/([A-Za-z0-9]+)/?$")

DEFAULT_API_BASE = "https://api.gofile.io"

_SITE_HEADERS = {
    "Origin": "https://gofile.io",
    "Referer": "https://gofile.io/",
}


def extract_content_id(url: str) -> str | None:
    """Content id from a ``/d/<id>`` GoFile URL."""
    match = _CONTENT_ID_RE.search(urlparse(url).path)
    return match.group(1) if match else None


def _json_ok(resp: httpx.Response, what: str) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError as exc:
        raise PatternNotFound(f"{what} response is not JSON") from exc
    if not isinstance(data, dict) or data.get("status") != "ok":
        status = data.get("status") if isinstance(data, dict) else None
        raise PatternNotFound(f"{what} status {status!r}")
    return data


def _lift_children(data: dict[str, Any]) -> tuple[list[str], list[dict[str, Any]]]:
    """Direct links and file metadata of a contents response."""
    content = data.get("data")
    if not isinstance(content, dict):
        raise PatternNotFound("contents response has no 'data' object")

    children = content.get("children")
    if isinstance(children, dict):
        entries = list(children.values())
    elif content.get("type") == "file":
        entries = [content]
    else:
        entries = []

    links: list[str] = []
    files: list[dict[str, Any]] = []
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("type", "file") != "file":
            continue
        files.append({"name": entry.get("name"), "size": entry.get("size")})
        link = entry.get("link")
        if isinstance(link, str) and link.startswith(("http://", "https://")):
            links.append(link)
    return links, files


class GoFileResolver(HostResolver):
    """Resolves GoFile folders to their file links."""

    host_kind = HostKind.GOFILE

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = 30.0,
        token: str | None = None,
        api_base: str = DEFAULT_API_BASE,
    ) -> None:
        super().__init__(http_client, timeout=timeout)
        self._token = token
        self._api_base = api_base.rstrip("/")

    async def _guest_token(self) -> str:
        resp = await request(
            self._http,
            "POST",
            f"{self._api_base}/accounts",
            timeout=self._timeout,
            headers=_SITE_HEADERS,
            json={},
        )
        data = _json_ok(resp, "accounts")
        token = (data.get("data") or {}).get("token")
        if not isinstance(token, str) or not token:
            raise PatternNotFound("accounts response has no token")
        log.debug("gofile_token_acquired")
        return token

    async def _resolve(self, url: str, started: float) -> ResolutionAttempt:
        content_id = extract_content_id(url)
        if not content_id:
            raise PatternNotFound(f"no content id in {url}")

        token = self._token or await self._guest_token()
        resp = await request(
            self._http,
            "GET",
            f"{self._api_base}/contents/{content_id}",
            timeout=self._timeout,
            headers={"Authorization": f"Bearer {token}", **_SITE_HEADERS},
            require_success=False,
        )
        if resp.status_code != 200:
            raise NetworkFailure(f"contents HTTP {resp.status_code}")

        links, files = _lift_children(_json_ok(resp, "contents"))
        log.debug("gofile_resolved", content_id=content_id, files=len(files))
        return ResolutionAttempt.terminal(
            url,
            self.host_kind,
            links or [url],
            started=started,
            metadata={"files": files} if files else None,
        )
