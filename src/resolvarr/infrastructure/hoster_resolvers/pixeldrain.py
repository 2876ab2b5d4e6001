"""PixelDrain URL-shape resolver.

Share pages map onto the file API without any network call:
    https://pixeldrain.dev/u/{id}  ->  https://pixeldrain.dev/api/file/{id}?download
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

import httpx

from resolvarr.domain.entities.resolution import HostKind, ResolutionAttempt
from resolvarr.domain.exceptions import PatternNotFound

from ._base import HostResolver

_API_PATH_RE = re.compile(r"^/api/file/[A-Za-z0-9_-]+/?$")
_ID_RE = re.compile(r"([A-Za-z0-9_-]+)/?$")


def to_direct_url(url: str) -> str:
    """Rewrite a PixelDrain share URL into its direct download URL.

    Already-direct URLs are returned unchanged. Raises ``PatternNotFound``
    when the path carries no file id.
    """
    parsed = urlparse(url)
    if _API_PATH_RE.match(parsed.path) and "download" in parsed.query:
        return url
    m = _ID_RE.search(parsed.path)
    if not m or parsed.path in ("", "/"):
        raise PatternNotFound(f"no file id in {url}")
    return f"{parsed.scheme}://{parsed.netloc}/api/file/{m.group(1)}?download"


class PixelDrainResolver(HostResolver):
    """Pure URL rewrite; never touches the network."""

    host_kind = HostKind.PIXELDRAIN

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        super().__init__(http_client)  # type: ignore[arg-type]

    async def _resolve(self, url: str, started: float) -> ResolutionAttempt:
        return ResolutionAttempt.terminal(
            url, self.host_kind, [to_direct_url(url)], started=started
        )
