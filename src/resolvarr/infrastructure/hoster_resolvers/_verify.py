"""HEAD-check reachability of resolved terminal URLs."""

from __future__ import annotations

import httpx
import structlog

log = structlog.get_logger(__name__)


class ReachabilityProbe:
    """HEAD-checks a URL, accepting 200 and 206 (byte-range servers).

    Only reachability is checked; the response body is never inspected.
    """

    def __init__(self, http_client: httpx.AsyncClient, *, timeout: float = 8.0) -> None:
        self._http = http_client
        self._timeout = timeout

    async def __call__(self, url: str) -> bool:
        try:
            resp = await self._http.head(
                url,
                follow_redirects=True,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            log.warning("terminal_probe_error", url=url[:120], error=str(exc))
            return False
        if resp.status_code in (200, 206):
            return True
        log.warning("terminal_probe_failed", status=resp.status_code, url=url[:120])
        return False
