"""Thin httpx helpers that map transport errors onto ``NetworkFailure``."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

import httpx

from resolvarr.domain.exceptions import NetworkFailure

# Sent on page fetches; the User-Agent comes from the shared client.
PAGE_HEADERS: dict[str, str] = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}


def origin_of(url: str) -> str:
    """``scheme://host[:port]`` of *url*."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


async def request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    timeout: float,
    headers: dict[str, str] | None = None,
    follow_redirects: bool = True,
    require_success: bool = True,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request with an explicit timeout.

    Raises ``NetworkFailure`` on transport errors and, unless
    *require_success* is false, on non-2xx responses.
    """
    try:
        resp = await client.request(
            method,
            url,
            headers={**PAGE_HEADERS, **(headers or {})},
            timeout=timeout,
            follow_redirects=follow_redirects,
            **kwargs,
        )
    except httpx.TimeoutException as exc:
        raise NetworkFailure(f"timeout on {method} {url}") from exc
    except httpx.HTTPError as exc:
        raise NetworkFailure(f"{type(exc).__name__} on {method} {url}") from exc

    if require_success and not resp.is_success:
        raise NetworkFailure(f"HTTP {resp.status_code} on {method} {url}")
    return resp


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """GET a page, following redirects."""
    return await request(client, "GET", url, timeout=timeout, headers=headers)
