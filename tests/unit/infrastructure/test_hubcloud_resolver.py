"""Tests for HubCloudResolver."""

from __future__ import annotations

import httpx
import pytest
import respx

from resolvarr.domain.entities import OutcomeStatus
from resolvarr.infrastructure.hoster_resolvers import HubCloudResolver

_PAGE_URL = "https://hubcloud.example/drive/H1"
_GATEWAY_URL = "https://gateway.example/hubcloud.php?id=H1"


def _gateway_page(*anchors: str) -> str:
    return "<html><body>" + "".join(anchors) + "</body></html>"


class TestHubCloudResolver:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_cdn_link_on_gateway(self) -> None:
        respx.get(_PAGE_URL).respond(
            200, text=f'<a id="download" href="{_GATEWAY_URL}">Download</a>'
        )
        gateway = respx.get(_GATEWAY_URL).respond(
            200,
            text=_gateway_page(
                '<a class="btn btn-success" href="https://cdn.example/final1.mp4">'
                "Download [Server : 1]</a>",
                '<a href="https://t.me/channel">Join us</a>',
            ),
        )
        respx.head("https://cdn.example/final1.mp4").respond(200)

        async with httpx.AsyncClient() as client:
            attempt = await HubCloudResolver(client).resolve(_PAGE_URL)

        assert attempt.status is OutcomeStatus.TERMINAL
        assert attempt.urls == ("https://cdn.example/final1.mp4",)
        assert gateway.calls.last.request.headers["referer"] == _PAGE_URL

    @respx.mock
    @pytest.mark.asyncio()
    async def test_inline_gateway_variable(self) -> None:
        respx.get(_PAGE_URL).respond(
            200, text="<script>var url = '/gw/hubcloud.php?id=H1';</script>"
        )
        respx.get("https://hubcloud.example/gw/hubcloud.php?id=H1").respond(
            200,
            text=_gateway_page(
                '<a href="https://pub-1.r2.dev/H1.mkv?token=t">Download [FSL]</a>'
            ),
        )
        respx.head("https://pub-1.r2.dev/H1.mkv?token=t").respond(200)

        async with httpx.AsyncClient() as client:
            attempt = await HubCloudResolver(client).resolve(_PAGE_URL)

        assert attempt.urls == ("https://pub-1.r2.dev/H1.mkv?token=t",)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_server_button_redirect_followed_once(self) -> None:
        respx.get(_PAGE_URL).respond(
            200, text=f'<a id="download" href="{_GATEWAY_URL}">Download</a>'
        )
        respx.get(_GATEWAY_URL).respond(
            200,
            text=_gateway_page(
                '<a class="btn btn-danger" href="https://fast.example/go/H1">'
                "Download [10Gbps]</a>",
            ),
        )
        respx.head("https://fast.example/go/H1").respond(
            302, headers={"Location": "https://files.example/H1.mkv"}
        )

        async with httpx.AsyncClient() as client:
            attempt = await HubCloudResolver(client).resolve(_PAGE_URL)

        assert attempt.urls == ("https://files.example/H1.mkv",)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_head_failure_keeps_link(self) -> None:
        respx.get(_PAGE_URL).respond(
            200, text=f'<a id="download" href="{_GATEWAY_URL}">Download</a>'
        )
        respx.get(_GATEWAY_URL).respond(
            200,
            text=_gateway_page('<a href="https://mirror.example/H1">Fast Download</a>'),
        )
        respx.head("https://mirror.example/H1").mock(
            side_effect=httpx.ConnectError("refused")
        )

        async with httpx.AsyncClient() as client:
            attempt = await HubCloudResolver(client).resolve(_PAGE_URL)

        assert attempt.urls == ("https://mirror.example/H1",)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_no_gateway_fails(self) -> None:
        respx.get(_PAGE_URL).respond(200, text="<html><a href='/'>Home</a></html>")

        async with httpx.AsyncClient() as client:
            attempt = await HubCloudResolver(client).resolve(_PAGE_URL)

        assert attempt.status is OutcomeStatus.FAILED
        assert attempt.reason == "PatternNotFound: no gateway link on file page"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_gateway_without_links_fails(self) -> None:
        respx.get(_PAGE_URL).respond(
            200, text=f'<a id="download" href="{_GATEWAY_URL}">Download</a>'
        )
        respx.get(_GATEWAY_URL).respond(
            200, text=_gateway_page('<a href="https://t.me/x">Telegram</a>')
        )

        async with httpx.AsyncClient() as client:
            attempt = await HubCloudResolver(client).resolve(_PAGE_URL)

        assert attempt.status is OutcomeStatus.FAILED
        assert attempt.reason == "PatternNotFound: no download link on gateway page"
