"""Tests for Base64RedirectResolver."""

from __future__ import annotations

import httpx
import pytest
import respx

from resolvarr.domain.entities import OutcomeStatus
from resolvarr.infrastructure.hoster_resolvers import Base64RedirectResolver, HostTable
from resolvarr.infrastructure.hoster_resolvers.base64_redirect import (
    decode_wrapped_url,
)
from resolvarr.infrastructure.transforms import base64_encode

_TARGET = "https://hubcloud.example/drive/abc"


class TestDecodeWrappedUrl:
    def test_query_parameter(self) -> None:
        url = f"https://bloggingvector.example/go?url={base64_encode(_TARGET)}"
        assert decode_wrapped_url(url) == _TARGET

    def test_path_segment_after_prefix(self) -> None:
        url = f"https://www-ampproject.example/c/s/{base64_encode(_TARGET)}"
        assert decode_wrapped_url(url) == _TARGET

    def test_non_url_payload(self) -> None:
        url = f"https://newsongs.example/?x={base64_encode('just some text, not a link')}"
        assert decode_wrapped_url(url) is None

    def test_short_runs_ignored(self) -> None:
        assert decode_wrapped_url("https://newsongs.example/p/aGk=") is None


class TestBase64RedirectResolver:
    @pytest.mark.asyncio()
    async def test_encoded_target_without_network(self, host_table: HostTable) -> None:
        url = f"https://bloggingvector.example/go?url={base64_encode(_TARGET)}"
        async with httpx.AsyncClient() as client:
            attempt = await Base64RedirectResolver(client, host_table).resolve(url)

        assert attempt.status is OutcomeStatus.INTERMEDIATE
        assert attempt.urls == (_TARGET,)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_http_redirect_followed(self, host_table: HostTable) -> None:
        url = "https://newsongs.example/r/123"
        respx.get(url).respond(302, headers={"Location": _TARGET})
        respx.get(_TARGET).respond(200, text="<html></html>")

        async with httpx.AsyncClient() as client:
            attempt = await Base64RedirectResolver(client, host_table).resolve(url)

        assert attempt.status is OutcomeStatus.INTERMEDIATE
        assert attempt.urls == (_TARGET,)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_no_target_fails(self, host_table: HostTable) -> None:
        url = "https://newsongs.example/r/123"
        respx.get(url).respond(200, text="<html></html>")

        async with httpx.AsyncClient() as client:
            attempt = await Base64RedirectResolver(client, host_table).resolve(url)

        assert attempt.status is OutcomeStatus.FAILED

    @respx.mock
    @pytest.mark.asyncio()
    async def test_page_links_to_file_hosts(self, host_table: HostTable) -> None:
        url = "https://newsongs.example/r/456"
        respx.get(url).respond(
            200,
            text=(
                '<a href="https://hubcloud.example/drive/abc">Server 1</a>'
                '<a href="https://gdtot.example/file/xyz">Server 2</a>'
                '<a href="https://hubcloud.example/drive/abc">Server 1 again</a>'
                '<a href="https://t.me/channel">Join</a>'
                '<a href="/about">About</a>'
            ),
        )

        async with httpx.AsyncClient() as client:
            attempt = await Base64RedirectResolver(client, host_table).resolve(url)

        assert attempt.status is OutcomeStatus.INTERMEDIATE
        assert attempt.urls == (
            "https://hubcloud.example/drive/abc",
            "https://gdtot.example/file/xyz",
        )
