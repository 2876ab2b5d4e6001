"""Tests for resolution value objects and domain exceptions."""

from __future__ import annotations

import time

import pytest

from resolvarr.domain.entities import (
    HostKind,
    LinkRequest,
    LinkResolution,
    OutcomeStatus,
    ResolutionAttempt,
    ResolvedLink,
)
from resolvarr.domain.exceptions import (
    DecodeFailure,
    GateAbandoned,
    PatternNotFound,
    ResolutionError,
)


class TestHostKind:
    @pytest.mark.parametrize(
        "kind",
        [
            HostKind.GATED_REDIRECT,
            HostKind.HUBDRIVE,
            HostKind.HUBCLOUD,
            HostKind.GDFLIX,
            HostKind.PIXELDRAIN,
            HostKind.GOFILE,
            HostKind.PACKED_EMBED,
            HostKind.BASE64_REDIRECT,
        ],
    )
    def test_provider_families(self, kind: HostKind) -> None:
        assert kind.is_provider is True

    def test_aggregator_and_unknown_are_not_providers(self) -> None:
        assert HostKind.AGGREGATOR.is_provider is False
        assert HostKind.UNKNOWN.is_provider is False

    def test_values_are_strings(self) -> None:
        assert HostKind("hubcloud") is HostKind.HUBCLOUD


class TestResolutionAttempt:
    def test_terminal(self) -> None:
        attempt = ResolutionAttempt.terminal(
            "https://a.example/x", HostKind.HUBCLOUD, ["https://cdn.example/f.mp4"]
        )
        assert attempt.status is OutcomeStatus.TERMINAL
        assert attempt.urls == ("https://cdn.example/f.mp4",)
        assert attempt.reason is None
        assert attempt.metadata == {}
        assert attempt.duration_ms == 0.0

    def test_intermediate(self) -> None:
        attempt = ResolutionAttempt.intermediate(
            "https://a.example/x", HostKind.GDFLIX, ["https://b.example/y"]
        )
        assert attempt.status is OutcomeStatus.INTERMEDIATE
        assert attempt.urls == ("https://b.example/y",)

    def test_failed_carries_reason_and_fallback(self) -> None:
        attempt = ResolutionAttempt.failed(
            "https://a.example/x",
            HostKind.GATED_REDIRECT,
            "GateAbandoned",
            fallback_urls=["https://a.example/x"],
        )
        assert attempt.status is OutcomeStatus.FAILED
        assert attempt.reason == "GateAbandoned"
        assert attempt.urls == ("https://a.example/x",)

    def test_duration_measured_from_start(self) -> None:
        started = time.perf_counter() - 0.05
        attempt = ResolutionAttempt.terminal(
            "https://a.example/x", HostKind.HUBCLOUD, [], started=started
        )
        assert attempt.duration_ms >= 50.0


class TestResolvedLink:
    def test_fallback_returns_original_degraded(self) -> None:
        result = ResolvedLink.fallback("https://unknown.example/x")
        assert result.terminal_urls == ("https://unknown.example/x",)
        assert result.degraded is True

    def test_to_dict_without_metadata(self) -> None:
        result = ResolvedLink("https://a.example/x", ("https://cdn.example/f.mp4",))
        assert result.to_dict() == {
            "originalLink": "https://a.example/x",
            "terminalURLs": ["https://cdn.example/f.mp4"],
            "degraded": False,
        }

    def test_to_dict_with_metadata(self) -> None:
        result = ResolvedLink(
            "https://a.example/x",
            ("https://a.example/x",),
            degraded=True,
            metadata={"reason": "PatternNotFound"},
        )
        assert result.to_dict()["metadata"] == {"reason": "PatternNotFound"}


class TestLinkResolution:
    def test_to_dict_includes_label(self) -> None:
        resolution = LinkResolution(
            request=LinkRequest(url="https://a.example/x", label="1080p [2.1GB]"),
            result=ResolvedLink.fallback("https://a.example/x"),
        )
        data = resolution.to_dict()
        assert data["label"] == "1080p [2.1GB]"
        assert data["originalLink"] == "https://a.example/x"
        assert data["degraded"] is True


class TestResolutionErrors:
    def test_describe_with_message(self) -> None:
        assert PatternNotFound("no reurl").describe() == "PatternNotFound: no reurl"

    def test_describe_without_message(self) -> None:
        assert GateAbandoned().describe() == "GateAbandoned"

    def test_hierarchy(self) -> None:
        assert issubclass(DecodeFailure, ResolutionError)
        assert issubclass(GateAbandoned, ResolutionError)
