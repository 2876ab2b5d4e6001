"""Tests for the pure obfuscation transforms."""

from __future__ import annotations

import pytest

from resolvarr.domain.exceptions import DecodeFailure
from resolvarr.infrastructure.transforms import (
    base64_decode,
    base64_encode,
    rot13_decode,
    shift13_forward,
    to_base_n,
    unpack_tokens,
)

# ---------------------------------------------------------------------------
# base64
# ---------------------------------------------------------------------------


class TestBase64Decode:
    def test_plain(self) -> None:
        assert base64_decode("aGVsbG8=") == "hello"

    def test_missing_padding_is_fixed(self) -> None:
        assert base64_decode("aGVsbG8") == "hello"

    def test_whitespace_ignored(self) -> None:
        assert base64_decode("aGVs\n bG8=") == "hello"

    def test_invalid_alphabet_raises(self) -> None:
        with pytest.raises(DecodeFailure):
            base64_decode('{"a": 1}')

    def test_non_utf8_raises(self) -> None:
        with pytest.raises(DecodeFailure):
            base64_decode("//4=")

    def test_encode_matches_decode(self) -> None:
        assert base64_decode(base64_encode("https://a.example/x?y=1")) == (
            "https://a.example/x?y=1"
        )


# ---------------------------------------------------------------------------
# Letter ciphers
# ---------------------------------------------------------------------------


class TestRot13:
    def test_letters_rotated_case_preserved(self) -> None:
        assert rot13_decode("Hello, World!") == "Uryyb, Jbeyq!"

    def test_involution(self) -> None:
        assert rot13_decode(rot13_decode("abcXYZ019+/=")) == "abcXYZ019+/="


class TestShift13Forward:
    def test_wraps_at_z(self) -> None:
        assert shift13_forward("abcXYZ") == "nopKLM"

    def test_non_letters_untouched(self) -> None:
        assert shift13_forward("0189+/=é") == "0189+/=é"

    def test_same_permutation_as_rot13(self) -> None:
        text = "The Quick Brown Fox 42"
        assert shift13_forward(text) == rot13_decode(text)


# ---------------------------------------------------------------------------
# Packer helpers
# ---------------------------------------------------------------------------


class TestToBaseN:
    @pytest.mark.parametrize(
        ("num", "base", "expected"),
        [
            (0, 36, "0"),
            (9, 10, "9"),
            (10, 10, "10"),
            (35, 36, "z"),
            (36, 62, "A"),
            (61, 62, "Z"),
            (62, 62, "10"),
            (255, 16, "ff"),
        ],
    )
    def test_digits(self, num: int, base: int, expected: str) -> None:
        assert to_base_n(num, base) == expected

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_base_n(-1, 36)

    def test_base_below_two_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_base_n(3, 1)


class TestUnpackTokens:
    def test_replaces_whole_word_tokens(self) -> None:
        assert unpack_tokens("0 1", 36, 2, ["hello", "world"]) == "hello world"

    def test_empty_word_keeps_token(self) -> None:
        assert unpack_tokens("0 1", 36, 2, ["", "world"]) == "0 world"

    def test_empty_dictionary_is_identity(self) -> None:
        assert unpack_tokens("0 1 2", 36, 3, []) == "0 1 2"

    def test_partial_tokens_untouched(self) -> None:
        assert unpack_tokens("a ab", 36, 11, [""] * 10 + ["x"]) == "x ab"

    def test_replacement_is_literal(self) -> None:
        assert unpack_tokens("0", 36, 1, [r"\1$&"]) == r"\1$&"

    def test_word_boundary_is_ascii_only(self) -> None:
        assert unpack_tokens("é0 0é", 36, 1, ["x"]) == "éx xé"
