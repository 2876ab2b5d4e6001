"""Pure text transforms used to undo provider obfuscation.

No I/O. Decoders raise ``DecodeFailure`` instead of returning garbage.
"""

from __future__ import annotations

import base64
import binascii
import re

from resolvarr.domain.exceptions import DecodeFailure

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def base64_decode(value: str) -> str:
    """Decode standard base64 with padding fix.

    Whitespace is ignored. Raises ``DecodeFailure`` on malformed input or
    when the decoded bytes are not valid UTF-8.
    """
    data = "".join(value.split())
    padding = 4 - len(data) % 4
    if padding != 4:
        data += "=" * padding
    try:
        return base64.b64decode(data, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise DecodeFailure(f"invalid base64: {exc}") from exc


def base64_encode(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def rot13_decode(value: str) -> str:
    """Apply ROT13 (letters only, case preserving)."""
    result: list[str] = []
    for ch in value:
        code = ord(ch)
        if 0x41 <= code <= 0x5A:  # A-Z
            code = (code - 0x41 + 13) % 26 + 0x41
        elif 0x61 <= code <= 0x7A:  # a-z
            code = (code - 0x61 + 13) % 26 + 0x61
        result.append(chr(code))
    return "".join(result)


rot13_encode = rot13_decode


def shift13_forward(value: str) -> str:
    """Gate cipher: push each letter 13 code points forward, wrapping at Z/z.

    Produces the same permutation as ROT13.
    """
    result: list[str] = []
    for ch in value:
        if not ch.isascii() or not ch.isalpha():
            result.append(ch)
            continue
        limit = 90 if ch <= "Z" else 122
        code = ord(ch) + 13
        if code > limit:
            code -= 26
        result.append(chr(code))
    return "".join(result)


def to_base_n(num: int, base: int) -> str:
    """Encode *num* with the packer's digit alphabet.

    Digits below 36 use ``0-9a-z``; larger digits map to ``chr(d + 29)``
    (upper-case letters and beyond), as emitted by base-62 packers.
    """
    if num < 0:
        raise ValueError("num must be >= 0")
    if base < 2:
        raise ValueError("base must be >= 2")
    if num < base:
        return _DIGITS[num] if num < 36 else chr(num + 29)
    return to_base_n(num // base, base) + to_base_n(num % base, base)


def unpack_tokens(
    payload: str,
    base: int,
    token_count: int,
    dictionary: list[str],
) -> str:
    """Expand packer tokens in *payload* using *dictionary*.

    Indices are processed from ``token_count - 1`` down to ``0``. Each
    index with a non-empty word replaces every whole-word occurrence of its
    base-N token; word boundaries are ASCII-only, as in JavaScript. An
    empty dictionary leaves the payload unchanged.
    """
    if not dictionary:
        return payload
    for index in range(token_count - 1, -1, -1):
        word = dictionary[index] if index < len(dictionary) else ""
        if not word:
            continue
        token = to_base_n(index, base)
        payload = re.sub(
            rf"\b{re.escape(token)}\b",
            lambda _m, w=word: w,
            payload,
            flags=re.ASCII,
        )
    return payload
