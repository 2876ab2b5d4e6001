"""Dean Edwards packed JavaScript: locate, unpack, pull a manifest URL.

Format: eval(function(p,a,c,k,e,d){...}('payload',base,count,'dict'.split('|')))
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from resolvarr.infrastructure.transforms.text import unpack_tokens

_PACKER_START_RE = re.compile(
    r"eval\s*\(\s*function\s*\(\s*p\s*,\s*a\s*,\s*c\s*,\s*k\s*,\s*e\s*,\s*d\s*\)"
)

# Payload may contain backslash-escaped quotes.
_PACKER_ARGS_RE = re.compile(
    r"}\s*\(\s*'((?:[^'\\]|\\.)*)'\s*,\s*(\d+)\s*,\s*(\d+)\s*,"
    r"\s*'((?:[^'\\]|\\.)*)'\s*\.split\(\s*'\|'\s*\)",
    re.DOTALL,
)

_MAX_SCRIPT_CHARS = 65536

_MANIFEST_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"""(?:var|let|const)\s+q\s*=\s*['"](https?://[^'"]+\.m3u8[^'"]*)['"]"""
    ),
    re.compile(r"""['"](https?://[^'"]+\.(?:m3u8|mpd)[^'"]*)['"]"""),
    re.compile(r"""url\s*:\s*['"](https?://[^'"]+)['"]"""),
)


@dataclass(frozen=True)
class PackedScript:
    payload: str
    base: int
    token_count: int
    dictionary: list[str]


def find_packed_scripts(text: str) -> list[PackedScript]:
    """Return every packer call found in *text*, in document order."""
    scripts: list[PackedScript] = []
    for start in _PACKER_START_RE.finditer(text):
        chunk = text[start.start() : start.start() + _MAX_SCRIPT_CHARS]
        match = _PACKER_ARGS_RE.search(chunk)
        if not match:
            continue
        scripts.append(
            PackedScript(
                payload=match.group(1),
                base=int(match.group(2)),
                token_count=int(match.group(3)),
                dictionary=match.group(4).split("|"),
            )
        )
    return scripts


def unpack_script(script: PackedScript) -> str:
    """Expand a packed script's payload back into source."""
    if script.base < 2:
        return script.payload
    return unpack_tokens(
        script.payload,
        script.base,
        script.token_count,
        script.dictionary,
    )


def extract_manifest_url(unpacked: str) -> str | None:
    """Apply the ordered manifest patterns to unpacked source.

    Escaped quotes (``\\'`` / ``\\"``) are normalized first.
    """
    normalized = unpacked.replace("\\'", "'").replace('\\"', '"')
    for pattern in _MANIFEST_PATTERNS:
        m = pattern.search(normalized)
        if m:
            return m.group(1)
    return None


def extract_packed_manifest_url(text: str) -> str | None:
    """First manifest URL found across all packed scripts in *text*."""
    for script in find_packed_scripts(text):
        url = extract_manifest_url(unpack_script(script))
        if url:
            return url
    return None
