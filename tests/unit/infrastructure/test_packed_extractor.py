"""Tests for packed-JS detection, unpacking and manifest extraction."""

from __future__ import annotations

from resolvarr.infrastructure.extractors import (
    PackedScript,
    extract_manifest_url,
    extract_packed_manifest_url,
    find_packed_scripts,
    unpack_script,
)

_MANIFEST = "https://cdn.example.com/hls/master.m3u8"

_PACKED = (
    r"eval(function(p,a,c,k,e,d){e=function(c){return c};"
    r"if(!''.replace(/^/,String)){while(c--){d[c]=k[c]||c}}"
    r"return p}('2 0=\'1\';',3,3,'q|" + _MANIFEST + r"|var'.split('|'),0,{}))"
)

_PAGE = f"<html><body><script>{_PACKED}</script></body></html>"


class TestFindPackedScripts:
    def test_parses_arguments(self) -> None:
        scripts = find_packed_scripts(_PAGE)
        assert len(scripts) == 1
        script = scripts[0]
        assert script.payload == r"2 0=\'1\';"
        assert script.base == 3
        assert script.token_count == 3
        assert script.dictionary == ["q", _MANIFEST, "var"]

    def test_multiple_scripts(self) -> None:
        assert len(find_packed_scripts(_PAGE + _PAGE)) == 2

    def test_no_packer(self) -> None:
        assert find_packed_scripts("<script>var a = 1;</script>") == []


class TestUnpackScript:
    def test_expands_tokens(self) -> None:
        unpacked = unpack_script(find_packed_scripts(_PAGE)[0])
        assert unpacked == r"var q=\'" + _MANIFEST + r"\';"

    def test_degenerate_base_returns_payload(self) -> None:
        script = PackedScript(payload="0 1", base=0, token_count=2, dictionary=["a", "b"])
        assert unpack_script(script) == "0 1"


class TestExtractManifestUrl:
    def test_q_assignment_preferred(self) -> None:
        source = (
            "var other='https://x.example/a.mpd';"
            "const q = 'https://x.example/hls/index.m3u8?t=1';"
        )
        assert extract_manifest_url(source) == "https://x.example/hls/index.m3u8?t=1"

    def test_any_quoted_manifest(self) -> None:
        assert (
            extract_manifest_url('player.load("https://x.example/dash/main.mpd")')
            == "https://x.example/dash/main.mpd"
        )

    def test_url_property(self) -> None:
        assert (
            extract_manifest_url("setup({url: 'https://x.example/stream'})")
            == "https://x.example/stream"
        )

    def test_escaped_quotes_normalized(self) -> None:
        assert extract_manifest_url(r"var q=\'" + _MANIFEST + r"\';") == _MANIFEST

    def test_none(self) -> None:
        assert extract_manifest_url("var a = 1;") is None


class TestExtractPackedManifestUrl:
    def test_page(self) -> None:
        assert extract_packed_manifest_url(_PAGE) == _MANIFEST

    def test_page_without_packer(self) -> None:
        assert extract_packed_manifest_url("<html></html>") is None
