"""CSS-selector-based link extraction with fallback chains.

Every helper takes a primary selector plus optional fallbacks; the first
selector that yields at least one match wins. Provider pages shuffle
wrapper markup and class names often, so resolvers describe what they want
as a chain rather than a single selector.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

_WINDOW_OPEN_RE = re.compile(r"""window\.open\(\s*['"]([^'"]+)['"]""")


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string with the ``lxml`` parser."""
    return BeautifulSoup(html, "lxml")


def is_absolute_http(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements from the first selector that matches anything."""
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def extract_text(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Stripped text of the first matching element with non-empty text."""
    for sel in (selector, *fallback_selectors):
        match = root.select_one(sel)
        if match:
            text = match.get_text(strip=True)
            if text:
                return text
    return default


def extract_attr(
    root: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Attribute of the first matching element that carries it."""
    for sel in (selector, *fallback_selectors):
        for match in root.select(sel):
            val = match.get(attr)
            if val:
                return str(val).strip()
    return default


def link_target(tag: Tag) -> str:
    """Navigation target of an anchor or button.

    Checks ``href``, then ``data-href``, then a ``window.open('…')`` call in
    ``onclick``. Returns ``""`` for ``javascript:``/fragment-only hrefs.
    """
    for attr in ("href", "data-href"):
        val = tag.get(attr)
        if val:
            value = str(val).strip()
            if value and not value.startswith(("#", "javascript:")):
                return value
    onclick = tag.get("onclick")
    if onclick:
        m = _WINDOW_OPEN_RE.search(str(onclick))
        if m:
            return m.group(1)
    return ""


def extract_links(
    root: BeautifulSoup | Tag,
    selector: str = "a[href]",
    *fallback_selectors: str,
    base_url: str = "",
) -> list[dict[str, str]]:
    """Extract link targets matching *selector*.

    Returns ``{"text": ..., "href": ...}`` dicts in document order. Relative
    targets are joined against *base_url* when given.
    """
    results: list[dict[str, str]] = []
    for tag in select_items(root, selector, *fallback_selectors):
        href = link_target(tag)
        if not href:
            continue
        if base_url:
            href = urljoin(base_url, href)
        results.append({"text": tag.get_text(" ", strip=True), "href": href})
    return results
