"""Common infrastructure utilities."""

from __future__ import annotations

from .html_selectors import extract_links, parse_html, select_items
from .retry import retry

__all__ = [
    "extract_links",
    "parse_html",
    "retry",
    "select_items",
]
