"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "resolvarr",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "max_connections": 50,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "resolver": {
        "hop_budget": 3,
        "max_concurrent": 8,
        "resolve_timeout_seconds": 120.0,
        "page_timeout_seconds": 15.0,
        "api_timeout_seconds": 30.0,
        "gate_timeout_seconds": 45.0,
        "gate_poll_attempts": 5,
        "gate_poll_interval_seconds": 2.0,
        "gate_wait_padding_seconds": 3.0,
        "probe_terminal_urls": False,
    },
    "hosts": {
        "aggregator": ["gyanigurus", "gyaniguru"],
        "gated_redirect": ["gadgetsweb", "techyboy4u"],
        "hubdrive": ["hubdrive", "katdrive", "drivemanga"],
        "hubcloud": ["hubcloud", "vcloud"],
        "gdflix": ["gdflix", "gdtot"],
        "pixeldrain": ["pixeldrain"],
        "gofile": ["gofile"],
        "packed_embed": ["kwik"],
        "base64_redirect": ["ampproject", "bloggingvector", "newsongs"],
    },
}
