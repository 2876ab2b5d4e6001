"""Shared test fixtures for the resolvarr test suite."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from resolvarr.domain.entities.resolution import HostKind
from resolvarr.infrastructure.hoster_resolvers.classification import (
    DEFAULT_HOST_PATTERNS,
    HostTable,
)


@pytest.fixture()
def host_table() -> HostTable:
    """Default host families plus the ``host-a`` example aggregator."""
    patterns = dict(DEFAULT_HOST_PATTERNS)
    patterns[HostKind.AGGREGATOR] = (*patterns[HostKind.AGGREGATOR], "host-a")
    return HostTable(patterns)


@pytest.fixture()
def no_sleep() -> AsyncMock:
    """Stand-in for ``asyncio.sleep`` that records waits without sleeping."""
    return AsyncMock(return_value=None)
