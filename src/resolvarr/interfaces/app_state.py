"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from resolvarr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from resolvarr.application.use_cases import ResolveLinksUseCase
    from resolvarr.infrastructure.hoster_resolvers import ResolutionOrchestrator


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient

    # Resolution engine
    orchestrator: ResolutionOrchestrator

    # Application Services
    resolve_links_uc: ResolveLinksUseCase
