"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from resolvarr.application.use_cases import ResolveLinksUseCase
from resolvarr.infrastructure.config.schema import AppConfig
from resolvarr.infrastructure.hoster_resolvers import (
    Base64RedirectResolver,
    FanOutCoordinator,
    GatedRedirectClient,
    GDFlixResolver,
    GoFileResolver,
    HostTable,
    HubCloudResolver,
    HubDriveResolver,
    PackedEmbedResolver,
    PixelDrainResolver,
    ReachabilityProbe,
    ResolutionOrchestrator,
)
from resolvarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def create_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared async HTTP client for all resolvers."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        limits=httpx.Limits(max_connections=config.http_max_connections),
        follow_redirects=True,
    )


def build_orchestrator(
    config: AppConfig, http_client: httpx.AsyncClient
) -> ResolutionOrchestrator:
    """Wire host table, resolvers, gate client and fan-out."""
    rc = config.resolver
    host_table = HostTable.from_config(config.hosts) if config.hosts else HostTable()
    page_timeout = rc.page_timeout_seconds

    resolvers = [
        GatedRedirectClient(
            http_client,
            timeout=rc.gate_timeout_seconds,
            poll_attempts=rc.gate_poll_attempts,
            poll_interval=rc.gate_poll_interval_seconds,
            wait_padding=rc.gate_wait_padding_seconds,
        ),
        HubDriveResolver(http_client, timeout=page_timeout),
        HubCloudResolver(http_client, timeout=page_timeout),
        GDFlixResolver(http_client, host_table, timeout=page_timeout),
        PixelDrainResolver(),
        GoFileResolver(
            http_client,
            timeout=rc.api_timeout_seconds,
            token=rc.gofile_token,
            api_base=rc.gofile_api_base,
        ),
        PackedEmbedResolver(http_client, timeout=page_timeout),
        Base64RedirectResolver(http_client, host_table, timeout=page_timeout),
    ]

    probe = (
        ReachabilityProbe(http_client, timeout=rc.probe_timeout_seconds)
        if rc.probe_terminal_urls
        else None
    )

    return ResolutionOrchestrator(
        host_table,
        resolvers,
        fanout=FanOutCoordinator(http_client, host_table, timeout=page_timeout),
        hop_budget=rc.hop_budget,
        timeout=rc.resolve_timeout_seconds or None,
        probe=probe,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP client (required by every resolver)
        2. Orchestrator (host table, resolvers, gate client, fan-out)
        3. Use case (bounded batch resolution)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client
    state.http_client = create_http_client(config)
    log.info(
        "http_client_initialized",
        timeout=config.http_timeout_seconds,
        max_connections=config.http_max_connections,
    )

    # 2) Orchestrator
    state.orchestrator = build_orchestrator(config, state.http_client)
    log.info(
        "orchestrator_initialized",
        hosts=state.orchestrator.supported_hosts,
        hop_budget=config.resolver.hop_budget,
    )

    # 3) Use case
    state.resolve_links_uc = ResolveLinksUseCase(
        resolver=state.orchestrator,
        max_concurrent=config.resolver.max_concurrent,
    )

    log.info("app_startup_complete")
    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")
        log.info("app_shutdown_complete")
