"""Link resolution endpoints."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from resolvarr.domain.entities.resolution import LinkRequest
from resolvarr.infrastructure.common.html_selectors import is_absolute_http
from resolvarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/resolve", tags=["resolve"])

_MAX_LINKS = 100
_MAX_HOP_BUDGET = 10


class LinkIn(BaseModel):
    url: str
    label: str = ""


class ResolveBatchIn(BaseModel):
    links: list[LinkIn] = Field(default_factory=list, max_length=_MAX_LINKS)
    hop_budget: int | None = Field(default=None, ge=1, le=_MAX_HOP_BUDGET)


@router.get("")
async def resolve_one(
    request: Request,
    url: str = Query(..., description="Intermediate URL to resolve."),
    hop_budget: int | None = Query(
        default=None, ge=1, le=_MAX_HOP_BUDGET, description="Maximum resolver hops."
    ),
) -> dict[str, Any]:
    """Resolve a single URL to its terminal URLs."""
    state = cast(AppState, request.app.state)
    if not is_absolute_http(url):
        raise HTTPException(status_code=422, detail="url must be an absolute http(s) URL")

    log.info("resolve_request", url=url, hop_budget=hop_budget)
    result = await state.orchestrator.resolve(url, hop_budget)
    return result.to_dict()


@router.post("")
async def resolve_batch(request: Request, body: ResolveBatchIn) -> dict[str, Any]:
    """Resolve all links of one content item.

    Invalid URLs are not rejected; they come back unchanged and degraded.
    """
    state = cast(AppState, request.app.state)
    requests = [LinkRequest(url=link.url, label=link.label) for link in body.links]

    log.info("resolve_batch_request", links=len(requests), hop_budget=body.hop_budget)
    results = await state.resolve_links_uc.execute(requests, hop_budget=body.hop_budget)
    return {"results": [r.to_dict() for r in results]}
