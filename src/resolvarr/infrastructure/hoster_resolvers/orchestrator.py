"""Resolution orchestrator: classify, dispatch, recurse within a hop budget."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import structlog

from resolvarr.domain.entities.resolution import (
    HostKind,
    IntermediateURL,
    OutcomeStatus,
    ResolutionAttempt,
    ResolvedLink,
)
from resolvarr.domain.exceptions import HopBudgetExhausted
from resolvarr.domain.ports.host_resolver import HostResolverPort
from resolvarr.infrastructure.common.html_selectors import is_absolute_http

from .classification import HostTable
from .fanout import FanOutCoordinator

log = structlog.get_logger(__name__)

DEFAULT_HOP_BUDGET = 3

Probe = Callable[[str], Awaitable[bool]]


def _dedupe(urls: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(urls))


class ResolutionOrchestrator:
    """Turns an intermediate URL into terminal URLs.

    * Unknown hosts come back unchanged and degraded, without network calls.
    * Aggregators go through the fan-out coordinator (one level deep).
    * Every other family goes to its resolver; intermediate results recurse
      concurrently with one hop less.
    * ``resolve`` never raises: anything unexpected degrades to the
      original URL.
    """

    def __init__(
        self,
        host_table: HostTable,
        resolvers: Iterable[HostResolverPort],
        *,
        fanout: FanOutCoordinator | None = None,
        hop_budget: int = DEFAULT_HOP_BUDGET,
        timeout: float | None = None,
        probe: Probe | None = None,
    ) -> None:
        self._hosts = host_table
        self._resolvers: dict[HostKind, HostResolverPort] = {}
        for resolver in resolvers:
            if resolver.kind in self._resolvers:
                raise ValueError(f"duplicate resolver for {resolver.kind.value}")
            self._resolvers[resolver.kind] = resolver
            log.debug("hoster_resolver_registered", host=resolver.kind.value)
        self._fanout = fanout
        self._hop_budget = hop_budget
        self._timeout = timeout
        self._probe = probe

    @property
    def supported_hosts(self) -> list[str]:
        kinds = [kind.value for kind in self._resolvers]
        if self._fanout is not None:
            kinds.insert(0, HostKind.AGGREGATOR.value)
        return kinds

    async def resolve(self, url: str, hop_budget: int | None = None) -> ResolvedLink:
        """Resolve *url* to terminal URLs. Never raises."""
        budget = self._hop_budget if hop_budget is None else hop_budget
        try:
            if self._timeout:
                result = await asyncio.wait_for(
                    self._resolve(url, budget, allow_fanout=True), self._timeout
                )
            else:
                result = await self._resolve(url, budget, allow_fanout=True)
            if self._probe is not None and not result.degraded:
                result = await _check_reachable(self._probe, result)
        except asyncio.TimeoutError:
            log.warning("resolve_timeout", url=url, timeout=self._timeout)
            return ResolvedLink.fallback(url)
        except Exception:
            log.exception("resolve_error", url=url)
            return ResolvedLink.fallback(url)

        log.info(
            "resolve_finished",
            url=url,
            terminals=len(result.terminal_urls),
            degraded=result.degraded,
        )
        return result

    async def _resolve(self, url: str, budget: int, *, allow_fanout: bool) -> ResolvedLink:
        if not is_absolute_http(url):
            log.info("resolve_skipped_invalid_url", url=url)
            return ResolvedLink.fallback(url)

        target = self._hosts.to_intermediate(url)
        return await self._dispatch(target, budget, allow_fanout)

    async def _dispatch(
        self, target: IntermediateURL, budget: int, allow_fanout: bool
    ) -> ResolvedLink:
        url, kind = target.url, target.host
        if kind is HostKind.UNKNOWN:
            log.debug("resolve_unknown_host", url=url)
            return ResolvedLink.fallback(url)

        if budget <= 0:
            log.info("hop_budget_exhausted", url=url, host=kind.value)
            return ResolvedLink.fallback(url)

        if kind is HostKind.AGGREGATOR:
            if not allow_fanout or self._fanout is None:
                log.info("resolve_nested_aggregator", url=url)
                return ResolvedLink.fallback(url)
            return await self._fanout.resolve(url, budget, self._resolve_branch)

        resolver = self._resolvers.get(kind)
        if resolver is None:
            log.warning("resolve_no_resolver", url=url, host=kind.value)
            return ResolvedLink.fallback(url)

        attempt = await resolver.resolve(url)
        return await self._follow(url, kind, attempt, budget, allow_fanout)

    async def _resolve_branch(self, url: str, budget: int) -> ResolvedLink:
        return await self._resolve(url, budget, allow_fanout=False)

    async def _follow(
        self,
        url: str,
        kind: HostKind,
        attempt: ResolutionAttempt,
        budget: int,
        allow_fanout: bool,
    ) -> ResolvedLink:
        if attempt.status is OutcomeStatus.FAILED:
            return ResolvedLink(
                original_url=url,
                terminal_urls=_dedupe(attempt.urls) or (url,),
                degraded=True,
                metadata={"reason": attempt.reason},
            )

        accepted: list[str] = []
        onward: list[str] = []
        for next_url in attempt.urls:
            if not is_absolute_http(next_url):
                continue
            if attempt.status is OutcomeStatus.INTERMEDIATE:
                onward.append(next_url)
                continue
            # A "terminal" on another redirector family is one more hop.
            next_kind = self._hosts.classify(next_url)
            if next_kind in (HostKind.UNKNOWN, kind):
                accepted.append(next_url)
            else:
                onward.append(next_url)

        metadata: dict[str, Any] = dict(attempt.metadata)
        if not onward:
            if not accepted:
                return ResolvedLink.fallback(url)
            return ResolvedLink(url, _dedupe(accepted), metadata=metadata)

        remaining = budget - 1
        if remaining <= 0:
            reason = HopBudgetExhausted(f"{len(onward)} URLs still intermediate")
            log.info("hop_budget_exhausted", url=url, pending=len(onward))
            return ResolvedLink(
                url,
                _dedupe([*accepted, *onward]),
                degraded=True,
                metadata={**metadata, "reason": reason.describe()},
            )

        children = await asyncio.gather(
            *(self._resolve(u, remaining, allow_fanout=allow_fanout) for u in onward)
        )

        terminals = list(accepted)
        best_known: list[str] = []
        for child in children:
            if child.degraded:
                best_known.extend(child.terminal_urls)
            else:
                terminals.extend(child.terminal_urls)
                metadata.update(child.metadata)

        if terminals:
            return ResolvedLink(url, _dedupe(terminals), metadata=metadata)
        return ResolvedLink(url, _dedupe(best_known) or (url,), degraded=True)


async def _check_reachable(probe: Probe, result: ResolvedLink) -> ResolvedLink:
    checks = await asyncio.gather(*(probe(u) for u in result.terminal_urls))
    unreachable = [u for u, ok in zip(result.terminal_urls, checks) if not ok]
    if not unreachable:
        return result
    return ResolvedLink(
        original_url=result.original_url,
        terminal_urls=result.terminal_urls,
        degraded=True,
        metadata={**result.metadata, "unreachable": unreachable},
    )
