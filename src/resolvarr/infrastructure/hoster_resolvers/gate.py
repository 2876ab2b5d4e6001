"""Client for timed interstitial gates.

Gate pages carry their continuation data split into
``ck('_wp_http_<n>','<fragment>')`` calls. Once decoded, the data names a
follow-up endpoint, a token and a mandatory wait. The follow-up endpoint
answers ``Invalid Request`` until the gate considers the wait served, then
returns a page with ``var reurl = "<target>"``.

States::

    AWAITING_PAYLOAD -> PAYLOAD_DECODED -> WAITING -> POLLING -> RESOLVED
                                                              \\-> ABANDONED

Gadget-style interstitials put one more hop in front: an
``s('o','<payload>',180)`` call whose decoded ``o`` field is the gate page.
"""

from __future__ import annotations

import asyncio
import re
import time
from enum import Enum

import httpx
import structlog

from resolvarr.domain.entities.resolution import (
    GatePayload,
    HostKind,
    ResolutionAttempt,
)
from resolvarr.domain.exceptions import (
    GateAbandoned,
    PatternNotFound,
    ResolutionError,
)
from resolvarr.infrastructure.common.retry import SleepFn, retry
from resolvarr.infrastructure.extractors.payload import (
    collect_gate_fragments,
    decode_embedded_payload,
    decode_gate_payload,
    extract_gadget_target,
    find_embedded_payload,
    lift_gate_payload,
)
from resolvarr.infrastructure.transforms.text import base64_encode

from ._http import fetch_page

log = structlog.get_logger(__name__)

SENTINEL = "Invalid Request"

_REURL_RE = re.compile(r'var reurl = "([^"]+)"')


class GateState(str, Enum):
    AWAITING_PAYLOAD = "awaiting_payload"
    PAYLOAD_DECODED = "payload_decoded"
    WAITING = "waiting"
    POLLING = "polling"
    RESOLVED = "resolved"
    ABANDONED = "abandoned"


class _GateNotReady(ResolutionError):
    """Follow-up endpoint answered with the sentinel."""


def continuation_url(payload: GatePayload) -> str:
    return f"{payload.continuation_host}?re={base64_encode(payload.token)}"


class GatedRedirectClient:
    """Drives one gate from page fetch to the revealed target URL.

    ``sleep`` is injectable so tests can observe waits without sleeping.
    """

    host_kind = HostKind.GATED_REDIRECT

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = 45.0,
        poll_attempts: int = 5,
        poll_interval: float = 2.0,
        wait_padding: float = 3.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self._timeout = timeout
        self._poll_attempts = poll_attempts
        self._poll_interval = poll_interval
        self._wait_padding = wait_padding
        self._sleep = sleep

    @property
    def kind(self) -> HostKind:
        return self.host_kind

    async def resolve(self, url: str) -> ResolutionAttempt:
        started = time.perf_counter()
        state = GateState.AWAITING_PAYLOAD
        try:
            payload = await self._load_payload(url)
            state = self._transition(url, state, GateState.PAYLOAD_DECODED)

            wait = payload.wait_seconds + self._wait_padding
            state = self._transition(url, state, GateState.WAITING, wait=wait)
            await self._sleep(wait)

            state = self._transition(url, state, GateState.POLLING)
            target_url = continuation_url(payload)
            target = await retry(
                lambda: self._poll(target_url),
                max_attempts=self._poll_attempts,
                interval=self._poll_interval,
                retry_on=_GateNotReady,
                sleep=self._sleep,
            )
        except _GateNotReady:
            self._transition(url, state, GateState.ABANDONED, attempts=self._poll_attempts)
            reason = GateAbandoned(
                f"sentinel returned {self._poll_attempts} times"
            ).describe()
            return ResolutionAttempt.failed(
                url, self.host_kind, reason, fallback_urls=[url], started=started
            )
        except ResolutionError as exc:
            log.warning("gate_failed", url=url, state=state.value, error=exc.describe())
            return ResolutionAttempt.failed(
                url, self.host_kind, exc.describe(), started=started
            )
        except Exception as exc:
            log.exception("gate_error", url=url, state=state.value)
            return ResolutionAttempt.failed(
                url, self.host_kind, f"{type(exc).__name__}: {exc}", started=started
            )

        self._transition(url, state, GateState.RESOLVED, target=target)
        return ResolutionAttempt.terminal(url, self.host_kind, [target], started=started)

    @staticmethod
    def _transition(
        url: str, current: GateState, new: GateState, **context: object
    ) -> GateState:
        log.debug("gate_state", url=url, previous=current.value, state=new.value, **context)
        return new

    async def _load_payload(self, url: str) -> GatePayload:
        page = await fetch_page(self._http, url, timeout=self._timeout)
        html = page.text
        fragments = collect_gate_fragments(html)

        if not fragments:
            raw = find_embedded_payload(html)
            if raw is None:
                raise PatternNotFound("no gate fragments or embedded payload")
            gate_page = extract_gadget_target(decode_embedded_payload(raw))
            log.debug("gate_gadget_hop", url=url, gate_page=gate_page)
            page = await fetch_page(self._http, gate_page, timeout=self._timeout)
            fragments = collect_gate_fragments(page.text)

        return lift_gate_payload(decode_gate_payload(fragments))

    async def _poll(self, target_url: str) -> str:
        resp = await fetch_page(self._http, target_url, timeout=self._timeout)
        body = resp.text
        if SENTINEL in body:
            raise _GateNotReady(target_url)
        m = _REURL_RE.search(body)
        if not m:
            raise PatternNotFound("no reurl in continuation page")
        return m.group(1)
