"""Locate and decode script payloads embedded in redirector pages.

Two payload families are handled:

* the ``s('o','<payload>',180…)`` call of gadget-style interstitials,
  decoded with ``decode_embedded_payload``;
* the ``ck('_wp_http_<n>','<fragment>')`` cookie fragments of timed gates,
  concatenated and decoded with ``decode_gate_payload``.

Typed views (``extract_gadget_target``, ``lift_gate_payload``) validate the
decoded JSON once and raise ``PatternNotFound`` on missing fields.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog

from resolvarr.domain.entities.resolution import GatePayload
from resolvarr.domain.exceptions import DecodeFailure, PatternNotFound
from resolvarr.infrastructure.transforms.text import (
    base64_decode,
    rot13_decode,
    shift13_forward,
)

log = structlog.get_logger(__name__)

_EMBEDDED_CALL_RE = re.compile(r"s\('o','([^']+)',180")
_GATE_FRAGMENT_RE = re.compile(r"ck\('_wp_http_\d+','([^']+)'")


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as exc:
        raise DecodeFailure(f"invalid JSON: {exc}") from exc


def _decode_primary(raw: str) -> Any:
    return _parse_json(base64_decode(rot13_decode(base64_decode(base64_decode(raw)))))


def _decode_fallback(raw: str) -> Any:
    return _parse_json(base64_decode(base64_decode(raw)))


def decode_embedded_payload(raw: str) -> Any:
    """Decode an embedded payload into its JSON value.

    Primary sequence: base64, base64, ROT13, base64, JSON.
    Fallback sequence: base64, base64, JSON.

    Raises ``DecodeFailure`` when neither sequence succeeds.
    """
    try:
        return _decode_primary(raw)
    except DecodeFailure as primary_exc:
        try:
            value = _decode_fallback(raw)
        except DecodeFailure as exc:
            raise DecodeFailure(
                f"primary ({primary_exc}) and fallback ({exc}) sequences failed"
            ) from exc
    log.info("payload_decoded_with_fallback", length=len(raw))
    return value


def find_embedded_payload(html: str) -> str | None:
    """Return the raw ``s('o', …)`` payload of a page, if present."""
    match = _EMBEDDED_CALL_RE.search(html)
    return match.group(1) if match else None


def extract_gadget_target(obj: Any) -> str:
    """Lift the continuation URL from a decoded gadget payload.

    Field ``o`` holds the base64-encoded target.
    """
    if not isinstance(obj, dict):
        raise PatternNotFound("embedded payload is not an object")
    encoded = obj.get("o")
    if not isinstance(encoded, str) or not encoded:
        raise PatternNotFound("embedded payload has no 'o' field")
    target = base64_decode(encoded).strip()
    if not target.startswith(("http://", "https://")):
        raise PatternNotFound("embedded payload target is not an http URL")
    return target


def collect_gate_fragments(html: str) -> str:
    """Concatenate all ``_wp_http_<n>`` fragments in document order."""
    return "".join(_GATE_FRAGMENT_RE.findall(html))


def decode_gate_payload(fragments: str) -> Any:
    """Decode concatenated gate fragments.

    Sequence: base64, base64, shift13_forward, base64, JSON.
    """
    if not fragments:
        raise PatternNotFound("no gate fragments")
    return _parse_json(
        base64_decode(shift13_forward(base64_decode(base64_decode(fragments))))
    )


def lift_gate_payload(obj: Any) -> GatePayload:
    """Validate decoded gate JSON into a ``GatePayload``."""
    if not isinstance(obj, dict):
        raise PatternNotFound("gate payload is not an object")

    token = obj.get("data")
    host = obj.get("wp_http1")
    total_time = obj.get("total_time", 0)

    if not isinstance(token, str) or not token:
        raise PatternNotFound("gate payload has no 'data' token")
    if not isinstance(host, str) or not host.startswith(("http://", "https://")):
        raise PatternNotFound("gate payload has no 'wp_http1' endpoint")
    try:
        wait = float(total_time)
    except (TypeError, ValueError) as exc:
        raise PatternNotFound("gate payload 'total_time' is not numeric") from exc

    return GatePayload(
        token=token,
        continuation_host=host,
        wait_seconds=max(wait, 0.0),
    )
