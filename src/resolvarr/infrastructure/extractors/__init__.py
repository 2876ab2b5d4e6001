from .packed import (
    PackedScript,
    extract_manifest_url,
    extract_packed_manifest_url,
    find_packed_scripts,
    unpack_script,
)
from .payload import (
    collect_gate_fragments,
    decode_embedded_payload,
    decode_gate_payload,
    extract_gadget_target,
    find_embedded_payload,
    lift_gate_payload,
)

__all__ = [
    "PackedScript",
    "collect_gate_fragments",
    "decode_embedded_payload",
    "decode_gate_payload",
    "extract_gadget_target",
    "extract_manifest_url",
    "extract_packed_manifest_url",
    "find_embedded_payload",
    "find_packed_scripts",
    "lift_gate_payload",
    "unpack_script",
]
