from .resolution import (
    GatePayload,
    HostKind,
    IntermediateURL,
    LinkRequest,
    LinkResolution,
    OutcomeStatus,
    ResolutionAttempt,
    ResolvedLink,
)

__all__ = [
    "GatePayload",
    "HostKind",
    "IntermediateURL",
    "LinkRequest",
    "LinkResolution",
    "OutcomeStatus",
    "ResolutionAttempt",
    "ResolvedLink",
]
