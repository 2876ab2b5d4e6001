"""Link resolution exceptions.

Raised inside resolvers and the gate client, and converted to failed
attempts at their boundary. None of them reach callers of the orchestrator.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Base class for all resolution errors."""

    def describe(self) -> str:
        """Short ``Kind: message`` form used as an attempt's failure reason."""
        message = str(self)
        name = type(self).__name__
        return f"{name}: {message}" if message else name


class DecodeFailure(ResolutionError):
    """No transform sequence could recover the embedded payload."""


class NetworkFailure(ResolutionError):
    """Timeout, connection error or non-2xx status on a hop."""


class PatternNotFound(ResolutionError):
    """Expected markup, variable or JSON field is missing from a response."""


class GateAbandoned(ResolutionError):
    """A gated redirector kept answering with its sentinel until retries ran out."""


class HopBudgetExhausted(ResolutionError):
    """The hop budget ran out while results were still intermediate."""
