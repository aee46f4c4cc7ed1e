"""
Custom exceptions for SpliceDesk operations.

Every error carries a stable ``code`` that the CLI and the HTTP API echo
back to operators.
"""


class SpliceDeskError(Exception):
    """Base exception for all SpliceDesk errors."""

    code = "SPLICEDESK_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(SpliceDeskError):
    """Raised when an operator request is rejected before any gateway call."""

    code = "VALIDATION_ERROR"


class StateConflictError(SpliceDeskError):
    """Raised when a request is not valid for the current lifecycle state."""

    code = "STATE_CONFLICT"


class NotFoundError(SpliceDeskError):
    """Raised when an event or instruction id is unknown."""

    code = "NOT_FOUND"


class GatewayError(SpliceDeskError):
    """Raised by gateway adapters on transport failure or remote rejection.

    The engine records these as FAILED cue events; they never reach callers
    of the engine operations.
    """

    code = "GATEWAY_ERROR"


class JournalError(SpliceDeskError):
    """Raised when the event journal cannot be read back."""

    code = "JOURNAL_ERROR"
