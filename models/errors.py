"""
Error taxonomy for FocusGuard.

Every fault raised by the core derives from FocusGuardError and carries a
stable ``code`` (used by the HTTP layer and in logs) plus a user-facing
``message``. Oracle rejections and invalid session transitions are not
exceptions: they are ordinary outcomes (see SearchOutcome / TransitionResult).
"""

from typing import Any

SEARCH_FAILED_MESSAGE = "Search failed. Please try again later."


class FocusGuardError(Exception):
    """Base class for all FocusGuard faults."""

    code = "unknown"
    default_message = "Unexpected error."

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidInput(FocusGuardError):
    """Rejected locally before any external call (empty query, bad duration, UNSET role)."""

    code = "invalid_input"
    default_message = "Invalid input."


class OracleUnavailable(FocusGuardError):
    """Network failure or timeout while talking to the relevance oracle."""

    code = "oracle_unavailable"
    default_message = SEARCH_FAILED_MESSAGE


class MalformedOracleResponse(FocusGuardError):
    """The oracle replied, but the reply violates the response schema."""

    code = "malformed_oracle_response"
    default_message = SEARCH_FAILED_MESSAGE


class CredentialRejected(FocusGuardError):
    """Pause verification failed; the session stays locked."""

    code = "credential_rejected"
    default_message = "Incorrect password. Focus session is still locked."


class SessionActionNotPermitted(FocusGuardError):
    """The current session state does not allow the requested action."""

    code = "action_not_permitted"
    default_message = "This action is not available in the current focus session state."
