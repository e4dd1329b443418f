"""Shared utilities for FastAPI routes."""

from collections.abc import Mapping

from fastapi import HTTPException, status

from models.errors import (
    CredentialRejected,
    FocusGuardError,
    InvalidInput,
    MalformedOracleResponse,
    OracleUnavailable,
    SessionActionNotPermitted,
)
from models.focus_types import TransitionResult, TransitionStatus

SENSITIVE_HEADERS = {"x-api-key", "authorization"}

ERROR_STATUS_CODES: dict[type[FocusGuardError], int] = {
    InvalidInput: 422,
    CredentialRejected: status.HTTP_403_FORBIDDEN,
    SessionActionNotPermitted: status.HTTP_409_CONFLICT,
    OracleUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    MalformedOracleResponse: status.HTTP_502_BAD_GATEWAY,
}


def status_code_for(error: FocusGuardError) -> int:
    for error_type, code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def ensure_transition(result: TransitionResult) -> TransitionResult:
    """Map a non-applied session transition to an HTTP error."""
    if result.status is TransitionStatus.INVALID_INPUT:
        raise HTTPException(status_code=422, detail=result.reason)
    if result.status is TransitionStatus.NOT_APPLICABLE:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.reason)
    return result


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """
    Redact auth-bearing headers before logging.
    """
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS and value:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted
