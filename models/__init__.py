"""
Models package for focus-session and search domain objects.
"""

from .errors import (
    CredentialRejected,
    FocusGuardError,
    InvalidInput,
    MalformedOracleResponse,
    OracleUnavailable,
    SessionActionNotPermitted,
)
from .focus_types import (
    OracleLink,
    OracleVerdict,
    SearchOutcome,
    SearchResult,
    SessionAction,
    SessionSnapshot,
    SessionStatus,
    TransitionResult,
    TransitionStatus,
    UserRole,
)
from .user_context import UserContext

__all__ = [
    "CredentialRejected",
    "FocusGuardError",
    "InvalidInput",
    "MalformedOracleResponse",
    "OracleLink",
    "OracleUnavailable",
    "OracleVerdict",
    "SearchOutcome",
    "SearchResult",
    "SessionActionNotPermitted",
    "SessionAction",
    "SessionSnapshot",
    "SessionStatus",
    "TransitionResult",
    "TransitionStatus",
    "UserContext",
    "UserRole",
]
