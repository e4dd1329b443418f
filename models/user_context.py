"""
UserContext - resolved caller identity handed to the focus core.

The profile directory performs known-user detection and role selection;
the core only ever sees this resolved pair and never inspects a user list.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from models.focus_types import UserRole


@dataclass(frozen=True)
class UserContext:
    """
    Immutable identity + role pair for one caller.

    Attributes:
        identity: Stable key for the caller (lowercased email, or a guest id)
        role: Operating role; UNSET is never a valid operating role
        display_name: Name shown to the user
        is_guest: True for guest access without stored credentials
        created_at: When this context was resolved
    """

    identity: str
    role: UserRole = UserRole.UNSET
    display_name: str = ""
    is_guest: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_role(self) -> bool:
        return self.role.is_operating

    def with_role(self, role: UserRole) -> "UserContext":
        """
        Create a new UserContext with a different role.

        Args:
            role: The replacement role

        Returns:
            New UserContext instance
        """
        return replace(self, role=role)
