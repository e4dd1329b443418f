"""
ProfileDirectory - sign-up, sign-in, guest access and known-user lookup.

This is the collaborator that resolves a caller to a UserContext
(identity + role) before anything reaches the focus core, and it doubles as
the credential verifier used to gate pausing. Profiles live in process memory.
"""

import threading
from dataclasses import dataclass

from models.errors import CredentialRejected, InvalidInput
from models.focus_types import UserRole
from models.user_context import UserContext
from utils.credentials import compute_secret_hash, generate_guest_id, generate_salt, secret_matches
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserProfile:
    identity: str
    name: str
    role: UserRole
    secret_hash: str | None = None
    salt: str | None = None
    is_guest: bool = False

    def to_context(self) -> UserContext:
        return UserContext(
            identity=self.identity,
            role=self.role,
            display_name=self.name,
            is_guest=self.is_guest,
        )


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class ProfileDirectory:
    def __init__(self):
        self._lock = threading.Lock()
        self._profiles: dict[str, UserProfile] = {}

    def lookup(self, email: str) -> UserProfile | None:
        """Known-user detection: return the stored profile for an email, if any."""
        with self._lock:
            return self._profiles.get(_normalize_email(email))

    def resolve(self, identity: str) -> UserContext | None:
        with self._lock:
            profile = self._profiles.get(_normalize_email(identity))
        return profile.to_context() if profile else None

    def register(
        self,
        email: str,
        name: str,
        role: UserRole,
        password: str,
        confirm_password: str,
    ) -> UserContext:
        """
        Create an account.

        Raises:
            InvalidInput: Missing role or fields, mismatched passwords, or email already registered
        """
        if not role.is_operating:
            raise InvalidInput("A field must be chosen: Please select a role.")

        identity = _normalize_email(email)
        name = (name or "").strip()
        if not identity or not name or not password:
            raise InvalidInput("Please fill in all fields to create your account.")
        if password != confirm_password:
            raise InvalidInput("Passwords do not match.")

        salt = generate_salt()
        profile = UserProfile(
            identity=identity,
            name=name,
            role=role,
            secret_hash=compute_secret_hash(password, salt),
            salt=salt,
        )

        with self._lock:
            if identity in self._profiles:
                raise InvalidInput("An account with this email already exists. Please sign in.")
            self._profiles[identity] = profile

        logger.info(
            "Profile registered",
            extra={"extra_fields": {"identity": identity, "role": role.value}},
        )
        return profile.to_context()

    def sign_in(self, email: str, password: str) -> UserContext:
        """
        Resolve a known user by email and password.

        Raises:
            InvalidInput: No account for this email
            CredentialRejected: Wrong password
        """
        profile = self.lookup(email)
        if profile is None or profile.is_guest:
            raise InvalidInput("No account found for this email.")
        if not self.verify(profile.identity, password):
            raise CredentialRejected("Incorrect password for this email.")
        return profile.to_context()

    def guest(self, role: UserRole, passcode: str | None = None) -> UserContext:
        """
        Create a guest profile.

        A guest may set a passcode used only to pause focus sessions. Without
        one, a guest session cannot be paused and runs until it ends.
        """
        if not role.is_operating:
            raise InvalidInput("Please pick a role to continue as guest.")

        salt = generate_salt() if passcode else None
        profile = UserProfile(
            identity=generate_guest_id(),
            name="Guest User",
            role=role,
            secret_hash=compute_secret_hash(passcode, salt) if passcode else None,
            salt=salt,
            is_guest=True,
        )
        with self._lock:
            self._profiles[profile.identity] = profile

        logger.info(
            "Guest profile created",
            extra={"extra_fields": {"identity": profile.identity, "role": role.value}},
        )
        return profile.to_context()

    def forget_guest(self, identity: str) -> bool:
        """Remove a guest profile. Registered accounts are never removed here."""
        with self._lock:
            profile = self._profiles.get(identity)
            if profile is None or not profile.is_guest:
                return False
            del self._profiles[identity]

        logger.info("Guest profile removed", extra={"extra_fields": {"identity": identity}})
        return True

    def verify(self, identity: str, secret: str) -> bool:
        profile = self.lookup(identity)
        if profile is None or profile.secret_hash is None or profile.salt is None:
            return False
        return secret_matches(secret or "", profile.salt, profile.secret_hash)
