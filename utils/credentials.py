"""Shared credential utilities."""

import hashlib
import hmac
import secrets


def generate_salt() -> str:
    return secrets.token_hex(16)


def compute_secret_hash(secret: str, salt: str) -> str:
    """Return SHA-256 hex hash of a salted secret."""
    return hashlib.sha256(f"{salt}:{secret}".encode("utf-8")).hexdigest()


def secret_matches(secret: str, salt: str, expected_hash: str) -> bool:
    return hmac.compare_digest(compute_secret_hash(secret, salt), expected_hash)


def generate_guest_id(prefix: str = "guest") -> str:
    """Generate a random guest identity with prefix."""
    safe_prefix = (prefix or "guest").strip().lower().replace(" ", "-")
    return f"{safe_prefix}-{secrets.token_hex(8)}"
