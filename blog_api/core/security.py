"""Security helpers (password hashing and opaque access tokens)."""

from __future__ import annotations

import hashlib
import secrets

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
# Verified when the login e-mail is unknown so both paths cost one argon2 check.
_DUMMY_HASH = _ph.hash(secrets.token_urlsafe(16))


def hash_password(password: str) -> str:
    """Create a salted Argon2 hash."""
    return _ph.hash(password)


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or _DUMMY_HASH
    try:
        matched = _ph.verify(stored, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False
    return matched and stored_hash is not None


def password_needs_rehash(stored_hash: str) -> bool:
    try:
        return _ph.check_needs_rehash(stored_hash)
    except argon_exc.InvalidHashError:
        return True


def generate_token_secret() -> str:
    return secrets.token_urlsafe(40)


def hash_token(secret: str) -> str:
    return hashlib.sha256(secret.encode()).hexdigest()


def token_matches(secret: str, stored_digest: str) -> bool:
    return secrets.compare_digest(hash_token(secret), stored_digest or "")
