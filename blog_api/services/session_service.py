"""Access token helpers (issue, resolve, revoke) and the request auth dependency."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blog_api.core.config import get_settings
from blog_api.core.exceptions import AuthenticationError
from blog_api.core.security import generate_token_secret, hash_token, token_matches
from blog_api.db.models import AccessToken, User
from blog_api.db.session import MAX_ROW_ID, get_session

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated user and the token that authenticated the request."""

    user: User
    token_id: int


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)


def issue_token(user_id: int, name: str = "auth_token") -> str:
    """Create a token for ``user_id`` and return its plaintext form ``"{id}|{secret}"``."""
    secret = generate_token_secret()
    ttl = get_settings().token_ttl_seconds
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl) if ttl > 0 else None

    with get_session() as session:
        token = AccessToken(user_id=user_id, name=name, token_hash=hash_token(secret), expires_at=expires_at)
        session.add(token)
        session.commit()
        return f"{token.id}|{secret}"


def resolve_token(plain: str | None) -> Optional[AuthContext]:
    """Return the context for a plaintext token, or None when it is unknown, expired or orphaned."""
    if not plain or "|" not in plain:
        return None
    token_id, _, secret = plain.partition("|")
    if not secret or len(token_id) > 19 or not (token_id.isascii() and token_id.isdigit()):
        return None
    row_id = int(token_id)
    if not 0 < row_id <= MAX_ROW_ID:
        return None

    now = datetime.now(timezone.utc)
    with get_session() as session:
        token = session.get(AccessToken, row_id)
        if token is None or not token_matches(secret, token.token_hash):
            return None
        if token.expires_at and _as_utc(token.expires_at) < now:
            session.delete(token)
            session.commit()
            return None
        user = session.get(User, token.user_id)
        if user is None or user.deleted_at is not None:
            return None
        token.last_used_at = now
        session.commit()
        return AuthContext(user=user, token_id=token.id)


def revoke_token(token_id: int) -> None:
    with get_session() as session:
        token = session.get(AccessToken, token_id)
        if token:
            session.delete(token)
            session.commit()


def require_auth(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> AuthContext:
    context = resolve_token(credentials.credentials if credentials else None)
    if context is None:
        raise AuthenticationError()
    return context
