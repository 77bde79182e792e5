"""
Authentication use cases on top of the generic repository.

Identity is never read from ambient state: routers pass the ``AuthContext``
built by ``require_auth`` to ``logout`` and ``current_user``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from blog_api.core.exceptions import InvalidCredentials, PersistenceError, RegistrationFailed
from blog_api.core.security import hash_password, password_needs_rehash, verify_password
from blog_api.db.models import User
from blog_api.db.session import get_session, transaction
from blog_api.services import notifications
from blog_api.services.session_service import AuthContext, issue_token, revoke_token

from .base import ResourceRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: User
    access_token: str


class AuthRepository(ResourceRepository[User]):
    """Registration, login and logout for users."""

    def __init__(self) -> None:
        super().__init__(User)

    def find_by_email(self, email: str) -> User | None:
        with get_session() as session:
            stmt = select(User).where(User.email == email, User.deleted_at.is_(None))
            return session.execute(stmt).scalar_one_or_none()

    def email_taken(self, email: str) -> bool:
        # Soft-deleted rows still hold the unique e-mail.
        with get_session() as session:
            return session.execute(select(User.id).where(User.email == email)).first() is not None

    def register(self, data: Mapping[str, Any]) -> AuthResult:
        email = data.get("email", "")
        try:
            user = self.save(
                {
                    "name": data["name"],
                    "email": email,
                    "password": hash_password(data["password"]),
                }
            )
            token = issue_token(user.id)
        except (PersistenceError, SQLAlchemyError) as exc:
            logger.error("Registration failed for %s", email)
            raise RegistrationFailed() from exc
        notifications.dispatch_welcome_email(user.email, user.name)
        return AuthResult(user=user, access_token=token)

    def login(self, credentials: Mapping[str, Any]) -> AuthResult:
        user = self.find_by_email(credentials.get("email", ""))
        password = credentials.get("password", "")
        if not verify_password(password, user.password if user else None):
            raise InvalidCredentials()
        if password_needs_rehash(user.password):
            with transaction() as session:
                session.get(User, user.id).password = hash_password(password)
        return AuthResult(user=user, access_token=issue_token(user.id))

    def logout(self, context: AuthContext) -> None:
        revoke_token(context.token_id)

    def current_user(self, context: AuthContext) -> User:
        return context.user
