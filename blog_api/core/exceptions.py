"""
Error taxonomy for the blog API.

Every error the application raises on purpose derives from BlogApiError and
carries the HTTP status it maps to at the boundary. Internal detail (driver
messages, upstream bodies) is logged where it happens and never stored in
``message``.
"""

from __future__ import annotations

from typing import Mapping, Sequence


class BlogApiError(Exception):
    """Base class for application errors."""

    status_code = 500
    default_message = "Internal Error"

    def __init__(self, message: str | None = None, errors: Mapping[str, Sequence[str]] | None = None):
        self.message = message or self.default_message
        self.errors = {key: list(value) for key, value in (errors or {}).items()}
        super().__init__(self.message)


class ValidationError(BlogApiError):
    status_code = 422
    default_message = "Validation error"


class AuthenticationError(BlogApiError):
    """Missing, unknown or expired access token."""

    status_code = 401
    default_message = "Unauthenticated. Please provide a valid API token."


class InvalidCredentials(BlogApiError):
    """Login e-mail/password pair did not match."""

    status_code = 401
    default_message = "Invalid credentials"


class NotFound(BlogApiError):
    status_code = 404
    default_message = "Resource not found"


class PersistenceError(BlogApiError):
    """Raised by repositories instead of leaking SQLAlchemy exceptions."""


class ConstraintViolation(PersistenceError):
    pass


class UnexpectedError(PersistenceError):
    pass


class RegistrationFailed(BlogApiError):
    default_message = "Registration failed. Please try again later."


class UpstreamFailure(BlogApiError):
    status_code = 400
    default_message = "Failed to fetch weather data"
