"""
Input validation for request payloads.

Each ``validate_*`` function returns a cleaned dict holding only the known
fields, or raises ``ValidationError`` with ``{field: [messages]}``.
"""
from __future__ import annotations

import io
import re
from collections import defaultdict
from typing import Any, Mapping

from PIL import Image, UnidentifiedImageError
from sqlalchemy import select

from blog_api.core.exceptions import ValidationError
from blog_api.core.storage import PendingUpload
from blog_api.db.models import POST_STATUSES, Post, User
from blog_api.db.session import get_session

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
IMAGE_FORMATS = {"JPEG", "PNG", "GIF", "WEBP"}
MAX_IMAGE_KB = 2048
BOOLEAN_VALUES = {True, False, 0, 1, "0", "1", "true", "false"}

POST_FIELDS = ("title", "slug", "content", "image", "excerpt", "status", "is_featured")


class _Errors:
    def __init__(self) -> None:
        self.messages: dict[str, list[str]] = defaultdict(list)

    def add(self, field: str, message: str) -> None:
        self.messages[field].append(message)

    def raise_if_any(self) -> None:
        if self.messages:
            raise ValidationError(errors=dict(self.messages))


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _string(errors: _Errors, data: Mapping[str, Any], field: str, *, required: bool, max_length: int | None = None) -> str | None:
    value = data.get(field)
    if _blank(value):
        if required:
            errors.add(field, f"The {field} field is required.")
        return None
    if not isinstance(value, str):
        errors.add(field, f"The {field} field must be a string.")
        return None
    if max_length is not None and len(value) > max_length:
        errors.add(field, f"The {field} field must not be greater than {max_length} characters.")
    return value


def is_image(upload: PendingUpload) -> bool:
    try:
        with Image.open(io.BytesIO(upload.content)) as image:
            fmt = image.format
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return False
    return fmt in IMAGE_FORMATS


def email_in_use(email: str) -> bool:
    with get_session() as session:
        return session.execute(select(User.id).where(User.email == email)).first() is not None


def slug_in_use(slug: str, ignore_post_id: int | None = None) -> bool:
    """True when another post (soft-deleted ones included) already owns ``slug``."""
    stmt = select(Post.id).where(Post.slug == slug)
    if ignore_post_id is not None:
        stmt = stmt.where(Post.id != ignore_post_id)
    with get_session() as session:
        return session.execute(stmt).first() is not None


def validate_registration(data: Mapping[str, Any]) -> dict[str, Any]:
    errors = _Errors()
    name = _string(errors, data, "name", required=True, max_length=255)
    email = _string(errors, data, "email", required=True, max_length=255)
    if email is not None:
        if not EMAIL_RE.match(email):
            errors.add("email", "The email field must be a valid email address.")
        elif email_in_use(email):
            errors.add("email", "The email has already been taken.")
    password = _string(errors, data, "password", required=True)
    if password is not None:
        if len(password) < 8:
            errors.add("password", "The password field must be at least 8 characters.")
        if data.get("password_confirmation") != password:
            errors.add("password", "The password field confirmation does not match.")
    errors.raise_if_any()
    return {"name": name, "email": email, "password": password}


def validate_login(data: Mapping[str, Any]) -> dict[str, Any]:
    errors = _Errors()
    email = _string(errors, data, "email", required=True)
    if email is not None and not EMAIL_RE.match(email):
        errors.add("email", "The email field must be a valid email address.")
    password = _string(errors, data, "password", required=True)
    if password is not None and len(password) < 6:
        errors.add("password", "The password field must be at least 6 characters.")
    errors.raise_if_any()
    return {"email": email, "password": password}


def validate_post(data: Mapping[str, Any], *, partial: bool = False, post_id: int | None = None) -> dict[str, Any]:
    """Validate a create payload, or only the fields present when ``partial``."""
    errors = _Errors()
    cleaned: dict[str, Any] = {}

    def wanted(field: str) -> bool:
        return not partial or field in data

    if wanted("title"):
        cleaned["title"] = _string(errors, data, "title", required=True, max_length=255)
    if wanted("slug"):
        slug = _string(errors, data, "slug", required=True, max_length=255)
        if slug is not None and len(slug) <= 255 and slug_in_use(slug, post_id):
            errors.add("slug", "The slug has already been taken.")
        cleaned["slug"] = slug
    if wanted("content"):
        cleaned["content"] = _string(errors, data, "content", required=True)

    if "excerpt" in data:
        cleaned["excerpt"] = _string(errors, data, "excerpt", required=False, max_length=500)

    if "image" in data:
        image = data["image"]
        if _blank(image):
            cleaned["image"] = None
        elif not isinstance(image, PendingUpload) or not is_image(image):
            errors.add("image", "The image field must be an image (jpeg, png, gif or webp).")
        elif image.size > MAX_IMAGE_KB * 1024:
            errors.add("image", f"The image field must not be greater than {MAX_IMAGE_KB} kilobytes.")
        else:
            cleaned["image"] = image

    if not _blank(data.get("status")):
        status = data["status"]
        if status not in POST_STATUSES:
            errors.add("status", "The selected status is invalid.")
        cleaned["status"] = status

    if "is_featured" in data and data["is_featured"] is not None:
        flag = data["is_featured"]
        normalised = flag.strip().lower() if isinstance(flag, str) else flag
        if not isinstance(normalised, (bool, int, str)) or normalised not in BOOLEAN_VALUES:
            errors.add("is_featured", "The is_featured field must be true or false.")
        cleaned["is_featured"] = normalised

    errors.raise_if_any()
    return cleaned


def validate_page_size(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        size = 0
    else:
        try:
            size = int(value)
        except (TypeError, ValueError):
            size = 0
    if size <= 0:
        raise ValidationError(errors={"size": ["The size field must be a positive integer."]})
    return size
