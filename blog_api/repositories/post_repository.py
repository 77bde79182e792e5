from __future__ import annotations

from typing import Any, Mapping, Optional

from blog_api.core.storage import LocalFileStorage
from blog_api.db.capabilities import utcnow
from blog_api.db.models import Post

from .base import ResourceRepository

TRUTHY = {"1", "true", "yes", "on"}


def featured_flag(value: Any) -> int:
    """Normalise a boolean-like request value to 0/1."""
    if isinstance(value, str):
        return 1 if value.strip().lower() in TRUTHY else 0
    return 1 if value else 0


class PostRepository(ResourceRepository[Post]):
    """Posts: authorship, featured flag and publication timestamp rules."""

    def __init__(self, storage: LocalFileStorage | None = None) -> None:
        super().__init__(Post, storage)

    def save(self, input: Mapping[str, Any], acting_user_id: int | None = None) -> Post:
        data = dict(input)
        if acting_user_id is not None:
            data["user_id"] = acting_user_id
        data["is_featured"] = featured_flag(data.get("is_featured"))
        data["status"] = data.get("status") or "draft"
        data["published_at"] = utcnow() if data["status"] == "published" else None
        return super().save(data)

    def update(self, input: Mapping[str, Any], id: Any) -> Optional[Post]:
        data = dict(input)
        if "is_featured" in data:
            data["is_featured"] = featured_flag(data["is_featured"])
        if data.get("status") == "published":
            data["published_at"] = utcnow()
        return super().update(data, id)
