from __future__ import annotations

from blog_api.core.storage import get_storage
from blog_api.db.models import Post

from . import to_representation


def post_resource(post: Post) -> dict:
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "content": post.content,
        "image": get_storage().url(post.image),
        "excerpt": post.excerpt,
        "status": post.status,
        "is_featured": int(post.is_featured),
        "published_at": post.published_at,
        "author": to_representation(post.user),
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }
