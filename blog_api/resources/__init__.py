"""
Presentation of entities as JSON-ready dicts.

Presenters are registered explicitly per model class by
``configure_resources()``; a model without one is rendered as its column
values minus ``hidden_fields``.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from blog_api.repositories.base import Page

Presenter = Callable[[Any], dict]
PageUrl = Callable[[int], str]


class ResourceRegistry:
    def __init__(self) -> None:
        self._presenters: dict[type, Presenter] = {}

    def register(self, model: type, presenter: Presenter) -> None:
        self._presenters[model] = presenter

    def presenter_for(self, model: type) -> Optional[Presenter]:
        for klass in model.__mro__:
            presenter = self._presenters.get(klass)
            if presenter is not None:
                return presenter
        return None

    def clear(self) -> None:
        self._presenters.clear()


registry = ResourceRegistry()


def default_representation(entity: Any) -> dict:
    hidden = set(getattr(entity, "hidden_fields", ()))
    return {
        column.key: getattr(entity, column.key)
        for column in entity.__table__.columns
        if column.key not in hidden
    }


def to_representation(entity: Any) -> Optional[dict]:
    if entity is None:
        return None
    presenter = registry.presenter_for(type(entity))
    if presenter is None:
        return default_representation(entity)
    return presenter(entity)


def pagination_meta(page: Page, page_url: PageUrl | None = None) -> dict:
    def link(number: Optional[int]) -> Optional[str]:
        if number is None or page_url is None:
            return None
        return page_url(number)

    return {
        "totalItems": page.total,
        "itemsPerPage": page.per_page,
        "currentPage": page.current_page,
        "lastPage": page.last_page,
        "nextPageUrl": link(page.next_page),
        "prevPageUrl": link(page.prev_page),
    }


def to_collection(result: Iterable[Any], page_url: PageUrl | None = None) -> dict:
    data = [to_representation(item) for item in result]
    pagination = pagination_meta(result, page_url) if isinstance(result, Page) else {}
    return {"data": data, "pagination": pagination}


def configure_resources() -> None:
    from blog_api.db.models import Post

    from .posts import post_resource

    registry.register(Post, post_resource)
