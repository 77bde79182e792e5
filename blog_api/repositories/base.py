"""
Generic resource repository shared by every entity type.

A repository wraps one model class and provides paginated listing (search,
sort, order), lookup and transactional create/update/delete. Models opt into
behaviour through the capability mixins in ``blog_api.db.capabilities``:

- ``Searchable`` models are filtered by a case-insensitive substring match
  on their searchable fields;
- ``FileBearing`` models get their pending uploads stored before the row is
  written, and the files they reference removed on overwrite and delete;
- ``SoftDeletes`` models are hidden instead of removed.

SQLAlchemy errors never leave this module: they are logged and re-raised as
``ConstraintViolation`` or ``UnexpectedError``. File storage is not
transactional, so uploads made inside a failed transaction are deleted
afterwards, and files replaced by an update are only deleted once the new
value is committed.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Generic, Iterator, Mapping, Optional, Sequence, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session

from blog_api.core.exceptions import ConstraintViolation, UnexpectedError
from blog_api.core.storage import LocalFileStorage, PendingUpload, get_storage
from blog_api.db.capabilities import FileBearing, Searchable, SoftDeletes, utcnow
from blog_api.db.session import MAX_ROW_ID, get_session, transaction

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

DEFAULT_PAGE_SIZE = 25
SORT_DIRECTIONS = ("asc", "desc")
GUARDED_FIELDS = frozenset({"id", "created_at", "updated_at", "deleted_at"})
LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE metacharacters so they match literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass
class Page(Generic[ModelT]):
    """One slice of a listing plus the totals needed to navigate it."""

    items: list[ModelT]
    total: int
    per_page: int
    current_page: int

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def next_page(self) -> Optional[int]:
        return self.current_page + 1 if self.current_page < self.last_page else None

    @property
    def prev_page(self) -> Optional[int]:
        return self.current_page - 1 if self.current_page > 1 else None

    def __iter__(self) -> Iterator[ModelT]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class ResourceRepository(Generic[ModelT]):
    """CRUD helpers for a single model class."""

    def __init__(self, model: type[ModelT], storage: LocalFileStorage | None = None) -> None:
        self.model = model
        self._storage = storage
        if issubclass(model, FileBearing):
            columns = model.__table__.columns
            missing = [name for name in model.file_fields if name not in columns]
            if missing:
                raise ValueError(f"{model.__name__} declares unknown file fields: {', '.join(missing)}")

    @property
    def storage(self) -> LocalFileStorage:
        return self._storage or get_storage()

    @property
    def entity_name(self) -> str:
        return self.model.__name__.lower()

    # -------------------------- query parameters --------------------------
    def get_search_query(self, query_params: Mapping[str, Any]) -> Optional[str]:
        value = query_params.get("search")
        if value is None:
            return None
        return str(value).strip() or None

    def get_sort_field(self, query_params: Mapping[str, Any], default: str | None = None) -> str:
        fallback = default or self.model.default_sort
        sort = str(query_params.get("sort") or "").strip()
        return sort if sort in self.model.__table__.columns else fallback

    def get_order(self, query_params: Mapping[str, Any], default: str = "desc") -> str:
        order = str(query_params.get("order") or default).strip().lower()
        return order if order in SORT_DIRECTIONS else default

    def get_page_number(self, query_params: Mapping[str, Any]) -> int:
        try:
            page = int(query_params.get("page") or 1)
        except (TypeError, ValueError):
            return 1
        return max(page, 1)

    # -------------------------- listing --------------------------
    def filters(self, search: Optional[str]) -> list:
        criteria = []
        if issubclass(self.model, SoftDeletes):
            criteria.append(self.model.deleted_at.is_(None))
        if search and issubclass(self.model, Searchable) and self.model.searchable_fields:
            pattern = f"%{escape_like(search)}%"
            criteria.append(
                or_(*(getattr(self.model, name).ilike(pattern, escape=LIKE_ESCAPE) for name in self.model.searchable_fields))
            )
        return criteria

    def ordering(self, sort: str, order: str) -> list:
        columns = [self.model.__table__.columns[sort]]
        columns.extend(col for col in self.model.__table__.primary_key.columns if col.name != sort)
        return [col.desc() if order == "desc" else col.asc() for col in columns]

    def paginated_list(self, page_size: int = DEFAULT_PAGE_SIZE, query_params: Mapping[str, Any] | None = None) -> Page[ModelT]:
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            raise ValueError("page_size must be a positive integer")
        params = query_params or {}
        criteria = self.filters(self.get_search_query(params))
        ordering = self.ordering(self.get_sort_field(params), self.get_order(params))
        page = self.get_page_number(params)
        offset = (page - 1) * page_size
        with get_session() as session:
            total = session.execute(select(func.count()).select_from(self.model).where(*criteria)).scalar_one()
            items = []
            if offset < total:
                limit = min(page_size, MAX_ROW_ID)
                stmt = select(self.model).where(*criteria).order_by(*ordering).limit(limit).offset(offset)
                items = session.execute(stmt).unique().scalars().all()
        return Page(items=list(items), total=total, per_page=page_size, current_page=page)

    # -------------------------- single entities --------------------------
    def _get_live(self, session: Session, id: Any) -> Optional[ModelT]:
        if isinstance(id, int) and not 0 < id <= MAX_ROW_ID:
            return None
        try:
            entity = session.get(self.model, id)
        except (OverflowError, DataError):
            # Ids the engine cannot represent match nothing.
            session.rollback()
            return None
        if entity is None:
            return None
        if isinstance(entity, SoftDeletes) and entity.deleted_at is not None:
            return None
        return entity

    def find(self, id: Any) -> Optional[ModelT]:
        with get_session() as session:
            return self._get_live(session, id)

    def save(self, input: Mapping[str, Any]) -> ModelT:
        uploaded: list[str] = []
        try:
            with transaction() as session:
                values = self._store_uploads(self._fillable(input), uploaded)
                entity = self.model(**values)
                session.add(entity)
                session.flush()
                session.refresh(entity)
        except IntegrityError as exc:
            self._discard(uploaded)
            logger.exception("Constraint violation while creating %s", self.entity_name)
            raise ConstraintViolation(f"Failed to create {self.entity_name}") from exc
        except Exception as exc:
            self._discard(uploaded)
            logger.exception("Unexpected error while creating %s", self.entity_name)
            raise UnexpectedError(f"Unexpected error while creating {self.entity_name}") from exc
        return entity

    def update(self, input: Mapping[str, Any], id: Any) -> Optional[ModelT]:
        uploaded: list[str] = []
        try:
            with transaction() as session:
                entity = self._get_live(session, id)
                if entity is None:
                    return None
                values = self._store_uploads(self._fillable(input), uploaded)
                replaced = self._replaced_files(entity, values)
                for key, value in values.items():
                    setattr(entity, key, value)
                session.flush()
                session.refresh(entity)
        except IntegrityError as exc:
            self._discard(uploaded)
            logger.exception("Constraint violation while updating %s %s", self.entity_name, id)
            raise ConstraintViolation(f"Failed to update {self.entity_name}") from exc
        except Exception as exc:
            self._discard(uploaded)
            logger.exception("Unexpected error while updating %s %s", self.entity_name, id)
            raise UnexpectedError(f"Unexpected error while updating {self.entity_name}") from exc
        self._discard(replaced)
        return entity

    def delete(self, id: Any) -> None:
        try:
            with transaction() as session:
                entity = self._get_live(session, id)
                if entity is None:
                    return
                self._delete_files(entity)
                if isinstance(entity, SoftDeletes):
                    entity.deleted_at = utcnow()
                else:
                    session.delete(entity)
        except Exception as exc:
            logger.exception("Unexpected error while deleting %s %s", self.entity_name, id)
            raise UnexpectedError(f"Unexpected error while deleting {self.entity_name}") from exc

    # -------------------------- files --------------------------
    def _fillable(self, input: Mapping[str, Any]) -> dict[str, Any]:
        columns = self.model.__table__.columns
        return {key: value for key, value in input.items() if key in columns and key not in GUARDED_FIELDS}

    def _file_fields(self) -> Sequence[str]:
        return self.model.file_fields if issubclass(self.model, FileBearing) else ()

    def _store_uploads(self, values: dict[str, Any], uploaded: list[str]) -> dict[str, Any]:
        for name in self._file_fields():
            value = values.get(name)
            if isinstance(value, PendingUpload):
                path = self.storage.upload(value, f"{self.model.storage_path}/{name}")
                uploaded.append(path)
                values[name] = path
        return values

    def _replaced_files(self, entity: ModelT, values: Mapping[str, Any]) -> list[str]:
        replaced = []
        for name in self._file_fields():
            current = getattr(entity, name)
            if name in values and current and values[name] != current:
                replaced.append(current)
        return replaced

    def _delete_files(self, entity: ModelT) -> None:
        for name in self._file_fields():
            path = getattr(entity, name)
            if path and self.storage.exists(path):
                self.storage.delete(path)

    def _discard(self, paths: Sequence[str]) -> None:
        for path in paths:
            try:
                self.storage.delete(path)
            except (OSError, ValueError):
                logger.warning("Could not remove stored file %s", path, exc_info=True)
