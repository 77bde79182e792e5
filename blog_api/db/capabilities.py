"""
Capability mixins declared explicitly by each model.

The generic repository checks these with ``issubclass`` instead of probing
models for optional methods:

- ``Searchable``: free-text search over ``searchable_fields``.
- ``FileBearing``: ``file_fields`` hold storage paths under ``storage_path``.
- ``SoftDeletes``: deletes stamp ``deleted_at`` and hide the row.
- ``Timestamps``: ``created_at`` / ``updated_at`` maintained on write.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, func


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Searchable:
    searchable_fields = ()


class FileBearing:
    file_fields = ()
    storage_path = "uploads"


class SoftDeletes:
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None


class Timestamps:
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
