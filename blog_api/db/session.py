"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from blog_api.core.config import get_settings


class _ModelDefaults:
    # Column names never rendered by the fallback representation.
    hidden_fields = ()
    default_sort = "id"


Base = declarative_base(cls=_ModelDefaults)

# Largest primary key the supported engines can store (signed 64-bit).
MAX_ROW_ID = 2**63 - 1


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@lru_cache
def get_engine():
    settings = get_settings()
    url = (settings.database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    kwargs = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


@lru_cache
def _get_sessionmaker():
    # Entities are handed to the presentation layer after the session closes.
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, expire_on_commit=False, future=True)


@contextmanager
def get_session() -> Iterator[Session]:
    session: Session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction() -> Iterator[Session]:
    """Session scope that commits on success and rolls back on any exception."""
    with get_session() as session:
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
