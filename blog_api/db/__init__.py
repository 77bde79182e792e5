"""Database helpers (engine/session/transaction export)."""

from .session import MAX_ROW_ID, Base, get_engine, get_session, transaction

__all__ = ["MAX_ROW_ID", "Base", "get_engine", "get_session", "transaction"]
