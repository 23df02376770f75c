"""Database package: shared engine and session factory."""

from cofounder.db.base import Base, close_db, get_session_factory, init_db, session_scope

__all__ = [
    "Base",
    "close_db",
    "get_session_factory",
    "init_db",
    "session_scope",
]
