"""Database layer - session management, base models, and mixins."""

from thermio.core.database.base import Base, TimestampMixin, UUIDMixin, WorkspaceMixin
from thermio.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
    make_engine,
    make_session_factory,
)


__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "WorkspaceMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "make_engine",
    "make_session_factory",
]
