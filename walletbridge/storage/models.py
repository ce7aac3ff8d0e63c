"""
SQLAlchemy Models for Bridge Storage

Async-compatible SQLAlchemy 2.0 ORM models. Designed to work with SQLite
(via aiosqlite) and PostgreSQL (via asyncpg).

JSON column handling:
- PostgreSQL: Native JSONB
- SQLite: TEXT with JSON serialization
"""

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, Text, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class JSONType(TypeDecorator):
    """
    Platform-agnostic JSON column.

    Uses JSONB on PostgreSQL, TEXT+JSON elsewhere.
    """
    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if dialect.name == "postgresql":
            return value
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        if isinstance(value, str):
            return json.loads(value)
        return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class SettingModel(Base):
    """A persisted bridge setting (key -> JSON value)."""
    __tablename__ = "bridge_settings"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSONType(), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
