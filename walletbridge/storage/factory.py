"""
Storage Factory

Environment-based configuration and factory for the settings store.

Supported backends:
- memory: In-memory storage (development/testing)
- sqlite: SQLite with aiosqlite (desktop/single-node)
- postgresql: PostgreSQL with asyncpg

Usage:
    # From environment
    store = await create_settings_store_from_env()

    # From settings
    settings = StorageSettings(database_url="sqlite+aiosqlite:///bridge.db")
    store = await create_settings_store(settings)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .memory import InMemorySettingsStore
from .models import Base
from .ports import SettingsStore
from .sqlalchemy import SqlAlchemySettingsStore


class StorageBackend(str, Enum):
    """Supported storage backends."""
    MEMORY = "memory"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


@dataclass
class StorageSettings:
    """
    Configuration for the storage layer.

    Attributes:
        backend: Storage backend type
        database_url: SQLAlchemy async connection URL (for SQL backends)
        pool_size: Connection pool size (PostgreSQL only)
        echo_sql: Whether to log SQL queries
        create_tables: Whether to auto-create tables on startup
    """
    backend: StorageBackend = StorageBackend.MEMORY
    database_url: str | None = None
    pool_size: int = 5
    echo_sql: bool = False
    create_tables: bool = True


def _parse_database_url(url: str) -> StorageBackend:
    """Determine backend from database URL."""
    if url.startswith("sqlite"):
        return StorageBackend.SQLITE
    elif url.startswith("postgresql") or url.startswith("postgres"):
        return StorageBackend.POSTGRESQL
    else:
        raise ValueError(f"Unsupported database URL scheme: {url}")


def settings_from_env() -> StorageSettings:
    """
    Create StorageSettings from environment variables.

    Environment variables:
        BRIDGE_STORAGE_BACKEND: "memory", "sqlite", "postgresql"
        BRIDGE_DATABASE_URL: SQLAlchemy async connection URL
        BRIDGE_POOL_SIZE: Connection pool size
        BRIDGE_ECHO_SQL: "true" to log SQL
        BRIDGE_CREATE_TABLES: "false" to disable table creation
    """
    database_url = os.getenv("BRIDGE_DATABASE_URL")
    backend_str = os.getenv("BRIDGE_STORAGE_BACKEND", "memory")

    # Auto-detect backend from URL if provided
    if database_url and backend_str == "memory":
        backend = _parse_database_url(database_url)
    else:
        backend = StorageBackend(backend_str)

    return StorageSettings(
        backend=backend,
        database_url=database_url,
        pool_size=int(os.getenv("BRIDGE_POOL_SIZE", "5")),
        echo_sql=os.getenv("BRIDGE_ECHO_SQL", "").lower() == "true",
        create_tables=os.getenv("BRIDGE_CREATE_TABLES", "true").lower() != "false",
    )


async def create_settings_store(settings: StorageSettings) -> SettingsStore:
    """
    Create a settings store from settings.

    Raises:
        ValueError: If settings are invalid
    """
    if settings.backend == StorageBackend.MEMORY:
        return InMemorySettingsStore()

    if not settings.database_url:
        raise ValueError(f"database_url required for backend {settings.backend}")

    # Ensure async driver is in URL
    url = settings.database_url
    if settings.backend == StorageBackend.SQLITE:
        if "+aiosqlite" not in url:
            url = url.replace("sqlite://", "sqlite+aiosqlite://")
        engine = create_async_engine(url, echo=settings.echo_sql)
    else:
        if "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://")
            url = url.replace("postgres://", "postgresql+asyncpg://")
        engine = create_async_engine(
            url,
            pool_size=settings.pool_size,
            echo=settings.echo_sql,
        )

    if settings.create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return SqlAlchemySettingsStore(session_factory, engine=engine)


async def create_settings_store_from_env() -> SettingsStore:
    """Create a settings store from environment variables."""
    return await create_settings_store(settings_from_env())


async def create_sqlite_settings_store(
    path: str = ":memory:",
    create_tables: bool = True,
) -> SettingsStore:
    """Create a SQLite settings store."""
    return await create_settings_store(StorageSettings(
        backend=StorageBackend.SQLITE,
        database_url=f"sqlite+aiosqlite:///{path}",
        create_tables=create_tables,
    ))
