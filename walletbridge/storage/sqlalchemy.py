"""
SQLAlchemy Storage Adapter

Async SQLAlchemy 2.0 implementation of the settings store.
All operations are async. No sync DB calls.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from walletbridge.storage.models import SettingModel
from walletbridge.storage.ports import SettingRecord, SettingsStore, StorageError


def setting_model_to_record(model: SettingModel) -> SettingRecord:
    """Convert SQLAlchemy model to port record."""
    return SettingRecord(
        key=model.key,
        value=model.value,
        updated_at=model.updated_at,
    )


class SqlAlchemySettingsStore(SettingsStore):
    """
    SQLAlchemy implementation of settings storage.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ):
        self._session_factory = session_factory
        self._engine = engine

    async def get(self, key: str) -> SettingRecord | None:
        async with self._session_factory() as session:
            model = await session.get(SettingModel, key)
            if model is None:
                return None
            return setting_model_to_record(model)

    async def set(self, key: str, value: Any) -> SettingRecord:
        now = datetime.now(timezone.utc)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    model = await session.get(SettingModel, key)
                    if model is None:
                        model = SettingModel(key=key, value=value, updated_at=now)
                        session.add(model)
                    else:
                        model.value = value
                        model.updated_at = now
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to store setting {key}: {e}") from e

        return SettingRecord(key=key, value=value, updated_at=now)

    async def delete(self, key: str) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                model = await session.get(SettingModel, key)
                if model is None:
                    return False
                await session.delete(model)
                return True

    async def close(self) -> None:
        if self._engine:
            await self._engine.dispose()
