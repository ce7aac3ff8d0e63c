"""
In-Memory Storage Adapter

Process-local settings storage for development and testing.
Everything is lost on restart.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any

from walletbridge.storage.ports import SettingRecord, SettingsStore


class InMemorySettingsStore(SettingsStore):
    """
    In-memory settings storage.

    Uses dict with asyncio.Lock for async safety.
    """

    def __init__(self):
        self._settings: dict[str, SettingRecord] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> SettingRecord | None:
        async with self._lock:
            return self._settings.get(key)

    async def set(self, key: str, value: Any) -> SettingRecord:
        async with self._lock:
            record = SettingRecord(
                key=key,
                value=value,
                updated_at=datetime.now(timezone.utc),
            )
            self._settings[key] = record
            return record

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._settings.pop(key, None) is not None
