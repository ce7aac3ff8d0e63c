"""
Storage Port Interfaces

Abstract contracts for the small amount of state the bridge persists across
restarts. Sessions and pending requests are never persisted: they
live only as long as the process (sessions are restored by the relay, if at
all). What survives a restart is user preference, such as whether the
Authentication Gate is enabled.

All persistence APIs are async. Implementations must be safe for concurrent
async usage.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from dataclasses import dataclass
from typing import Any


@dataclass
class SettingRecord:
    """A single persisted bridge setting."""
    key: str
    value: Any
    updated_at: datetime


class SettingsStore(ABC):
    """
    Key-value storage for bridge settings.

    Values must be JSON-serializable.
    """

    @abstractmethod
    async def get(self, key: str) -> SettingRecord | None:
        """
        Get a setting by key.

        Returns:
            The record, or None if the key was never set
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> SettingRecord:
        """
        Create or replace a setting.

        Returns:
            The stored record

        Raises:
            StorageError: If the write fails
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove a setting.

        Returns:
            True if a record was removed
        """
        ...

    async def get_value(self, key: str, default: Any = None) -> Any:
        """Convenience accessor returning just the value."""
        record = await self.get(key)
        return record.value if record is not None else default

    async def close(self) -> None:
        """Release storage resources."""
        pass


# =============================================================================
# Exceptions
# =============================================================================

class StorageError(Exception):
    """Base exception for storage errors."""
    pass
