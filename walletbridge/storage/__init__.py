# Storage Layer
# Pluggable persistence for bridge settings
#
# This module provides:
# - Port interface (ABC) defining the settings store contract
# - In-memory implementation for development/testing
# - SQLAlchemy implementation for persistence across restarts
# - Factory for configuration-based adapter selection

from .ports import (
    SettingsStore,
    SettingRecord,
    StorageError,
)
from .memory import InMemorySettingsStore
from .sqlalchemy import SqlAlchemySettingsStore
from .factory import (
    StorageSettings,
    StorageBackend,
    create_settings_store,
    create_settings_store_from_env,
    create_sqlite_settings_store,
    settings_from_env,
)

__all__ = [
    # Ports
    "SettingsStore",
    "SettingRecord",
    "StorageError",
    # Implementations
    "InMemorySettingsStore",
    "SqlAlchemySettingsStore",
    # Factory
    "StorageSettings",
    "StorageBackend",
    "create_settings_store",
    "create_settings_store_from_env",
    "create_sqlite_settings_store",
    "settings_from_env",
]
