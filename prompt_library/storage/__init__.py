"""Persistence adapters for the prompt library."""

from ..config import StorageConfig
from ..errors import ConfigError
from .base import KeyValueStore
from .json_file import JsonFileStore
from .memory import MemoryStore
from .sqlite import SqliteStore


def create_store(config: StorageConfig) -> KeyValueStore:
    """Create the adapter selected by the storage config."""
    if config.type == "json":
        return JsonFileStore(config.path)
    if config.type == "sqlite":
        return SqliteStore(config.path)
    if config.type == "memory":
        return MemoryStore()
    raise ConfigError(f"Unknown storage type: {config.type}")


__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SqliteStore",
    "create_store",
]
