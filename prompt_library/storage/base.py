"""Base class for persistence adapters."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """A durable string key-value store.

    The prompt store keeps the whole library as one JSON string under a
    single fixed key, so adapters only need get and set.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value for a key, or None if it was never set."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    def describe(self) -> str:
        """Human-readable location for display."""
        return type(self).__name__
