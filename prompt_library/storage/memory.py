"""In-memory adapter for tests and embedding."""

from .base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Dict-backed store that lives for the process lifetime."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def describe(self) -> str:
        return "memory"
