"""Shared fixtures for prompt-library tests."""

import pytest

from prompt_library.core import PromptStore
from prompt_library.storage import MemoryStore


class FakeClock:
    """Deterministic millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def adapter():
    return MemoryStore()


@pytest.fixture
def store(adapter, clock):
    """A store backed by an in-memory adapter."""
    return PromptStore.open(adapter, clock=clock)
