"""Read and write the whole library as one JSON array."""

import json
import logging
from typing import TYPE_CHECKING, Iterable

from ..storage.base import KeyValueStore
from .models import Prompt

if TYPE_CHECKING:
    from .store import PromptStore

logger = logging.getLogger(__name__)

# Fixed key the library lives under in the key-value store
LIBRARY_KEY = "prompt-library"


def dump_library(prompts: Iterable[Prompt]) -> str:
    """Serialize prompts, in library order, to a JSON array."""
    return json.dumps([p.to_dict() for p in prompts], ensure_ascii=False)


def parse_library(raw: str | None) -> list[Prompt]:
    """Parse a persisted library.

    Anything unparsable yields an empty list. Individual malformed records
    and repeated ids are skipped.
    """
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as exc:
        # ValueError covers JSONDecodeError and over-long integer literals
        logger.warning("Persisted library is not valid JSON, starting empty: %s", exc)
        return []
    if not isinstance(data, list):
        logger.warning("Persisted library is not a JSON array, starting empty")
        return []

    prompts: list[Prompt] = []
    seen: set[str] = set()
    for index, record in enumerate(data):
        try:
            prompt = Prompt.from_dict(record)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed prompt record %d: %s", index, exc)
            continue
        if prompt.id in seen:
            logger.warning("Skipping duplicate prompt id %s", prompt.id)
            continue
        seen.add(prompt.id)
        prompts.append(prompt)
    return prompts


def load_library(adapter: KeyValueStore) -> list[Prompt]:
    """Read the library from an adapter. Never raises."""
    try:
        raw = adapter.get(LIBRARY_KEY)
    except Exception as exc:
        logger.warning("Could not read library from %s: %s", adapter.describe(), exc)
        return []
    return parse_library(raw)


class LibraryWriter:
    """Store listener that writes the library after every change.

    Writes are best effort: a failing adapter is logged and the in-memory
    library stays authoritative.
    """

    def __init__(self, adapter: KeyValueStore) -> None:
        self.adapter = adapter
        self.failures = 0

    def __call__(self, store: "PromptStore") -> None:
        try:
            self.adapter.set(LIBRARY_KEY, dump_library(store))
        except Exception as exc:
            self.failures += 1
            logger.warning("Could not save library to %s: %s", self.adapter.describe(), exc)
