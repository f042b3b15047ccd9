"""The prompt library and the operations that change it."""

import dataclasses
import logging
import time
import uuid
from typing import Callable, Iterable, Iterator

from ..errors import PromptLibraryError, PromptNotFoundError, VersionNotFoundError
from ..presets import DEFAULT_PROMPT
from ..share import decode
from ..storage.base import KeyValueStore
from .models import Prompt, Version
from .persistence import LibraryWriter, load_library

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
Listener = Callable[["PromptStore"], None]


def now_ms() -> int:
    """Wall clock in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class PromptStore:
    """Owns the library: prompts keyed by id, iterated in insertion order.

    Every mutation builds the new record completely before swapping it in,
    then notifies listeners. Persistence is one such listener (see `open`).
    The store also tracks the active selection, which is never persisted.
    """

    def __init__(self, prompts: Iterable[Prompt] = (), clock: Clock | None = None) -> None:
        self._prompts: dict[str, Prompt] = {}
        for prompt in prompts:
            self._prompts.setdefault(prompt.id, prompt)
        self._clock = clock or now_ms
        self._listeners: list[Listener] = []
        self.selected_id: str | None = next(iter(self._prompts), None)

    @classmethod
    def open(cls, adapter: KeyValueStore, clock: Clock | None = None) -> "PromptStore":
        """Load the library from an adapter and write back after each change.

        Missing or malformed persisted data gives an empty library.
        """
        store = cls(load_library(adapter), clock=clock)
        store.subscribe(LibraryWriter(adapter))
        logger.debug("Opened library with %d prompts from %s", len(store), adapter.describe())
        return store

    # --- Listeners ---

    def subscribe(self, listener: Listener) -> None:
        """Call listener with the store after every mutation."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    # --- Reads ---

    def __len__(self) -> int:
        return len(self._prompts)

    def __iter__(self) -> Iterator[Prompt]:
        return iter(list(self._prompts.values()))

    def __contains__(self, prompt_id: object) -> bool:
        return prompt_id in self._prompts

    def prompts(self) -> list[Prompt]:
        """All prompts in library order."""
        return list(self._prompts.values())

    def get(self, prompt_id: str) -> Prompt:
        """Return a prompt by id.

        Raises:
            PromptNotFoundError: If no prompt has this id
        """
        try:
            return self._prompts[prompt_id]
        except KeyError:
            raise PromptNotFoundError(prompt_id) from None

    def resolve(self, ref: str) -> Prompt:
        """Find a prompt by exact id or unique id prefix.

        Raises:
            PromptNotFoundError: If nothing matches
            PromptLibraryError: If the prefix matches several prompts
        """
        if ref in self._prompts:
            return self._prompts[ref]
        matches = [p for p in self._prompts.values() if p.id.startswith(ref)]
        if not matches:
            raise PromptNotFoundError(ref)
        if len(matches) > 1:
            ids = ", ".join(p.id for p in matches)
            raise PromptLibraryError(f"Ambiguous prompt id '{ref}' matches: {ids}")
        return matches[0]

    @property
    def selected(self) -> Prompt | None:
        """The active selection, if any."""
        if self.selected_id is None:
            return None
        return self._prompts.get(self.selected_id)

    def select(self, prompt_id: str | None) -> None:
        """Make a prompt the active selection, or clear it with None."""
        if prompt_id is not None and prompt_id not in self._prompts:
            raise PromptNotFoundError(prompt_id)
        self.selected_id = prompt_id

    # --- Mutations ---

    def _new_id(self, timestamp: int) -> str:
        while True:
            prompt_id = f"{timestamp}-{uuid.uuid4().hex[:6]}"
            if prompt_id not in self._prompts:
                return prompt_id

    def create(self, name: str, content: str | None = None) -> Prompt:
        """Add a prompt and make it the active selection.

        Args:
            name: Display name
            content: Template text; the built-in default template if omitted

        Returns:
            The new prompt
        """
        if content is None:
            content = DEFAULT_PROMPT
        timestamp = self._clock()
        prompt = Prompt(
            id=self._new_id(timestamp),
            name=name,
            content=content,
            versions=[Version(content=content, timestamp=timestamp)],
            created_at=timestamp,
            updated_at=timestamp,
        )
        self._prompts[prompt.id] = prompt
        self.selected_id = prompt.id
        logger.debug("Created prompt %s (%s)", prompt.id, name)
        self._notify()
        return prompt

    def load_preset(self, preset_name: str, preset_content: str) -> Prompt:
        """Create a prompt from a preset."""
        return self.create(preset_name, preset_content)

    def commit_edit(self, prompt_id: str, new_name: str, new_content: str) -> Prompt:
        """Replace a prompt's name and content and record a new version.

        Raises:
            PromptNotFoundError: If no prompt has this id
        """
        current = self.get(prompt_id)
        # Keep history monotonic even if the wall clock steps back
        timestamp = max(self._clock(), current.versions[-1].timestamp if current.versions else 0)
        updated = dataclasses.replace(
            current,
            name=new_name,
            content=new_content,
            versions=[*current.versions, Version(content=new_content, timestamp=timestamp)],
            updated_at=timestamp,
        )
        self._prompts[prompt_id] = updated
        logger.debug("Committed version %d of prompt %s", updated.current_version, prompt_id)
        self._notify()
        return updated

    def delete(self, prompt_id: str) -> None:
        """Remove a prompt. Unknown ids are ignored.

        If the removed prompt was selected, the first remaining prompt becomes
        the selection, or nothing when the library is empty.
        """
        if prompt_id not in self._prompts:
            logger.debug("Delete of unknown prompt %s ignored", prompt_id)
            return
        del self._prompts[prompt_id]
        if self.selected_id == prompt_id:
            self.selected_id = next(iter(self._prompts), None)
        logger.debug("Deleted prompt %s", prompt_id)
        self._notify()

    def restore_version(self, prompt_id: str, version_index: int) -> str:
        """Return the content of a past version without changing history.

        Raises:
            PromptNotFoundError: If no prompt has this id
            VersionNotFoundError: If the index is outside the history
        """
        prompt = self.get(prompt_id)
        if not 0 <= version_index < len(prompt.versions):
            raise VersionNotFoundError(prompt_id, version_index, len(prompt.versions))
        return prompt.versions[version_index].content

    def import_shared(self, token: str) -> Prompt | None:
        """Create a prompt from a share token.

        Returns None, without touching the library, if the token is malformed.
        """
        shared = decode(token)
        if shared is None:
            logger.warning("Ignoring malformed share token")
            return None
        return self.create(f"{shared.name} (shared)", shared.content)
