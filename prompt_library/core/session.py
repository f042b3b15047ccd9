"""Transient editing state for the active prompt."""

from dataclasses import dataclass, field

from ..errors import PromptNotFoundError
from ..templates.engine import extract_variables, missing_variables, substitute
from .models import Prompt
from .store import PromptStore


@dataclass
class EditSession:
    """Editing buffer and test inputs for one prompt.

    Nothing here is persisted. Changes reach the library only through
    `commit`.
    """

    prompt_id: str | None = None
    name: str = ""
    content: str = ""
    test_values: dict[str, str] = field(default_factory=dict)
    previewing_version: int | None = None

    @classmethod
    def for_prompt(cls, prompt: Prompt) -> "EditSession":
        session = cls()
        session.open(prompt)
        return session

    def open(self, prompt: Prompt) -> None:
        """Load a prompt's current name and content into the buffer."""
        self.prompt_id = prompt.id
        self.name = prompt.name
        self.previewing_version = None
        self._set_content(prompt.content)

    def _set_content(self, content: str) -> None:
        self.content = content
        self.test_values = {name: "" for name in extract_variables(content)}

    @property
    def variables(self) -> list[str]:
        return extract_variables(self.content)

    def set_content(self, content: str) -> None:
        """Replace the buffer text, keeping values for variables still present."""
        previous = self.test_values
        self._set_content(content)
        for name in self.test_values:
            self.test_values[name] = previous.get(name, "")

    def set_value(self, name: str, value: str) -> None:
        """Set a test input. Names not in the buffer are kept but unused."""
        self.test_values[name] = value

    def restore_version(self, store: PromptStore, prompt_id: str, version_index: int) -> str:
        """Load a past version into the buffer with fresh, empty test inputs.

        The prompt's history is not touched.
        """
        content = store.restore_version(prompt_id, version_index)
        if self.prompt_id != prompt_id:
            self.prompt_id = prompt_id
            self.name = store.get(prompt_id).name
        self.previewing_version = version_index
        self._set_content(content)
        return content

    def preview(self) -> str:
        """The buffer rendered with the current test inputs."""
        return substitute(self.content, self.test_values)

    def missing(self) -> list[str]:
        """Variables with no test input yet."""
        return missing_variables(self.content, self.test_values)

    def is_dirty(self, prompt: Prompt) -> bool:
        """Whether the buffer differs from the prompt's committed state."""
        return self.name != prompt.name or self.content != prompt.content

    def commit(self, store: PromptStore) -> Prompt:
        """Commit the buffer as a new version of the prompt.

        Raises:
            PromptNotFoundError: If the prompt was deleted or none is open
        """
        if self.prompt_id is None:
            raise PromptNotFoundError("")
        prompt = store.commit_edit(self.prompt_id, self.name, self.content)
        self.previewing_version = None
        return prompt
