"""Exception types raised by the prompt library."""


class PromptLibraryError(Exception):
    """Base class for prompt library errors."""


class PromptNotFoundError(PromptLibraryError, KeyError):
    """Raised when an operation references an id absent from the library."""

    def __init__(self, prompt_id: str) -> None:
        super().__init__(prompt_id)
        self.prompt_id = prompt_id

    def __str__(self) -> str:
        return f"Prompt not found: {self.prompt_id}"


class VersionNotFoundError(PromptLibraryError, IndexError):
    """Raised when a version index is outside a prompt's history."""

    def __init__(self, prompt_id: str, index: int, count: int) -> None:
        super().__init__(f"Prompt {prompt_id} has no version {index} ({count} versions)")
        self.prompt_id = prompt_id
        self.index = index
        self.count = count


class ConfigError(PromptLibraryError, ValueError):
    """Raised for unreadable or invalid configuration and preset files."""
