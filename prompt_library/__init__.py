"""Author, version, test-render and share {{variable}} prompt templates."""

from .core import EditSession, Prompt, PromptStore, Version
from .errors import (
    ConfigError,
    PromptLibraryError,
    PromptNotFoundError,
    VersionNotFoundError,
)
from .share import SharedPrompt, decode, encode
from .templates import extract_variables, substitute

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "EditSession",
    "Prompt",
    "PromptLibraryError",
    "PromptNotFoundError",
    "PromptStore",
    "SharedPrompt",
    "Version",
    "VersionNotFoundError",
    "decode",
    "encode",
    "extract_variables",
    "substitute",
]
