"""Prompt records, the library store and editing sessions."""

from .models import Prompt, Version
from .persistence import LIBRARY_KEY, LibraryWriter, dump_library, load_library, parse_library
from .session import EditSession
from .store import PromptStore, now_ms

__all__ = [
    "LIBRARY_KEY",
    "EditSession",
    "LibraryWriter",
    "Prompt",
    "PromptStore",
    "Version",
    "dump_library",
    "load_library",
    "now_ms",
    "parse_library",
]
