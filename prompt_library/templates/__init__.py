"""Template engine for {{variable}} prompt templates."""

from .engine import (
    extract_variables,
    missing_variables,
    parse_vars,
    substitute,
)
from .loader import PromptFile, load_prompt_file

__all__ = [
    "PromptFile",
    "extract_variables",
    "load_prompt_file",
    "missing_variables",
    "parse_vars",
    "substitute",
]
