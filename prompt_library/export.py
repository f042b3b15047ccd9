"""Render prompts as markdown documents."""

import re
from datetime import date
from pathlib import Path

from jinja2 import BaseLoader, Environment

from .core.models import Prompt

EXPORT_TEMPLATE = """\
# {{ name }}

{{ content }}

---
*Exported from Prompt Library on {{ exported_on }}*
"""

_FILENAME_JUNK = re.compile(r"[^a-z0-9]+")


def _create_jinja_env() -> Environment:
    """Create a Jinja2 environment for plain-text documents."""
    return Environment(
        loader=BaseLoader(),
        keep_trailing_newline=False,
        autoescape=False,
    )


# Shared environment instance
_jinja_env = _create_jinja_env()
_export_template = _jinja_env.from_string(EXPORT_TEMPLATE)


def export_filename(name: str) -> str:
    """File name for an exported prompt: lowercased, non-alphanumeric runs -> '-'."""
    return _FILENAME_JUNK.sub("-", name.lower()) + ".md"


def render_export(prompt: Prompt, exported_on: date | None = None) -> str:
    """Render the export document for a prompt.

    The prompt content is inserted as a value, so any `{{placeholders}}`
    it contains come through untouched.
    """
    exported_on = exported_on or date.today()
    return _export_template.render(
        name=prompt.name,
        content=prompt.content,
        exported_on=exported_on.isoformat(),
    )


def write_export(prompt: Prompt, directory: str | Path, exported_on: date | None = None) -> Path:
    """Write the export document into directory and return its path."""
    directory = Path(directory).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(prompt.name)
    path.write_text(render_export(prompt, exported_on) + "\n", encoding="utf-8")
    return path
