"""Load markdown prompt files, with YAML frontmatter or in export format."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

EXPORT_TRAILER_PATTERN = re.compile(
    r"\n*---\n\*Exported from Prompt Library on [^\n]*\*\s*\Z"
)
HEADING_PATTERN = re.compile(r"\A#[ \t]+(.+?)[ \t]*(?:\n|\Z)")


@dataclass
class PromptFile:
    """A prompt read from a markdown file."""

    name: str
    content: str
    description: str = ""


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split markdown content into frontmatter dict and body.

    Args:
        content: Markdown content with optional YAML frontmatter

    Returns:
        Tuple of (frontmatter_dict, body_text)
        If no frontmatter, returns ({}, content)
    """
    content = content.strip()

    if not content.startswith("---"):
        return {}, content

    # Skip the first "---" and find the closing one
    lines = content.split("\n")
    end_idx = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            end_idx = i
            break

    if end_idx is None:
        return {}, content

    frontmatter_text = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :]).strip()

    try:
        frontmatter = yaml.safe_load(frontmatter_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML frontmatter: {exc}") from exc

    if frontmatter is None:
        frontmatter = {}

    if not isinstance(frontmatter, dict):
        raise ValueError("Frontmatter must be a YAML mapping")

    return frontmatter, body


def parse_export(content: str) -> tuple[str | None, str]:
    """Split an exported document into (title, body), dropping the trailer."""
    content = EXPORT_TRAILER_PATTERN.sub("", content.strip())
    match = HEADING_PATTERN.match(content)
    if not match:
        return None, content
    return match.group(1), content[match.end() :].strip()


def load_prompt_file(path: str | Path) -> PromptFile:
    """Load a markdown prompt file.

    The name comes from the frontmatter `name` key, then from a leading
    `# heading`, then from the file stem.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file is unreadable or has no content
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ValueError(f"Failed to read prompt file: {exc}") from exc

    frontmatter, body = parse_frontmatter(text)
    title = frontmatter.get("name")
    if not frontmatter:
        title, body = parse_export(body)

    if not body.strip():
        raise ValueError(f"Prompt file has no content: {path}")

    return PromptFile(
        name=str(title) if title else path.stem,
        content=body,
        description=str(frontmatter.get("description", "")),
    )
