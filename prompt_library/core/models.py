"""Prompt records and their version history."""

import math
from dataclasses import dataclass, field
from typing import Any

from ..templates.engine import extract_variables


def _timestamp(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{what} must be a number")
    if not math.isfinite(value):
        raise ValueError(f"{what} must be finite")
    return int(value)


@dataclass(frozen=True)
class Version:
    """An immutable snapshot of a prompt's content."""

    content: str
    timestamp: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Version":
        content = data["content"]
        if not isinstance(content, str):
            raise TypeError("version content must be a string")
        return cls(content=content, timestamp=_timestamp(data["timestamp"], "version timestamp"))


@dataclass(frozen=True)
class Prompt:
    """A named, versioned template.

    `variables` is derived from `content` and has no setter. Records are
    frozen; the store replaces whole records on every change.
    """

    id: str
    name: str
    content: str
    versions: list[Version] = field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0

    @property
    def variables(self) -> list[str]:
        """Placeholder names in the current content."""
        return extract_variables(self.content)

    @property
    def current_version(self) -> int:
        """Index of the newest version."""
        return len(self.versions) - 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted JSON record."""
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "variables": self.variables,
            "versions": [v.to_dict() for v in self.versions],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Prompt":
        """Create from a persisted record.

        Stored `variables` are ignored and recomputed from content. A record
        with no history gets one version holding its content.

        Raises:
            KeyError, TypeError, ValueError: If the record is malformed
        """
        if not isinstance(data, dict):
            raise TypeError("prompt record must be an object")
        prompt_id = data["id"]
        name = data["name"]
        content = data["content"]
        for key, value in (("id", prompt_id), ("name", name), ("content", content)):
            if not isinstance(value, str):
                raise TypeError(f"prompt {key} must be a string")

        created_at = _timestamp(data.get("createdAt", 0), "createdAt")
        updated_at = _timestamp(data.get("updatedAt", created_at), "updatedAt")
        versions = [Version.from_dict(v) for v in data.get("versions") or []]
        if not versions:
            versions = [Version(content=content, timestamp=updated_at)]

        return cls(
            id=prompt_id,
            name=name,
            content=content,
            versions=versions,
            created_at=created_at,
            updated_at=updated_at,
        )
