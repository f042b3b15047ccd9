"""Extract and substitute {{variable}} placeholders in prompt templates."""

import re
from typing import Mapping

# ASCII word characters only: {{Role}} and {{role}} are different names
PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}", re.ASCII)


def extract_variables(text: str) -> list[str]:
    """Return the distinct placeholder names in order of first appearance.

    Args:
        text: Template text

    Returns:
        List of variable names, empty if the text has no placeholders
    """
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)


def substitute(text: str, values: Mapping[str, str]) -> str:
    """Fill placeholders with the supplied values.

    Only non-empty values are substituted. A placeholder whose value is
    empty or missing is left verbatim so an unrendered preview shows which
    inputs are still needed. Names that do not occur in the text are
    ignored. Every occurrence of a placeholder is replaced, and the
    inserted values are never scanned again.

    Args:
        text: Template text
        values: Dict of variable name -> value

    Returns:
        Rendered string
    """

    def _replace(match: re.Match[str]) -> str:
        value = values.get(match.group(1))
        if value:
            return value
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_replace, text)


def missing_variables(text: str, values: Mapping[str, str]) -> list[str]:
    """Return the placeholders that substitute() would leave unrendered."""
    return [name for name in extract_variables(text) if not values.get(name)]


def parse_var_string(var_string: str) -> tuple[str, str]:
    """Parse a 'key=value' string into (key, value).

    Args:
        var_string: String in format "key=value"

    Returns:
        Tuple of (key, value)

    Raises:
        ValueError: If string is not in key=value format
    """
    if "=" not in var_string:
        raise ValueError(f"Invalid variable format (expected key=value): {var_string}")

    key, value = var_string.split("=", 1)
    key = key.strip()

    if not key:
        raise ValueError(f"Empty variable name in: {var_string}")

    return key, value


def parse_vars(var_list: list[str]) -> dict[str, str]:
    """Parse a list of 'key=value' strings into a dict.

    Raises:
        ValueError: If any string is not in key=value format
    """
    result: dict[str, str] = {}
    for var_string in var_list:
        key, value = parse_var_string(var_string)
        result[key] = value
    return result
