"""Encode prompts into URL-safe share tokens and back.

A token is the compact JSON object {"name", "content", "variables"},
UTF-8 encoded and then URL-safe base64 encoded with the padding removed.
Tokens travel as the `s` query parameter of a share link.
"""

import base64
import binascii
import json
import logging
import re
from typing import NamedTuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

SHARE_PARAM = "s"

# URL-safe alphabet only; trailing padding is tolerated
TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_-]+={0,2}")


class SharedPrompt(NamedTuple):
    """The shareable fields of a prompt."""

    name: str
    content: str
    variables: list[str]


def encode(name: str, content: str, variables: list[str]) -> str:
    """Serialize a prompt's shareable fields into a URL-safe token."""
    data = json.dumps(
        {"name": name, "content": content, "variables": list(variables)},
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return base64.urlsafe_b64encode(data.encode("utf-8")).decode("ascii").rstrip("=")


def decode(token: str) -> SharedPrompt | None:
    """Decode a share token.

    Returns None for anything that is not a well-formed token: bad base64,
    bad UTF-8, bad JSON, or missing or mistyped fields. The result is not
    validated beyond its shape; callers decide whether to trust it.
    """
    if not isinstance(token, str):
        return None
    token = token.strip()
    if not TOKEN_PATTERN.fullmatch(token):
        return None

    token = token.rstrip("=")
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, RecursionError) as exc:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        logger.debug("Rejected share token: %s", exc)
        return None

    if not isinstance(data, dict):
        return None
    name = data.get("name")
    content = data.get("content")
    variables = data.get("variables")
    if not isinstance(name, str) or not isinstance(content, str):
        return None
    if not isinstance(variables, list) or not all(isinstance(v, str) for v in variables):
        return None

    return SharedPrompt(name=name, content=content, variables=variables)


def build_share_url(base_url: str, token: str) -> str:
    """Return base_url with the share parameter set to token."""
    parts = urlsplit(base_url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != SHARE_PARAM]
    query.append((SHARE_PARAM, token))
    return urlunsplit(parts._replace(query=urlencode(query)))


def extract_share_token(url: str) -> tuple[str | None, str]:
    """Read the share parameter from a URL.

    Returns:
        Tuple of (token, url_without_share_param). The token is None when
        the URL has no share parameter.
    """
    parts = urlsplit(url)
    token = None
    kept = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key == SHARE_PARAM:
            if token is None:
                token = value
            continue
        kept.append((key, value))
    return token, urlunsplit(parts._replace(query=urlencode(kept)))
