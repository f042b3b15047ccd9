"""Best-effort system clipboard sink."""

import logging
import shutil
import subprocess

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5  # seconds

# Tried in order; the first one found on PATH is used
CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)


def find_clipboard_command() -> tuple[str, ...] | None:
    """Return the first available clipboard command, if any."""
    for command in CLIPBOARD_COMMANDS:
        if shutil.which(command[0]):
            return command
    return None


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the system clipboard. Returns True on success.

    Failures are logged, never raised.
    """
    command = find_clipboard_command()
    if command is None:
        logger.info("No clipboard command available")
        return False

    try:
        result = subprocess.run(
            command,
            input=text.encode("utf-8"),
            capture_output=True,
            timeout=DEFAULT_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning("Clipboard command %s failed: %s", command[0], exc)
        return False

    if result.returncode != 0:
        logger.warning(
            "Clipboard command %s exited with %d: %s",
            command[0],
            result.returncode,
            result.stderr.decode("utf-8", errors="replace").strip(),
        )
        return False
    return True
