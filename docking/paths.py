"""
Validation and resolution of the user-supplied Vina executable path.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from .base import DOCKING_EXECUTABLE

logger = logging.getLogger(__name__)

ILLEGAL_PATH_CHARS = '<>"|?*'

ILLEGAL_CHARS_MESSAGE = 'Path contains illegal characters (< > " | ? *)'
DIRECTORY_MESSAGE = 'Path should point to the executable file (e.g., vina.exe), not a directory.'


class PathValidationError(ValueError):
    """Raised when an executable path is syntactically invalid."""


def validate_executable_path(path: Optional[str]) -> Optional[str]:
    """Check an executable path string without touching the filesystem.

    Rules are applied in order and the first match wins:
    an empty path is valid (Vina is then looked up on PATH); reserved
    characters are rejected; a trailing separator is rejected.

    Args:
        path: Path as typed by the user

    Returns:
        Error message, or None if the path is acceptable
    """
    if not path:
        return None
    if any(char in ILLEGAL_PATH_CHARS for char in path):
        return ILLEGAL_CHARS_MESSAGE
    if path.endswith('\\') or path.endswith('/'):
        return DIRECTORY_MESSAGE
    return None


def require_valid_executable_path(path: Optional[str]) -> str:
    """Return the trimmed path or raise PathValidationError."""
    cleaned = (path or '').strip()
    error = validate_executable_path(cleaned)
    if error:
        raise PathValidationError(error)
    return cleaned


def resolve_executable(path: Optional[str], default: str = DOCKING_EXECUTABLE) -> str:
    """Resolve the executable on this host.

    Mirrors what the generated run scripts do: use ``path`` when it is valid
    and exists as a file, otherwise fall back to ``default`` on PATH.

    Args:
        path: User-supplied executable path
        default: Bare command name used as the fallback

    Returns:
        The path to use, or ``default``
    """
    cleaned = (path or '').strip()
    if not cleaned:
        return default
    if validate_executable_path(cleaned) is not None:
        logger.warning(f"Ignoring invalid executable path: {cleaned!r}")
        return default
    if Path(cleaned).is_file():
        return cleaned
    logger.warning(f"Executable not found at {cleaned}; falling back to '{default}'")
    return default


def find_on_path(name: str) -> Optional[str]:
    """Locate an executable on PATH.

    Returns:
        Absolute path, or None if not found
    """
    found = shutil.which(name)
    if found and not os.access(found, os.X_OK):
        logger.warning(f"{name} found at {found} but is not executable")
        return None
    return found
