"""Environment helpers shared by the installation toolchain."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import StageError

__all__ = ["optional_env_path", "require_env_path"]


def require_env_path(name: str) -> Path:
    """Return ``Path`` value for ``name`` or raise :class:`StageError`.

    Parameters
    ----------
    name:
        Name of the environment variable to fetch.

    Raises
    ------
    StageError
        Raised when the environment variable is unset or empty.
    """
    if (value := optional_env_path(name)) is None:
        message = f"Environment variable '{name}' is not set."
        raise StageError(message)
    return value


def optional_env_path(name: str) -> Path | None:
    """Return ``Path`` value for ``name`` or ``None`` when unset or empty."""
    value = os.environ.get(name)
    return Path(value) if value else None
