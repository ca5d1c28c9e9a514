"""Exception types raised by the sample installation helper."""

from __future__ import annotations

__all__ = ["StageError"]


class StageError(RuntimeError):
    """Raised when the installation pipeline cannot continue."""
