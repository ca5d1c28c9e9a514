"""Decide how each candidate file should be installed.

Classification first drops link-time intermediates, sources and build
housekeeping files, then recognises data files, shared libraries and
executables. Executables are detected differently per host: Windows relies on
the ``.exe`` extension while POSIX hosts look for an extension-less file with
an execute permission bit.
"""

from __future__ import annotations

import enum
import os
import stat
import typing as typ
from pathlib import Path

from .target import HostPlatform

if typ.TYPE_CHECKING:
    from .config import StagingLayout

__all__ = ["ArtefactKind", "classify", "has_execute_bit", "is_excluded"]

_EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class ArtefactKind(enum.StrEnum):
    """Installation class of a candidate file."""

    DATA_FILE = "data file"
    SHARED_LIBRARY = "shared library"
    EXECUTABLE = "executable"
    SKIP = "skip"


def is_excluded(path: Path, layout: StagingLayout) -> bool:
    """Return ``True`` when ``path`` must never be installed.

    Examples
    --------
    >>> layout = StagingLayout.defaults(HostPlatform.POSIX)  # doctest: +SKIP
    >>> is_excluded(Path("build/CMakeFiles/app.dir/main.cu.o"), layout)  # doctest: +SKIP
    True
    """
    if path.suffix.lower() in layout.excluded_extensions:
        return True
    if path.name in layout.excluded_names:
        return True
    return any(part in layout.excluded_dirs for part in path.parent.parts)


def has_execute_bit(path: Path) -> bool:
    """Return ``True`` when any execute permission bit is set on ``path``.

    Raises
    ------
    OSError
        Propagated when ``path`` cannot be inspected.
    """
    return bool(os.stat(path).st_mode & _EXECUTE_BITS)


def classify(
    path: Path,
    layout: StagingLayout,
    host: HostPlatform | None = None,
) -> ArtefactKind:
    """Return the :class:`ArtefactKind` of ``path``.

    Parameters
    ----------
    path : Path
        Candidate file to classify.
    layout : StagingLayout
        Extension and exclusion tables.
    host : HostPlatform | None, optional
        Permission model to apply. Defaults to ``layout.host``.

    Returns
    -------
    ArtefactKind
        ``SKIP`` for excluded or unrecognised files.
    """
    host = host or layout.host
    if is_excluded(path, layout):
        return ArtefactKind.SKIP

    suffix = path.suffix.lower()
    if suffix in layout.data_extensions:
        return ArtefactKind.DATA_FILE
    if suffix in layout.shared_library_extensions:
        return ArtefactKind.SHARED_LIBRARY
    if host is HostPlatform.WINDOWS:
        if suffix in layout.executable_extensions:
            return ArtefactKind.EXECUTABLE
        return ArtefactKind.SKIP
    if not suffix and has_execute_bit(path):
        return ArtefactKind.EXECUTABLE
    return ArtefactKind.SKIP
