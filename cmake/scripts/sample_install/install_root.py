"""Locate the shared installation root of a build tree.

Sub-projects configured as part of a larger build each have their own binary
directory. Installing beneath that directory would scatter artefacts across
the tree, so the default prefix is derived from the top-level build directory,
identified by the build system's cache file.
"""

from __future__ import annotations

import os
from pathlib import Path

__all__ = [
    "DEFAULT_MARKER",
    "DEFAULT_MAX_ASCENT",
    "default_install_prefix",
    "find_build_root",
    "resolve_install_prefix",
]

DEFAULT_MARKER = "CMakeCache.txt"
DEFAULT_MAX_ASCENT = 50


def find_build_root(
    build_dir: Path,
    marker: str = DEFAULT_MARKER,
    max_ascent: int = DEFAULT_MAX_ASCENT,
) -> Path:
    """Return the nearest ancestor of ``build_dir`` containing ``marker``.

    The search inspects ``build_dir`` itself and at most ``max_ascent``
    parents. It stops early at the filesystem root or when a parent lookup no
    longer changes the path. When nothing is found, ``build_dir`` is returned
    unchanged.

    Examples
    --------
    >>> find_build_root(Path("/nonexistent/build/sub"))  # doctest: +SKIP
    PosixPath('/nonexistent/build/sub')
    """
    start = Path(os.path.abspath(build_dir))
    current = start
    previous: Path | None = None
    for _ in range(max_ascent + 1):
        if (current / marker).is_file():
            return current
        previous, current = current, current.parent
        if current == previous:
            break
    return start


def default_install_prefix(
    build_dir: Path,
    *,
    marker: str = DEFAULT_MARKER,
    max_ascent: int = DEFAULT_MAX_ASCENT,
    prefix_dir: str = "bin",
) -> Path:
    """Return ``<build root>/<prefix_dir>`` for ``build_dir``."""
    return find_build_root(build_dir, marker, max_ascent) / prefix_dir


def resolve_install_prefix(
    build_dir: Path,
    override: Path | None = None,
    *,
    marker: str = DEFAULT_MARKER,
    max_ascent: int = DEFAULT_MAX_ASCENT,
    prefix_dir: str = "bin",
) -> Path:
    """Return ``override`` when given, else ``<build root>/<prefix_dir>``."""
    if override is not None:
        return Path(os.path.abspath(override))
    return default_install_prefix(
        build_dir, marker=marker, max_ascent=max_ascent, prefix_dir=prefix_dir
    )
