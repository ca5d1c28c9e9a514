"""Candidate discovery for a single build unit."""

from __future__ import annotations

import dataclasses
import enum
import os
import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    from .config import StagingLayout

__all__ = [
    "BuildUnit",
    "Candidate",
    "Provenance",
    "collect_candidates",
    "iter_unit_files",
]


class Provenance(enum.IntEnum):
    """Origin of a candidate, ordered by installation precedence."""

    UNIT_OUTPUT = 1
    UNIT_DATA = 2
    SHARED_DATA = 3
    PLATFORM_LIBRARIES = 4


@dataclasses.dataclass(slots=True, frozen=True)
class BuildUnit:
    """One independently built sample.

    Parameters
    ----------
    source_dir : Path
        Source directory of the unit (``CMAKE_CURRENT_SOURCE_DIR``).
    binary_dir : Path
        Build output directory of the unit (``CMAKE_CURRENT_BINARY_DIR``).
    source_root : Path | None, optional
        Top-level source directory (``CMAKE_SOURCE_DIR``). Platform library
        templates that need it are skipped when it is not given.
    """

    source_dir: Path
    binary_dir: Path
    source_root: Path | None = None


@dataclasses.dataclass(slots=True, frozen=True)
class Candidate:
    """Existing file that may be installed. Never modified by the helper."""

    source: Path
    provenance: Provenance


def iter_unit_files(root: Path) -> list[Path]:
    """Return every file beneath ``root`` in sorted order.

    Symlinked directories are listed by :func:`os.walk` but never descended
    into. A missing ``root`` yields an empty list.
    """
    if not root.is_dir():
        return []
    found: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        found.extend(base / name for name in filenames)
    return sorted(found)


def collect_candidates(
    unit: BuildUnit, layout: StagingLayout, config: str
) -> list[Candidate]:
    """Return the installation manifest for ``unit``.

    Provenances are concatenated in :class:`Provenance` order: unit build
    output, unit data, the shared data pool, then the platform library pool.
    ``config`` is the live configuration name used to locate prebuilt
    platform libraries.

    Examples
    --------
    >>> unit = BuildUnit(Path("Samples/0_Intro/vectorAdd"), Path("build/vectorAdd"))
    >>> collect_candidates(unit, layout, "release")  # doctest: +SKIP
    [Candidate(source=PosixPath('build/vectorAdd/vectorAdd'), ...), ...]
    """
    manifest = [
        Candidate(path, Provenance.UNIT_OUTPUT)
        for path in iter_unit_files(unit.binary_dir)
    ]
    manifest.extend(
        Candidate(path, Provenance.UNIT_DATA)
        for path in iter_unit_files(unit.source_dir / layout.unit_data_dir)
    )
    manifest.extend(
        Candidate(path, Provenance.SHARED_DATA)
        for path in _shared_data_files(unit.source_dir, layout)
    )
    manifest.extend(
        Candidate(path, Provenance.PLATFORM_LIBRARIES)
        for path in _platform_library_files(unit, layout, config)
    )
    return manifest


def _shared_data_files(source_dir: Path, layout: StagingLayout) -> list[Path]:
    for relative in layout.shared_data_dirs:
        pool = _normalise(source_dir / relative)
        if pool.is_dir():
            return iter_unit_files(pool)
    return []


def _platform_library_files(
    unit: BuildUnit, layout: StagingLayout, config: str
) -> list[Path]:
    candidates = layout.platform_library_candidates(
        unit.source_dir, unit.source_root, config
    )
    for directory in map(_normalise, candidates):
        if not directory.is_dir():
            continue
        if matches := sorted(
            path for path in directory.glob(layout.platform_library_glob)
            if path.is_file()
        ):
            return matches
    return []


def _normalise(path: Path) -> Path:
    return Path(os.path.normpath(path))
