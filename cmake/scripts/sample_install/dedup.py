"""Manifest deduplication and the shared-pool skip-copy rule."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from .collection import Candidate, Provenance

__all__ = ["deduplicate", "should_skip_copy"]


def deduplicate(candidates: typ.Iterable[Candidate]) -> list[Candidate]:
    """Return ``candidates`` with repeated source paths removed.

    The first occurrence wins, so manifest order decides precedence. Paths are
    compared after lexical normalisation; two different sources sharing a
    file name are both kept and will overwrite each other on installation.

    Examples
    --------
    >>> first = Candidate(Path("/src/data/a.raw"), Provenance.UNIT_DATA)
    >>> again = Candidate(Path("/src/x/../data/a.raw"), Provenance.SHARED_DATA)
    >>> [item.provenance.name for item in deduplicate([first, again])]
    ['UNIT_DATA']
    """
    seen: set[str] = set()
    unique: list[Candidate] = []
    for candidate in candidates:
        key = os.path.normcase(os.path.normpath(os.path.abspath(candidate.source)))
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def should_skip_copy(candidate: Candidate, destination: Path) -> bool:
    """Return ``True`` when a shared data file is already installed.

    Units installing into the same directory carry byte-identical copies of
    the shared pool, so an existing destination is left untouched. The check
    is advisory: two installs racing in parallel may both copy, which is
    harmless while pool contents are identical.
    """
    return candidate.provenance is Provenance.SHARED_DATA and destination.exists()
