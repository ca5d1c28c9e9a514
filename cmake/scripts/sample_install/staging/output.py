"""Machine-readable summary of an installation run.

Status lines on stdout are for people. Callers that need the results (a CI
step, a packaging script) can ask for an output file instead. The file holds
``key=value`` records, and multi-line values are wrapped in a
``key<<DELIMITER`` block. The format matches what GitHub Actions reads from
``GITHUB_OUTPUT``, so that variable can be passed as the output file.
"""

from __future__ import annotations

import typing as typ
import uuid
from collections.abc import Mapping, Sequence
from pathlib import Path

if typ.TYPE_CHECKING:
    from .pipeline import InstallResult

__all__ = ["prepare_output_data", "write_output_file"]


def prepare_output_data(
    results: Sequence[InstallResult],
) -> dict[str, str | list[str]]:
    """Summarise one or more unit installs.

    Parameters
    ----------
    results : Sequence[InstallResult]
        Outcomes returned by :func:`install_unit` during one run.

    Returns
    -------
    dict[str, str | list[str]]
        ``install_dir`` lists each distinct destination directory.
        ``installed_count`` is the total number of copies.
        ``installed_files`` and ``failed_files`` list file names and source
        paths.

    Examples
    --------
    >>> sorted(prepare_output_data([]))
    ['failed_files', 'install_dir', 'installed_count', 'installed_files']
    """
    installed = [item for result in results for item in result.installed]
    failed = [failure for result in results for failure in result.failures]
    return {
        "install_dir": sorted({result.install_dir.as_posix() for result in results}),
        "installed_count": str(len(installed)),
        "installed_files": sorted({item.destination.name for item in installed}),
        "failed_files": [failure.source.as_posix() for failure in failed],
    }


def write_output_file(file: Path, values: Mapping[str, str | Sequence[str]]) -> None:
    """Append ``values`` to ``file`` as ``key=value`` records.

    Sequences are joined with newlines. A value that ends up on one line is
    written as ``key=value``. Anything longer goes in a ``key<<DELIMITER``
    block, and the delimiter is chosen so it never appears in the payload.
    """
    records: list[str] = []
    for key, value in values.items():
        text = value if isinstance(value, str) else "\n".join(value)
        if "\n" not in text:
            records.append(f"{key}={text}")
            continue
        delimiter = _pick_delimiter(text)
        records.extend([f"{key}<<{delimiter}", text, delimiter])

    file.parent.mkdir(parents=True, exist_ok=True)
    with file.open("a", encoding="utf-8") as handle:
        handle.writelines(f"{record}\n" for record in records)


def _pick_delimiter(text: str) -> str:
    lines = set(text.splitlines())
    delimiter = "END_OUTPUT"
    while delimiter in lines:
        delimiter = f"END_{uuid.uuid4().hex[:12]}"
    return delimiter
