"""Shared helpers for the installation test suites."""

from __future__ import annotations

import dataclasses
from pathlib import Path

__all__ = [
    "SampleTree",
    "build_sample_tree",
    "decode_output_file",
    "snapshot_dir",
    "write_executable",
    "write_file",
]


@dataclasses.dataclass(slots=True, frozen=True)
class SampleTree:
    """Paths of a synthetic sample laid out like the samples repository."""

    source_root: Path
    source_dir: Path
    shared_data: Path
    build_root: Path
    binary_dir: Path

    @property
    def unit_data(self) -> Path:
        """Directory holding the sample's own data files."""
        return self.source_dir / "data"

    def install_dir(self, config: str = "debug") -> Path:
        """Return the default installation directory for ``config``."""
        return self.build_root / "bin" / "x86_64" / "linux" / config


def build_sample_tree(root: Path, category: str = "0_Introduction") -> SampleTree:
    """Create source and build directories for a ``vectorAdd`` sample.

    Parameters
    ----------
    root : Path
        Directory receiving ``src/`` and ``build/`` subtrees.
    category : str, default="0_Introduction"
        Sample category directory; nesting it deeper moves the shared data
        pool one level further away.
    """
    source_root = root / "src"
    source_dir = source_root / "Samples" / category / "vectorAdd"
    build_root = root / "build"
    binary_dir = build_root / "Samples" / category / "vectorAdd"
    for directory in (source_dir, binary_dir):
        directory.mkdir(parents=True, exist_ok=True)
    (build_root / "CMakeCache.txt").write_text("# cache\n", encoding="utf-8")
    return SampleTree(
        source_root=source_root,
        source_dir=source_dir,
        shared_data=source_root / "Common" / "data",
        build_root=build_root,
        binary_dir=binary_dir,
    )


def write_file(path: Path, payload: bytes = b"payload") -> Path:
    """Write ``payload`` to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return path


def write_executable(path: Path, payload: bytes = b"\x7fELF") -> Path:
    """Write ``payload`` to ``path`` and mark it executable."""
    write_file(path, payload)
    path.chmod(0o755)
    return path


def snapshot_dir(directory: Path) -> dict[str, bytes]:
    """Return a mapping of file names to contents for ``directory``."""
    return {path.name: path.read_bytes() for path in directory.iterdir()}


def decode_output_file(path: Path) -> dict[str, str]:
    """Return the records of an output file as a ``key -> value`` mapping."""
    values: dict[str, str] = {}
    lines = iter(path.read_text(encoding="utf-8").splitlines())
    for line in lines:
        key, sep, value = line.partition("=")
        if not sep or "<<" in key:
            key, _, delimiter = line.partition("<<")
            block: list[str] = []
            for body in lines:
                if body == delimiter:
                    break
                block.append(body)
            value = "\n".join(block)
        values[key] = value
    return values
