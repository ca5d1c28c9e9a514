"""Core installation pipeline for a single build unit."""

from __future__ import annotations

import dataclasses
import os
import shutil
import sys
import tempfile
import typing as typ
from pathlib import Path

from ..classify import ArtefactKind, classify
from ..collection import collect_candidates
from ..dedup import deduplicate, should_skip_copy
from ..errors import StageError
from ..target import HostPlatform

if typ.TYPE_CHECKING:
    from ..collection import BuildUnit, Candidate
    from ..session import BuildSession

__all__ = [
    "InstallFailure",
    "InstallResult",
    "InstalledFile",
    "deploy_file",
    "install_unit",
]

_POSIX_MODES: dict[ArtefactKind, int] = {
    ArtefactKind.DATA_FILE: 0o644,
    ArtefactKind.SHARED_LIBRARY: 0o644,
    ArtefactKind.EXECUTABLE: 0o755,
}


@dataclasses.dataclass(slots=True, frozen=True)
class InstalledFile:
    """A candidate copied into the installation directory."""

    source: Path
    destination: Path
    kind: ArtefactKind


@dataclasses.dataclass(slots=True, frozen=True)
class InstallFailure:
    """A candidate that could not be inspected or copied."""

    source: Path
    reason: str


@dataclasses.dataclass(slots=True)
class InstallResult:
    """Outcome of :func:`install_unit`.

    Attributes
    ----------
    install_dir:
        Flat directory the unit was installed into.
    installed:
        Files copied during this run, in manifest order.
    skipped:
        Shared data files left alone because they were already installed.
    excluded:
        Candidates that matched no installation rule.
    failures:
        Candidates whose inspection or copy raised an :class:`OSError`.
    """

    install_dir: Path
    installed: list[InstalledFile] = dataclasses.field(default_factory=list)
    skipped: list[Path] = dataclasses.field(default_factory=list)
    excluded: list[Path] = dataclasses.field(default_factory=list)
    failures: list[InstallFailure] = dataclasses.field(default_factory=list)

    @property
    def installed_count(self) -> int:
        """Number of files copied during this run."""
        return len(self.installed)


def install_unit(
    session: BuildSession, unit: BuildUnit, *, config: str | None = None
) -> InstallResult:
    """Install the artefacts of ``unit`` into the session's layout.

    Parameters
    ----------
    session : BuildSession
        Build-wide context holding the target, layout and install prefix.
    unit : BuildUnit
        Unit whose build output and data should be installed.
    config : str | None, optional
        Configuration name supplied by the install step. Required for
        multi-configuration builds; overrides the configure-time value
        otherwise.

    Returns
    -------
    InstallResult
        Summary of installed, skipped, excluded and failed candidates.

    Raises
    ------
    StageError
        Raised when the unit build directory is missing or the configuration
        cannot be resolved. Per-file failures are reported, not raised.
    """
    if not unit.binary_dir.is_dir():
        message = f"Unit build directory not found: {unit.binary_dir}"
        raise StageError(message)

    session.announce()
    live_config = session.target.configuration.resolve(config)
    install_dir = session.target.install_dir(session.install_prefix, config)
    result = InstallResult(install_dir)

    manifest = deduplicate(collect_candidates(unit, session.layout, live_config))
    for candidate in manifest:
        if _is_within(candidate.source, session.install_prefix):
            continue
        try:
            _process_candidate(candidate, install_dir, session, result)
        except OSError as exc:
            _record_failure(result, candidate.source, exc)

    print(
        f"Installation complete: {result.installed_count} files installed to "
        f"{install_dir.as_posix()}"
    )
    return result


def deploy_file(
    source: Path, destination: Path, kind: ArtefactKind, host: HostPlatform
) -> None:
    """Copy ``source`` to ``destination`` and apply ``kind`` permissions.

    The copy is written to a hidden sibling of ``destination`` and moved into
    place with :func:`os.replace`, so a failed copy leaves any previously
    installed file intact. POSIX hosts receive ``0o755`` for executables and
    ``0o644`` otherwise. Windows hosts keep the copied attributes untouched.

    Raises
    ------
    OSError
        Propagated from directory creation, copying, ``chmod`` or the final
        rename.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    handle, partial_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".partial", dir=destination.parent
    )
    os.close(handle)
    partial = Path(partial_name)
    try:
        shutil.copy2(source, partial)
        if host is HostPlatform.POSIX:
            os.chmod(partial, _POSIX_MODES[kind])
        os.replace(partial, destination)
    except OSError:
        partial.unlink(missing_ok=True)
        raise


def _process_candidate(
    candidate: Candidate,
    install_dir: Path,
    session: BuildSession,
    result: InstallResult,
) -> None:
    kind = classify(candidate.source, session.layout)
    if kind is ArtefactKind.SKIP:
        result.excluded.append(candidate.source)
        return

    destination = install_dir / candidate.source.name
    if should_skip_copy(candidate, destination):
        result.skipped.append(candidate.source)
        return

    print(f"Installing {kind.value}: {destination.as_posix()}")
    deploy_file(candidate.source, destination, kind, session.host)
    result.installed.append(InstalledFile(candidate.source, destination, kind))


def _record_failure(result: InstallResult, source: Path, exc: OSError) -> None:
    reason = exc.strerror or str(exc)
    result.failures.append(InstallFailure(source, reason))
    print(
        f"warning: failed to install {source.as_posix()}: {reason}", file=sys.stderr
    )


def _is_within(path: Path, directory: Path) -> bool:
    """Return ``True`` when ``path`` lies beneath ``directory``."""
    candidate = Path(os.path.abspath(path))
    return candidate.is_relative_to(os.path.abspath(directory))
