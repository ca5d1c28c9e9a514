"""Layout tables and loader for the installation helper.

This module provides the :class:`StagingLayout` dataclass holding every table
the pipeline consults (marker file, extension lists, shared data locations,
platform library templates) and a loader that reads overrides from a TOML
document with a ``[common]`` section and per-host ``[targets.*]`` sections.

Usage
-----
Load the repository layout for the running host::

    from pathlib import Path
    from sample_install.config import load_layout
    from sample_install.target import HostPlatform

    layout = load_layout(Path("cmake/install-layout.toml"), HostPlatform.detect())
    print(layout.data_extensions)
"""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from pathlib import Path

import tomllib

from .errors import StageError
from .target import HostPlatform

__all__ = [
    "StagingLayout",
    "load_layout",
    "render_template",
]

_COMMON_DEFAULTS: dict[str, typ.Any] = {
    "marker_file": "CMakeCache.txt",
    "max_ascent": 50,
    "prefix_dir": "bin",
    "data_extensions": (".fatbin", ".ptx", ".bc", ".raw", ".ppm"),
    "excluded_extensions": (
        ".o", ".a", ".cmake", ".obj", ".lib", ".exp", ".ilk", ".pdb",
        ".cu", ".cpp", ".cxx", ".cc", ".c", ".h", ".hpp", ".hxx", ".cuh", ".inl",
    ),
    "excluded_names": ("Makefile", "cmake_install.cmake"),
    "excluded_dirs": ("CMakeFiles",),
    "unit_data_dir": "data",
    "shared_data_dirs": ("../../../Common/data", "../../../../Common/data"),
}

_TARGET_DEFAULTS: dict[HostPlatform, dict[str, typ.Any]] = {
    HostPlatform.POSIX: {
        "shared_library_extensions": (".so",),
        "executable_extensions": (),
        "platform_library_dirs": (),
        "platform_library_glob": "*.so",
    },
    HostPlatform.WINDOWS: {
        "shared_library_extensions": (".dll",),
        "executable_extensions": (".exe",),
        "platform_library_dirs": (
            "../../../bin/win64/{config}",
            "../../../../bin/win64/{config}",
            "{source_root}/bin/win64/{config}",
        ),
        "platform_library_glob": "*.dll",
    },
}

_STRING_KEYS = {"marker_file", "prefix_dir", "unit_data_dir", "platform_library_glob"}
_LIST_KEYS = {
    "data_extensions",
    "excluded_extensions",
    "excluded_names",
    "excluded_dirs",
    "shared_data_dirs",
    "shared_library_extensions",
    "executable_extensions",
    "platform_library_dirs",
}
_EXTENSION_KEYS = {
    "data_extensions",
    "excluded_extensions",
    "shared_library_extensions",
    "executable_extensions",
}


@dataclasses.dataclass(slots=True, frozen=True)
class StagingLayout:
    """Tables consulted by the collector, classifier and deployer.

    Parameters
    ----------
    host : HostPlatform
        Permission model the tables were selected for.
    marker_file : str
        File identifying the top of the build tree.
    max_ascent : int
        Maximum number of parent directories inspected for ``marker_file``.
    prefix_dir : str
        Directory beneath the build root used as the default install prefix.
    data_extensions : tuple[str, ...]
        Extensions installed as data files.
    excluded_extensions : tuple[str, ...]
        Extensions never installed (objects, archives, sources, headers).
    excluded_names : tuple[str, ...]
        Build housekeeping file names never installed.
    excluded_dirs : tuple[str, ...]
        Build-internal directory names whose contents are never installed.
    unit_data_dir : str
        Directory beneath a unit's source tree holding its own data files.
    shared_data_dirs : tuple[str, ...]
        Candidate locations of the shared data pool relative to a unit's
        source tree; the first existing one is used.
    shared_library_extensions : tuple[str, ...]
        Dynamic-library extensions on ``host``.
    executable_extensions : tuple[str, ...]
        Extensions marking executables on ``host``. Empty on POSIX hosts,
        where the execute permission bit decides instead.
    platform_library_dirs : tuple[str, ...]
        ``str.format`` templates locating prebuilt shared libraries. Relative
        templates resolve against the unit source tree.
    platform_library_glob : str
        Pattern selecting files inside a platform library directory.

    Examples
    --------
    >>> layout = StagingLayout.defaults(HostPlatform.WINDOWS)
    >>> layout.executable_extensions
    ('.exe',)
    """

    host: HostPlatform
    marker_file: str
    max_ascent: int
    prefix_dir: str
    data_extensions: tuple[str, ...]
    excluded_extensions: tuple[str, ...]
    excluded_names: tuple[str, ...]
    excluded_dirs: tuple[str, ...]
    unit_data_dir: str
    shared_data_dirs: tuple[str, ...]
    shared_library_extensions: tuple[str, ...]
    executable_extensions: tuple[str, ...]
    platform_library_dirs: tuple[str, ...]
    platform_library_glob: str

    @classmethod
    def defaults(cls, host: HostPlatform) -> StagingLayout:
        """Return the built-in tables for ``host``."""
        return _build_layout(host, {})

    def platform_library_candidates(
        self, source_dir: Path, source_root: Path | None, config: str
    ) -> list[Path]:
        """Render :attr:`platform_library_dirs` for one unit and configuration.

        Both directories are made absolute before rendering so relative
        templates and the ``{source_root}`` template resolve from the same
        place. Templates naming ``{source_root}`` are dropped when
        ``source_root`` is unknown.
        """
        base = Path(os.path.abspath(source_dir))
        context = {"config": config}
        if source_root is not None:
            context["source_root"] = Path(os.path.abspath(source_root)).as_posix()
        return [
            base / render_template(template, context)
            for template in self.platform_library_dirs
            if source_root is not None or "{source_root}" not in template
        ]


def load_layout(config_file: Path, host: HostPlatform) -> StagingLayout:
    """Load layout overrides from ``config_file`` for ``host``.

    Parameters
    ----------
    config_file : Path
        TOML document with an optional ``[common]`` table and optional
        ``[targets.posix]``/``[targets.windows]`` tables.
    host : HostPlatform
        Host whose ``[targets.*]`` section should be merged.

    Returns
    -------
    StagingLayout
        Built-in defaults overlaid with the values found in ``config_file``.

    Raises
    ------
    FileNotFoundError
        Raised when the configuration file is absent at ``config_file``.
    StageError
        Raised when a key is unknown or holds a value of the wrong type.
    """
    config_file = Path(config_file)
    if not config_file.is_file():
        message = f"Configuration file not found at {config_file}"
        raise FileNotFoundError(message)

    data = _load_toml(config_file)
    common, target_cfg = _extract_sections(data, config_file, host)
    overrides = _validate_section(common, "common", config_file)
    overrides |= _validate_section(target_cfg, f"targets.{host.value}", config_file)
    return _build_layout(host, overrides)


def render_template(template: str, context: dict[str, typ.Any]) -> str:
    """Return ``template`` formatted with ``context``.

    Examples
    --------
    >>> render_template("bin/win64/{config}", {"config": "debug"})
    'bin/win64/debug'
    """
    try:
        return template.format(**context)
    except KeyError as exc:
        message = f"Invalid template key {exc} in '{template}'"
        raise StageError(message) from exc


def _build_layout(host: HostPlatform, overrides: dict[str, typ.Any]) -> StagingLayout:
    values = _COMMON_DEFAULTS | _TARGET_DEFAULTS[host] | overrides
    for key in _LIST_KEYS:
        values[key] = tuple(values[key])
    for key in _EXTENSION_KEYS:
        values[key] = tuple(_normalise_extension(item) for item in values[key])
    return StagingLayout(host=host, **values)


def _load_toml(path: Path) -> dict[str, typ.Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _extract_sections(
    data: dict[str, typ.Any], config_path: Path, host: HostPlatform
) -> tuple[dict[str, typ.Any], dict[str, typ.Any]]:
    common = data.get("common", {})
    targets = data.get("targets", {})
    if not isinstance(common, dict) or not isinstance(targets, dict):
        message = f"[common] and [targets] must be tables in {config_path}"
        raise StageError(message)
    target_cfg = targets.get(host.value, {})
    if not isinstance(target_cfg, dict):
        message = f"[targets.{host.value}] must be a table in {config_path}"
        raise StageError(message)
    return common, target_cfg


def _validate_section(
    section: dict[str, typ.Any], label: str, config_path: Path
) -> dict[str, typ.Any]:
    """Return the recognised keys of ``section`` with validated values.

    Examples
    --------
    >>> _validate_section(  # doctest: +SKIP
    ...     {"max_ascent": 10},
    ...     "common",
    ...     Path("cfg"),
    ... )
    {'max_ascent': 10}
    """
    known = _STRING_KEYS | _LIST_KEYS | {"max_ascent"}
    if unknown := sorted(key for key in section if key not in known):
        joined = ", ".join(unknown)
        message = f"Unknown key(s) {joined} in [{label}] section of {config_path}"
        raise StageError(message)

    validated: dict[str, typ.Any] = {}
    for key, value in section.items():
        if key == "max_ascent":
            validated[key] = _positive_int(value, key, label, config_path)
        elif key in _STRING_KEYS:
            validated[key] = _non_empty_string(value, key, label, config_path)
        else:
            validated[key] = _string_list(value, key, label, config_path)
    return validated


def _positive_int(value: object, key: str, label: str, config_path: Path) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        message = f"'{key}' must be a positive integer in [{label}] of {config_path}"
        raise StageError(message)
    return value


def _non_empty_string(value: object, key: str, label: str, config_path: Path) -> str:
    if not isinstance(value, str) or not value:
        message = f"'{key}' must be a non-empty string in [{label}] of {config_path}"
        raise StageError(message)
    return value


def _string_list(
    value: object, key: str, label: str, config_path: Path
) -> list[str]:
    """Return ``value`` as a list of non-empty strings."""
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, list):
        message = f"'{key}' must be a list of strings in [{label}] of {config_path}"
        raise StageError(message)
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            message = f"'{key}' entries must be strings in [{label}] of {config_path}"
            raise StageError(message)
        if item:
            items.append(item)
    return items


def _normalise_extension(extension: str) -> str:
    lowered = extension.lower()
    return lowered if lowered.startswith(".") else f".{lowered}"
