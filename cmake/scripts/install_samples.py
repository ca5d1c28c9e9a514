# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "cyclopts>=3.24.0,<4.0.0",
# ]
# ///

"""Command-line entry point for the sample installation helper.

The build system runs this script during its install step. Each named sample
has its executables, shared libraries and data files copied into
``<prefix>/<arch>/<os>/<config>``. Name every sample of a build in one run so
the layout summary is printed only once.

Examples
--------
Install one sample from a single-configuration build tree::

    uv run cmake/scripts/install_samples.py \
        Samples/0_Introduction/vectorAdd build/Samples/0_Introduction/vectorAdd \
        --source-root . --build-type Release

Install several samples from a multi-configuration tree, naming the
configuration at install time::

    export CMAKE_INSTALL_CONFIG_NAME=Debug
    uv run cmake/scripts/install_samples.py --multi-config \
        --unit Samples/0_Introduction/vectorAdd:build/Samples/0_Introduction/vectorAdd \
        --unit Samples/2_Concepts/reduction:build/Samples/2_Concepts/reduction
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from sample_install import (
    BuildUnit,
    HostPlatform,
    StageError,
    StagingLayout,
    TargetFacts,
    install_unit,
    load_layout,
    open_session,
    optional_env_path,
)
from sample_install.staging import prepare_output_data, write_output_file

import cyclopts

CONFIG_ENV = "CMAKE_INSTALL_CONFIG_NAME"
PREFIX_ENV = "SAMPLES_INSTALL_PREFIX"
OUTPUT_ENV = "SAMPLES_INSTALL_OUTPUT"

app = cyclopts.App(help="Install sample build outputs into the per-target layout.")


@app.default
def main(
    source_dir: Path | None = None,
    binary_dir: Path | None = None,
    *,
    unit: list[str] | None = None,
    source_root: Path | None = None,
    build_dir: Path | None = None,
    config: str | None = None,
    build_type: str | None = None,
    multi_config: bool = False,
    arch: str | None = None,
    system_name: str | None = None,
    install_prefix: Path | None = None,
    layout_file: Path | None = None,
    output_file: Path | None = None,
) -> None:
    """Install the artefacts of one or more samples.

    All samples named in one run share a session, so the layout summary is
    printed once however many samples are installed.

    Parameters
    ----------
    source_dir:
        Source directory of a single sample.
    binary_dir:
        Build output directory of that sample.
    unit:
        Additional ``SOURCE_DIR<sep>BINARY_DIR`` pair, where ``<sep>`` is the
        platform path-list separator (``:`` on POSIX, ``;`` on Windows).
        Repeat the option to install several samples.
    source_root:
        Top-level source directory holding the prebuilt library pool.
    build_dir:
        Directory the build-root search starts from; defaults to the first
        sample's binary directory.
    config:
        Configuration being installed. Falls back to
        ``CMAKE_INSTALL_CONFIG_NAME``.
    build_type:
        Configure-time build type of single-configuration trees.
    multi_config:
        The tree was generated by a multi-configuration generator.
    arch:
        Target processor; defaults to the host machine.
    system_name:
        Target system name; defaults to the host system.
    install_prefix:
        Installation prefix. Falls back to ``SAMPLES_INSTALL_PREFIX`` and then
        to ``<build root>/bin``.
    layout_file:
        TOML file overriding the built-in layout tables.
    output_file:
        File receiving ``key=value`` results. Falls back to
        ``SAMPLES_INSTALL_OUTPUT``.
    """
    try:
        units = _collect_units(source_dir, binary_dir, unit or [], source_root)
        host = HostPlatform.detect()
        layout = (
            load_layout(Path(layout_file), host)
            if layout_file
            else StagingLayout.defaults(host)
        )
        facts = TargetFacts.from_host(
            processor=arch,
            system_name=system_name,
            multi_config=multi_config,
            build_type=build_type,
        )
        session = open_session(
            facts,
            Path(build_dir or units[0].binary_dir),
            layout=layout,
            install_prefix=install_prefix or optional_env_path(PREFIX_ENV),
        )
        live_config = config or os.environ.get(CONFIG_ENV) or None
        results = [install_unit(session, item, config=live_config) for item in units]
        if (target := output_file or optional_env_path(OUTPUT_ENV)) is not None:
            write_output_file(Path(target), prepare_output_data(results))
    except (FileNotFoundError, StageError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if failed := sum(len(result.failures) for result in results):
        print(f"{failed} file(s) could not be installed.", file=sys.stderr)


def _collect_units(
    source_dir: Path | None,
    binary_dir: Path | None,
    pairs: list[str],
    source_root: Path | None,
) -> list[BuildUnit]:
    """Return the samples named positionally and through ``--unit``."""
    units: list[BuildUnit] = []
    if (source_dir is None) != (binary_dir is None):
        message = "SOURCE_DIR and BINARY_DIR must be given together."
        raise StageError(message)
    if source_dir is not None and binary_dir is not None:
        units.append(BuildUnit(Path(source_dir), Path(binary_dir), source_root))
    for pair in pairs:
        parts = pair.split(os.pathsep)
        if len(parts) != 2 or not all(parts):
            message = (
                f"Invalid --unit value '{pair}': expected "
                f"SOURCE_DIR{os.pathsep}BINARY_DIR."
            )
            raise StageError(message)
        units.append(BuildUnit(Path(parts[0]), Path(parts[1]), source_root))
    if not units:
        message = "No samples to install: pass SOURCE_DIR BINARY_DIR or --unit."
        raise StageError(message)
    return units


if __name__ == "__main__":
    app()
