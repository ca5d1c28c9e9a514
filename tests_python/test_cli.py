"""Behavioural tests for the installation CLI entry point."""

from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path
from types import ModuleType

import pytest

from install_test_helpers import (
    build_sample_tree,
    decode_output_file,
    write_executable,
    write_file,
)

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPTS_DIR = REPO_ROOT / "cmake" / "scripts"

posix_only = pytest.mark.skipif(os.name == "nt", reason="requires POSIX permissions")


@pytest.fixture
def install_cli(sample_install: object) -> ModuleType:
    """Import the CLI module from the scripts directory."""
    sys_path_entry = str(SCRIPTS_DIR)
    sys.path.insert(0, sys_path_entry)
    try:
        return importlib.import_module("install_samples")
    finally:
        sys.path.remove(sys_path_entry)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove installation variables inherited from the outer environment."""
    for name in (
        "CMAKE_INSTALL_CONFIG_NAME",
        "SAMPLES_INSTALL_PREFIX",
        "SAMPLES_INSTALL_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)


def _run(install_cli: ModuleType, tree: object, **kwargs: object) -> None:
    install_cli.main(
        tree.source_dir,
        tree.binary_dir,
        source_root=tree.source_root,
        arch="x86_64",
        system_name="Linux",
        **kwargs,
    )


@posix_only
def test_main_installs_and_writes_outputs(
    install_cli: ModuleType,
    sample_tree: object,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """The CLI should install the unit and export workflow outputs."""
    write_executable(sample_tree.binary_dir / "vectorAdd")
    write_file(sample_tree.binary_dir / "vectorAdd.cu.o")
    write_file(sample_tree.unit_data / "input.raw")
    output_file = tmp_path / "outputs.txt"
    monkeypatch.setenv("SAMPLES_INSTALL_OUTPUT", str(output_file))

    _run(install_cli, sample_tree, build_type="Debug")

    install_dir = sample_tree.install_dir("debug")
    assert (install_dir / "vectorAdd").is_file()
    assert (install_dir / "input.raw").is_file()
    assert not (install_dir / "vectorAdd.cu.o").exists()

    outputs = decode_output_file(output_file)
    assert outputs["install_dir"] == install_dir.as_posix()
    assert outputs["installed_count"] == "2"
    assert outputs["installed_files"] == "input.raw\nvectorAdd"

    out = capsys.readouterr().out
    assert "  Install Prefix: " in out
    assert "Installation complete: 2 files installed" in out


def test_main_reads_live_configuration_from_environment(
    install_cli: ModuleType,
    sample_tree: object,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Multi-config builds should take the configuration from the install step."""
    write_file(sample_tree.binary_dir / "kernel.ptx")
    monkeypatch.setenv("CMAKE_INSTALL_CONFIG_NAME", "RelWithDebInfo")

    _run(install_cli, sample_tree, multi_config=True)

    assert (sample_tree.install_dir("relwithdebinfo") / "kernel.ptx").is_file()


def test_main_honours_prefix_environment(
    install_cli: ModuleType,
    sample_tree: object,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """``SAMPLES_INSTALL_PREFIX`` should replace the derived prefix."""
    write_file(sample_tree.binary_dir / "kernel.ptx")
    prefix = tmp_path / "dist"
    monkeypatch.setenv("SAMPLES_INSTALL_PREFIX", str(prefix))

    _run(install_cli, sample_tree, build_type="Release")

    assert (prefix / "x86_64" / "linux" / "release" / "kernel.ptx").is_file()


def test_main_applies_layout_file(
    install_cli: ModuleType,
    sample_tree: object,
    tmp_path: Path,
) -> None:
    """A layout file should replace the built-in data whitelist."""
    write_file(sample_tree.binary_dir / "weights.bin")
    layout_file = tmp_path / "layout.toml"
    layout_file.write_text(
        '[common]\ndata_extensions = [".bin"]\n', encoding="utf-8"
    )

    _run(install_cli, sample_tree, build_type="Release", layout_file=layout_file)

    assert (sample_tree.install_dir("release") / "weights.bin").is_file()


def test_main_reports_missing_configuration(
    install_cli: ModuleType,
    sample_tree: object,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A multi-config install without a configuration should exit with 1."""
    with pytest.raises(SystemExit) as exc:
        _run(install_cli, sample_tree, multi_config=True)

    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "CMAKE_INSTALL_CONFIG_NAME" in err


def test_main_reports_missing_layout_file(
    install_cli: ModuleType,
    sample_tree: object,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A missing layout file should be reported as an installation error."""
    with pytest.raises(SystemExit) as exc:
        _run(
            install_cli,
            sample_tree,
            build_type="Release",
            layout_file=tmp_path / "absent.toml",
        )

    assert exc.value.code == 1
    assert "Configuration file not found" in capsys.readouterr().err


def test_app_parses_command_line(install_cli: ModuleType, sample_tree: object) -> None:
    """The cyclopts app should bind positional paths and option flags."""
    command, bound, *_ = install_cli.app.parse_args(
        [
            str(sample_tree.source_dir),
            str(sample_tree.binary_dir),
            "--build-type",
            "Release",
            "--multi-config",
        ]
    )

    assert command is install_cli.main
    assert bound.arguments["source_dir"] == sample_tree.source_dir
    assert bound.arguments["binary_dir"] == sample_tree.binary_dir
    assert bound.arguments["build_type"] == "Release"
    assert bound.arguments["multi_config"] is True


def _unit_option(tree: object) -> str:
    return f"{tree.source_dir}{os.pathsep}{tree.binary_dir}"


def test_main_announces_once_for_several_units(
    install_cli: ModuleType,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """One run installing several samples should print the summary once."""
    first = build_sample_tree(tmp_path, category="0_Introduction")
    second = build_sample_tree(tmp_path, category="2_Concepts")
    write_file(first.binary_dir / "first.ptx")
    write_file(second.binary_dir / "second.ptx")

    install_cli.main(
        unit=[_unit_option(first), _unit_option(second)],
        source_root=first.source_root,
        arch="x86_64",
        system_name="Linux",
        build_type="Debug",
    )

    out = capsys.readouterr().out
    assert out.count("Sample installation configured:") == 1
    assert out.count("Installation complete:") == 2
    install_dir = first.install_dir("debug")
    assert sorted(path.name for path in install_dir.iterdir()) == [
        "first.ptx",
        "second.ptx",
    ]


def test_main_combines_positional_and_unit_options(
    install_cli: ModuleType,
    tmp_path: Path,
) -> None:
    """Positional directories and ``--unit`` pairs should install together."""
    first = build_sample_tree(tmp_path, category="0_Introduction")
    second = build_sample_tree(tmp_path, category="2_Concepts")
    write_file(first.binary_dir / "first.ptx")
    write_file(second.binary_dir / "second.ptx")
    output_file = tmp_path / "outputs.txt"

    install_cli.main(
        first.source_dir,
        first.binary_dir,
        unit=[_unit_option(second)],
        arch="x86_64",
        system_name="Linux",
        build_type="Debug",
        output_file=output_file,
    )

    outputs = decode_output_file(output_file)
    assert outputs["installed_count"] == "2"
    assert outputs["installed_files"] == "first.ptx\nsecond.ptx"
    assert outputs["install_dir"] == first.install_dir("debug").as_posix()


@pytest.mark.parametrize(
    ("kwargs", "expected"),
    [
        pytest.param({}, "No samples to install", id="nothing"),
        pytest.param(
            {"unit": ["only-one-path"]}, "Invalid --unit value", id="bad-unit"
        ),
    ],
)
def test_main_rejects_missing_units(
    install_cli: ModuleType,
    capsys: pytest.CaptureFixture[str],
    kwargs: dict[str, object],
    expected: str,
) -> None:
    """Runs that name no valid sample should exit with 1."""
    with pytest.raises(SystemExit) as exc:
        install_cli.main(build_type="Release", **kwargs)

    assert exc.value.code == 1
    assert expected in capsys.readouterr().err


def test_app_parses_repeated_unit_options(
    install_cli: ModuleType, tmp_path: Path
) -> None:
    """``--unit`` should be repeatable on the command line."""
    first = build_sample_tree(tmp_path, category="0_Introduction")
    second = build_sample_tree(tmp_path, category="2_Concepts")

    _command, bound, *_ = install_cli.app.parse_args(
        ["--unit", _unit_option(first), "--unit", _unit_option(second)]
    )

    assert bound.arguments["unit"] == [_unit_option(first), _unit_option(second)]
