"""Shared fixtures for the sample installation test suite."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

from install_test_helpers import SampleTree, build_sample_tree

REPO_ROOT = Path(__file__).resolve().parent.parent
MODULE_DIR = REPO_ROOT / "cmake" / "scripts"


@pytest.fixture(scope="session")
def sample_install() -> object:
    """Load the installation helper package once for reuse across tests."""
    sys_path = str(MODULE_DIR)

    sys.path.insert(0, sys_path)
    try:
        return importlib.import_module("sample_install")
    finally:
        sys.path.remove(sys_path)


@pytest.fixture
def staging_pipeline(sample_install: object) -> object:
    """Expose the installation pipeline module for unit-level assertions."""

    return importlib.import_module("sample_install.staging.pipeline")


@pytest.fixture
def staging_output(sample_install: object) -> object:
    """Expose the workflow output helpers for direct testing."""

    return importlib.import_module("sample_install.staging.output")


@pytest.fixture
def posix_layout(sample_install: object) -> object:
    """Return the built-in layout tables for POSIX hosts."""

    return sample_install.StagingLayout.defaults(sample_install.HostPlatform.POSIX)


@pytest.fixture
def windows_layout(sample_install: object) -> object:
    """Return the built-in layout tables for Windows hosts."""

    return sample_install.StagingLayout.defaults(sample_install.HostPlatform.WINDOWS)


@pytest.fixture
def sample_tree(tmp_path: Path) -> SampleTree:
    """Create an empty source/build tree pair for one sample."""

    return build_sample_tree(tmp_path)
