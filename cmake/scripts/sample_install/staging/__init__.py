"""Installation pipeline package exposing unit installation utilities."""

from .output import prepare_output_data, write_output_file
from .pipeline import (
    InstallFailure,
    InstallResult,
    InstalledFile,
    deploy_file,
    install_unit,
)

__all__ = [
    "InstallFailure",
    "InstallResult",
    "InstalledFile",
    "deploy_file",
    "install_unit",
    "prepare_output_data",
    "write_output_file",
]
