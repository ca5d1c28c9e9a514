"""Public interface for the sample installation helper package."""

from .classify import ArtefactKind, classify
from .collection import BuildUnit, Candidate, Provenance, collect_candidates
from .config import StagingLayout, load_layout
from .dedup import deduplicate
from .environment import optional_env_path, require_env_path
from .errors import StageError
from .install_root import (
    default_install_prefix,
    find_build_root,
    resolve_install_prefix,
)
from .session import BuildSession, open_session
from .staging import InstallResult, install_unit, write_output_file
from .target import (
    DeferredConfiguration,
    FixedConfiguration,
    HostPlatform,
    OperatingSystem,
    TargetDescriptor,
    TargetFacts,
    resolve_target,
)

__all__ = [
    "ArtefactKind",
    "BuildSession",
    "BuildUnit",
    "Candidate",
    "DeferredConfiguration",
    "FixedConfiguration",
    "HostPlatform",
    "InstallResult",
    "OperatingSystem",
    "Provenance",
    "StageError",
    "StagingLayout",
    "TargetDescriptor",
    "TargetFacts",
    "classify",
    "collect_candidates",
    "deduplicate",
    "default_install_prefix",
    "find_build_root",
    "install_unit",
    "load_layout",
    "open_session",
    "optional_env_path",
    "require_env_path",
    "resolve_install_prefix",
    "resolve_target",
    "write_output_file",
]
