"""Target descriptor resolution for the installation layout.

Every installed file lands in ``<prefix>/<architecture>/<os>/<configuration>``.
Architecture and operating system are fixed once per build. The configuration
is either fixed when the build tree is configured (single-configuration
generators such as Makefiles or Ninja) or chosen when the install step runs
(multi-configuration generators such as Visual Studio, Xcode or Ninja
Multi-Config). :class:`FixedConfiguration` and :class:`DeferredConfiguration`
model the two cases so callers never freeze a configuration name too early.

Usage
-----
Resolve the descriptor for the running host and compute a destination::

    from pathlib import Path
    from sample_install.target import TargetFacts, resolve_target

    target = resolve_target(TargetFacts.from_host(build_type="Debug"))
    print(target.install_dir(Path("build/bin")))
"""

from __future__ import annotations

import dataclasses
import enum
import os
import platform
import typing as typ
from pathlib import Path

from .errors import StageError

__all__ = [
    "BuildConfiguration",
    "DeferredConfiguration",
    "FixedConfiguration",
    "HostPlatform",
    "OperatingSystem",
    "TargetDescriptor",
    "TargetFacts",
    "resolve_target",
]

DEFAULT_BUILD_TYPE = "Release"
_APPLE_SYSTEMS = frozenset({"Darwin", "iOS", "tvOS", "watchOS", "visionOS"})


class OperatingSystem(enum.StrEnum):
    """Operating system component of the installation layout."""

    WINDOWS = "windows"
    DARWIN = "darwin"
    LINUX = "linux"
    QNX = "qnx"
    UNKNOWN = "unknown"


class HostPlatform(enum.StrEnum):
    """Permission model of the machine running the install step."""

    WINDOWS = "windows"
    POSIX = "posix"

    @classmethod
    def detect(cls) -> HostPlatform:
        """Return the permission model of the running interpreter."""
        return cls.WINDOWS if os.name == "nt" else cls.POSIX


@dataclasses.dataclass(slots=True, frozen=True)
class FixedConfiguration:
    """Configuration chosen when the build tree was configured.

    Examples
    --------
    >>> FixedConfiguration("release").resolve()
    'release'
    >>> FixedConfiguration("release").resolve("Debug")
    'debug'
    """

    value: str

    def resolve(self, live: str | None = None) -> str:
        """Return ``live`` lower-cased when supplied, else the frozen value."""
        return live.lower() if live else self.value

    def describe(self) -> str:
        """Return the summary text announced for this configuration."""
        return self.value


@dataclasses.dataclass(slots=True, frozen=True)
class DeferredConfiguration:
    """Configuration named only when the install step runs.

    Examples
    --------
    >>> DeferredConfiguration().resolve("RelWithDebInfo")
    'relwithdebinfo'
    """

    resolver: typ.Callable[[str], str] = str.lower

    def resolve(self, live: str | None = None) -> str:
        """Evaluate the deferred expression against ``live``.

        Raises
        ------
        StageError
            Raised when no configuration name is available at install time.
        """
        if not live:
            message = (
                "Multi-configuration builds must name the configuration at "
                "install time (set CMAKE_INSTALL_CONFIG_NAME or pass --config)."
            )
            raise StageError(message)
        return self.resolver(live)

    def describe(self) -> str:
        """Return the summary text announced for this configuration."""
        return "multi-config (specified at build time)"


BuildConfiguration = FixedConfiguration | DeferredConfiguration


@dataclasses.dataclass(slots=True, frozen=True)
class TargetFacts:
    """Raw build-system facts consumed by :func:`resolve_target`.

    Parameters
    ----------
    processor : str
        Target processor identifier (``CMAKE_SYSTEM_PROCESSOR``).
    system_name : str
        Target system name (``CMAKE_SYSTEM_NAME``).
    windows, apple, unix : bool
        Platform flags as reported by the build system. ``apple`` and
        ``unix`` may both be set; the more specific flag wins.
    multi_config : bool, default=False
        Whether the generator selects the configuration at build time.
    build_type : str | None, optional
        Configure-time build type for single-configuration generators.
    """

    processor: str
    system_name: str
    windows: bool = False
    apple: bool = False
    unix: bool = False
    multi_config: bool = False
    build_type: str | None = None

    @classmethod
    def from_host(
        cls,
        *,
        processor: str | None = None,
        system_name: str | None = None,
        multi_config: bool = False,
        build_type: str | None = None,
    ) -> TargetFacts:
        """Return facts describing the running host, with optional overrides."""
        name = system_name or platform.system()
        return cls(
            processor=processor or platform.machine(),
            system_name=name,
            windows=name == "Windows",
            apple=name in _APPLE_SYSTEMS,
            unix=bool(name) and name != "Windows",
            multi_config=multi_config,
            build_type=build_type,
        )


@dataclasses.dataclass(slots=True, frozen=True)
class TargetDescriptor:
    """Resolved ``(architecture, os, configuration)`` key."""

    architecture: str
    operating_system: OperatingSystem
    configuration: BuildConfiguration

    def install_dir(self, prefix: Path, live: str | None = None) -> Path:
        """Return the flat installation directory beneath ``prefix``.

        Examples
        --------
        >>> target = TargetDescriptor(
        ...     "x86_64", OperatingSystem.LINUX, FixedConfiguration("debug")
        ... )
        >>> target.install_dir(Path("/tmp/bin")).as_posix()
        '/tmp/bin/x86_64/linux/debug'
        """
        return self._base_dir(prefix) / self.configuration.resolve(live)

    def describe_install_dir(self, prefix: Path) -> str:
        """Return the install directory, or its ``<config>`` placeholder."""
        if isinstance(self.configuration, DeferredConfiguration):
            return f"{self._base_dir(prefix).as_posix()}/<config>"
        return self.install_dir(prefix).as_posix()

    def _base_dir(self, prefix: Path) -> Path:
        return prefix / self.architecture / self.operating_system.value


def resolve_target(facts: TargetFacts) -> TargetDescriptor:
    """Derive the installation key from ``facts``.

    Examples
    --------
    >>> facts = TargetFacts("AMD64", "Windows", windows=True, multi_config=True)
    >>> target = resolve_target(facts)
    >>> (target.architecture, target.operating_system.value)
    ('amd64', 'windows')
    >>> isinstance(target.configuration, DeferredConfiguration)
    True
    """
    configuration: BuildConfiguration
    if facts.multi_config:
        configuration = DeferredConfiguration()
    else:
        build_type = facts.build_type or DEFAULT_BUILD_TYPE
        configuration = FixedConfiguration(build_type.lower())
    return TargetDescriptor(
        architecture=facts.processor.lower(),
        operating_system=_classify_operating_system(facts),
        configuration=configuration,
    )


def _classify_operating_system(facts: TargetFacts) -> OperatingSystem:
    if facts.windows:
        return OperatingSystem.WINDOWS
    if facts.apple:
        return OperatingSystem.DARWIN
    if facts.unix:
        if "QNX" in facts.system_name:
            return OperatingSystem.QNX
        return OperatingSystem.LINUX
    return OperatingSystem.UNKNOWN
