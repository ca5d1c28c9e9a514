"""Build-wide context shared by every unit installed in one run."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from .config import StagingLayout
from .install_root import resolve_install_prefix
from .target import HostPlatform, TargetDescriptor, TargetFacts, resolve_target

__all__ = ["BuildSession", "open_session"]


@dataclasses.dataclass(slots=True)
class BuildSession:
    """Resolved target, layout and prefix for one build.

    The session owns the one-shot announcement of the resolved layout:
    :meth:`announce` prints the summary the first time it is called and is a
    no-op afterwards, however many units are installed.

    Examples
    --------
    >>> session = open_session(  # doctest: +SKIP
    ...     TargetFacts("x86_64", "Linux", unix=True, build_type="Debug"),
    ...     Path("build"),
    ... )
    >>> session.announce()  # doctest: +SKIP
    Sample installation configured:
      Architecture: x86_64
    ...
    True
    """

    target: TargetDescriptor
    layout: StagingLayout
    install_prefix: Path
    _announced: bool = dataclasses.field(default=False, init=False, repr=False)

    @property
    def host(self) -> HostPlatform:
        """Permission model applied when installing files."""
        return self.layout.host

    @property
    def announced(self) -> bool:
        """Whether the summary has already been printed."""
        return self._announced

    def summary_lines(self) -> list[str]:
        """Return the human-readable description of the resolved layout."""
        return [
            "Sample installation configured:",
            f"  Architecture: {self.target.architecture}",
            f"  OS: {self.target.operating_system.value}",
            f"  Build Type: {self.target.configuration.describe()}",
            f"  Install Prefix: {self.install_prefix.as_posix()}",
            "  Install Directory: "
            f"{self.target.describe_install_dir(self.install_prefix)}",
        ]

    def announce(self) -> bool:
        """Print the summary once; return ``True`` when it was printed."""
        if self._announced:
            return False
        self._announced = True
        for line in self.summary_lines():
            print(line)
        return True


def open_session(
    facts: TargetFacts,
    build_dir: Path,
    *,
    layout: StagingLayout | None = None,
    install_prefix: Path | None = None,
) -> BuildSession:
    """Resolve the target and install prefix for ``build_dir``.

    Parameters
    ----------
    facts : TargetFacts
        Build-system facts describing the target.
    build_dir : Path
        Binary directory the search for the build root starts from.
    layout : StagingLayout | None, optional
        Layout tables. Defaults to the built-in tables for the running host.
    install_prefix : Path | None, optional
        Explicit prefix overriding ``<build root>/bin``.
    """
    layout = layout or StagingLayout.defaults(HostPlatform.detect())
    prefix = resolve_install_prefix(
        build_dir,
        install_prefix,
        marker=layout.marker_file,
        max_ascent=layout.max_ascent,
        prefix_dir=layout.prefix_dir,
    )
    return BuildSession(resolve_target(facts), layout, prefix)
