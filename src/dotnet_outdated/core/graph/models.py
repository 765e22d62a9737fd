"""Dependency model: projects, target profiles and dependencies.

Built once per run by the graph builder. Afterwards the only mutation is
``Dependency.latest_version``, assigned by the resolution orchestrator after
all resolution work has finished.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path

from dotnet_outdated.core.versioning import NuGetVersion, VersionRange


class UpgradeSeverity(IntEnum):
    """How disruptive moving from the resolved to the latest version is.

    The integer encoding enables direct comparison: NONE < PATCH < MINOR
    < MAJOR.
    """

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3


def upgrade_severity(
    resolved: NuGetVersion | None,
    latest: NuGetVersion | None,
) -> UpgradeSeverity:
    """Classify the step from *resolved* to *latest*.

    A major bump, or a pre-release on either side, is MAJOR; a minor bump
    is MINOR; a patch or revision bump is PATCH. Anything else, including
    an unknown side, is NONE.
    """
    if resolved is None or latest is None or not latest > resolved:
        return UpgradeSeverity.NONE
    if latest.major > resolved.major or resolved.is_prerelease or latest.is_prerelease:
        return UpgradeSeverity.MAJOR
    if latest.minor > resolved.minor:
        return UpgradeSeverity.MINOR
    if latest.patch > resolved.patch or latest.revision > resolved.revision:
        return UpgradeSeverity.PATCH
    return UpgradeSeverity.NONE


@dataclass
class Dependency:
    """One package in a target profile's dependency set.

    Attributes:
        name: Package id as written in the restore metadata.
        version_range: The requested range (the project's reference for a
            direct dependency, the referrer's constraint for a transitive
            one). None when the metadata carries no range.
        resolved_version: The version the last restore selected.
        is_transitive: False for packages the project references directly.
        is_auto_referenced: True for packages supplied implicitly by the SDK.
        depth: Reference hops from the project; 0 for direct dependencies.
        latest_version: Latest permitted version, None until resolved or
            when it could not be determined.
    """

    name: str
    version_range: VersionRange | None
    resolved_version: NuGetVersion
    is_transitive: bool = False
    is_auto_referenced: bool = False
    depth: int = 0
    latest_version: NuGetVersion | None = None

    @property
    def key(self) -> str:
        """Case-insensitive identity within a profile."""
        return self.name.lower()

    @property
    def is_outdated(self) -> bool:
        return self.latest_version is not None and self.latest_version > self.resolved_version

    @property
    def upgrade_severity(self) -> UpgradeSeverity:
        return upgrade_severity(self.resolved_version, self.latest_version)

    @property
    def description(self) -> str:
        """Display name; auto-referenced packages are tagged ``(A)``."""
        return f"{self.name} (A)" if self.is_auto_referenced else self.name


@dataclass
class TargetProfile:
    """A target framework of a project and its dependencies.

    Package names are unique within a profile; ``add`` refuses duplicates
    so the first occurrence always wins.
    """

    name: str
    dependencies: list[Dependency] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._index: dict[str, Dependency] = {}
        for dep in self.dependencies:
            self._index.setdefault(dep.key, dep)

    def get(self, name: str) -> Dependency | None:
        return self._index.get(name.lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._index

    def add(self, dependency: Dependency) -> bool:
        """Append *dependency* unless a package of the same name exists.

        Returns:
            True if the dependency was added.
        """
        if dependency.key in self._index:
            return False
        self._index[dependency.key] = dependency
        self.dependencies.append(dependency)
        return True

    @property
    def direct_dependencies(self) -> list[Dependency]:
        return [d for d in self.dependencies if not d.is_transitive]

    @property
    def transitive_dependencies(self) -> list[Dependency]:
        return [d for d in self.dependencies if d.is_transitive]


@dataclass
class Project:
    """A restorable build unit.

    Attributes:
        name: Project name.
        file_path: Path of the project file.
        sources: Package source endpoints in restore order.
        target_profiles: Profiles whose graph was built successfully.
        skipped_profiles: Profiles whose restore metadata was unusable,
            mapped to the reason.
    """

    name: str
    file_path: Path
    sources: list[str] = field(default_factory=list)
    target_profiles: list[TargetProfile] = field(default_factory=list)
    skipped_profiles: dict[str, str] = field(default_factory=dict)
