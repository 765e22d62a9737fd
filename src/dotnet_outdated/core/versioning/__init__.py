"""NuGet versions, version ranges and the latest-version selection policy.

All public names are re-exported here so callers can write
``from dotnet_outdated.core.versioning import NuGetVersion``.
"""

from dotnet_outdated.core.versioning.policy import (
    PrereleaseReporting,
    VersionLock,
    VersionPolicy,
    allows_prerelease,
    select_latest,
    within_lock,
)
from dotnet_outdated.core.versioning.ranges import VersionRange
from dotnet_outdated.core.versioning.version import NuGetVersion

__all__ = [
    "NuGetVersion",
    "VersionRange",
    "PrereleaseReporting",
    "VersionLock",
    "VersionPolicy",
    "allows_prerelease",
    "within_lock",
    "select_latest",
]
