"""Version policy: pre-release and version-lock rules for latest-version selection.

Pure functions, no I/O. A run fixes one ``VersionPolicy`` and every
dependency is evaluated against it:

- ``allows_prerelease`` decides whether a pre-release candidate may be
  reported at all.
- ``within_lock`` keeps candidates on the resolved version's major (or
  major.minor) line.
- ``select_latest`` combines both with the requested version range and
  picks the highest qualifying candidate.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from dotnet_outdated.core.versioning.ranges import VersionRange
from dotnet_outdated.core.versioning.version import NuGetVersion
from dotnet_outdated.exceptions import ValidationError


class PrereleaseReporting(str, Enum):
    """Whether pre-release versions are eligible as "latest"."""

    AUTO = "Auto"
    ALWAYS = "Always"
    NEVER = "Never"

    @classmethod
    def from_name(cls, value: str) -> PrereleaseReporting:
        return _enum_from_name(cls, value)


class VersionLock(str, Enum):
    """Which leading version components a candidate must share with the resolved one."""

    NONE = "None"
    MAJOR = "Major"
    MINOR = "Minor"

    @classmethod
    def from_name(cls, value: str) -> VersionLock:
        return _enum_from_name(cls, value)


def _enum_from_name(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if str(value).strip().lower() == member.value.lower():
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise ValidationError(
        f"Invalid {enum_cls.__name__} value {value!r} (expected one of: {choices})"
    )


@dataclass(frozen=True)
class VersionPolicy:
    """Policy parameters for one resolution run.

    Attributes:
        prerelease: Pre-release reporting mode.
        version_lock: Version lock mode.
        transitive_depth: Deepest transitive level to resolve; 0 means
            direct dependencies only.
        include_auto_references: Whether SDK-supplied packages are resolved
            and reported.
    """

    prerelease: PrereleaseReporting = PrereleaseReporting.AUTO
    version_lock: VersionLock = VersionLock.NONE
    transitive_depth: int = 0
    include_auto_references: bool = False

    def validate(self) -> VersionPolicy:
        """Raise ValidationError for an unusable combination; return self otherwise."""
        if not isinstance(self.transitive_depth, int) or self.transitive_depth < 0:
            raise ValidationError(
                f"Transitive depth must be a non-negative integer, got {self.transitive_depth!r}"
            )
        return self

    def select_latest(
        self,
        candidates: Iterable[NuGetVersion],
        resolved: NuGetVersion,
        version_range: VersionRange | None = None,
    ) -> NuGetVersion | None:
        """``select_latest`` bound to this policy's lock and pre-release modes."""
        return select_latest(
            candidates, resolved, version_range, self.version_lock, self.prerelease
        )


def allows_prerelease(
    candidate: NuGetVersion,
    resolved_is_prerelease: bool,
    mode: PrereleaseReporting,
) -> bool:
    """Whether *candidate* passes the pre-release rule.

    Stable candidates always pass. A pre-release candidate passes under
    ``ALWAYS``; under ``NEVER`` and ``AUTO`` it passes only when the
    resolved version is itself a pre-release, so a package already on a
    pre-release track keeps receiving pre-release updates.
    """
    if not candidate.is_prerelease:
        return True
    if mode is PrereleaseReporting.ALWAYS:
        return True
    return resolved_is_prerelease


def within_lock(
    candidate: NuGetVersion,
    resolved: NuGetVersion,
    lock: VersionLock,
) -> bool:
    """Whether *candidate* stays on the line *lock* pins *resolved* to."""
    if lock is VersionLock.MAJOR:
        return candidate.major == resolved.major
    if lock is VersionLock.MINOR:
        return candidate.major == resolved.major and candidate.minor == resolved.minor
    return True


def select_latest(
    candidates: Iterable[NuGetVersion],
    resolved: NuGetVersion,
    version_range: VersionRange | None,
    lock: VersionLock,
    prerelease: PrereleaseReporting,
) -> NuGetVersion | None:
    """Pick the highest candidate allowed by range, lock and pre-release rules.

    The result may equal *resolved* when nothing newer qualifies; callers
    decide outdatedness with ``latest > resolved``. None means no candidate
    qualified at all (for example an empty catalog), which is not an error.

    Args:
        candidates: Versions published on the feeds.
        resolved: The version selected by the last restore.
        version_range: The requested range, or None to skip range filtering.
        lock: Version lock mode.
        prerelease: Pre-release reporting mode.

    Returns:
        The maximum qualifying version, or None.
    """
    resolved_is_prerelease = resolved.is_prerelease
    best: NuGetVersion | None = None
    for candidate in candidates:
        if version_range is not None and not version_range.satisfies(candidate):
            continue
        if not within_lock(candidate, resolved, lock):
            continue
        if not allows_prerelease(candidate, resolved_is_prerelease, prerelease):
            continue
        if best is None or candidate > best:
            best = candidate
    return best
