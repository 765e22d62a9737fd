"""Tests for the version policy: pre-release rules, locks and selection."""

from __future__ import annotations

import pytest

from dotnet_outdated.core.versioning import (
    NuGetVersion,
    PrereleaseReporting,
    VersionLock,
    VersionPolicy,
    VersionRange,
    allows_prerelease,
    select_latest,
    within_lock,
)
from dotnet_outdated.exceptions import ValidationError


def v(text: str) -> NuGetVersion:
    return NuGetVersion.parse(text)


def vs(*texts: str) -> list[NuGetVersion]:
    return [v(t) for t in texts]


class TestAllowsPrerelease:
    """Pre-release eligibility per reporting mode."""

    @pytest.mark.parametrize("mode", list(PrereleaseReporting))
    def test_stable_always_allowed(self, mode: PrereleaseReporting) -> None:
        assert allows_prerelease(v("2.0.0"), False, mode)

    def test_always_allows_prerelease(self) -> None:
        assert allows_prerelease(v("2.0.0-beta"), False, PrereleaseReporting.ALWAYS)

    @pytest.mark.parametrize("mode", [PrereleaseReporting.AUTO, PrereleaseReporting.NEVER])
    def test_stable_resolved_rejects_prerelease(self, mode: PrereleaseReporting) -> None:
        assert not allows_prerelease(v("2.0.0-beta"), False, mode)

    @pytest.mark.parametrize("mode", [PrereleaseReporting.AUTO, PrereleaseReporting.NEVER])
    def test_prerelease_track_continues(self, mode: PrereleaseReporting) -> None:
        """A package already on a pre-release keeps receiving pre-releases."""
        assert allows_prerelease(v("2.0.0-rc.1"), True, mode)


class TestWithinLock:
    """Version lock rules."""

    def test_none_allows_anything(self) -> None:
        assert within_lock(v("9.0.0"), v("1.0.0"), VersionLock.NONE)

    def test_major_lock(self) -> None:
        assert within_lock(v("1.9.0"), v("1.2.0"), VersionLock.MAJOR)
        assert not within_lock(v("2.0.0"), v("1.2.0"), VersionLock.MAJOR)

    def test_minor_lock(self) -> None:
        assert within_lock(v("1.2.9.1"), v("1.2.0"), VersionLock.MINOR)
        assert not within_lock(v("1.3.0"), v("1.2.0"), VersionLock.MINOR)
        assert not within_lock(v("2.2.0"), v("1.2.0"), VersionLock.MINOR)


class TestSelectLatest:
    """Combined selection."""

    def test_scenario_unlocked_picks_highest(self) -> None:
        """resolved 1.2.0, [1.0.0,), {1.2.0, 1.3.0, 2.0.0}, no lock -> 2.0.0."""
        latest = select_latest(
            vs("1.2.0", "1.3.0", "2.0.0"), v("1.2.0"), VersionRange.parse("[1.0.0,)"),
            VersionLock.NONE, PrereleaseReporting.AUTO,
        )
        assert latest == v("2.0.0")

    def test_scenario_minor_lock_returns_resolved(self) -> None:
        """Same catalog with a minor lock -> 1.2.0, which is not newer."""
        latest = select_latest(
            vs("1.2.0", "1.3.0", "2.0.0"), v("1.2.0"), VersionRange.parse("[1.0.0,)"),
            VersionLock.MINOR, PrereleaseReporting.AUTO,
        )
        assert latest == v("1.2.0")
        assert not latest > v("1.2.0")

    def test_empty_catalog_is_none(self) -> None:
        assert select_latest([], v("1.0.0"), None, VersionLock.NONE, PrereleaseReporting.AUTO) is None

    def test_range_filters_candidates(self) -> None:
        latest = select_latest(
            vs("1.0.0", "1.5.0", "2.0.0"), v("1.0.0"), VersionRange.parse("[1.0,2.0)"),
            VersionLock.NONE, PrereleaseReporting.AUTO,
        )
        assert latest == v("1.5.0")

    def test_prerelease_skipped_for_stable(self) -> None:
        latest = select_latest(
            vs("1.0.0", "1.1.0", "2.0.0-preview.1"), v("1.0.0"), None,
            VersionLock.NONE, PrereleaseReporting.AUTO,
        )
        assert latest == v("1.1.0")

    def test_prerelease_reported_when_always(self) -> None:
        latest = select_latest(
            vs("1.0.0", "1.1.0", "2.0.0-preview.1"), v("1.0.0"), None,
            VersionLock.NONE, PrereleaseReporting.ALWAYS,
        )
        assert latest == v("2.0.0-preview.1")

    def test_nothing_qualifies(self) -> None:
        """Only pre-releases newer than a stable resolved version -> None."""
        assert select_latest(
            vs("3.0.0-alpha"), v("2.0.0"), None, VersionLock.NONE, PrereleaseReporting.NEVER
        ) is None


class TestVersionPolicy:
    """Policy object and enum parsing."""

    def test_defaults(self) -> None:
        policy = VersionPolicy()
        assert policy.prerelease is PrereleaseReporting.AUTO
        assert policy.version_lock is VersionLock.NONE
        assert policy.transitive_depth == 0
        assert not policy.include_auto_references

    def test_negative_depth_rejected(self) -> None:
        with pytest.raises(ValidationError):
            VersionPolicy(transitive_depth=-1).validate()

    def test_bound_select_latest(self) -> None:
        policy = VersionPolicy(version_lock=VersionLock.MAJOR)
        assert policy.select_latest(vs("1.4.0", "2.0.0"), v("1.0.0")) == v("1.4.0")

    @pytest.mark.parametrize("text", ["minor", "MINOR", " Minor "])
    def test_lock_from_name_case_insensitive(self, text: str) -> None:
        assert VersionLock.from_name(text) is VersionLock.MINOR

    def test_prerelease_from_name(self) -> None:
        assert PrereleaseReporting.from_name("always") is PrereleaseReporting.ALWAYS

    def test_unknown_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="expected one of"):
            VersionLock.from_name("Patch")
