"""Tests for DependencyGraphBuilder: direct references, depth-bounded
transitive expansion, deduplication and per-profile failure handling."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from dotnet_outdated.core.graph import (
    DependencyGraphBuilder,
    UpgradeSeverity,
    long_framework_name,
    upgrade_severity,
)
from dotnet_outdated.core.versioning import NuGetVersion, VersionRange
from dotnet_outdated.exceptions import GraphConstructionError

PROJECT_FILE = Path("/src/App/App.csproj")


def names(profile) -> list[str]:
    return [d.name for d in profile.dependencies]


class TestDirectDependencies:
    """Depth 0."""

    def test_direct_only_at_depth_zero(self, sample_assets: dict[str, Any]) -> None:
        """D = 0 yields exactly the declared packages."""
        profile = DependencyGraphBuilder(0).build_profile(sample_assets, "net8.0")
        assert sorted(names(profile)) == [
            "NETStandard.Library", "Newtonsoft.Json", "Serilog.Sinks.Console",
        ]
        assert all(not d.is_transitive and d.depth == 0 for d in profile.dependencies)

    def test_resolved_version_and_range(self, sample_assets: dict[str, Any]) -> None:
        profile = DependencyGraphBuilder(0).build_profile(sample_assets, "net8.0")
        dep = profile.get("newtonsoft.json")
        assert dep is not None
        assert dep.resolved_version == NuGetVersion.parse("13.0.1")
        assert dep.version_range == VersionRange.parse("[13.0.1, )")

    def test_auto_referenced_marked_not_excluded(self, sample_assets: dict[str, Any]) -> None:
        profile = DependencyGraphBuilder(0).build_profile(sample_assets, "net8.0")
        dep = profile.get("NETStandard.Library")
        assert dep is not None and dep.is_auto_referenced
        assert dep.description == "NETStandard.Library (A)"

    def test_project_references_ignored(self, assets_factory) -> None:
        assets = assets_factory(
            direct={
                "Lib": {"target": "Project", "version": "[1.0.0, )"},
                "Foo": "[1.0.0, )",
            },
            packages={"Foo": ("1.0.0", {})},
        )
        profile = DependencyGraphBuilder(0).build_profile(assets, "net8.0")
        assert names(profile) == ["Foo"]


class TestTransitiveExpansion:
    """Breadth-first expansion bounded by depth."""

    def test_depth_one(self, sample_assets: dict[str, Any]) -> None:
        profile = DependencyGraphBuilder(1).build_profile(sample_assets, "net8.0")
        transitive = {d.name: d.depth for d in profile.transitive_dependencies}
        assert transitive == {"Serilog": 1, "Microsoft.NETCore.Platforms": 1}

    def test_depth_two(self, sample_assets: dict[str, Any]) -> None:
        profile = DependencyGraphBuilder(2).build_profile(sample_assets, "net8.0")
        dep = profile.get("System.Diagnostics.DiagnosticSource")
        assert dep is not None
        assert dep.is_transitive and dep.depth == 2
        assert dep.version_range == VersionRange.parse("7.0.0")

    def test_no_dependency_deeper_than_limit(self, sample_assets: dict[str, Any]) -> None:
        for depth in range(4):
            profile = DependencyGraphBuilder(depth).build_profile(sample_assets, "net8.0")
            assert max(d.depth for d in profile.dependencies) <= depth

    def test_stops_when_nothing_new(self, sample_assets: dict[str, Any]) -> None:
        """A large limit adds nothing beyond the real graph depth."""
        deep = DependencyGraphBuilder(50).build_profile(sample_assets, "net8.0")
        assert len(deep.dependencies) == 6

    def test_missing_child_skipped(self, assets_factory) -> None:
        """A child absent from the restore target is skipped, not fatal."""
        assets = assets_factory(
            direct={"Foo": "[1.0.0, )"},
            packages={"Foo": ("1.0.0", {"Ghost": "1.0.0"})},
        )
        profile = DependencyGraphBuilder(3).build_profile(assets, "net8.0")
        assert names(profile) == ["Foo"]

    def test_child_name_uses_restored_casing(self, assets_factory) -> None:
        assets = assets_factory(
            direct={"Foo": "[1.0.0, )"},
            packages={"Foo": ("1.0.0", {"bar": "2.0.0"}), "Bar": ("2.0.0", {})},
        )
        profile = DependencyGraphBuilder(1).build_profile(assets, "net8.0")
        assert names(profile) == ["Foo", "Bar"]


class TestDeduplication:
    """First occurrence wins; direct always wins."""

    def test_direct_wins_over_deep_transitive(self, assets_factory) -> None:
        """A package both direct and at depth 2 appears once, as direct."""
        assets = assets_factory(
            direct={"A": "[1.0.0, )", "C": "[3.0.0, )"},
            packages={
                "A": ("1.0.0", {"B": "1.0.0"}),
                "B": ("1.0.0", {"C": "2.0.0"}),
                "C": ("3.0.0", {}),
            },
        )
        profile = DependencyGraphBuilder(3).build_profile(assets, "net8.0")
        matches = [d for d in profile.dependencies if d.key == "c"]
        assert len(matches) == 1
        assert not matches[0].is_transitive
        assert matches[0].depth == 0
        assert matches[0].version_range == VersionRange.parse("[3.0.0, )")

    def test_lowest_depth_wins(self, assets_factory) -> None:
        """D is reachable at depth 1 (via A) and depth 2 (via B -> X)."""
        assets = assets_factory(
            direct={"A": "[1.0.0, )", "B": "[1.0.0, )"},
            packages={
                "A": ("1.0.0", {"D": "[1.0.0, )"}),
                "B": ("1.0.0", {"X": "1.0.0"}),
                "X": ("1.0.0", {"D": "[0.5.0, )"}),
                "D": ("1.0.0", {}),
            },
        )
        profile = DependencyGraphBuilder(5).build_profile(assets, "net8.0")
        dep = profile.get("D")
        assert dep is not None and dep.depth == 1
        assert dep.version_range == VersionRange.parse("[1.0.0, )")

    def test_first_breadth_first_path_wins(self, assets_factory) -> None:
        """Two depth-1 referrers: the first one enumerated sets the range."""
        assets = assets_factory(
            direct={"A": "[1.0.0, )", "B": "[1.0.0, )"},
            packages={
                "A": ("1.0.0", {"Shared": "[1.1.0, )"}),
                "B": ("1.0.0", {"Shared": "[1.0.0, )"}),
                "Shared": ("1.1.0", {}),
            },
        )
        profile = DependencyGraphBuilder(1).build_profile(assets, "net8.0")
        dep = profile.get("shared")
        assert dep is not None
        assert dep.version_range == VersionRange.parse("[1.1.0, )")

    def test_cycle_terminates(self, assets_factory) -> None:
        assets = assets_factory(
            direct={"A": "[1.0.0, )"},
            packages={"A": ("1.0.0", {"B": "1.0.0"}), "B": ("1.0.0", {"A": "1.0.0"})},
        )
        profile = DependencyGraphBuilder(10).build_profile(assets, "net8.0")
        assert names(profile) == ["A", "B"]


class TestTargetLookup:
    """Matching frameworks to restore targets."""

    def test_long_framework_target_key(self, assets_factory) -> None:
        assets = assets_factory(
            direct={"Foo": "[1.0.0, )"},
            packages={"Foo": ("1.0.0", {})},
            framework="netcoreapp3.1",
            target_key=".NETCoreApp,Version=v3.1",
        )
        assert names(DependencyGraphBuilder(0).build_profile(assets, "netcoreapp3.1")) == ["Foo"]

    def test_runtime_specific_targets_ignored(self, assets_factory) -> None:
        assets = assets_factory(
            direct={"Foo": "[1.0.0, )"},
            packages={"Foo": ("1.0.0", {})},
        )
        assets["targets"]["net8.0/win-x64"] = {"Foo/9.9.9": {"type": "package"}}
        profile = DependencyGraphBuilder(0).build_profile(assets, "net8.0")
        assert profile.dependencies[0].resolved_version == NuGetVersion.parse("1.0.0")

    @pytest.mark.parametrize(
        ("short", "long"),
        [
            ("net8.0", ".NETCoreApp,Version=v8.0"),
            ("netcoreapp3.1", ".NETCoreApp,Version=v3.1"),
            ("netstandard2.0", ".NETStandard,Version=v2.0"),
            ("net472", ".NETFramework,Version=v4.7.2"),
            ("net48", ".NETFramework,Version=v4.8"),
            ("net8.0-windows", None),
        ],
    )
    def test_long_framework_name(self, short: str, long: str | None) -> None:
        assert long_framework_name(short) == long


class TestFailures:
    """Malformed metadata fails the profile, not the project."""

    def test_unparseable_resolved_version(self, assets_factory) -> None:
        assets = assets_factory(
            direct={"Foo": "[1.0.0, )"},
            packages={"Foo": ("not-a-version", {})},
        )
        with pytest.raises(GraphConstructionError, match="unparseable"):
            DependencyGraphBuilder(0).build_profile(assets, "net8.0")

    def test_direct_package_not_restored(self, assets_factory) -> None:
        assets = assets_factory(direct={"Foo": "[1.0.0, )"}, packages={})
        with pytest.raises(GraphConstructionError, match="not restored"):
            DependencyGraphBuilder(0).build_profile(assets, "net8.0")

    def test_invalid_range(self, assets_factory) -> None:
        assets = assets_factory(direct={"Foo": "[2.0, 1.0]"}, packages={"Foo": ("1.0.0", {})})
        with pytest.raises(GraphConstructionError, match="invalid version range"):
            DependencyGraphBuilder(0).build_profile(assets, "net8.0")

    def test_failing_profile_recorded_and_skipped(self, sample_assets: dict[str, Any]) -> None:
        """One broken framework does not stop the others."""
        sample_assets["project"]["frameworks"]["net6.0"] = {
            "dependencies": {"Foo": {"target": "Package", "version": "[1.0.0, )"}}
        }
        project = DependencyGraphBuilder(0).build_project(sample_assets, PROJECT_FILE)
        assert [p.name for p in project.target_profiles] == ["net8.0"]
        assert "net6.0" in project.skipped_profiles

    def test_project_section_required(self) -> None:
        with pytest.raises(GraphConstructionError):
            DependencyGraphBuilder(0).build_project({"targets": {}}, PROJECT_FILE)

    def test_negative_depth(self) -> None:
        with pytest.raises(ValueError):
            DependencyGraphBuilder(-1)


class TestBuildProject:
    """Project-level fields."""

    def test_name_and_sources(self, assets_factory) -> None:
        assets = assets_factory(
            direct={}, packages={}, project_name="Web",
            sources=["https://nuget.example/v3/index.json", "/opt/feed"],
        )
        project = DependencyGraphBuilder(0).build_project(assets, PROJECT_FILE)
        assert project.name == "Web"
        assert project.sources == ["https://nuget.example/v3/index.json", "/opt/feed"]
        assert project.file_path == PROJECT_FILE

    def test_name_falls_back_to_file_stem(self, assets_factory) -> None:
        assets = assets_factory(direct={}, packages={})
        del assets["project"]["restore"]
        project = DependencyGraphBuilder(0).build_project(assets, PROJECT_FILE)
        assert project.name == "App"
        assert project.sources == []


class TestUpgradeSeverity:
    """Colour classification of an upgrade."""

    @pytest.mark.parametrize(
        ("resolved", "latest", "expected"),
        [
            ("1.2.0", "2.0.0", UpgradeSeverity.MAJOR),
            ("1.2.0", "1.3.0", UpgradeSeverity.MINOR),
            ("1.2.0", "1.2.1", UpgradeSeverity.PATCH),
            ("1.2.0", "1.2.0.1", UpgradeSeverity.PATCH),
            ("1.2.0-beta", "1.2.0", UpgradeSeverity.MAJOR),
            ("1.2.0", "1.2.1-rc", UpgradeSeverity.MAJOR),
            ("1.2.0", "1.2.0", UpgradeSeverity.NONE),
            ("1.3.0", "1.2.0", UpgradeSeverity.NONE),
        ],
    )
    def test_classification(self, resolved: str, latest: str, expected: UpgradeSeverity) -> None:
        assert upgrade_severity(NuGetVersion.parse(resolved), NuGetVersion.parse(latest)) == expected

    def test_unknown_latest(self) -> None:
        assert upgrade_severity(NuGetVersion.parse("1.0.0"), None) is UpgradeSeverity.NONE
