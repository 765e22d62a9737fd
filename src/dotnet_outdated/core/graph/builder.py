"""Dependency graph construction from NuGet restore metadata.

Reads the ``project.assets.json`` document that ``dotnet restore`` leaves in
a project's ``obj`` folder and produces one ``TargetProfile`` per target
framework, holding the direct dependencies and, up to a depth limit, the
transitive ones.

Relevant parts of the assets document::

    {
      "targets": {
        "net8.0": {
          "Serilog.Sinks.Console/5.0.1": {
            "type": "package",
            "dependencies": {"Serilog": "3.1.1"}
          }
        }
      },
      "project": {
        "restore": {"projectName": "App", "sources": {"https://...": {}}},
        "frameworks": {
          "net8.0": {
            "dependencies": {
              "Serilog.Sinks.Console": {"target": "Package", "version": "[5.0.1, )"}
            }
          }
        }
      }
    }

Transitive expansion is breadth-first, level by level, so a package is
always recorded at the lowest depth it is reachable at. Direct packages
are inserted before any expansion and therefore always win over a
transitive occurrence of the same package.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from dotnet_outdated.core.graph.models import Dependency, Project, TargetProfile
from dotnet_outdated.core.versioning import NuGetVersion, VersionRange
from dotnet_outdated.exceptions import GraphConstructionError

logger = logging.getLogger(__name__)

# Key used in Project.skipped_profiles when the whole document is unusable.
ALL_PROFILES = "*"

_NETCORE_RE = re.compile(r"^netcoreapp(\d+\.\d+)$")
_NETSTANDARD_RE = re.compile(r"^netstandard(\d+\.\d+)$")
_NET5_PLUS_RE = re.compile(r"^net(\d+\.\d+)$")
_NETFRAMEWORK_RE = re.compile(r"^net(\d)(\d)(\d?)$")


def long_framework_name(short_name: str) -> str | None:
    """Translate a short framework moniker to the long form older assets files use.

    ``net8.0`` -> ``.NETCoreApp,Version=v8.0``,
    ``netstandard2.0`` -> ``.NETStandard,Version=v2.0``,
    ``net472`` -> ``.NETFramework,Version=v4.7.2``.
    """
    name = short_name.strip().lower()
    m = _NETCORE_RE.match(name) or _NET5_PLUS_RE.match(name)
    if m:
        return f".NETCoreApp,Version=v{m.group(1)}"
    m = _NETSTANDARD_RE.match(name)
    if m:
        return f".NETStandard,Version=v{m.group(1)}"
    m = _NETFRAMEWORK_RE.match(name)
    if m:
        digits = [d for d in m.groups() if d]
        return f".NETFramework,Version=v{'.'.join(digits)}"
    return None


class DependencyGraphBuilder:
    """Builds per-profile dependency sets from restore metadata.

    Args:
        max_depth: Deepest transitive level to include. 0 keeps direct
            dependencies only.
    """

    def __init__(self, max_depth: int = 0) -> None:
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self._max_depth = max_depth

    def build_project(self, assets: dict[str, Any], project_file: Path) -> Project:
        """Build a ``Project`` from one assets document.

        Profiles that fail are recorded in ``Project.skipped_profiles`` and
        logged; they never stop the other profiles.

        Raises:
            GraphConstructionError: If the document has no usable
                ``project`` section at all.
        """
        section = assets.get("project") if isinstance(assets, dict) else None
        if not isinstance(section, dict):
            raise GraphConstructionError(
                f"Restore metadata for {project_file} has no 'project' section"
            )
        restore = section.get("restore") if isinstance(section.get("restore"), dict) else {}
        frameworks = section.get("frameworks")
        if not isinstance(frameworks, dict) or not frameworks:
            raise GraphConstructionError(
                f"Restore metadata for {project_file} declares no target frameworks"
            )

        project = Project(
            name=str(restore.get("projectName") or project_file.stem),
            file_path=project_file,
            sources=_read_sources(restore),
        )
        for framework in frameworks:
            try:
                profile = self.build_profile(assets, framework)
            except GraphConstructionError as exc:
                logger.warning("Skipping %s [%s]: %s", project.name, framework, exc)
                project.skipped_profiles[framework] = str(exc)
                continue
            project.target_profiles.append(profile)
        return project

    def build_profile(self, assets: dict[str, Any], framework: str) -> TargetProfile:
        """Build the dependency set of one target framework.

        Raises:
            GraphConstructionError: If the framework's restore target is
                missing or any version in it is malformed.
        """
        framework_spec = assets["project"]["frameworks"].get(framework)
        if not isinstance(framework_spec, dict):
            raise GraphConstructionError(f"No framework section for {framework!r}")

        libraries = _index_target(_find_target(assets, framework, framework_spec), framework)
        profile = TargetProfile(name=framework)

        frontier: list[tuple[Dependency, dict[str, Any]]] = []
        declared = framework_spec.get("dependencies") or {}
        if not isinstance(declared, dict):
            raise GraphConstructionError(f"Malformed dependencies for {framework!r}")

        for name, entry in declared.items():
            entry = entry if isinstance(entry, dict) else {"version": entry}
            if str(entry.get("target", "Package")).lower() != "package":
                continue
            library = libraries.get(name.lower())
            if library is None:
                raise GraphConstructionError(
                    f"Package {name!r} is referenced but was not restored for {framework!r}"
                )
            dependency = Dependency(
                name=name,
                version_range=_parse_range(entry.get("version"), name, framework),
                resolved_version=library["version"],
                is_auto_referenced=bool(entry.get("autoReferenced", False)),
            )
            if profile.add(dependency):
                frontier.append((dependency, library))

        depth = 0
        while frontier and depth < self._max_depth:
            depth += 1
            next_frontier: list[tuple[Dependency, dict[str, Any]]] = []
            for _parent, parent_library in frontier:
                for child_name, child_range in parent_library["dependencies"].items():
                    if child_name in profile:
                        continue
                    child_library = libraries.get(child_name.lower())
                    if child_library is None:
                        logger.debug(
                            "%s is not part of the %s restore target; skipped",
                            child_name, framework,
                        )
                        continue
                    child = Dependency(
                        name=child_library["name"],
                        version_range=_parse_range(child_range, child_name, framework),
                        resolved_version=child_library["version"],
                        is_transitive=True,
                        depth=depth,
                    )
                    profile.add(child)
                    next_frontier.append((child, child_library))
            frontier = next_frontier

        logger.debug(
            "Built %s: %d direct, %d transitive",
            framework, len(profile.direct_dependencies), len(profile.transitive_dependencies),
        )
        return profile


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_sources(restore: dict[str, Any]) -> list[str]:
    sources = restore.get("sources")
    if isinstance(sources, dict):
        return [str(s) for s in sources]
    if isinstance(sources, list):
        return [str(s) for s in sources]
    return []


def _find_target(
    assets: dict[str, Any],
    framework: str,
    framework_spec: dict[str, Any],
) -> dict[str, Any]:
    targets = assets.get("targets")
    if not isinstance(targets, dict):
        raise GraphConstructionError("Restore metadata has no 'targets' section")

    candidates = [framework, framework_spec.get("targetAlias"), long_framework_name(framework)]
    lowered = {str(k).lower(): v for k, v in targets.items() if "/" not in str(k)}
    for candidate in candidates:
        if candidate and candidate.lower() in lowered:
            target = lowered[candidate.lower()]
            if not isinstance(target, dict):
                raise GraphConstructionError(f"Malformed restore target for {framework!r}")
            return target

    frameworks = assets["project"]["frameworks"]
    if len(frameworks) == 1 and len(lowered) == 1:
        target = next(iter(lowered.values()))
        if isinstance(target, dict):
            return target
    raise GraphConstructionError(f"No restore target found for {framework!r}")


def _index_target(target: dict[str, Any], framework: str) -> dict[str, dict[str, Any]]:
    """Map lower-cased package id -> {name, version, dependencies}."""
    index: dict[str, dict[str, Any]] = {}
    for key, library in target.items():
        if not isinstance(library, dict) or library.get("type", "package") != "package":
            continue
        name, sep, raw_version = str(key).rpartition("/")
        if not sep or not name:
            raise GraphConstructionError(f"Malformed library key {key!r} in {framework!r}")
        version = NuGetVersion.try_parse(raw_version)
        if version is None:
            raise GraphConstructionError(
                f"Package {name!r} has unparseable resolved version {raw_version!r} in {framework!r}"
            )
        dependencies = library.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            raise GraphConstructionError(f"Malformed dependencies for {key!r} in {framework!r}")
        index[name.lower()] = {"name": name, "version": version, "dependencies": dependencies}
    return index


def _parse_range(raw: Any, name: str, framework: str) -> VersionRange | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        return VersionRange.parse(str(raw))
    except ValueError as exc:
        raise GraphConstructionError(
            f"Package {name!r} has an invalid version range {raw!r} in {framework!r}"
        ) from exc
