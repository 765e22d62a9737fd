"""Restore metadata provider: turn a solution or project into ``Project`` graphs.

Solutions are expanded into their projects. Both solution formats are read:

- ``.sln``: ``Project("{type-guid}") = "Name", "rel\\path.csproj", "{guid}"``
- ``.slnx``: ``<Project Path="rel/path.csproj" />`` anywhere under
  ``<Solution>``

Solution folders and non-.NET entries are ignored by suffix.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from dotnet_outdated.core.graph.builder import ALL_PROFILES, DependencyGraphBuilder
from dotnet_outdated.core.graph.models import Project
from dotnet_outdated.exceptions import GraphConstructionError, RestoreError, ValidationError
from dotnet_outdated.project.discovery import is_project, is_solution
from dotnet_outdated.project.restore import DotNetRestorer, load_assets

logger = logging.getLogger(__name__)

_SLN_PROJECT_RE = re.compile(
    r'^Project\("\{[^}]*\}"\)\s*=\s*"[^"]*"\s*,\s*"(?P<path>[^"]+)"', re.MULTILINE
)


def solution_projects(solution_file: Path) -> list[Path]:
    """List the project files a solution references, in solution order.

    Raises:
        ValidationError: If the solution cannot be read or parsed.
    """
    try:
        text = solution_file.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise ValidationError(f"Cannot read solution {solution_file}: {exc}") from exc

    if solution_file.suffix.lower() == ".slnx":
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ValidationError(f"Invalid solution file {solution_file}: {exc}") from exc
        raw_paths = [el.get("Path", "") for el in root.iter("Project")]
    else:
        raw_paths = [m.group("path") for m in _SLN_PROJECT_RE.finditer(text)]

    projects: list[Path] = []
    for raw in raw_paths:
        candidate = (solution_file.parent / raw.replace("\\", "/")).resolve()
        if is_project(candidate) and candidate not in projects:
            projects.append(candidate)
    return projects


class ProjectAnalyzer:
    """Produces fully built ``Project`` objects from restore metadata.

    Args:
        restorer: Runs ``dotnet restore``; defaults to ``DotNetRestorer()``.
    """

    def __init__(self, restorer: DotNetRestorer | None = None) -> None:
        self._restorer = restorer or DotNetRestorer()

    def analyze(
        self,
        project_file: Path,
        transitive: bool = False,
        depth: int = 1,
        *,
        restore: bool = True,
    ) -> list[Project]:
        """Analyze a solution or project file.

        Args:
            project_file: The ``.sln``/``.slnx`` or project file.
            transitive: Whether to include transitive dependencies.
            depth: Transitive depth limit (ignored unless *transitive*).
            restore: Run ``dotnet restore`` first. When False the existing
                ``obj/project.assets.json`` files are used.

        Returns:
            One ``Project`` per project file. Profiles that could not be
            built are listed in ``Project.skipped_profiles``.

        Raises:
            RestoreError: If the restore fails, or a single project
                (not a solution) has no readable restore metadata. Inside
                a solution such a project is recorded as skipped instead.
            ValidationError: If *depth* is negative or the solution is
                unreadable.
        """
        if depth < 0:
            raise ValidationError(f"Transitive depth must be >= 0, got {depth}")

        in_solution = is_solution(project_file)
        if in_solution:
            project_files = solution_projects(project_file)
            logger.info("%s references %d project(s)", project_file.name, len(project_files))
        else:
            project_files = [project_file]

        if restore:
            self._restorer.restore(project_file)

        builder = DependencyGraphBuilder(max_depth=depth if transitive else 0)
        projects: list[Project] = []
        for path in project_files:
            if not path.is_file():
                logger.warning("Project %s listed in the solution does not exist; skipped", path)
                continue
            try:
                project = builder.build_project(load_assets(path), path)
            except (RestoreError, GraphConstructionError) as exc:
                if isinstance(exc, RestoreError) and not in_solution:
                    raise
                logger.warning("Skipping %s: %s", path.name, exc)
                project = Project(
                    name=path.stem,
                    file_path=path,
                    skipped_profiles={ALL_PROFILES: str(exc)},
                )
            projects.append(project)
        return projects
