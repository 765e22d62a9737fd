"""Project discovery, package restore and restore metadata analysis.

Public API::

    from dotnet_outdated.project import ProjectAnalyzer, discover_project

    projects = ProjectAnalyzer().analyze(discover_project("."), transitive=True, depth=2)
"""

from __future__ import annotations

from dotnet_outdated.project.analysis import ProjectAnalyzer, solution_projects
from dotnet_outdated.project.discovery import discover_project
from dotnet_outdated.project.restore import DotNetRestorer, assets_path, load_assets

__all__ = [
    "DotNetRestorer",
    "ProjectAnalyzer",
    "assets_path",
    "discover_project",
    "load_assets",
    "solution_projects",
]
