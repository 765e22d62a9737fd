"""Dependency model and its construction from restore metadata.

Public API::

    from dotnet_outdated.core.graph import DependencyGraphBuilder, Project
"""

from __future__ import annotations

from dotnet_outdated.core.graph.builder import DependencyGraphBuilder, long_framework_name
from dotnet_outdated.core.graph.models import (
    Dependency,
    Project,
    TargetProfile,
    UpgradeSeverity,
    upgrade_severity,
)

__all__ = [
    "Dependency",
    "DependencyGraphBuilder",
    "Project",
    "TargetProfile",
    "UpgradeSeverity",
    "long_framework_name",
    "upgrade_severity",
]
