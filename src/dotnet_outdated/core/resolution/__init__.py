"""Latest-version resolution over the dependency graph."""

from __future__ import annotations

from dotnet_outdated.core.resolution.orchestrator import (
    MAX_CONCURRENT_RESOLUTIONS,
    ResolutionOrchestrator,
    ResolutionSummary,
    ResolutionTask,
    ResolutionWarning,
)

__all__ = [
    "MAX_CONCURRENT_RESOLUTIONS",
    "ResolutionOrchestrator",
    "ResolutionSummary",
    "ResolutionTask",
    "ResolutionWarning",
]
