"""Resolution Orchestrator: populate ``latest_version`` across all projects.

Walks every (project, profile, dependency) that passes the reporting
filters, looks the package up through the ``FeedCatalogClient`` and picks
the latest permitted version with the run's ``VersionPolicy``.

Concurrency model
-----------------
Tasks go onto an ``asyncio.Queue`` drained by ``MAX_CONCURRENT_RESOLUTIONS``
worker coroutines. ``resolve`` waits on ``queue.join()`` (the barrier) and
only then writes the collected results onto the ``Dependency`` objects, so
readers never observe a half-resolved graph and a cancelled run leaves the
graph untouched.

Failure model
-------------
- ``FeedUnavailableError`` for one dependency: latest stays None, a
  ``ResolutionWarning`` is recorded, the run continues.
- Any other exception: collected by the worker, re-raised after the
  barrier; nothing is assigned.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from dotnet_outdated.core.graph.models import Dependency, Project, TargetProfile
from dotnet_outdated.core.versioning import NuGetVersion, VersionPolicy
from dotnet_outdated.exceptions import (
    FeedUnavailableError,
    GraphConstructionError,
    ValidationError,
)
from dotnet_outdated.feeds.catalog import FeedCatalogClient

logger = logging.getLogger(__name__)

# Feed queries in flight at once. Fixed; not a user option.
MAX_CONCURRENT_RESOLUTIONS: int = 12


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolutionTask:
    """One dependency to resolve, with the context it was found in."""

    project: Project
    profile: TargetProfile
    dependency: Dependency

    @property
    def sources(self) -> list[str]:
        return self.project.sources


@dataclass(frozen=True)
class ResolutionWarning:
    """A dependency whose latest version could not be determined.

    Attributes:
        project: Project name.
        profile: Target profile name.
        package: Package id.
        message: Why the lookup failed.
    """

    project: str
    profile: str
    package: str
    message: str


@dataclass
class ResolutionSummary:
    """Outcome of one resolution run.

    Attributes:
        resolved: Dependencies with a latest version assigned.
        unresolved: Dependencies left with latest None (feed failure or no
            qualifying candidate).
        outdated: Dependencies whose latest version is newer than the
            resolved one.
        warnings: Per-dependency feed failures.
    """

    resolved: int = 0
    unresolved: int = 0
    outdated: int = 0
    warnings: list[ResolutionWarning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ResolutionOrchestrator:
    """Drives latest-version resolution for a set of projects.

    Args:
        catalog: Shared feed catalog (and cache) for the run.
        policy: Version policy for the run.
        concurrency: Worker count; defaults to ``MAX_CONCURRENT_RESOLUTIONS``.
    """

    def __init__(
        self,
        catalog: FeedCatalogClient,
        policy: VersionPolicy,
        *,
        concurrency: int = MAX_CONCURRENT_RESOLUTIONS,
    ) -> None:
        self._catalog = catalog
        self._policy = policy.validate()
        self._concurrency = max(1, concurrency)

    def includes(self, dependency: Dependency) -> bool:
        """Whether *dependency* passes the reporting filters."""
        if dependency.is_auto_referenced and not self._policy.include_auto_references:
            return False
        return not dependency.is_transitive or dependency.depth <= self._policy.transitive_depth

    def plan(self, projects: list[Project]) -> list[ResolutionTask]:
        """Flatten *projects* into resolution tasks.

        Order is project, then profile, then direct dependencies before
        transitive ones, then package name.
        """
        tasks: list[ResolutionTask] = []
        for project in projects:
            for profile in project.target_profiles:
                ordered = sorted(
                    profile.dependencies, key=lambda d: (d.is_transitive, d.key)
                )
                tasks.extend(
                    ResolutionTask(project, profile, dep) for dep in ordered if self.includes(dep)
                )
        return tasks

    async def resolve(self, projects: list[Project]) -> ResolutionSummary:
        """Resolve the latest version of every planned dependency.

        Returns only once every task has finished. Results are assigned to
        the dependencies after that point.

        Raises:
            ValidationError: If *projects* is empty.
            GraphConstructionError: If no project has a usable profile.
        """
        if not projects:
            raise ValidationError("No projects to analyze")
        if not any(p.target_profiles for p in projects):
            skipped = "; ".join(
                f"{p.name} [{tfm}]: {reason}"
                for p in projects
                for tfm, reason in p.skipped_profiles.items()
            )
            raise GraphConstructionError(
                "No target profile could be built" + (f" ({skipped})" if skipped else "")
            )

        tasks = self.plan(projects)
        logger.info(
            "Resolving %d dependencies across %d project(s) with %d workers",
            len(tasks), len(projects), self._concurrency,
        )

        queue: asyncio.Queue[ResolutionTask] = asyncio.Queue()
        for task in tasks:
            queue.put_nowait(task)

        results: dict[int, NuGetVersion | None] = {}
        warnings: list[ResolutionWarning] = []
        errors: list[BaseException] = []

        workers = [
            asyncio.ensure_future(self._worker(queue, results, warnings, errors))
            for _ in range(min(self._concurrency, len(tasks)) or 1)
        ]
        try:
            await queue.join()
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        if errors:
            raise errors[0]

        summary = ResolutionSummary(warnings=sorted(
            warnings, key=lambda w: (w.project, w.profile, w.package.lower())
        ))
        for task in tasks:
            latest = results.get(id(task))
            task.dependency.latest_version = latest
            if latest is None:
                summary.unresolved += 1
            else:
                summary.resolved += 1
                if task.dependency.is_outdated:
                    summary.outdated += 1
        logger.info(
            "Resolved %d, unresolved %d, outdated %d",
            summary.resolved, summary.unresolved, summary.outdated,
        )
        return summary

    async def _worker(
        self,
        queue: asyncio.Queue[ResolutionTask],
        results: dict[int, NuGetVersion | None],
        warnings: list[ResolutionWarning],
        errors: list[BaseException],
    ) -> None:
        while True:
            task = await queue.get()
            try:
                results[id(task)] = await self._resolve_one(task)
            except FeedUnavailableError as exc:
                logger.warning(
                    "Could not determine latest version of %s (%s, %s): %s",
                    task.dependency.name, task.project.name, task.profile.name, exc,
                )
                results[id(task)] = None
                warnings.append(ResolutionWarning(
                    project=task.project.name,
                    profile=task.profile.name,
                    package=task.dependency.name,
                    message=str(exc),
                ))
            except Exception as exc:
                logger.error(
                    "Unexpected failure resolving %s", task.dependency.name, exc_info=True
                )
                errors.append(exc)
            finally:
                queue.task_done()

    async def _resolve_one(self, task: ResolutionTask) -> NuGetVersion | None:
        dependency = task.dependency
        candidates = await self._catalog.fetch_versions(dependency.name, task.sources)
        latest = self._policy.select_latest(
            candidates, dependency.resolved_version, dependency.version_range
        )
        logger.debug(
            "%s %s -> %s (%d candidates)",
            dependency.name, dependency.resolved_version, latest, len(candidates),
        )
        return latest
