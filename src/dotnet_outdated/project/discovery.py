"""Locate the solution or project file to analyze.

A path may name the file directly or a directory. In a directory a single
solution wins over project files; more than one candidate of the winning
kind is ambiguous.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotnet_outdated.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SOLUTION_SUFFIXES: frozenset[str] = frozenset({".sln", ".slnx"})
PROJECT_SUFFIXES: frozenset[str] = frozenset({".csproj", ".fsproj", ".vbproj"})


def is_solution(path: Path) -> bool:
    return path.suffix.lower() in SOLUTION_SUFFIXES


def is_project(path: Path) -> bool:
    return path.suffix.lower() in PROJECT_SUFFIXES


def discover_project(path: Path | str) -> Path:
    """Resolve *path* to one solution or project file.

    Args:
        path: A solution/project file or a directory containing one.

    Returns:
        Absolute path of the file to analyze.

    Raises:
        NotFoundError: If the path does not exist or holds no candidate.
        ValidationError: If a file of the wrong kind is given, or a
            directory holds several solutions (or, without a solution,
            several projects).
    """
    target = Path(path).expanduser().resolve()
    if not target.exists():
        raise NotFoundError(f"The path {target} does not exist")

    if target.is_file():
        if is_solution(target) or is_project(target):
            return target
        raise ValidationError(f"{target} is not a solution or project file")

    files = sorted(p for p in target.iterdir() if p.is_file())
    solutions = [p for p in files if is_solution(p)]
    if len(solutions) > 1:
        raise ValidationError(
            f"Found more than one solution file in {target}; specify which to use"
        )
    if solutions:
        logger.debug("Using solution %s", solutions[0])
        return solutions[0]

    projects = [p for p in files if is_project(p)]
    if len(projects) > 1:
        raise ValidationError(
            f"Found more than one project file in {target}; specify which to use"
        )
    if projects:
        logger.debug("Using project %s", projects[0])
        return projects[0]

    raise NotFoundError(f"No solution or project file found in {target}")
