"""Run ``dotnet restore`` and read the restore metadata it leaves behind."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from dotnet_outdated.exceptions import RestoreError

logger = logging.getLogger(__name__)

ASSETS_FILE_NAME = "project.assets.json"

# Seconds to wait for one restore before giving up.
RESTORE_TIMEOUT: float = 600.0


def assets_path(project_file: Path) -> Path:
    """Default location of a project's restore metadata."""
    return project_file.parent / "obj" / ASSETS_FILE_NAME


def load_assets(project_file: Path) -> dict[str, Any]:
    """Read the restore metadata of *project_file*.

    Raises:
        RestoreError: If the file is missing or not valid JSON.
    """
    path = assets_path(project_file)
    if not path.is_file():
        raise RestoreError(
            f"No restore metadata at {path}; run 'dotnet restore' for {project_file.name}"
        )
    try:
        with path.open(encoding="utf-8-sig") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        raise RestoreError(f"Cannot read restore metadata {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RestoreError(f"Restore metadata {path} is not a JSON object")
    return data


class DotNetRestorer:
    """Invokes the .NET CLI to restore a project's packages.

    Args:
        executable: The ``dotnet`` executable to run.
        timeout: Seconds before a restore is abandoned.
    """

    def __init__(self, executable: str = "dotnet", *, timeout: float = RESTORE_TIMEOUT) -> None:
        self._executable = executable
        self._timeout = timeout

    def command(self, project_file: Path) -> list[str]:
        return [self._executable, "restore", str(project_file)]

    def restore(self, project_file: Path) -> None:
        """Restore *project_file*.

        Raises:
            RestoreError: If the CLI is missing, times out or exits non-zero.
        """
        cmd = self.command(project_file)
        logger.info("Restoring %s", project_file.name)
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise RestoreError(
                f"'{self._executable}' was not found; install the .NET SDK or use --no-restore"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise RestoreError(
                f"Restore of {project_file.name} timed out after {self._timeout:.0f}s"
            ) from exc

        if result.returncode != 0:
            output = (result.stdout or "") + (result.stderr or "")
            logger.debug("Restore output:\n%s", output)
            raise RestoreError(
                f"Failed to restore {project_file.name} (exit code {result.returncode}):\n"
                f"{output.strip()}"
            )
