"""Optional YAML configuration file.

``.dotnet-outdated.yaml`` in the working directory (or the file passed with
``--config``) supplies defaults for the command-line options::

    transitive: true
    transitive_depth: 2
    pre_release: Auto          # Auto | Always | Never
    version_lock: Minor        # None | Major | Minor
    include_auto_references: false
    sources:                   # used when a project lists no sources
      - https://api.nuget.org/v3/index.json
    timeout: 30

Options given on the command line override the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from dotnet_outdated.core.versioning import PrereleaseReporting, VersionLock, VersionPolicy
from dotnet_outdated.exceptions import ValidationError
from dotnet_outdated.feeds.catalog import DEFAULT_SOURCES
from dotnet_outdated.feeds.http_client import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".dotnet-outdated.yaml"


@dataclass
class OutdatedConfig:
    """Effective settings for one run."""

    transitive: bool = False
    transitive_depth: int = 1
    pre_release: PrereleaseReporting = PrereleaseReporting.AUTO
    version_lock: VersionLock = VersionLock.NONE
    include_auto_references: bool = False
    sources: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCES))
    timeout: float = DEFAULT_TIMEOUT

    def to_policy(self) -> VersionPolicy:
        """Build the (validated) version policy these settings describe."""
        return VersionPolicy(
            prerelease=self.pre_release,
            version_lock=self.version_lock,
            transitive_depth=self.transitive_depth if self.transitive else 0,
            include_auto_references=self.include_auto_references,
        ).validate()

    def merged(self, **overrides: Any) -> OutdatedConfig:
        """Return a copy with every non-None override applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return _coerce(values, source="command line")


def load_config(path: Path | None = None, *, cwd: Path | None = None) -> OutdatedConfig:
    """Load settings from *path*, or from ``.dotnet-outdated.yaml`` in *cwd*.

    Args:
        path: Explicit configuration file. Must exist.
        cwd: Directory searched when *path* is None.

    Returns:
        The configuration; defaults when no file applies.

    Raises:
        ValidationError: If the file is unreadable, not a mapping, has
            unknown keys or invalid values.
    """
    if path is None:
        candidate = (cwd or Path.cwd()) / CONFIG_FILE_NAME
        if not candidate.is_file():
            return OutdatedConfig()
        path = candidate

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Cannot read configuration {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError(f"Configuration {path} must be a mapping")

    values = {str(k).replace("-", "_"): v for k, v in raw.items()}
    known = {f.name for f in fields(OutdatedConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValidationError(f"Unknown setting(s) in {path}: {', '.join(unknown)}")

    logger.info("Loaded configuration from %s", path)
    base = {f.name: getattr(OutdatedConfig(), f.name) for f in fields(OutdatedConfig)}
    base.update(values)
    return _coerce(base, source=str(path))


def _coerce(values: dict[str, Any], *, source: str) -> OutdatedConfig:
    try:
        depth = values["transitive_depth"]
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise ValidationError(
                f"transitive_depth must be a non-negative integer, got {depth!r}"
            )
        sources = values["sources"]
        if isinstance(sources, str):
            sources = [sources]
        if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
            raise ValidationError("sources must be a list of endpoint strings")
        timeout = float(values["timeout"])
        if timeout <= 0:
            raise ValidationError(f"timeout must be positive, got {timeout}")
        return OutdatedConfig(
            transitive=bool(values["transitive"]),
            transitive_depth=depth,
            pre_release=PrereleaseReporting.from_name(values["pre_release"]),
            version_lock=VersionLock.from_name(values["version_lock"]),
            include_auto_references=bool(values["include_auto_references"]),
            sources=list(sources),
            timeout=timeout,
        )
    except ValidationError as exc:
        raise ValidationError(f"Invalid configuration ({source}): {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid configuration ({source}): {exc}") from exc
