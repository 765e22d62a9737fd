"""Local folder feed.

NuGet accepts two folder layouts as a package source:

- hierarchical: ``{root}/{id-lower}/{version}/`` (what ``nuget add`` and
  the global packages folder produce);
- flat: ``{root}/{Id}.{version}.nupkg``.

Both are read; the directory listing is the version list.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotnet_outdated.core.versioning import NuGetVersion
from dotnet_outdated.exceptions import FeedUnavailableError
from dotnet_outdated.feeds.base import FeedSource, parse_versions

logger = logging.getLogger(__name__)

NUPKG_SUFFIX = ".nupkg"


class LocalFeed(FeedSource):
    """A package source on the local file system."""

    def __init__(self, endpoint: str, root: Path) -> None:
        self._endpoint = endpoint
        self._root = root

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def root(self) -> Path:
        return self._root

    async def list_versions(self, package_id: str) -> list[NuGetVersion]:
        return await asyncio.to_thread(self._scan, package_id)

    def _scan(self, package_id: str) -> list[NuGetVersion]:
        if not self._root.is_dir():
            raise FeedUnavailableError(
                f"Local feed folder {self._root} does not exist",
                endpoint=self._endpoint,
                package=package_id,
            )
        try:
            raw = self._hierarchical(package_id) + self._flat(package_id)
        except OSError as exc:
            raise FeedUnavailableError(
                f"Cannot read local feed {self._root}: {exc}",
                endpoint=self._endpoint,
                package=package_id,
            ) from exc
        return parse_versions(raw, self._endpoint)

    def _hierarchical(self, package_id: str) -> list[str]:
        package_dir = self._root / package_id.lower()
        if not package_dir.is_dir():
            return []
        return [child.name for child in package_dir.iterdir() if child.is_dir()]

    def _flat(self, package_id: str) -> list[str]:
        prefix = f"{package_id.lower()}."
        found: list[str] = []
        for child in self._root.iterdir():
            name = child.name
            if not child.is_file() or not name.lower().endswith(NUPKG_SUFFIX):
                continue
            stem = name[: -len(NUPKG_SUFFIX)]
            if stem.lower().endswith(".symbols"):
                continue
            # "Foo.Bar.1.0.0" must not match package "Foo".
            if stem.lower().startswith(prefix) and stem[len(prefix):][:1].isdigit():
                found.append(stem[len(prefix):])
        return found
