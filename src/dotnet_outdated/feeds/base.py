"""Base class for package feed sources.

Defines the ``FeedSource`` abstract base class that the concrete sources
(NuGet V3 over HTTP, local folders) implement, and ``create_source`` which
picks the right one for an endpoint string as it appears in restore
metadata.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from dotnet_outdated.core.versioning import NuGetVersion

logger = logging.getLogger(__name__)


class FeedSource(ABC):
    """A single package source endpoint."""

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """The endpoint string this source was created from."""

    @abstractmethod
    async def list_versions(self, package_id: str) -> list[NuGetVersion]:
        """List every version of *package_id* published on this source.

        Args:
            package_id: NuGet package id (case-insensitive).

        Returns:
            Versions in no particular order. Empty when the source does not
            carry the package.

        Raises:
            FeedUnavailableError: If the source cannot be queried.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.endpoint!r})"


def parse_versions(raw_versions: list[object], source: str) -> list[NuGetVersion]:
    """Parse feed version strings, dropping (and logging) unparseable ones."""
    versions: list[NuGetVersion] = []
    for raw in raw_versions:
        version = NuGetVersion.try_parse(str(raw))
        if version is None:
            logger.debug("Ignoring unparseable version %r from %s", raw, source)
            continue
        versions.append(version)
    return versions


def create_source(endpoint: str, client: httpx.AsyncClient) -> FeedSource:
    """Create the feed source for *endpoint*.

    ``http(s)://`` endpoints are NuGet V3 service indexes; ``file://`` URLs
    and plain paths are local folder feeds.
    """
    from dotnet_outdated.feeds.local import LocalFeed
    from dotnet_outdated.feeds.nuget_v3 import NuGetV3Feed

    parsed = urlparse(endpoint)
    if parsed.scheme in ("http", "https"):
        return NuGetV3Feed(endpoint, client)
    if parsed.scheme == "file":
        return LocalFeed(endpoint, Path(unquote(parsed.path)))
    return LocalFeed(endpoint, Path(endpoint).expanduser())
