"""Feed Catalog Client: merged, cached version lists across package sources.

One ``FeedCatalogClient`` lives for one run. It owns the HTTP client shared
by every feed, one ``FeedSource`` per endpoint, and the response cache.

Cache semantics
---------------
Entries are keyed by ``(package id lower-cased, endpoint)`` and hold the
*task* that queries the endpoint, not its result. The first caller for a
key creates and stores the task before yielding to the event loop; every
later caller for the same key awaits that same task. A package reached
from several profiles or transitive paths therefore costs one request per
endpoint, however many resolutions ask for it concurrently. Failures are
cached too, so an unreachable endpoint is not retried within the run.

Usage::

    async with FeedCatalogClient() as catalog:
        versions = await catalog.fetch_versions("Serilog", project.sources)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence

import httpx

from dotnet_outdated.core.versioning import NuGetVersion
from dotnet_outdated.exceptions import FeedUnavailableError
from dotnet_outdated.feeds.base import FeedSource, create_source
from dotnet_outdated.feeds.http_client import DEFAULT_TIMEOUT, create_client

logger = logging.getLogger(__name__)

# Source used when a project's restore metadata lists none.
NUGET_ORG_V3: str = "https://api.nuget.org/v3/index.json"
DEFAULT_SOURCES: tuple[str, ...] = (NUGET_ORG_V3,)

SourceFactory = Callable[[str, httpx.AsyncClient], FeedSource]


class FeedCatalogClient:
    """Queries package sources for published versions, with a per-run cache.

    Args:
        client: HTTP client to share between feeds. When omitted one is
            created (and closed by ``aclose``).
        default_sources: Endpoints used when a lookup names none.
        timeout: Request timeout for a client created here.
        source_factory: Builds the ``FeedSource`` for an endpoint.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        default_sources: Sequence[str] = DEFAULT_SOURCES,
        timeout: float = DEFAULT_TIMEOUT,
        source_factory: SourceFactory = create_source,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else create_client(timeout=timeout)
        self._default_sources = tuple(default_sources)
        self._source_factory = source_factory
        self._sources: dict[str, FeedSource] = {}
        self._cache: dict[tuple[str, str], asyncio.Task[list[NuGetVersion]]] = {}
        self._request_count = 0

    async def __aenter__(self) -> FeedCatalogClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Cancel pending lookups and close an owned HTTP client."""
        for task in self._cache.values():
            if not task.done():
                task.cancel()
        if self._owns_client:
            await self._client.aclose()

    @property
    def default_sources(self) -> tuple[str, ...]:
        return self._default_sources

    @property
    def request_count(self) -> int:
        """Number of endpoint queries actually issued (cache misses)."""
        return self._request_count

    def source_for(self, endpoint: str) -> FeedSource:
        """Return the (single) feed source for *endpoint*."""
        source = self._sources.get(endpoint)
        if source is None:
            source = self._source_factory(endpoint, self._client)
            self._sources[endpoint] = source
        return source

    async def fetch_versions(
        self,
        package_id: str,
        endpoints: Iterable[str] = (),
    ) -> list[NuGetVersion]:
        """Return every version of *package_id* found on *endpoints*.

        Endpoints are queried concurrently and their results merged;
        versions equal across endpoints collapse into one entry.

        Args:
            package_id: NuGet package id (case-insensitive).
            endpoints: Source endpoints in restore order. Empty means the
                default sources.

        Returns:
            Ascending list of unique versions. Empty when no endpoint
            carries the package.

        Raises:
            FeedUnavailableError: If every endpoint failed.
        """
        targets = list(dict.fromkeys(endpoints)) or list(self._default_sources)
        outcomes = await asyncio.gather(
            *(self._lookup(package_id, endpoint) for endpoint in targets),
            return_exceptions=True,
        )

        merged: set[NuGetVersion] = set()
        failures: list[FeedUnavailableError] = []
        for outcome in outcomes:
            if isinstance(outcome, FeedUnavailableError):
                failures.append(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                merged.update(outcome)

        if failures and len(failures) == len(targets):
            reasons = "; ".join(str(f) for f in failures)
            raise FeedUnavailableError(
                f"No source could be queried for {package_id}: {reasons}",
                package=package_id,
            )
        if failures:
            logger.warning(
                "%s: %d of %d sources failed, versions may be incomplete (%s)",
                package_id, len(failures), len(targets),
                ", ".join(f.endpoint or "?" for f in failures),
            )
        return sorted(merged)

    async def _lookup(self, package_id: str, endpoint: str) -> list[NuGetVersion]:
        key = (package_id.lower(), endpoint)
        task = self._cache.get(key)
        if task is None:
            task = asyncio.ensure_future(self._query(package_id, endpoint))
            self._cache[key] = task
        else:
            logger.debug("Cache hit for %s on %s", package_id, endpoint)
        # A cancelled waiter must not cancel the lookup other waiters share.
        return await asyncio.shield(task)

    async def _query(self, package_id: str, endpoint: str) -> list[NuGetVersion]:
        self._request_count += 1
        logger.debug("Querying %s for %s", endpoint, package_id)
        versions = await self.source_for(endpoint).list_versions(package_id)
        logger.debug("%s on %s: %d versions", package_id, endpoint, len(versions))
        return versions
