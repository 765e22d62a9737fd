"""NuGet V3 HTTP feed.

Every V3 feed publishes a service index listing its resources. Two of them
can enumerate a package's versions:

- ``PackageBaseAddress/3.0.0`` (flat container):
  ``{base}{id-lower}/index.json`` -> ``{"versions": [...]}``.
- ``RegistrationsBaseUrl``: ``{base}{id-lower}/index.json`` -> pages of
  catalog entries, either inline or behind a page ``@id``.

The flat container is preferred because it is a single small document.

Usage::

    feed = NuGetV3Feed("https://api.nuget.org/v3/index.json", client)
    versions = await feed.list_versions("Newtonsoft.Json")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx

from dotnet_outdated.core.versioning import NuGetVersion
from dotnet_outdated.exceptions import FeedUnavailableError
from dotnet_outdated.feeds.base import FeedSource, parse_versions
from dotnet_outdated.feeds.http_client import fetch_json

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FLAT_CONTAINER_TYPES: tuple[str, ...] = ("PackageBaseAddress/3.0.0",)

REGISTRATION_TYPES: tuple[str, ...] = (
    "RegistrationsBaseUrl/3.6.0",
    "RegistrationsBaseUrl/3.4.0",
    "RegistrationsBaseUrl/3.0.0-rc",
    "RegistrationsBaseUrl/3.0.0-beta",
    "RegistrationsBaseUrl",
)


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------


class NuGetV3Feed(FeedSource):
    """A NuGet V3 feed addressed by its service index URL."""

    def __init__(self, endpoint: str, client: httpx.AsyncClient) -> None:
        self._endpoint = endpoint
        self._client = client
        self._resources: dict[str, str] | None = None
        self._index_error: str | None = None
        self._index_lock = asyncio.Lock()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def list_versions(self, package_id: str) -> list[NuGetVersion]:
        resources = await self._service_resources(package_id)
        package_path = quote(package_id.lower(), safe="")

        flat_base = _first_resource(resources, FLAT_CONTAINER_TYPES)
        if flat_base is not None:
            data = await fetch_json(
                self._client,
                f"{_with_slash(flat_base)}{package_path}/index.json",
                endpoint=self._endpoint,
                package=package_id,
            )
            if data is None:
                return []
            if not isinstance(data, dict):
                raise self._malformed(package_id, "flat container index")
            return parse_versions(list(data.get("versions") or []), self._endpoint)

        registration_base = _first_resource(resources, REGISTRATION_TYPES)
        if registration_base is not None:
            return await self._registration_versions(
                f"{_with_slash(registration_base)}{package_path}/index.json", package_id
            )

        raise FeedUnavailableError(
            f"{self._endpoint} advertises no resource that can list package versions",
            endpoint=self._endpoint,
            package=package_id,
        )

    async def _service_resources(self, package_id: str) -> dict[str, str]:
        """Fetch the service index once, mapping resource type -> URL.

        A failed fetch is remembered too: later lookups on this feed fail
        straight away with the same reason.
        """
        async with self._index_lock:
            if self._resources is not None:
                return self._resources
            if self._index_error is not None:
                raise FeedUnavailableError(
                    self._index_error, endpoint=self._endpoint, package=package_id
                )
            try:
                data = await fetch_json(
                    self._client, self._endpoint, endpoint=self._endpoint, package=package_id
                )
                if not isinstance(data, dict) or not isinstance(data.get("resources"), list):
                    raise FeedUnavailableError(
                        f"{self._endpoint} did not return a NuGet V3 service index",
                        endpoint=self._endpoint,
                        package=package_id,
                    )
            except FeedUnavailableError as exc:
                logger.debug("Service index %s unavailable: %s", self._endpoint, exc)
                self._index_error = str(exc)
                raise
            resources: dict[str, str] = {}
            for resource in data["resources"]:
                if not isinstance(resource, dict):
                    continue
                url = resource.get("@id")
                types = resource.get("@type")
                for rtype in types if isinstance(types, list) else [types]:
                    if isinstance(rtype, str) and isinstance(url, str):
                        resources.setdefault(rtype, url)
            logger.debug("Service index %s: %d resources", self._endpoint, len(resources))
            self._resources = resources
            return resources

    async def _registration_versions(self, url: str, package_id: str) -> list[NuGetVersion]:
        index = await fetch_json(self._client, url, endpoint=self._endpoint, package=package_id)
        if index is None:
            return []
        if not isinstance(index, dict):
            raise self._malformed(package_id, "registration index")

        raw_versions: list[Any] = []
        for page in index.get("items") or []:
            if not isinstance(page, dict):
                continue
            leaves = page.get("items")
            if leaves is None and isinstance(page.get("@id"), str):
                page_data = await fetch_json(
                    self._client, page["@id"], endpoint=self._endpoint, package=package_id
                )
                leaves = page_data.get("items") if isinstance(page_data, dict) else None
            for leaf in leaves or []:
                entry = leaf.get("catalogEntry") if isinstance(leaf, dict) else None
                if isinstance(entry, dict) and entry.get("version"):
                    raw_versions.append(entry["version"])
        return parse_versions(raw_versions, self._endpoint)

    def _malformed(self, package_id: str, what: str) -> FeedUnavailableError:
        return FeedUnavailableError(
            f"Malformed {what} for {package_id} from {self._endpoint}",
            endpoint=self._endpoint,
            package=package_id,
        )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _first_resource(resources: dict[str, str], types: tuple[str, ...]) -> str | None:
    for rtype in types:
        if rtype in resources:
            return resources[rtype]
    return None


def _with_slash(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"
