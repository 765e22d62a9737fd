"""Package source access: NuGet V3 HTTP feeds and local folder feeds.

Public API::

    from dotnet_outdated.feeds import FeedCatalogClient
    from dotnet_outdated.feeds.nuget_v3 import NuGetV3Feed
    from dotnet_outdated.feeds.local import LocalFeed
"""

from __future__ import annotations

from dotnet_outdated.feeds.base import FeedSource, create_source
from dotnet_outdated.feeds.catalog import DEFAULT_SOURCES, NUGET_ORG_V3, FeedCatalogClient

__all__ = [
    "DEFAULT_SOURCES",
    "FeedCatalogClient",
    "FeedSource",
    "NUGET_ORG_V3",
    "create_source",
]
