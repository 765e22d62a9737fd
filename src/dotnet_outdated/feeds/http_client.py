"""Shared async HTTP helpers for package feeds.

Provides a thin wrapper around ``httpx.AsyncClient`` with standardised
timeouts, user-agent headers and error handling. All HTTP feed sources
use this module so that HTTP behaviour is consistent and testable.

A 404 is a normal answer from a package feed ("no such package here") and
is returned as None. Every other failure raises ``FeedUnavailableError``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dotnet_outdated import __version__
from dotnet_outdated.exceptions import FeedUnavailableError

logger = logging.getLogger(__name__)

# Timeout for all feed HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = f"dotnet-outdated-py/{__version__}"


def create_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the client shared by every HTTP feed of one run.

    Args:
        timeout: Request timeout in seconds.
        transport: Optional transport override (tests pass
            ``httpx.MockTransport``).

    Returns:
        A configured ``httpx.AsyncClient``. The caller owns and closes it.
    """
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        follow_redirects=True,
        transport=transport,
    )


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    endpoint: str | None = None,
    package: str | None = None,
) -> Any | None:  # noqa: ANN401
    """Fetch a URL and parse the response as JSON.

    Args:
        client: The shared client.
        url: The URL to fetch.
        endpoint: Feed endpoint the request belongs to, for error context.
        package: Package id being looked up, for error context.

    Returns:
        Parsed JSON, or None when the server answered 404.

    Raises:
        FeedUnavailableError: On timeouts, transport errors, non-404 HTTP
            errors or invalid JSON.
    """
    endpoint = endpoint or url
    try:
        resp = await client.get(url)
    except httpx.TimeoutException as exc:
        logger.warning("Timeout fetching %s", url)
        raise FeedUnavailableError(
            f"Timed out querying {endpoint}", endpoint=endpoint, package=package
        ) from exc
    except httpx.RequestError as exc:
        logger.warning("Request error for %s: %s", url, exc)
        raise FeedUnavailableError(
            f"Could not reach {endpoint}: {exc}", endpoint=endpoint, package=package
        ) from exc

    if resp.status_code == 404:
        logger.debug("404 from %s", url)
        return None
    if resp.is_error:
        logger.warning("HTTP %d from %s", resp.status_code, url)
        if resp.status_code in (401, 403):
            reason = "authentication required"
        elif resp.is_server_error:
            reason = "server error"
        else:
            reason = "request rejected"
        raise FeedUnavailableError(
            f"HTTP {resp.status_code} ({reason}) from {endpoint}",
            endpoint=endpoint,
            package=package,
        )
    try:
        return resp.json()
    except ValueError as exc:
        logger.warning("Invalid JSON from %s", url)
        raise FeedUnavailableError(
            f"Invalid JSON response from {endpoint}", endpoint=endpoint, package=package
        ) from exc
