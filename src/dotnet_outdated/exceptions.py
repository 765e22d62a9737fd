"""dotnet-outdated exception hierarchy.

All public exceptions inherit from OutdatedError, giving callers a single
base class to catch when they want to handle any tool-specific failure
without swallowing unrelated errors.

Fatal errors (validation, discovery, restore, a run with no usable
profile) end the CLI with exit code 1. Feed failures are isolated per
endpoint and per dependency and never abort a run on their own.
"""

from __future__ import annotations


class OutdatedError(Exception):
    """Base exception for all dotnet-outdated errors."""


class ValidationError(OutdatedError):
    """Raised for an invalid option or policy combination.

    Covers negative transitive depths, unknown enum values in the
    configuration file, and ambiguous project paths. Raised before any
    restore or network work begins.
    """


class NotFoundError(OutdatedError):
    """Raised when no solution or project file exists at the given path."""


class RestoreError(OutdatedError):
    """Raised when ``dotnet restore`` fails or leaves no restore metadata."""


class GraphConstructionError(OutdatedError):
    """Raised when restore metadata for a target profile is absent or malformed.

    Fatal for the affected profile only; the profile is reported and
    skipped. Raised for the whole run only when no profile survives.
    """


class FeedUnavailableError(OutdatedError):
    """Raised when a package source cannot be queried.

    Covers timeouts, transport errors, authentication failures, server
    errors and unreadable responses.

    Attributes:
        endpoint: The source endpoint that failed, or None when the error
            aggregates every endpoint of a package lookup.
        package: The package id being looked up, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        package: str | None = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.package = package
