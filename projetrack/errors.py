"""Exception hierarchy shared by services, the log store and the API layer.

Services raise these; `projetrack.api.errors` maps them to the response
envelope. Only the message of client-side errors is shown to the caller.
"""

from __future__ import annotations

from typing import Any


class ProjeTrackError(Exception):
    """Base class for every expected application error."""

    status_code: int = 500

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ProjeTrackError):
    """Missing or out-of-range input. No state was changed."""

    status_code = 400


class NotFoundError(ProjeTrackError):
    """A referenced entity does not exist. No state was changed."""

    status_code = 404


class ReferentialConflictError(ProjeTrackError):
    """Delete blocked by dependent rows; carries the number of dependents."""

    status_code = 409

    def __init__(self, message: str, dependents: int) -> None:
        super().__init__(message, dependents=dependents)
        self.dependents = dependents


class AuthenticationError(ProjeTrackError):
    """Missing, invalid, expired or revoked bearer token / bad credentials."""

    status_code = 401


class PermissionDeniedError(ProjeTrackError):
    """Authenticated but lacking the role required for the operation."""

    status_code = 403


class RateLimitedError(ProjeTrackError):
    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message, retry_after=retry_after)
        self.retry_after = retry_after


class StoreError(ProjeTrackError):
    """Persistence failure during the primary mutation; nothing was applied."""

    status_code = 500


class StoreUnavailableError(StoreError):
    """The activity log store could not append/read a record."""
