"""Exception hierarchy for Themesync."""

from __future__ import annotations

from typing import Any


class ThemeSyncError(Exception):
    """Base class for every failure surfaced by Themesync."""


class ConfigError(ThemeSyncError):
    """Raised when the configuration cannot support the requested operation."""


class ApiError(ThemeSyncError):
    """Raised when the remote API answers with an error status."""

    type = "ApiError"

    def __init__(self, message: str, *, status_code: int | None = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class InvalidRequestError(ApiError):
    """Raised when the remote API rejects a request as invalid.

    ``detail`` carries the structured rejection body verbatim so it can be shown
    to the user.
    """

    type = "InvalidRequestError"


class AuthenticationError(ApiError):
    """Raised when the remote API refuses the configured credentials."""

    type = "AuthenticationError"


class TransportError(ThemeSyncError):
    """Raised when the HTTP transport fails before a response arrives."""


class MissingDataError(ThemeSyncError):
    """Raised when a remote response lacks the field an operation needs."""


class IncompleteAssetError(ThemeSyncError):
    """Raised when a retrieved asset has neither a value nor an attachment."""
