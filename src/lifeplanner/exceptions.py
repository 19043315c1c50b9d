"""Custom exception hierarchy for lifeplanner."""

from __future__ import annotations


class LifePlannerError(Exception):
    """Base exception for all lifeplanner errors."""


class LifePlannerConfigError(LifePlannerError):
    """Invalid or missing configuration."""


class LifePlannerTransportError(LifePlannerError):
    """HTTP-level failure (network, 5xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class LifePlannerApiError(LifePlannerError):
    """The backend rejected the request (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class LifePlannerAuthenticationError(LifePlannerApiError):
    """Sign-in or sign-up rejected (bad credentials, duplicate account)."""


class LifePlannerSessionExpiredError(LifePlannerAuthenticationError):
    """Access token rejected by the server or refresh token no longer valid.

    The client refreshes tokens before they expire; this is raised when the
    server still refuses the token (e.g. ``PGRST301``) or when the refresh
    itself fails.
    """


class LifePlannerPermissionError(LifePlannerApiError):
    """Row-level authorization denied the operation (e.g. code ``42501``)."""


class LifePlannerNotAuthenticatedError(LifePlannerError):
    """The operation needs a signed-in identity and there is none."""


class LifePlannerNotFoundError(LifePlannerError):
    """The referenced record is not present in the local mirror."""


class LifePlannerValidationError(LifePlannerError):
    """A create draft or update patch failed validation."""
