"""Shared helpers for lifeplanner endpoint modules.

This module centralizes the most repeated patterns:
- building the ``apikey`` / bearer headers
- building column filters in the table service's operator syntax
- mapping error responses to the exception hierarchy

It is internal to lifeplanner and may change at any time.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from lifeplanner._constants import JWT_EXPIRED_CODES, PERMISSION_DENIED_CODES
from lifeplanner._transport import RestResponse
from lifeplanner.config import LifePlannerConfig
from lifeplanner.exceptions import (
    LifePlannerApiError,
    LifePlannerAuthenticationError,
    LifePlannerPermissionError,
    LifePlannerSessionExpiredError,
)


def build_headers(
    config: LifePlannerConfig,
    access_token: str | None = None,
    *,
    prefer: str | None = None,
) -> dict[str, str]:
    """Headers every request carries; anonymous calls authorize with the anon key."""
    headers = {
        "apikey": config.anon_key,
        "authorization": f"Bearer {access_token or config.anon_key}",
    }
    if prefer:
        headers["prefer"] = prefer
    return headers


def eq(value: Any) -> str:
    """Column filter matching *value* exactly."""
    return f"eq.{value}"


def in_(values: Iterable[Any]) -> str:
    """Column filter matching any of *values*."""
    return f"in.({','.join(str(v) for v in values)})"


def _error_fields(response: RestResponse) -> tuple[str, str]:
    """Extract ``(code, message)`` from the error shapes both services use."""
    data = response.data
    if not isinstance(data, dict):
        return str(response.status), str(data or "")
    code = data.get("error_code") or data.get("code") or data.get("error") or response.status
    message = data.get("msg") or data.get("message") or data.get("error_description") or ""
    return str(code), str(message)


def raise_for_auth_response(endpoint: str, response: RestResponse) -> None:
    """Raise the matching error for a failed auth-service response."""
    if response.ok:
        return
    code, message = _error_fields(response)
    if response.status == 401 or code in {"bad_jwt", "session_not_found", "refresh_token_not_found"}:
        raise LifePlannerSessionExpiredError(
            f"{endpoint} failed: code={code} message={message}",
            code=code,
            endpoint=endpoint,
            status_code=response.status,
        )
    raise LifePlannerAuthenticationError(
        f"{endpoint} failed: code={code} message={message}",
        code=code,
        endpoint=endpoint,
        status_code=response.status,
    )


def raise_for_rest_response(endpoint: str, response: RestResponse) -> None:
    """Raise the matching error for a failed table-service response."""
    if response.ok:
        return
    code, message = _error_fields(response)
    if code in JWT_EXPIRED_CODES:
        raise LifePlannerSessionExpiredError(
            f"{endpoint} failed: code={code} message={message}",
            code=code,
            endpoint=endpoint,
            status_code=response.status,
        )
    if code in PERMISSION_DENIED_CODES or response.status in (401, 403):
        raise LifePlannerPermissionError(
            f"{endpoint} denied: code={code} message={message}",
            code=code,
            endpoint=endpoint,
            status_code=response.status,
        )
    raise LifePlannerApiError(
        f"{endpoint} failed: code={code} message={message}",
        code=code,
        endpoint=endpoint,
        status_code=response.status,
    )
