"""Auth service endpoints.

Endpoints:
  - POST /auth/v1/signup
  - POST /auth/v1/token?grant_type=password
  - POST /auth/v1/token?grant_type=refresh_token
  - POST /auth/v1/logout
  - GET  /auth/v1/user
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from lifeplanner._api._common import build_headers, raise_for_auth_response
from lifeplanner._redact import redact_for_log
from lifeplanner._transport import Transport
from lifeplanner.config import LifePlannerConfig
from lifeplanner.exceptions import (
    LifePlannerAuthenticationError,
    LifePlannerSessionExpiredError,
)
from lifeplanner.models.identity import Identity
from lifeplanner.session import Session

_logger = logging.getLogger(__name__)

SIGNUP_ENDPOINT = "/auth/v1/signup"
TOKEN_ENDPOINT = "/auth/v1/token"
LOGOUT_ENDPOINT = "/auth/v1/logout"
USER_ENDPOINT = "/auth/v1/user"


def parse_session_response(endpoint: str, data: Any) -> Session:
    """Parse a token response into a :class:`Session`.

    Raises
    ------
    LifePlannerAuthenticationError
        If the response lacks the token or user fields.
    """
    _logger.debug("%s response parsed=%s", endpoint, redact_for_log(data))
    if not isinstance(data, dict):
        raise LifePlannerAuthenticationError(
            f"{endpoint} returned no session",
            endpoint=endpoint,
        )
    try:
        return Session.model_validate(data)
    except ValidationError as exc:
        raise LifePlannerAuthenticationError(
            f"{endpoint} response missing session fields",
            endpoint=endpoint,
        ) from exc


async def sign_up(
    config: LifePlannerConfig,
    transport: Transport,
    *,
    email: str,
    password: str,
    full_name: str | None = None,
) -> Identity | None:
    """Request account creation.

    The account stays unconfirmed until the email-verification link
    (pointing at ``config.email_redirect_to``) is followed, so no session
    is established here even if the server returns one.

    Returns
    -------
    Identity or None
        The created account when the server echoes it back.
    """
    params: dict[str, str] = {}
    if config.email_redirect_to:
        params["redirect_to"] = config.email_redirect_to
    response = await transport.request(
        "POST",
        SIGNUP_ENDPOINT,
        params=params,
        payload={
            "email": email,
            "password": password,
            "data": {"full_name": full_name},
        },
        headers=build_headers(config),
    )
    raise_for_auth_response(SIGNUP_ENDPOINT, response)

    data = response.data if isinstance(response.data, dict) else {}
    user = data.get("user") if isinstance(data.get("user"), dict) else data
    if not user.get("id"):
        return None
    return Identity.model_validate(user)


async def sign_in_with_password(
    config: LifePlannerConfig,
    transport: Transport,
    *,
    email: str,
    password: str,
) -> Session:
    """Exchange email + password for a session."""
    response = await transport.request(
        "POST",
        TOKEN_ENDPOINT,
        params={"grant_type": "password"},
        payload={"email": email, "password": password},
        headers=build_headers(config),
    )
    raise_for_auth_response(TOKEN_ENDPOINT, response)
    return parse_session_response(TOKEN_ENDPOINT, response.data)


async def refresh_session(
    config: LifePlannerConfig,
    transport: Transport,
    refresh_token: str,
) -> Session:
    """Exchange a refresh token for a new session.

    Raises
    ------
    LifePlannerSessionExpiredError
        If the refresh token is no longer accepted.
    """
    response = await transport.request(
        "POST",
        TOKEN_ENDPOINT,
        params={"grant_type": "refresh_token"},
        payload={"refresh_token": refresh_token},
        headers=build_headers(config),
    )
    try:
        raise_for_auth_response(TOKEN_ENDPOINT, response)
    except LifePlannerSessionExpiredError:
        raise
    except LifePlannerAuthenticationError as exc:
        raise LifePlannerSessionExpiredError(
            f"Session refresh rejected: {exc}",
            code=exc.code,
            endpoint=TOKEN_ENDPOINT,
            status_code=exc.status_code,
        ) from exc
    return parse_session_response(TOKEN_ENDPOINT, response.data)


async def sign_out(
    config: LifePlannerConfig,
    transport: Transport,
    access_token: str,
) -> None:
    """Revoke the session server-side."""
    response = await transport.request(
        "POST",
        LOGOUT_ENDPOINT,
        headers=build_headers(config, access_token),
    )
    raise_for_auth_response(LOGOUT_ENDPOINT, response)


async def get_user(
    config: LifePlannerConfig,
    transport: Transport,
    access_token: str,
) -> Identity:
    """Fetch the account the access token belongs to."""
    response = await transport.request(
        "GET",
        USER_ENDPOINT,
        headers=build_headers(config, access_token),
    )
    raise_for_auth_response(USER_ENDPOINT, response)
    try:
        return Identity.model_validate(response.data)
    except ValidationError as exc:
        raise LifePlannerAuthenticationError(
            f"{USER_ENDPOINT} returned no user",
            endpoint=USER_ENDPOINT,
        ) from exc
