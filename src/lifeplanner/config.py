"""Client configuration for lifeplanner."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from lifeplanner.exceptions import LifePlannerConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class LifePlannerConfig:
    """Client configuration.

    Parameters
    ----------
    url : str
        Project base URL of the hosted backend (e.g.
        ``"https://abc.example.co"``). The auth service lives under
        ``/auth/v1`` and the table service under ``/rest/v1``.
    anon_key : str
        Public (anonymous) API key sent as ``apikey`` with every request.
    email_redirect_to : str or None
        Where the email-verification link sent on sign-up points to.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    refresh_margin : float
        Seconds before the access token's expiry at which the client
        refreshes it proactively.
    session_file : str or None
        Path of a JSON file used to persist the session between runs.
        ``None`` keeps the session in memory only.
    persist_session : bool
        Persist sessions at all. When ``False`` ``session_file`` is ignored.
    """

    url: str
    anon_key: str
    email_redirect_to: str | None = None
    request_timeout: float = 30.0
    refresh_margin: float = 60.0
    session_file: str | None = None
    persist_session: bool = True

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    @property
    def auth_url(self) -> str:
        return f"{self.base_url}/auth/v1"

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}/rest/v1"

    @classmethod
    def from_env(cls, **overrides: Any) -> LifePlannerConfig:
        """Create configuration from environment variables.

        Reads ``LIFEPLANNER_URL``, ``LIFEPLANNER_ANON_KEY`` and the optional
        ``LIFEPLANNER_*`` variables. Explicit keyword arguments override
        environment values.

        Raises
        ------
        LifePlannerConfigError
            If the URL or the anon key is missing.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "LIFEPLANNER_URL": "url",
            "LIFEPLANNER_ANON_KEY": "anon_key",
            "LIFEPLANNER_EMAIL_REDIRECT_TO": "email_redirect_to",
            "LIFEPLANNER_SESSION_FILE": "session_file",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("LIFEPLANNER_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        margin_env = env.get("LIFEPLANNER_REFRESH_MARGIN")
        if margin_env is not None and "refresh_margin" not in overrides:
            config_kwargs["refresh_margin"] = float(margin_env)

        if "persist_session" not in overrides:
            config_kwargs["persist_session"] = _env_bool(env.get("LIFEPLANNER_PERSIST_SESSION"), True)

        config_kwargs.update(overrides)

        missing = [name for name in ("url", "anon_key") if not config_kwargs.get(name)]
        if missing:
            raise LifePlannerConfigError(f"Missing configuration: {', '.join(missing)}")

        return cls(**config_kwargs)
