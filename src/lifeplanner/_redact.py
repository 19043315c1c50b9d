"""Masking of credentials in DEBUG log output.

Auth requests and responses carry the account password, both session
tokens and the project API key. :func:`redact_for_log` walks a payload
and replaces those values before the transport logs it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

REDACTED = "<redacted>"
_MAX_DEPTH = 20

# Compared lower-cased; header names arrive in any case.
_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "access_token",
        "refresh_token",
        "provider_token",
        "provider_refresh_token",
        "token",
        "apikey",
        "authorization",
        "cookie",
    }
)


def _is_secret(key: object) -> bool:
    return str(key).lower() in _SECRET_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Copy *value* with secret fields masked and long strings shortened."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    depth = _depth + 1
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if _is_secret(key) else redact_for_log(item, max_string=max_string, _depth=depth)
            for key, item in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=depth) for item in value]
    return repr(value)
