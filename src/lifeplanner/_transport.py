"""HTTP transport for the hosted backend's auth and table services."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from lifeplanner._constants import USER_AGENT
from lifeplanner._redact import redact_for_log
from lifeplanner.config import LifePlannerConfig
from lifeplanner.exceptions import LifePlannerTransportError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RestResponse:
    """Status code and decoded JSON body (``None`` for empty bodies)."""

    status: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`RestTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> RestResponse:
        ...


class RestTransport:
    """JSON-over-HTTP transport.

    Returns 4xx responses to the caller (endpoint modules map them to
    typed errors) and raises :class:`LifePlannerTransportError` for network
    failures, 5xx responses and undecodable bodies.
    """

    def __init__(
        self,
        config: LifePlannerConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> RestResponse:
        """Send one request to ``config.base_url + path`` and decode the reply."""
        url = f"{self._config.base_url}{path}"
        request_headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if payload is not None:
            request_headers["content-type"] = "application/json"
        if headers:
            request_headers.update(headers)

        body = json.dumps(payload) if payload is not None else None

        _logger.debug("%s %s params=%s", method, url, redact_for_log(dict(params or {})))
        if body is not None:
            _logger.debug("%s %s payload=%s", method, path, redact_for_log(payload))

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                data=body,
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise LifePlannerTransportError(
                f"Request to {path} failed: {exc}",
                endpoint=path,
            ) from exc
        except TimeoutError as exc:
            raise LifePlannerTransportError(
                f"Request to {path} timed out after {self._config.request_timeout}s",
                endpoint=path,
            ) from exc

        if status >= 500:
            raise LifePlannerTransportError(
                f"HTTP {status} from {path}: {text[:200]}",
                status_code=status,
                endpoint=path,
            )

        if not text.strip():
            return RestResponse(status=status)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LifePlannerTransportError(
                f"Invalid JSON from {path}: {text[:200]}",
                status_code=status,
                endpoint=path,
            ) from exc

        _logger.debug("%s %s -> %s %s", method, path, status, redact_for_log(data))
        return RestResponse(status=status, data=data)
