"""High-level async client for the LifePlanner backend."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from lifeplanner._api import auth as _auth_api
from lifeplanner._api import rest as _rest_api
from lifeplanner._storage import FileSessionStorage, MemorySessionStorage, SessionStorage
from lifeplanner._transport import RestTransport
from lifeplanner.config import LifePlannerConfig
from lifeplanner.exceptions import (
    LifePlannerError,
    LifePlannerNotAuthenticatedError,
    LifePlannerSessionExpiredError,
)
from lifeplanner.models.identity import Identity
from lifeplanner.session import Session
from lifeplanner.state.events import AuthEvent, SessionChange

_logger = logging.getLogger(__name__)

SessionCallback = Callable[[SessionChange], None]


class Subscription:
    """Handle returned by :meth:`LifePlannerClient.on_auth_state_change`."""

    def __init__(self, client: LifePlannerClient, callback: SessionCallback) -> None:
        self._client = client
        self.callback = callback

    def unsubscribe(self) -> None:
        self._client._remove_subscription(self)  # noqa: SLF001


def _default_storage(config: LifePlannerConfig) -> SessionStorage:
    if config.persist_session and config.session_file:
        return FileSessionStorage(config.session_file)
    return MemorySessionStorage()


class LifePlannerClient:
    """Async client for the LifePlanner auth and table services.

    Usage::

        async with LifePlannerClient(config) as client:
            await client.sign_in("me@example.com", "secret")
            rows = await client.select("tasks", filters={"user_id": eq(client.identity.id)})

    Every change of the active session is reported to the callbacks
    registered with :meth:`on_auth_state_change`.
    """

    def __init__(
        self,
        config: LifePlannerConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        storage: SessionStorage | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: RestTransport | None = None
        self._storage = storage if storage is not None else _default_storage(config)
        self._session: Session | None = None
        self._subscriptions: list[Subscription] = []
        self._refresh_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LifePlannerClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = RestTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    @property
    def config(self) -> LifePlannerConfig:
        return self._config

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def identity(self) -> Identity | None:
        return self._session.user if self._session is not None else None

    # ------------------------------------------------------------------
    # Session-change notifications
    # ------------------------------------------------------------------

    def on_auth_state_change(self, callback: SessionCallback) -> Subscription:
        """Register *callback* for every future session change."""
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _remove_subscription(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _emit(self, event: AuthEvent) -> None:
        change = SessionChange(event=event, session=self._session)
        _logger.debug("Auth event %s (user=%s)", event, change.identity.id if change.identity else None)
        for subscription in list(self._subscriptions):
            try:
                subscription.callback(change)
            except Exception:
                _logger.warning("Session-change callback failed for %s", event, exc_info=True)

    def _set_session(self, session: Session, event: AuthEvent) -> None:
        self._session = session
        self._storage.save(session)
        self._emit(event)

    def _drop_session(self) -> None:
        self._session = None
        self._storage.clear()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str, *, full_name: str | None = None) -> Identity | None:
        """Request a new account; verification happens out of band."""
        transport = self._require_transport()
        identity = await _auth_api.sign_up(
            self._config,
            transport,
            email=email,
            password=password,
            full_name=full_name,
        )
        _logger.info("Sign-up requested; awaiting email verification")
        return identity

    async def sign_in(self, email: str, password: str) -> Session:
        """Sign in with email and password and announce ``SIGNED_IN``."""
        transport = self._require_transport()
        session = await _auth_api.sign_in_with_password(
            self._config,
            transport,
            email=email,
            password=password,
        )
        _logger.info("Signed in as %s", session.user.id)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def sign_out(self) -> None:
        """Revoke the session server-side and forget it locally.

        The local session is dropped even when the server call fails.
        """
        session = self._session
        try:
            if session is not None:
                await _auth_api.sign_out(self._config, self._require_transport(), session.access_token)
        except LifePlannerError as exc:
            _logger.warning("Remote sign-out failed, clearing local session anyway: %s", exc)
        finally:
            self._drop_session()
        _logger.info("Signed out")
        self._emit(AuthEvent.SIGNED_OUT)

    async def restore_session(self) -> Session | None:
        """Re-establish a previously persisted session.

        The stored session is checked against the auth service (refreshing
        it when the access token is expired or rejected). The outcome is
        announced as ``INITIAL_SESSION``, with no session when nothing
        valid was found.
        """
        stored = self._storage.load()
        session: Session | None = None
        if stored is not None:
            try:
                session = await self._revalidate(stored)
            except LifePlannerSessionExpiredError as exc:
                _logger.info("Stored session no longer valid: %s", exc)
                self._storage.clear()
            except LifePlannerError as exc:
                _logger.warning("Could not restore session: %s", exc)

        if session is not None:
            self._session = session
            self._storage.save(session)
        else:
            self._session = None
        self._emit(AuthEvent.INITIAL_SESSION)
        return session

    async def _revalidate(self, stored: Session) -> Session:
        transport = self._require_transport()
        if not stored.expires_within(self._config.refresh_margin):
            try:
                user = await _auth_api.get_user(self._config, transport, stored.access_token)
                return stored.model_copy(update={"user": user})
            except LifePlannerSessionExpiredError:
                _logger.debug("Stored access token rejected; refreshing")
        return await _auth_api.refresh_session(self._config, transport, stored.refresh_token)

    async def refresh_session(self) -> Session:
        """Exchange the refresh token for a new session (``TOKEN_REFRESHED``).

        A rejected refresh token signs the client out (``SIGNED_OUT``)
        and re-raises.
        """
        current = self._session
        if current is None:
            raise LifePlannerNotAuthenticatedError("No session to refresh")
        try:
            session = await _auth_api.refresh_session(
                self._config,
                self._require_transport(),
                current.refresh_token,
            )
        except LifePlannerSessionExpiredError:
            self._drop_session()
            self._emit(AuthEvent.SIGNED_OUT)
            raise
        self._set_session(session, AuthEvent.TOKEN_REFRESHED)
        return session

    async def ensure_session(self) -> Session:
        """Return an active session, refreshing it shortly before expiry.

        Concurrent callers share one refresh: refresh tokens are single-use.
        """
        session = self._session
        if session is None:
            raise LifePlannerNotAuthenticatedError("Not signed in")
        if not session.expires_within(self._config.refresh_margin):
            return session
        async with self._refresh_lock:
            current = self._session
            if current is None:
                raise LifePlannerNotAuthenticatedError("Not signed in")
            if current is not session:
                return current
            return await self.refresh_session()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> RestTransport:
        if self._transport is None:
            raise LifePlannerError("Client not initialized. Use 'async with LifePlannerClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        *,
        filters: Mapping[str, str] | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Rows of *table* matching *filters*."""
        session = await self.ensure_session()
        return await _rest_api.select_rows(
            self._config,
            self._require_transport(),
            session.access_token,
            table,
            filters=filters,
            columns=columns,
        )

    async def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        """Insert *row* and return the stored row."""
        session = await self.ensure_session()
        return await _rest_api.insert_row(self._config, self._require_transport(), session.access_token, table, row)

    async def upsert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        """Insert *row* or merge it into the row with the same primary key."""
        session = await self.ensure_session()
        return await _rest_api.upsert_row(self._config, self._require_transport(), session.access_token, table, row)

    async def update(self, table: str, changes: Mapping[str, Any], *, filters: Mapping[str, str]) -> None:
        """Apply *changes* to the rows matching *filters*."""
        session = await self.ensure_session()
        await _rest_api.update_rows(
            self._config,
            self._require_transport(),
            session.access_token,
            table,
            changes,
            filters=filters,
        )

    async def delete(self, table: str, *, filters: Mapping[str, str]) -> None:
        """Delete the rows matching *filters*."""
        session = await self.ensure_session()
        await _rest_api.delete_rows(
            self._config,
            self._require_transport(),
            session.access_token,
            table,
            filters=filters,
        )
