from __future__ import annotations

import asyncio
import itertools
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from lifeplanner._transport import RestResponse
from lifeplanner.config import LifePlannerConfig

_OWNED_TABLES = {"tasks", "habits", "goals", "vision_board"}

_TABLE_DEFAULTS: dict[str, dict[str, Any]] = {
    "tasks": {
        "description": None,
        "due_date": None,
        "priority": "medium",
        "status": "not_started",
        "tags": None,
    },
    "habits": {"description": None, "frequency": "daily", "streak": 0, "last_completed": None},
    "goals": {"description": None, "deadline": None, "progress": 0},
    "goal_steps": {"is_completed": False},
    "vision_board": {"image_url": None, "quote": None, "position_x": 0, "position_y": 0},
    "profiles": {"full_name": None, "avatar_url": None},
}


@dataclass
class FakePlannerBackend:
    """In-memory stand-in for the hosted auth + table services.

    Emulates row-level security: every table statement only sees the rows
    owned by the bearer token's user.
    """

    users: dict[str, dict[str, Any]] = field(default_factory=dict)
    passwords: dict[str, str] = field(default_factory=dict)
    tables: dict[str, list[dict[str, Any]]] = field(
        default_factory=lambda: {name: [] for name in _TABLE_DEFAULTS},
    )
    access_tokens: dict[str, str] = field(default_factory=dict)
    refresh_tokens: dict[str, str] = field(default_factory=dict)
    calls: list[tuple[str, str, dict[str, str]]] = field(default_factory=list)
    failures: dict[tuple[str, str], RestResponse] = field(default_factory=dict)
    expires_in: int = 3600
    load_gate: asyncio.Event | None = None
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    # ------------------------------------------------------------------
    # Seeding helpers
    # ------------------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def register(self, email: str, password: str, full_name: str | None = None) -> str:
        user_id = self._next_id("user")
        self.users[user_id] = {
            "id": user_id,
            "email": email,
            "user_metadata": {"full_name": full_name},
        }
        self.passwords[email] = password
        return user_id

    def issue_session(self, user_id: str, *, expires_in: int | None = None) -> dict[str, Any]:
        access = self._next_id("access")
        refresh = self._next_id("refresh")
        self.access_tokens[access] = user_id
        self.refresh_tokens[refresh] = user_id
        lifetime = self.expires_in if expires_in is None else expires_in
        return {
            "access_token": access,
            "refresh_token": refresh,
            "token_type": "bearer",
            "expires_in": lifetime,
            "expires_at": int(time.time()) + lifetime,
            "user": dict(self.users[user_id]),
        }

    def seed(self, table: str, **row: Any) -> dict[str, Any]:
        stored = {
            **_TABLE_DEFAULTS[table],
            "id": self._next_id(table),
            "created_at": datetime.now(UTC).isoformat(),
            **row,
        }
        self.tables[table].append(stored)
        return stored

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p == path)

    def params_for(self, method: str, path: str) -> list[dict[str, str]]:
        return [params for m, p, params in self.calls if m == method and p == path]

    # ------------------------------------------------------------------
    # Request dispatch
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> RestResponse:
        params = dict(params or {})
        headers = dict(headers or {})
        self.calls.append((method, path, params))

        if path.startswith("/auth/v1/"):
            return self._auth(method, path.removeprefix("/auth/v1/"), params, payload, headers)
        if path.startswith("/rest/v1/"):
            table = path.removeprefix("/rest/v1/")
            if method == "GET" and self.load_gate is not None:
                await self.load_gate.wait()
            injected = self.failures.get((method, table))
            if injected is not None:
                return injected
            return self._rest(method, table, params, payload, headers)
        raise AssertionError(f"Unexpected path in fake backend: {path}")

    def _bearer_user(self, headers: Mapping[str, str]) -> str | None:
        token = headers.get("authorization", "").removeprefix("Bearer ")
        return self.access_tokens.get(token)

    def _auth(
        self,
        method: str,
        route: str,
        params: dict[str, str],
        payload: Any,
        headers: Mapping[str, str],
    ) -> RestResponse:
        if method == "POST" and route == "signup":
            email = payload["email"]
            if email in self.passwords:
                return RestResponse(
                    422,
                    {"code": 422, "error_code": "user_already_exists", "msg": "User already registered"},
                )
            user_id = self.register(email, payload["password"], (payload.get("data") or {}).get("full_name"))
            return RestResponse(200, dict(self.users[user_id]))

        if method == "POST" and route == "token" and params.get("grant_type") == "password":
            email = payload["email"]
            if self.passwords.get(email) != payload["password"]:
                return RestResponse(
                    400,
                    {"code": 400, "error_code": "invalid_credentials", "msg": "Invalid login credentials"},
                )
            user_id = next(uid for uid, user in self.users.items() if user["email"] == email)
            return RestResponse(200, self.issue_session(user_id))

        if method == "POST" and route == "token" and params.get("grant_type") == "refresh_token":
            user_id = self.refresh_tokens.pop(payload["refresh_token"], None)
            if user_id is None:
                return RestResponse(
                    400,
                    {"code": 400, "error_code": "refresh_token_not_found", "msg": "Invalid Refresh Token"},
                )
            return RestResponse(200, self.issue_session(user_id))

        if method == "POST" and route == "logout":
            token = headers.get("authorization", "").removeprefix("Bearer ")
            self.access_tokens.pop(token, None)
            return RestResponse(204)

        if method == "GET" and route == "user":
            user_id = self._bearer_user(headers)
            if user_id is None:
                return RestResponse(401, {"code": 401, "error_code": "bad_jwt", "msg": "invalid JWT"})
            return RestResponse(200, dict(self.users[user_id]))

        raise AssertionError(f"Unexpected auth route in fake backend: {method} {route}")

    def _owner_of(self, table: str, row: Mapping[str, Any]) -> str | None:
        if table in _OWNED_TABLES:
            return row.get("user_id")
        if table == "profiles":
            return row.get("id")
        if table == "goal_steps":
            goal = next((g for g in self.tables["goals"] if g["id"] == row.get("goal_id")), None)
            return goal["user_id"] if goal is not None else None
        return None

    def _matches(self, table: str, row: Mapping[str, Any], params: Mapping[str, str]) -> bool:
        for column, expression in params.items():
            if column == "select":
                continue
            operator, _, operand = expression.partition(".")
            if column == "goals.user_id":
                value = self._owner_of("goal_steps", row)
            else:
                value = row.get(column)
            if operator == "eq" and str(value) != operand:
                return False
            if operator == "in" and str(value) not in operand.strip("()").split(","):
                return False
        return True

    def _rest(
        self,
        method: str,
        table: str,
        params: dict[str, str],
        payload: Any,
        headers: Mapping[str, str],
    ) -> RestResponse:
        user_id = self._bearer_user(headers)
        if user_id is None:
            return RestResponse(401, {"code": "PGRST301", "message": "JWT expired"})
        rows = self.tables[table]
        visible = [row for row in rows if self._owner_of(table, row) == user_id]

        if method == "GET":
            selected = [dict(row) for row in visible if self._matches(table, row, params)]
            if table == "goal_steps" and "goals!inner" in params.get("select", ""):
                for row in selected:
                    row["goals"] = {"user_id": self._owner_of("goal_steps", row)}
            return RestResponse(200, selected)

        if method == "POST":
            incoming = dict(payload)
            if "merge-duplicates" in headers.get("prefer", ""):
                existing = next((row for row in rows if row["id"] == incoming.get("id")), None)
                if existing is not None:
                    if self._owner_of(table, existing) != user_id:
                        return RestResponse(403, {"code": "42501", "message": "permission denied"})
                    existing.update(incoming)
                    return RestResponse(201, [dict(existing)])
            stored = {
                **_TABLE_DEFAULTS[table],
                "id": incoming.get("id") or self._next_id(table),
                "created_at": datetime.now(UTC).isoformat(),
                **incoming,
            }
            if self._owner_of(table, stored) != user_id:
                return RestResponse(
                    403,
                    {"code": "42501", "message": f'new row violates row-level security policy for table "{table}"'},
                )
            rows.append(stored)
            return RestResponse(201, [dict(stored)])

        if method == "PATCH":
            for row in visible:
                if self._matches(table, row, params):
                    row.update(payload)
            return RestResponse(204)

        if method == "DELETE":
            doomed = [row for row in visible if self._matches(table, row, params)]
            self.tables[table] = [row for row in rows if row not in doomed]
            if table == "goals":
                # ON DELETE CASCADE
                doomed_ids = {row["id"] for row in doomed}
                self.tables["goal_steps"] = [s for s in self.tables["goal_steps"] if s["goal_id"] not in doomed_ids]
            return RestResponse(204)

        raise AssertionError(f"Unexpected method in fake backend: {method}")


@pytest.fixture
def config() -> LifePlannerConfig:
    return LifePlannerConfig(
        url="https://planner.example.test",
        anon_key="anon-key",
        email_redirect_to="https://app.example.test/",
    )


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakePlannerBackend:
    fake_backend = FakePlannerBackend()

    async def fake_request(_self: Any, method: str, path: str, **kwargs: Any) -> RestResponse:
        return await fake_backend.request(method, path, **kwargs)

    monkeypatch.setattr("lifeplanner._transport.RestTransport.request", fake_request)
    return fake_backend
