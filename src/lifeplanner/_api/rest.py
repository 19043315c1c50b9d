"""Table service endpoints: ``/rest/v1/<table>``.

Every function takes the column filters already in operator syntax
(see :func:`lifeplanner._api._common.eq`). Row-level security on the
server limits every statement to the caller's rows; callers still pass
explicit owner filters.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from lifeplanner._api._common import build_headers, raise_for_rest_response
from lifeplanner._transport import Transport
from lifeplanner.config import LifePlannerConfig
from lifeplanner.exceptions import LifePlannerApiError


def table_endpoint(table: str) -> str:
    return f"/rest/v1/{table}"


async def select_rows(
    config: LifePlannerConfig,
    transport: Transport,
    access_token: str,
    table: str,
    *,
    filters: Mapping[str, str] | None = None,
    columns: str = "*",
) -> list[dict[str, Any]]:
    """Return every row of *table* matching *filters*."""
    endpoint = table_endpoint(table)
    response = await transport.request(
        "GET",
        endpoint,
        params={"select": columns, **(filters or {})},
        headers=build_headers(config, access_token),
    )
    raise_for_rest_response(endpoint, response)
    rows = response.data if isinstance(response.data, list) else []
    return [row for row in rows if isinstance(row, dict)]


async def _write_returning_row(
    config: LifePlannerConfig,
    transport: Transport,
    access_token: str,
    table: str,
    row: Mapping[str, Any],
    prefer: str,
) -> dict[str, Any]:
    endpoint = table_endpoint(table)
    response = await transport.request(
        "POST",
        endpoint,
        params={"select": "*"},
        payload=dict(row),
        headers=build_headers(config, access_token, prefer=prefer),
    )
    raise_for_rest_response(endpoint, response)
    rows = response.data if isinstance(response.data, list) else [response.data]
    if not rows or not isinstance(rows[0], dict):
        raise LifePlannerApiError(
            f"{endpoint} returned no row",
            code="empty_response",
            endpoint=endpoint,
            status_code=response.status,
        )
    return rows[0]


async def insert_row(
    config: LifePlannerConfig,
    transport: Transport,
    access_token: str,
    table: str,
    row: Mapping[str, Any],
) -> dict[str, Any]:
    """Insert one row and return it as stored (server-assigned id, timestamps)."""
    return await _write_returning_row(config, transport, access_token, table, row, "return=representation")


async def upsert_row(
    config: LifePlannerConfig,
    transport: Transport,
    access_token: str,
    table: str,
    row: Mapping[str, Any],
) -> dict[str, Any]:
    """Insert one row, or merge into the existing row with the same primary key."""
    return await _write_returning_row(
        config,
        transport,
        access_token,
        table,
        row,
        "resolution=merge-duplicates,return=representation",
    )


async def update_rows(
    config: LifePlannerConfig,
    transport: Transport,
    access_token: str,
    table: str,
    changes: Mapping[str, Any],
    *,
    filters: Mapping[str, str],
) -> None:
    """Apply *changes* to every row matching *filters*."""
    endpoint = table_endpoint(table)
    if not filters:
        raise ValueError("update_rows requires at least one filter")
    response = await transport.request(
        "PATCH",
        endpoint,
        params=dict(filters),
        payload=dict(changes),
        headers=build_headers(config, access_token, prefer="return=minimal"),
    )
    raise_for_rest_response(endpoint, response)


async def delete_rows(
    config: LifePlannerConfig,
    transport: Transport,
    access_token: str,
    table: str,
    *,
    filters: Mapping[str, str],
) -> None:
    """Delete every row matching *filters*."""
    endpoint = table_endpoint(table)
    if not filters:
        raise ValueError("delete_rows requires at least one filter")
    response = await transport.request(
        "DELETE",
        endpoint,
        params=dict(filters),
        headers=build_headers(config, access_token, prefer="return=minimal"),
    )
    raise_for_rest_response(endpoint, response)
