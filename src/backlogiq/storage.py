"""Client for the hosted REST data API (PostgREST conventions)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

import httpx

from backlogiq.exceptions import StorageError
from backlogiq.http_utils import build_async_client, error_message, json_body, request_with_retries
from backlogiq.schemas import Membership, PersistedPosition

logger = logging.getLogger(__name__)

POSITIONS_TABLE = "organization_positions"
MEMBERSHIPS_TABLE = "memberships"
ORGANIZATIONS_TABLE = "organizations"

_RESERVED_CHARS = frozenset(',()":. ')


def _quote(value: Any) -> str:
    text = str(value)
    if any(char in _RESERVED_CHARS for char in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


@dataclass
class TableQuery:
    """Filters, ordering and pagination for one table request.

    Methods return ``self`` so calls can be chained::

        TableQuery().eq("organization_id", org_id).order("created_at", ascending=False)
    """

    columns: str = "*"
    filters: list[tuple[str, str]] = field(default_factory=list)
    ordering: list[str] = field(default_factory=list)
    offset: int | None = None
    limit: int | None = None

    def eq(self, column: str, value: Any) -> TableQuery:
        """Keep rows where ``column`` equals ``value``."""
        self.filters.append((column, f"eq.{value}"))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> TableQuery:
        """Keep rows where ``column`` is one of ``values``. Empty sets are ignored."""
        items = [_quote(value) for value in values]
        if items:
            self.filters.append((column, f"in.({','.join(items)})"))
        return self

    def ilike(self, column: str, text: str) -> TableQuery:
        """Keep rows where ``column`` contains ``text``, case-insensitively."""
        self.filters.append((column, f"ilike.*{text}*"))
        return self

    def or_ilike(self, columns: Iterable[str], text: str) -> TableQuery:
        """Keep rows where any of ``columns`` contains ``text``, case-insensitively."""
        pattern = _quote(f"*{text}*")
        clauses = [f"{column}.ilike.{pattern}" for column in columns]
        if clauses:
            self.filters.append(("or", f"({','.join(clauses)})"))
        return self

    def order(self, column: str, *, ascending: bool = True) -> TableQuery:
        """Sort by ``column``; repeated calls add tie-breakers."""
        self.ordering.append(f"{column}.{'asc' if ascending else 'desc'}")
        return self

    def range(self, start: int, end: int) -> TableQuery:
        """Restrict to rows ``start`` through ``end`` inclusive (0-based)."""
        if start < 0 or end < start:
            raise ValueError(f"Invalid range {start}-{end}")
        self.offset = start
        self.limit = end - start + 1
        return self

    def to_params(self, *, include_select: bool = True) -> list[tuple[str, str]]:
        """Render the query as URL parameters."""
        params: list[tuple[str, str]] = []
        if include_select:
            params.append(("select", self.columns))
        params.extend(self.filters)
        if self.ordering:
            params.append(("order", ",".join(self.ordering)))
        if self.offset is not None:
            params.append(("offset", str(self.offset)))
        if self.limit is not None:
            params.append(("limit", str(self.limit)))
        return params


def parse_content_range(header: str | None) -> int | None:
    """Return the total row count from a ``Content-Range`` header such as ``0-9/42``."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1].strip()
    return int(total) if total.isdigit() else None


class StorageClient:
    """Async client for ``/rest/v1`` table endpoints.

    Args:
        base_url: Project URL of the hosted backend.
        api_key: Public API key sent as ``apikey``.
        access_token: Signed-in user's token. Without one, requests run with
            the API key's anonymous role and row-level security applies.
        client: Optional shared httpx.AsyncClient. When omitted the storage
            client creates and owns one.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self._client = client or build_async_client()
        self._owns_client = client is None

    async def __aenter__(self) -> StorageClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, prefer: list[str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        if prefer:
            headers["Prefer"] = ",".join(prefer)
        return headers

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    async def _send(
        self,
        method: str,
        table: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        prefer: list[str] | None = None,
        max_retries: int | None = None,
    ) -> httpx.Response:
        response = await request_with_retries(
            method,
            self._url(table),
            client=self._client,
            headers=self._headers(prefer),
            params=params,
            json=json,
            max_retries=max_retries,
            error_cls=StorageError,
        )
        if response.is_error:
            message = error_message(response)
            logger.warning(
                "Storage request failed",
                extra={"method": method, "table": table, "status": response.status_code},
            )
            raise StorageError(
                f"{method} {table} failed: {message}", status_code=response.status_code
            )
        return response

    async def select(
        self,
        table: str,
        query: TableQuery | None = None,
        *,
        count: bool = False,
    ) -> tuple[list[dict[str, Any]], int | None]:
        """Fetch matching rows, plus the exact total when ``count`` is set."""
        query = query or TableQuery()
        response = await self._send(
            "GET",
            table,
            params=query.to_params(),
            prefer=["count=exact"] if count else None,
        )
        total = parse_content_range(response.headers.get("Content-Range")) if count else None
        return json_body(response, StorageError), total

    async def select_one(self, table: str, query: TableQuery) -> dict[str, Any] | None:
        """Fetch the first matching row, or None. ``query`` is left unchanged."""
        first = replace(
            query,
            filters=list(query.filters),
            ordering=list(query.ordering),
            offset=None,
            limit=1,
        )
        rows, _ = await self.select(table, first)
        return rows[0] if rows else None

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Create one row and return it as stored.

        Inserts are sent once, without retries.
        """
        response = await self._send(
            "POST",
            table,
            params=[("select", "*")],
            json=record,
            prefer=["return=representation"],
            max_retries=0,
        )
        rows = json_body(response, StorageError)
        if isinstance(rows, list):
            if not rows:
                raise StorageError(f"POST {table} returned no rows", status_code=response.status_code)
            return rows[0]
        return rows

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        query: TableQuery,
    ) -> list[dict[str, Any]]:
        """Apply ``values`` to every row matching ``query`` and return the rows."""
        if not query.filters:
            raise ValueError(f"Refusing to update {table} without filters")
        response = await self._send(
            "PATCH",
            table,
            params=query.to_params(include_select=False) + [("select", "*")],
            json=values,
            prefer=["return=representation"],
        )
        return json_body(response, StorageError)

    async def delete(self, table: str, query: TableQuery) -> None:
        """Delete every row matching ``query``."""
        if not query.filters:
            raise ValueError(f"Refusing to delete from {table} without filters")
        await self._send("DELETE", table, params=query.to_params(include_select=False))


class SupabasePositionStore:
    """Creates position records in ``organization_positions``."""

    def __init__(self, storage: StorageClient) -> None:
        self.storage = storage

    async def create_position(
        self,
        *,
        organization_id: str,
        title: str,
        description: str | None,
        parent_position_id: str | None,
    ) -> PersistedPosition:
        row = await self.storage.insert(
            POSITIONS_TABLE,
            {
                "organization_id": organization_id,
                "title": title,
                "description": description,
                "parent_position_id": parent_position_id,
            },
        )
        return PersistedPosition.model_validate(row)


async def get_membership(storage: StorageClient, user_id: str) -> Membership | None:
    """Look up the organization membership for ``user_id``."""
    row = await storage.select_one(
        MEMBERSHIPS_TABLE,
        TableQuery(columns="organization_id,role").eq("user_id", user_id),
    )
    return Membership.model_validate(row) if row else None
