"""HTTP utilities for calling the hosted backend with retry logic and connection pooling."""

from __future__ import annotations

import asyncio
from typing import Any, Final

import httpx

from backlogiq.config import (
    BACKLOGIQ_HTTP_BACKOFF_S,
    BACKLOGIQ_HTTP_MAX_RETRIES,
    BACKLOGIQ_HTTP_TIMEOUT_S,
    BACKLOGIQ_USER_AGENT,
)
from backlogiq.exceptions import BacklogIQError

RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

_MAX_REDIRECTS: Final[int] = 5


def build_async_client(*, base_url: str = "", headers: dict[str, str] | None = None) -> httpx.AsyncClient:
    """Create an AsyncClient with the project-wide timeout and user agent.

    Args:
        base_url: Optional base URL prepended to relative request paths.
        headers: Extra default headers merged over the user agent.

    Returns:
        A configured httpx.AsyncClient. The caller owns and must close it.
    """
    default_headers = {"User-Agent": BACKLOGIQ_USER_AGENT}
    default_headers.update(headers or {})
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(BACKLOGIQ_HTTP_TIMEOUT_S),
        headers=default_headers,
        follow_redirects=True,
        max_redirects=_MAX_REDIRECTS,
    )


async def request_with_retries(
    method: str,
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    headers: dict[str, str] | None = None,
    params: Any = None,
    json: Any = None,
    max_retries: int | None = None,
    error_cls: type[BacklogIQError] = BacklogIQError,
) -> httpx.Response:
    """Send a request, retrying transient failures.

    Only transport errors and the statuses in ``RETRY_STATUS_CODES`` are
    retried. Any other response, including 4xx errors, is returned to the
    caller, which owns the mapping from status to domain error.

    Args:
        method: HTTP method, e.g. "GET" or "POST".
        url: Absolute URL, or a path relative to the client's base URL.
        client: Optional httpx.AsyncClient for connection pooling. If not
            provided, a new client is created for this request.
        headers: Per-request headers.
        params: Query parameters (mapping or list of pairs).
        json: JSON-serializable request body.
        max_retries: Retry budget. Defaults to BACKLOGIQ_HTTP_MAX_RETRIES; pass
            0 for non-idempotent writes.
        error_cls: Exception raised once retries are exhausted.

    Returns:
        The first non-retryable httpx.Response.

    Raises:
        error_cls: If every attempt failed with a transport error or a
            retryable status.
    """
    retries = BACKLOGIQ_HTTP_MAX_RETRIES if max_retries is None else max_retries
    last_exc: Exception | None = None

    async def do_request(http_client: httpx.AsyncClient) -> httpx.Response:
        nonlocal last_exc

        for attempt in range(retries + 1):
            try:
                response = await http_client.request(
                    method, url, headers=headers, params=params, json=json
                )
                if response.status_code not in RETRY_STATUS_CODES:
                    return response
                last_exc = error_cls(f"HTTP {response.status_code} from {method} {url}")
            except httpx.RequestError as exc:
                last_exc = exc

            if attempt < retries:
                backoff = BACKLOGIQ_HTTP_BACKOFF_S * (2**attempt)
                await asyncio.sleep(backoff)

        raise error_cls(f"Failed to {method} {url}: {last_exc}")

    if client is not None:
        return await do_request(client)

    async with build_async_client() as new_client:
        return await do_request(new_client)


def error_message(response: httpx.Response) -> str:
    """Extract a human-readable error message from an error response body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return f"HTTP {response.status_code}"


def json_body(response: httpx.Response, error_cls: type[BacklogIQError] = BacklogIQError) -> Any:
    """Decode a successful response body, raising ``error_cls`` when it is not JSON."""
    try:
        return response.json()
    except ValueError as exc:
        raise error_cls(f"Invalid JSON in HTTP {response.status_code} response: {exc}") from exc
