"""Client for the optional companion HTTP backend."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from backlogiq.auth import AuthClient
from backlogiq.exceptions import BacklogIQError, BackendError, NoSessionError
from backlogiq.http_utils import build_async_client, json_body, request_with_retries
from backlogiq.storage import StorageClient, get_membership

logger = logging.getLogger(__name__)

_PLACEHOLDER_HOST = "example.com"


class BackendClient:
    """Bearer-authenticated JSON calls to the companion backend.

    The backend is optional. When ``base_url`` is empty or still points at the
    placeholder host, ``sync_user`` becomes a no-op.
    """

    def __init__(
        self,
        base_url: str,
        auth: AuthClient,
        storage: StorageClient,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.storage = storage
        self._client = client or build_async_client()
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url) and _PLACEHOLDER_HOST not in self.base_url

    async def sync_user(self) -> dict[str, Any] | None:
        """Register the signed-in user with the backend.

        Never raises: a missing configuration, session or membership, as well as
        any failed call, is logged and returns None.
        """
        if not self.is_configured:
            logger.info("Backend sync skipped: API base URL not configured")
            return None

        session = self.auth.get_session()
        if session is None:
            logger.warning("No session available for user sync")
            return None

        try:
            membership = await get_membership(self.storage, session.user.id)
            if membership is None:
                logger.warning("No organization membership found for user")
                return None

            data = await self._request(
                "POST",
                "/api/users",
                json={
                    "userId": session.user.id,
                    "email": session.user.email,
                    "orgId": membership.organization_id,
                    "role": membership.role,
                },
            )
        except BacklogIQError as exc:
            logger.warning("Failed to sync user to backend (non-fatal): %s", exc)
            return None

        logger.info("User synced to backend", extra={"user_id": session.user.id})
        return data

    async def send_event(self, event_type: str, data: dict[str, Any]) -> dict[str, Any]:
        """Post an event to the backend ingest endpoint."""
        return await self._request(
            "POST",
            "/api/ingest",
            json={
                "type": event_type,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "source": "backend",
                "data": data,
            },
        )

    async def get_user(self, user_id: str) -> dict[str, Any]:
        """Fetch a user record; ``"me"`` resolves to the caller."""
        return await self._request("GET", f"/api/users/{user_id}")

    async def _request(self, method: str, path: str, *, json: Any = None) -> dict[str, Any]:
        session = self.auth.get_session()
        if session is None:
            raise NoSessionError("No active session")

        response = await request_with_retries(
            method,
            f"{self.base_url}{path}",
            client=self._client,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {session.access_token}",
            },
            json=json,
            max_retries=0 if method == "POST" else None,
            error_cls=BackendError,
        )
        if response.is_error:
            raise BackendError(f"{method} {path} failed: {response.status_code}")
        return json_body(response, BackendError)
