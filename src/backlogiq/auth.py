"""Client for the hosted auth service (``/auth/v1``)."""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import urlencode

import httpx

from backlogiq.exceptions import AuthError, NoSessionError
from backlogiq.http_utils import build_async_client, error_message, json_body, request_with_retries
from backlogiq.schemas import AuthUser, Session

logger = logging.getLogger(__name__)


class AuthClient:
    """Signs users in and out and holds the current session in memory.

    Args:
        base_url: Project URL of the hosted backend.
        api_key: Public API key sent as ``apikey``.
        client: Optional shared httpx.AsyncClient.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client or build_async_client()
        self._owns_client = client is None
        self._session: Session | None = None

    async def __aenter__(self) -> AuthClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def get_session(self) -> Session | None:
        """Return the current session, or None when signed out."""
        return self._session

    def set_session(self, session: Session | None) -> None:
        self._session = session

    def current_user_id(self) -> str:
        """Return the signed-in user's id.

        Raises:
            NoSessionError: If nobody is signed in.
        """
        if self._session is None:
            raise NoSessionError("No active session")
        return self._session.user.id

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Exchange email and password for a session."""
        payload = await self._post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        self._session = _session_from_payload(payload)
        logger.info("Signed in", extra={"user_id": self._session.user.id})
        return self._session

    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        redirect_to: str | None = None,
    ) -> Session | None:
        """Register a new account.

        Returns:
            The new session, or None when the service requires the user to
            confirm their email address before signing in.
        """
        params = {"redirect_to": redirect_to} if redirect_to else None
        payload = await self._post("/signup", params=params, json={"email": email, "password": password})
        if "access_token" not in payload:
            return None
        self._session = _session_from_payload(payload)
        return self._session

    async def refresh_session(self) -> Session:
        """Trade the current refresh token for a fresh session."""
        if self._session is None or not self._session.refresh_token:
            raise NoSessionError("No session to refresh")
        payload = await self._post(
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": self._session.refresh_token},
        )
        self._session = _session_from_payload(payload)
        return self._session

    async def sign_out(self) -> None:
        """Revoke the current session.

        The local session is cleared even when the remote call fails; the
        failure is still raised.
        """
        session = self._session
        self._session = None
        if session is None:
            return
        await self._post("/logout", access_token=session.access_token)

    async def get_user(self, access_token: str) -> AuthUser:
        """Resolve the user that owns ``access_token``."""
        response = await request_with_retries(
            "GET",
            f"{self.base_url}/auth/v1/user",
            client=self._client,
            headers=self._headers(access_token),
            error_cls=AuthError,
        )
        _raise_for_status(response)
        return AuthUser.model_validate(json_body(response, AuthError))

    async def session_from_access_token(self, access_token: str) -> Session:
        """Adopt a bearer token issued elsewhere as the current session."""
        user = await self.get_user(access_token)
        self._session = Session(access_token=access_token, user=user)
        return self._session

    def oauth_authorize_url(self, provider: str, redirect_to: str) -> str:
        """Return the URL that starts a third-party provider sign-in."""
        query = urlencode({"provider": provider, "redirect_to": redirect_to})
        return f"{self.base_url}/auth/v1/authorize?{query}"

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self.api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _post(
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        response = await request_with_retries(
            "POST",
            f"{self.base_url}/auth/v1{path}",
            client=self._client,
            headers=self._headers(access_token),
            params=params,
            json=json,
            max_retries=0,
            error_cls=AuthError,
        )
        _raise_for_status(response)
        if not response.content:
            return {}
        return json_body(response, AuthError)


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_error:
        raise AuthError(error_message(response), status_code=response.status_code)


def _session_from_payload(payload: dict[str, Any]) -> Session:
    data = dict(payload)
    if data.get("expires_at") is None and data.get("expires_in") is not None:
        data["expires_at"] = int(time.time()) + int(data["expires_in"])
    try:
        return Session.model_validate(data)
    except ValueError as exc:
        raise AuthError(f"Malformed session payload: {exc}") from exc
