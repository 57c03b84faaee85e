"""Auth session models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """Signed-in user as reported by the auth service."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None


class Session(BaseModel):
    """Active auth session.

    Attributes:
        access_token: Bearer token sent to the data API and backend.
        refresh_token: Token exchanged for a fresh session.
        expires_at: Unix timestamp when the access token expires, if known.
        token_type: Normally "bearer".
        user: The signed-in user.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    token_type: str = "bearer"
    user: AuthUser
