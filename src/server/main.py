"""FastAPI application for the onboarding API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from backlogiq.auth import AuthClient
from backlogiq.config import BACKLOGIQ_SUPABASE_ANON_KEY, BACKLOGIQ_SUPABASE_URL
from backlogiq.http_utils import build_async_client
from backlogiq.storage import StorageClient
from server.drafts import DraftRegistry
from server.routers import onboarding


class ClientFactory:
    """Builds per-request backend clients over one pooled HTTP connection."""

    def __init__(self, base_url: str, api_key: str, http_client: httpx.AsyncClient | None = None) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.http_client = http_client

    def _client(self) -> httpx.AsyncClient:
        if self.http_client is None:
            self.http_client = build_async_client()
        return self.http_client

    def auth(self) -> AuthClient:
        return AuthClient(self.base_url, self.api_key, client=self._client())

    def storage(self, access_token: str) -> StorageClient:
        return StorageClient(self.base_url, self.api_key, access_token=access_token, client=self._client())

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None


def create_app(
    client_factory: ClientFactory | None = None,
    drafts: DraftRegistry | None = None,
) -> FastAPI:
    """Create the API with its own draft registry and client factory."""
    factory = client_factory or ClientFactory(BACKLOGIQ_SUPABASE_URL, BACKLOGIQ_SUPABASE_ANON_KEY)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await factory.aclose()

    app = FastAPI(title="BacklogIQ onboarding", lifespan=lifespan)
    app.state.drafts = drafts if drafts is not None else DraftRegistry()
    app.state.client_factory = factory
    app.include_router(onboarding.router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
