"""Test setup for backlogiq."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

BASE_URL = "https://project.backend.test"
API_KEY = "anon-key"
USER_TOKEN = "user-token"


class FakeBackend:
    """In-memory stand-in for the hosted auth and REST data API.

    Served through ``httpx.MockTransport`` so the real clients run unchanged.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.users: dict[str, dict[str, Any]] = {
            USER_TOKEN: {"id": "user-1", "email": "owner@acme.test"},
        }
        self.memberships: dict[str, dict[str, Any]] = {
            "user-1": {"organization_id": "org-1", "role": "owner"},
        }
        self.organization_updates: list[dict[str, Any]] = []
        self.positions: list[dict[str, Any]] = []
        self.fail_titles: set[str] = set()
        self.auth_status: int | None = None

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def position_requests(self) -> list[dict[str, Any]]:
        return [
            json.loads(request.content)
            for request in self.requests
            if request.method == "POST" and request.url.path.endswith("/organization_positions")
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/auth/v1/user":
            if self.auth_status is not None:
                return httpx.Response(self.auth_status, json={"message": "auth service unavailable"})
            token = request.headers.get("Authorization", "").removeprefix("Bearer ")
            user = self.users.get(token)
            if user is None:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json=user)

        if path == "/rest/v1/memberships" and request.method == "GET":
            user_filter = request.url.params.get("user_id", "")
            membership = self.memberships.get(user_filter.removeprefix("eq."))
            return httpx.Response(200, json=[membership] if membership else [])

        if path == "/rest/v1/organizations" and request.method == "PATCH":
            values = json.loads(request.content)
            self.organization_updates.append(values)
            org_id = request.url.params.get("id", "").removeprefix("eq.")
            return httpx.Response(200, json=[{"id": org_id, **values}])

        if path == "/rest/v1/organization_positions" and request.method == "POST":
            record = json.loads(request.content)
            if record["title"] in self.fail_titles:
                return httpx.Response(400, json={"message": f"cannot insert {record['title']}"})
            row = {"id": f"pos-{len(self.positions) + 1}", **record}
            self.positions.append(row)
            return httpx.Response(201, json=[row])

        return httpx.Response(404, json={"message": f"no route for {request.method} {path}"})


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()
