"""Tests for the task tracker service."""

from __future__ import annotations

import json

import httpx
import pytest

from backlogiq.auth import AuthClient
from backlogiq.exceptions import MembershipNotFoundError, NoSessionError
from backlogiq.schemas import AuthUser, Session, TaskFilters, TaskUpdate
from backlogiq.storage import StorageClient
from backlogiq.tasks import TasksService
from conftest import API_KEY, BASE_URL, USER_TOKEN, FakeBackend

TASK_ROW = {
    "id": "t1",
    "organization_id": "org-1",
    "title": "Fix login",
    "description": None,
    "status": "todo",
    "priority": "high",
    "label": "bug",
    "assignee_id": None,
    "created_by": "user-1",
    "due_date": None,
    "created_at": "2026-10-01T00:00:00+00:00",
    "updated_at": "2026-10-01T00:00:00+00:00",
}


class TaskTable:
    """Routes ``/rest/v1/tasks`` and delegates everything else to the fake backend."""

    def __init__(self, fake_backend: FakeBackend, total: int = 1) -> None:
        self.fake_backend = fake_backend
        self.total = total
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path != "/rest/v1/tasks":
            return self.fake_backend.handler(request)
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=[TASK_ROW], headers={"Content-Range": f"0-0/{self.total}"})
        if request.method == "POST":
            return httpx.Response(201, json=[{**TASK_ROW, **json.loads(request.content), "id": "t2"}])
        if request.method == "PATCH":
            if request.url.params.get("id") == "eq.missing":
                return httpx.Response(200, json=[])
            return httpx.Response(200, json=[{**TASK_ROW, **json.loads(request.content)}])
        return httpx.Response(204)


def _service(table: TaskTable, user_id: str | None = "user-1") -> TasksService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(table.handler))
    auth = AuthClient(BASE_URL, API_KEY, client=client)
    if user_id is not None:
        auth.set_session(Session(access_token=USER_TOKEN, user=AuthUser(id=user_id)))
    storage = StorageClient(BASE_URL, API_KEY, access_token=USER_TOKEN, client=client)
    return TasksService(auth, storage)


class TestListTasks:
    """Tests for list_tasks."""

    @pytest.mark.asyncio
    async def test_builds_filtered_page_query(self, fake_backend: FakeBackend) -> None:
        table = TaskTable(fake_backend, total=23)
        filters = TaskFilters(status=["todo", "in progress"], priority=["high"], search="login")

        page = await _service(table).list_tasks(page=3, page_size=10, filters=filters)

        assert page.total_count == 23
        assert page.page == 3
        assert page.tasks[0].title == "Fix login"
        params = table.requests[0].url.params
        assert params.get("organization_id") == "eq.org-1"
        assert params.get("order") == "created_at.desc"
        assert params.get("status") == 'in.(todo,"in progress")'
        assert params.get("priority") == "in.(high)"
        assert params.get("or") == "(title.ilike.*login*,description.ilike.*login*)"
        assert params.get("offset") == "20"
        assert params.get("limit") == "10"
        assert table.requests[0].headers["Prefer"] == "count=exact"

    @pytest.mark.asyncio
    async def test_no_filters(self, fake_backend: FakeBackend) -> None:
        table = TaskTable(fake_backend)
        await _service(table).list_tasks()

        params = table.requests[0].url.params
        assert "status" not in params
        assert "or" not in params
        assert params.get("offset") == "0"

    @pytest.mark.asyncio
    async def test_requires_membership(self, fake_backend: FakeBackend) -> None:
        with pytest.raises(MembershipNotFoundError):
            await _service(TaskTable(fake_backend), user_id="stranger").list_tasks()

    @pytest.mark.asyncio
    async def test_requires_session(self, fake_backend: FakeBackend) -> None:
        with pytest.raises(NoSessionError):
            await _service(TaskTable(fake_backend), user_id=None).list_tasks()

    @pytest.mark.asyncio
    async def test_rejects_bad_page(self, fake_backend: FakeBackend) -> None:
        with pytest.raises(ValueError, match="positive"):
            await _service(TaskTable(fake_backend)).list_tasks(page=0)


class TestWriteTasks:
    """Tests for create, update and delete."""

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self, fake_backend: FakeBackend) -> None:
        table = TaskTable(fake_backend)
        task = await _service(table).create_task("Write docs", label="documentation")

        body = json.loads(table.requests[0].content)
        assert body["organization_id"] == "org-1"
        assert body["created_by"] == "user-1"
        assert body["status"] == "todo"
        assert body["priority"] == "medium"
        assert task.id == "t2"
        assert task.label == "documentation"

    @pytest.mark.asyncio
    async def test_update_sends_only_set_fields(self, fake_backend: FakeBackend) -> None:
        table = TaskTable(fake_backend)
        task = await _service(table).update_task("t1", TaskUpdate(status="done"))

        assert json.loads(table.requests[0].content) == {"status": "done"}
        assert table.requests[0].url.params.get("id") == "eq.t1"
        assert task.status == "done"

    @pytest.mark.asyncio
    async def test_update_missing_task(self, fake_backend: FakeBackend) -> None:
        with pytest.raises(LookupError, match="missing"):
            await _service(TaskTable(fake_backend)).update_task("missing", TaskUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_delete_many(self, fake_backend: FakeBackend) -> None:
        table = TaskTable(fake_backend)
        service = _service(table)

        await service.delete_tasks([])
        assert table.requests == []

        await service.delete_tasks(["t1", "t2"])
        await service.delete_task("t3")
        assert [r.url.params.get("id") for r in table.requests] == ["in.(t1,t2)", "eq.t3"]
