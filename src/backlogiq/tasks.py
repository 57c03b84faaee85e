"""Task tracker backed by the ``tasks`` table."""

from __future__ import annotations

import logging

from backlogiq.auth import AuthClient
from backlogiq.exceptions import MembershipNotFoundError
from backlogiq.schemas import Task, TaskFilters, TaskPage, TaskUpdate
from backlogiq.schemas.tasks import TaskLabel, TaskPriority, TaskStatus
from backlogiq.storage import StorageClient, TableQuery, get_membership

logger = logging.getLogger(__name__)

TASKS_TABLE = "tasks"
_SEARCH_COLUMNS = ("title", "description")


class TasksService:
    """Lists and edits tasks of the signed-in user's organization."""

    def __init__(self, auth: AuthClient, storage: StorageClient) -> None:
        self.auth = auth
        self.storage = storage

    async def _organization_id(self) -> str:
        user_id = self.auth.current_user_id()
        membership = await get_membership(self.storage, user_id)
        if membership is None:
            raise MembershipNotFoundError("No organization found for current user")
        return membership.organization_id

    async def list_tasks(
        self,
        page: int = 1,
        page_size: int = 10,
        filters: TaskFilters | None = None,
    ) -> TaskPage:
        """Return one page of tasks, newest first.

        Args:
            page: 1-based page number.
            page_size: Tasks per page.
            filters: Optional status, priority and text filters.

        Returns:
            The page of tasks and the total number of matching tasks.
        """
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be positive")

        org_id = await self._organization_id()
        filters = filters or TaskFilters()

        query = TableQuery().eq("organization_id", org_id).order("created_at", ascending=False)
        query.in_("status", filters.status)
        query.in_("priority", filters.priority)
        if filters.search:
            query.or_ilike(_SEARCH_COLUMNS, filters.search)

        start = (page - 1) * page_size
        query.range(start, start + page_size - 1)

        rows, total = await self.storage.select(TASKS_TABLE, query, count=True)
        tasks = [Task.model_validate(row) for row in rows]
        return TaskPage(tasks=tasks, total_count=total or 0, page=page, page_size=page_size)

    async def create_task(
        self,
        title: str,
        *,
        description: str | None = None,
        status: TaskStatus = "todo",
        priority: TaskPriority = "medium",
        label: TaskLabel | None = None,
        assignee_id: str | None = None,
        due_date: str | None = None,
    ) -> Task:
        """Create a task owned by the current user's organization."""
        user_id = self.auth.current_user_id()
        org_id = await self._organization_id()
        row = await self.storage.insert(
            TASKS_TABLE,
            {
                "organization_id": org_id,
                "title": title,
                "description": description,
                "status": status,
                "priority": priority,
                "label": label,
                "assignee_id": assignee_id,
                "created_by": user_id,
                "due_date": due_date,
            },
        )
        return Task.model_validate(row)

    async def update_task(self, task_id: str, changes: TaskUpdate) -> Task:
        """Apply the explicitly set fields of ``changes`` to one task."""
        values = changes.model_dump(exclude_unset=True)
        rows = await self.storage.update(TASKS_TABLE, values, TableQuery().eq("id", task_id))
        if not rows:
            raise LookupError(f"Task {task_id!r} not found")
        return Task.model_validate(rows[0])

    async def delete_task(self, task_id: str) -> None:
        await self.storage.delete(TASKS_TABLE, TableQuery().eq("id", task_id))

    async def delete_tasks(self, task_ids: list[str]) -> None:
        """Delete several tasks in one request; an empty list does nothing."""
        if not task_ids:
            return
        await self.storage.delete(TASKS_TABLE, TableQuery().in_("id", task_ids))
        logger.info("Deleted %d tasks", len(task_ids))
