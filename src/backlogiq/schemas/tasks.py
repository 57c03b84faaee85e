"""Task tracker models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TaskStatus = Literal["todo", "in progress", "done", "canceled", "backlog"]
TaskPriority = Literal["low", "medium", "high", "critical"]
TaskLabel = Literal["bug", "feature", "documentation"]


class Task(BaseModel):
    """A task row scoped to one organization."""

    model_config = ConfigDict(extra="ignore")

    id: str
    organization_id: str | None = None
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    label: TaskLabel | None = None
    assignee_id: str | None = None
    created_by: str | None = None
    due_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class TaskFilters(BaseModel):
    """Filters for listing tasks.

    Attributes:
        status: Keep tasks whose status is one of these.
        priority: Keep tasks whose priority is one of these.
        search: Case-insensitive substring matched against title or description.
    """

    status: list[TaskStatus] = Field(default_factory=list)
    priority: list[TaskPriority] = Field(default_factory=list)
    search: str | None = None


class TaskUpdate(BaseModel):
    """Editable task fields; unset fields are left unchanged."""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    label: TaskLabel | None = None
    assignee_id: str | None = None
    due_date: str | None = None


class TaskPage(BaseModel):
    """One page of tasks plus the total matching count."""

    tasks: list[Task]
    total_count: int
    page: int
    page_size: int
