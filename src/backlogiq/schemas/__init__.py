"""Shared schemas for backlogiq."""

from backlogiq.schemas.organization import Membership, OrganizationData
from backlogiq.schemas.positions import PersistedPosition, PositionFields, PositionNode
from backlogiq.schemas.review import ReviewSummary
from backlogiq.schemas.session import AuthUser, Session
from backlogiq.schemas.tasks import Task, TaskFilters, TaskPage, TaskUpdate

__all__ = [
    "AuthUser",
    "Membership",
    "OrganizationData",
    "PersistedPosition",
    "PositionFields",
    "PositionNode",
    "ReviewSummary",
    "Session",
    "Task",
    "TaskFilters",
    "TaskPage",
    "TaskUpdate",
]
