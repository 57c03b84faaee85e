"""Position tree models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PositionNode(BaseModel):
    """A role in the organization's reporting structure.

    Transient nodes carry a client-generated ``tmp-`` id until persisted;
    ``parent_id`` always names the node that owns this one in the forest.
    """

    id: str
    title: str
    description: str | None = None
    parent_id: str | None = None
    children: list["PositionNode"] = Field(default_factory=list)


class PositionFields(BaseModel):
    """Partial field set merged into a position by an edit."""

    title: str | None = None
    description: str | None = None


class PersistedPosition(BaseModel):
    """A position row as returned by storage after creation."""

    id: str
    organization_id: str
    title: str
    description: str | None = None
    parent_position_id: str | None = None
    created_at: str | None = None
