"""Pydantic models for the onboarding API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from backlogiq.schemas import OrganizationData, PersistedPosition, PositionNode


class OrganizationRequest(BaseModel):
    """Request model for ``PUT /api/onboarding/{draft_id}/organization``.

    Attributes
    ----------
    name : str
        Organization display name.
    description : str | None
        Optional free-text description.

    """

    name: str = Field(..., description="Organization name")
    description: str | None = Field(default=None, description="Organization description")


class CreatePositionRequest(BaseModel):
    """Request model for adding a position.

    Attributes
    ----------
    title : str
        Position title; blank titles are rejected.
    description : str | None
        Optional role description.
    parent_id : str | None
        Id of the position this one reports to; omit for a top-level position.

    """

    title: str = Field(..., description="Position title")
    description: str | None = Field(default=None, description="Role description")
    parent_id: str | None = Field(default=None, description="Parent position id")


class EditPositionRequest(BaseModel):
    """Request model for editing a position's title and description."""

    title: str = Field(..., description="Position title")
    description: str | None = Field(default=None, description="Role description")


class DraftResponse(BaseModel):
    """State of one onboarding draft.

    Attributes
    ----------
    draft_id : str
        Identifier of the draft.
    organization : OrganizationData
        Organization details entered so far.
    hierarchy : list[PositionNode]
        Current position forest.
    total_positions : int
        Number of positions in the forest.
    completed : bool
        Whether the draft has been saved.

    """

    draft_id: str
    organization: OrganizationData
    hierarchy: list[PositionNode]
    total_positions: int
    completed: bool


class FinishResponse(BaseModel):
    """Positions created by a successful finish."""

    positions: list[PersistedPosition]


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error message")
