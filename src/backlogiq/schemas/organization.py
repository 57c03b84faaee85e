"""Organization and membership models."""

from __future__ import annotations

from pydantic import BaseModel


class OrganizationData(BaseModel):
    """Details collected by the organization info step."""

    name: str = ""
    description: str | None = None


class Membership(BaseModel):
    """Link between a user and the organization they belong to."""

    organization_id: str
    role: str | None = None
