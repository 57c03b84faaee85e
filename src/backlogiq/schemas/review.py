"""Review step output model."""

from __future__ import annotations

from pydantic import BaseModel


class ReviewSummary(BaseModel):
    """Rendered onboarding review."""

    summary: str
    hierarchy_tree: str
    total_positions: int
