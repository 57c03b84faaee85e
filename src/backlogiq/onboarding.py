"""Organization onboarding wizard state and completion."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Final

from backlogiq.auth import AuthClient
from backlogiq.exceptions import MembershipNotFoundError, ValidationError
from backlogiq.hierarchy import (
    PositionWriter,
    default_hierarchy,
    insert_position,
    new_position,
    persist_hierarchy,
    remove_position,
    update_position,
    validate_hierarchy,
)
from backlogiq.review import format_review
from backlogiq.schemas import OrganizationData, PersistedPosition, PositionFields, PositionNode, ReviewSummary
from backlogiq.storage import ORGANIZATIONS_TABLE, StorageClient, SupabasePositionStore, TableQuery, get_membership

logger = logging.getLogger(__name__)

STEPS: Final[tuple[str, ...]] = ("welcome", "info", "hierarchy", "review")


def _require_title(title: str) -> str:
    if not title.strip():
        raise ValidationError("Position title is required")
    return title


@dataclass
class OnboardingWizard:
    """Holds the organization details and position forest being set up.

    The forest is replaced wholesale after every edit; the hierarchy
    functions never modify it in place.

    Attributes:
        organization: Details from the organization info step.
        hierarchy: Current position forest, seeded with a CEO root.
        current_step: Index into ``STEPS``.
        completed: Set once ``finish`` succeeds.
    """

    organization: OrganizationData = field(default_factory=OrganizationData)
    hierarchy: list[PositionNode] = field(default_factory=default_hierarchy)
    current_step: int = 0
    completed: bool = False

    @property
    def step(self) -> str:
        return STEPS[self.current_step]

    @property
    def progress(self) -> float:
        """Completion percentage including the current step."""
        return (self.current_step + 1) / len(STEPS) * 100

    def can_proceed(self) -> bool:
        if self.step == "info":
            return bool(self.organization.name.strip())
        if self.step == "hierarchy":
            return len(self.hierarchy) > 0
        return True

    def next(self) -> None:
        if self.current_step < len(STEPS) - 1:
            self.current_step += 1

    def back(self) -> None:
        if self.current_step > 0:
            self.current_step -= 1

    def add_position(
        self,
        title: str,
        description: str | None = None,
        parent_id: str | None = None,
    ) -> PositionNode:
        """Add a position under ``parent_id`` (or as a root) and return it."""
        node = new_position(_require_title(title), description, parent_id)
        self.hierarchy = insert_position(self.hierarchy, parent_id, node)
        return node

    def edit_position(self, node_id: str, title: str, description: str | None = None) -> None:
        fields = PositionFields(title=_require_title(title), description=description)
        self.hierarchy = update_position(self.hierarchy, node_id, fields)

    def delete_position(self, node_id: str) -> None:
        self.hierarchy = remove_position(self.hierarchy, node_id)

    def review(self) -> ReviewSummary:
        return format_review(self.organization, self.hierarchy)

    async def finish(
        self,
        auth: AuthClient,
        storage: StorageClient,
        writer: PositionWriter | None = None,
    ) -> list[PersistedPosition]:
        """Save the organization details and the whole hierarchy.

        On failure the error is logged and re-raised, and the wizard stays
        where it is so the user can retry. Positions already written by a
        failed attempt are not removed, so a retry duplicates them.

        Args:
            auth: Supplies the signed-in user.
            storage: Data API used for the membership lookup and organization update.
            writer: Position writer; defaults to one backed by ``storage``.

        Returns:
            The persisted position records in pre-order.

        Raises:
            NoSessionError: If nobody is signed in.
            MembershipNotFoundError: If the user has no organization.
            StorageError: If any write fails.
        """
        writer = writer or SupabasePositionStore(storage)
        try:
            user_id = auth.current_user_id()
            membership = await get_membership(storage, user_id)
            if membership is None:
                raise MembershipNotFoundError("No organization found")

            validate_hierarchy(self.hierarchy)

            await storage.update(
                ORGANIZATIONS_TABLE,
                {
                    "name": self.organization.name,
                    "description": self.organization.description,
                    "onboarding_completed": True,
                    "onboarding_completed_at": datetime.now(timezone.utc).isoformat(),
                },
                TableQuery().eq("id", membership.organization_id),
            )

            persisted = await persist_hierarchy(writer, membership.organization_id, self.hierarchy)
        except Exception:
            logger.exception("Failed to complete onboarding")
            raise

        self.completed = True
        logger.info(
            "Organization setup completed",
            extra={"organization_id": membership.organization_id, "positions": len(persisted)},
        )
        return persisted
