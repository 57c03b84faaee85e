"""backlogiq: organization onboarding, hierarchy editing and task tracking."""

from backlogiq.exceptions import (
    AuthError,
    BacklogIQError,
    BackendError,
    HierarchyError,
    MembershipNotFoundError,
    NoSessionError,
    StorageError,
    ValidationError,
)
from backlogiq.hierarchy import (
    count_positions,
    default_hierarchy,
    find_position,
    insert_position,
    iter_positions,
    new_position,
    persist_hierarchy,
    remove_position,
    update_position,
    validate_hierarchy,
)
from backlogiq.onboarding import OnboardingWizard
from backlogiq.schemas import PersistedPosition, PositionFields, PositionNode

__all__ = [
    "AuthError",
    "BacklogIQError",
    "BackendError",
    "HierarchyError",
    "MembershipNotFoundError",
    "NoSessionError",
    "OnboardingWizard",
    "PersistedPosition",
    "PositionFields",
    "PositionNode",
    "StorageError",
    "ValidationError",
    "count_positions",
    "default_hierarchy",
    "find_position",
    "insert_position",
    "iter_positions",
    "new_position",
    "persist_hierarchy",
    "remove_position",
    "update_position",
    "validate_hierarchy",
]
