"""Custom exceptions for backlogiq."""

from __future__ import annotations


class BacklogIQError(Exception):
    """Base exception for backlogiq operations."""


class HierarchyError(BacklogIQError):
    """Position forest violates a structural invariant."""


class ValidationError(BacklogIQError):
    """User-supplied field rejected before reaching the model."""


class StorageError(BacklogIQError):
    """Error returned by the structured storage API."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(BacklogIQError):
    """Error during authentication or session handling.

    ``status_code`` is set when the auth service answered with an error
    response, and left as None when the service could not be reached.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoSessionError(AuthError):
    """No signed-in session is available."""


class MembershipNotFoundError(BacklogIQError):
    """Current user does not belong to any organization."""


class BackendError(BacklogIQError):
    """Error calling the companion HTTP backend."""
