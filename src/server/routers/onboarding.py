"""Onboarding wizard endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from backlogiq.auth import AuthClient
from backlogiq.exceptions import (
    AuthError,
    BacklogIQError,
    MembershipNotFoundError,
    NoSessionError,
    ValidationError,
)
from backlogiq.hierarchy import count_positions
from backlogiq.onboarding import OnboardingWizard
from backlogiq.schemas import ReviewSummary
from backlogiq.storage import StorageClient
from backlogiq.utils.logging_config import get_logger
from server.drafts import DraftRegistry
from server.models import (
    CreatePositionRequest,
    DraftResponse,
    EditPositionRequest,
    ErrorResponse,
    FinishResponse,
    OrganizationRequest,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/onboarding")


def get_registry(request: Request) -> DraftRegistry:
    return request.app.state.drafts


def get_auth_client(request: Request) -> AuthClient:
    return request.app.state.client_factory.auth()


def get_bearer_token(authorization: Annotated[str | None, Header()] = None) -> str:
    """Extract the bearer token from the ``Authorization`` header.

    Raises
    ------
    HTTPException
        **401** - header missing or not a bearer token

    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Bearer token required")
    return token


def get_storage_client(
    request: Request,
    token: Annotated[str, Depends(get_bearer_token)],
) -> StorageClient:
    return request.app.state.client_factory.storage(token)


def _draft_or_404(registry: DraftRegistry, draft_id: str) -> OnboardingWizard:
    wizard = registry.get(draft_id)
    if wizard is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Draft {draft_id!r} not found")
    return wizard


def _draft_response(draft_id: str, wizard: OnboardingWizard) -> DraftResponse:
    return DraftResponse(
        draft_id=draft_id,
        organization=wizard.organization,
        hierarchy=wizard.hierarchy,
        total_positions=count_positions(wizard.hierarchy),
        completed=wizard.completed,
    )


RegistryDep = Annotated[DraftRegistry, Depends(get_registry)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_draft(registry: RegistryDep) -> DraftResponse:
    """Start a new onboarding draft seeded with a single CEO position."""
    draft_id, wizard = registry.create()
    logger.info("Created onboarding draft", extra={"draft_id": draft_id})
    return _draft_response(draft_id, wizard)


@router.get("/{draft_id}")
async def get_draft(draft_id: str, registry: RegistryDep) -> DraftResponse:
    return _draft_response(draft_id, _draft_or_404(registry, draft_id))


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_draft(draft_id: str, registry: RegistryDep) -> None:
    """Abandon a draft; its positions are dropped without being saved."""
    _draft_or_404(registry, draft_id)
    registry.discard(draft_id)


@router.put("/{draft_id}/organization")
async def set_organization(
    draft_id: str,
    body: OrganizationRequest,
    registry: RegistryDep,
) -> DraftResponse:
    wizard = _draft_or_404(registry, draft_id)
    wizard.organization = wizard.organization.model_copy(
        update={"name": body.name, "description": body.description}
    )
    return _draft_response(draft_id, wizard)


@router.post("/{draft_id}/positions", status_code=status.HTTP_201_CREATED)
async def add_position(
    draft_id: str,
    body: CreatePositionRequest,
    registry: RegistryDep,
) -> DraftResponse:
    """Add a position under ``parent_id``, or as a top-level position.

    An unknown ``parent_id`` leaves the hierarchy unchanged.
    """
    wizard = _draft_or_404(registry, draft_id)
    try:
        wizard.add_position(body.title, body.description, body.parent_id)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _draft_response(draft_id, wizard)


@router.patch("/{draft_id}/positions/{position_id}")
async def edit_position(
    draft_id: str,
    position_id: str,
    body: EditPositionRequest,
    registry: RegistryDep,
) -> DraftResponse:
    wizard = _draft_or_404(registry, draft_id)
    try:
        wizard.edit_position(position_id, body.title, body.description)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _draft_response(draft_id, wizard)


@router.delete("/{draft_id}/positions/{position_id}")
async def delete_position(draft_id: str, position_id: str, registry: RegistryDep) -> DraftResponse:
    """Delete a position and everything reporting to it."""
    wizard = _draft_or_404(registry, draft_id)
    wizard.delete_position(position_id)
    return _draft_response(draft_id, wizard)


@router.get("/{draft_id}/review")
async def review_draft(draft_id: str, registry: RegistryDep) -> ReviewSummary:
    return _draft_or_404(registry, draft_id).review()


@router.post(
    "/{draft_id}/finish",
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    response_model=None,
)
async def finish_draft(
    draft_id: str,
    registry: RegistryDep,
    token: Annotated[str, Depends(get_bearer_token)],
    auth: Annotated[AuthClient, Depends(get_auth_client)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> FinishResponse | JSONResponse:
    """Save the organization details and the whole hierarchy.

    **Returns**

    - **FinishResponse**: created position records, parents before children
    - **JSONResponse**: ``{"error": ...}`` with **401**, **403**, **409** or **502**

    A failed finish leaves the draft in place for a retry. Positions saved
    before the failure are kept, so a retry creates duplicates of them.

    """
    wizard = _draft_or_404(registry, draft_id)
    if not wizard.organization.name.strip():
        raise HTTPException(
            status_code=422,
            detail="Organization name is required",
        )
    if not registry.begin_finish(draft_id):
        return _error(status.HTTP_409_CONFLICT, "Setup is already being completed for this draft.")

    try:
        await auth.session_from_access_token(token)
        positions = await wizard.finish(auth, storage)
    except AuthError as exc:
        if _is_rejection(exc):
            return _error(status.HTTP_401_UNAUTHORIZED, str(exc))
        logger.warning("Auth service unavailable", extra={"draft_id": draft_id, "error": str(exc)})
        return _error(status.HTTP_502_BAD_GATEWAY, "Failed to complete setup. Please try again.")
    except MembershipNotFoundError as exc:
        return _error(status.HTTP_403_FORBIDDEN, str(exc))
    except BacklogIQError as exc:
        logger.warning("Onboarding finish failed", extra={"draft_id": draft_id, "error": str(exc)})
        return _error(status.HTTP_502_BAD_GATEWAY, "Failed to complete setup. Please try again.")
    finally:
        registry.end_finish(draft_id)

    registry.discard(draft_id)
    return FinishResponse(positions=positions)


def _is_rejection(exc: AuthError) -> bool:
    """True when the auth service refused the caller, as opposed to failing."""
    if isinstance(exc, NoSessionError):
        return True
    return exc.status_code is not None and 400 <= exc.status_code < 500


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())
