"""Experience routes: browse, share, rank, like and save."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interview_board.api.dependencies import CurrentSessionUser, DbSession, OptionalSessionUser
from interview_board.api.schemas.experiences import (
    ExperienceCreateRequest,
    ExperienceResponse,
    LikeToggleResponse,
    PaginatedExperiencesResponse,
    SaveToggleResponse,
)
from interview_board.services.exceptions import (
    ExperienceNotFoundError,
    IdentityReconciliationError,
    ReactionConflictError,
)
from interview_board.services.experiences import (
    DEFAULT_LIMIT,
    create_experience,
    empty_page,
    find_missing_fields,
    get_experience,
    get_weekly_ranking,
    list_experiences,
)
from interview_board.services.identity import ensure_user_exists
from interview_board.services.reactions import toggle_like, toggle_save
from interview_board.services.sessions import SessionUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/experiences", tags=["experiences"])

ExperienceId = Annotated[str, Path(description="Experience ID")]


def _require_user_id(db: Session, principal: SessionUser) -> str:
    """Reconcile the caller's identity, failing with 500 if that is impossible."""
    user_id = ensure_user_exists(db, principal)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user",
        )
    return user_id


def _viewer_id(db: Session, principal: SessionUser | None) -> str | None:
    """Return the reconciled viewer id, or None for callers without a session."""
    if principal is None:
        return None
    user_id = ensure_user_exists(db, principal)
    if not user_id:
        raise IdentityReconciliationError(principal.id)
    return user_id


def _degraded_page(error: str, exc: Exception) -> JSONResponse:
    body = PaginatedExperiencesResponse(**empty_page()).model_dump(mode="json", by_alias=True)
    body["error"] = error
    body["details"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


@router.get("", response_model=PaginatedExperiencesResponse)
def list_experiences_endpoint(
    db: DbSession,
    principal: OptionalSessionUser,
    page: Annotated[int, Query(description="1-based page number")] = 1,
    limit: Annotated[int, Query(description="Page size, clamped to 1..50")] = DEFAULT_LIMIT,
    sort_by: Annotated[str, Query(alias="sortBy", description="recent or popular")] = "recent",
):
    """List experiences newest-first or most-liked-first, one page at a time."""
    try:
        viewer_id = _viewer_id(db, principal)
        result = list_experiences(db, page=page, limit=limit, sort_by=sort_by, viewer_id=viewer_id)
    except (SQLAlchemyError, IdentityReconciliationError) as exc:
        db.rollback()
        logger.exception("Failed to fetch experiences")
        return _degraded_page("Failed to fetch experiences", exc)

    return PaginatedExperiencesResponse(**result)


@router.post("", response_model=ExperienceResponse, status_code=status.HTTP_201_CREATED)
def create_experience_endpoint(
    data: ExperienceCreateRequest,
    db: DbSession,
    principal: CurrentSessionUser,
) -> ExperienceResponse:
    """Share a new interview experience."""
    experience_data = data.model_dump()
    missing = find_missing_fields(experience_data)
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required fields: {', '.join(missing)}",
        )

    user_id = _require_user_id(db, principal)
    try:
        result = create_experience(
            db, user_id, experience_data, session_is_anonymous=principal.is_anonymous
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create experience for %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create experience",
        ) from exc

    return ExperienceResponse(**result)


@router.get("/weekly-ranking", response_model=list[ExperienceResponse])
def weekly_ranking_endpoint(db: DbSession, principal: OptionalSessionUser):
    """Top ten most liked experiences shared in the last seven days."""
    try:
        viewer_id = _viewer_id(db, principal)
        results = get_weekly_ranking(db, viewer_id=viewer_id)
    except (SQLAlchemyError, IdentityReconciliationError):
        db.rollback()
        logger.exception("Failed to fetch weekly ranking")
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=[])

    return [ExperienceResponse(**r) for r in results]


@router.get("/{experience_id}", response_model=ExperienceResponse)
def get_experience_endpoint(
    experience_id: ExperienceId,
    db: DbSession,
    principal: OptionalSessionUser,
) -> ExperienceResponse:
    """Get a single experience annotated with the viewer's like/save state."""
    try:
        viewer_id = _viewer_id(db, principal)
        result = get_experience(db, experience_id, viewer_id=viewer_id)
    except (SQLAlchemyError, IdentityReconciliationError) as exc:
        db.rollback()
        logger.exception("Failed to fetch experience %s", experience_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch experience",
        ) from exc

    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Experience not found")

    return ExperienceResponse(**result)


@router.post("/{experience_id}/like", response_model=LikeToggleResponse)
def toggle_like_endpoint(
    experience_id: ExperienceId,
    db: DbSession,
    principal: CurrentSessionUser,
) -> LikeToggleResponse:
    """Like the experience, or remove the caller's like if present."""
    user_id = _require_user_id(db, principal)
    try:
        liked = toggle_like(db, user_id, experience_id)
    except ExperienceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Experience not found"
        ) from exc
    except ReactionConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Concurrent update, please retry"
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to toggle like on %s for %s", experience_id, user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to toggle like"
        ) from exc

    return LikeToggleResponse(liked=liked)


@router.post("/{experience_id}/save", response_model=SaveToggleResponse)
def toggle_save_endpoint(
    experience_id: ExperienceId,
    db: DbSession,
    principal: CurrentSessionUser,
) -> SaveToggleResponse:
    """Save the experience to the caller's collection, or remove it if present.

    Anonymous sessions cannot keep a saved collection.
    """
    if principal.is_anonymous:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Anonymous users cannot save experiences",
        )

    user_id = _require_user_id(db, principal)
    try:
        saved = toggle_save(db, user_id, experience_id)
    except ExperienceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Experience not found"
        ) from exc
    except ReactionConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Concurrent update, please retry"
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to toggle save on %s for %s", experience_id, user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to toggle save"
        ) from exc

    return SaveToggleResponse(saved=saved)
