"""Saved-collection routes."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from interview_board.api.dependencies import CurrentSessionUser, DbSession
from interview_board.api.schemas.experiences import PaginatedExperiencesResponse
from interview_board.services.experiences import (
    DEFAULT_LIMIT,
    empty_page,
    list_saved_experiences,
)
from interview_board.services.identity import ensure_user_exists

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/saved", tags=["saved"])


@router.get("", response_model=PaginatedExperiencesResponse)
def list_saved_endpoint(
    db: DbSession,
    principal: CurrentSessionUser,
    page: Annotated[int, Query(description="1-based page number")] = 1,
    limit: Annotated[int, Query(description="Page size, clamped to 1..50")] = DEFAULT_LIMIT,
):
    """List the caller's saved experiences, newest experience first.

    Anonymous sessions never have saved experiences and receive an empty page.
    """
    if principal.is_anonymous:
        return PaginatedExperiencesResponse(**empty_page())

    user_id = ensure_user_exists(db, principal)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user",
        )

    try:
        result = list_saved_experiences(db, user_id, page=page, limit=limit)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to fetch saved experiences for %s", user_id)
        body = PaginatedExperiencesResponse(**empty_page()).model_dump(mode="json", by_alias=True)
        body["error"] = "Failed to fetch saved experiences"
        body["details"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)

    return PaginatedExperiencesResponse(**result)
