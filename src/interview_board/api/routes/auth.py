"""Session routes: anonymous sign-in, email sign-up and sign-in."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from interview_board.api.dependencies import CurrentSessionUser, DbSession
from interview_board.api.schemas.auth import (
    SessionUserResponse,
    SignInRequest,
    SignUpRequest,
    TokenResponse,
)
from interview_board.data.models import User
from interview_board.services.auth import authenticate_user, create_anonymous_user, create_user
from interview_board.services.sessions import SessionUser, create_session_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User) -> TokenResponse:
    principal = SessionUser.from_user(user)
    return TokenResponse(
        access_token=create_session_token(principal),
        user=SessionUserResponse(
            id=principal.id,
            name=principal.name,
            email=principal.email,
            is_anonymous=principal.is_anonymous,
        ),
    )


@router.post("/anonymous", response_model=TokenResponse)
def sign_in_anonymously(db: DbSession) -> TokenResponse:
    """Create a fresh anonymous account and start a session for it."""
    try:
        user = create_anonymous_user(db)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create anonymous user")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create anonymous session",
        ) from exc
    logger.info("Anonymous user %s signed in", user.id)
    return _token_response(user)


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def sign_up(data: SignUpRequest, db: DbSession) -> TokenResponse:
    """Create a credentialed account and start a session for it."""
    try:
        user, error = create_user(db, data.email, data.password, data.name)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to sign up %s", data.email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user",
        ) from exc
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    return _token_response(user)


@router.post("/signin", response_model=TokenResponse)
def sign_in(data: SignInRequest, db: DbSession) -> TokenResponse:
    """Start a session for an existing credentialed account."""
    try:
        user = authenticate_user(db, data.email, data.password)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to sign in %s", data.email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sign in",
        ) from exc
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _token_response(user)


@router.get("/me", response_model=SessionUserResponse)
def get_me(principal: CurrentSessionUser) -> SessionUserResponse:
    """Return the identity carried by the caller's session token."""
    return SessionUserResponse(
        id=principal.id,
        name=principal.name,
        email=principal.email,
        is_anonymous=principal.is_anonymous,
    )
