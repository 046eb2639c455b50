"""Shared dependencies for API routes."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from interview_board.data.db import get_session
from interview_board.services.sessions import SessionUser, decode_session_token

security = HTTPBearer(auto_error=False)


def get_db() -> Iterator[Session]:
    """Provide a request-scoped database session."""
    with get_session() as session:
        yield session


def get_optional_session_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> SessionUser | None:
    """Get the session principal if a valid token was sent, or None.

    Unlike ``get_session_user`` this does **not** raise 401. Use this for
    endpoints that support both authenticated and anonymous callers
    (listing, detail, ranking). An invalid or expired token counts as no
    session.
    """
    if not credentials:
        return None
    return decode_session_token(credentials.credentials)


def get_session_user(
    principal: Annotated[SessionUser | None, Depends(get_optional_session_user)],
) -> SessionUser:
    """Get the session principal, rejecting unauthenticated callers.

    Raises:
        HTTPException: If no valid session token is present (401).
    """
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


DbSession = Annotated[Session, Depends(get_db)]
OptionalSessionUser = Annotated[SessionUser | None, Depends(get_optional_session_user)]
CurrentSessionUser = Annotated[SessionUser, Depends(get_session_user)]
