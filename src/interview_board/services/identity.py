"""Reconcile session principals with persistent user rows.

A session token can outlive the user row it was issued for (the row was
purged, or the token predates it). Every handler that needs a user id
calls :func:`ensure_user_exists` first so that writes never fail on a
dangling foreign key.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interview_board.data.models import User
from interview_board.services.sessions import SessionUser

logger = logging.getLogger(__name__)

__all__ = ["ensure_user_exists"]

_ANONYMOUS_FALLBACK_NAME = "Anonymous User"
_UNKNOWN_FALLBACK_NAME = "Unknown User"


def _fallback_name(principal: SessionUser) -> str:
    if principal.name:
        return principal.name
    return _ANONYMOUS_FALLBACK_NAME if principal.is_anonymous else _UNKNOWN_FALLBACK_NAME


def _create_user(session: Session, principal: SessionUser, user_id: str | None) -> str:
    user = User(
        name=_fallback_name(principal),
        email=principal.email or None,
        is_anonymous=bool(principal.is_anonymous),
    )
    if user_id is not None:
        user.id = user_id
    session.add(user)
    session.commit()
    return user.id


def ensure_user_exists(session: Session, principal: SessionUser | None) -> str | None:
    """Return the id of the user row backing ``principal``, creating it if needed.

    The row is first created with the principal's own id. If that insert
    fails (e.g. a constraint violation) a second row with a freshly
    generated id is created instead.

    Args:
        session: Database session.
        principal: Identity from the caller's session token.

    Returns:
        The persistent user id, or None if the principal is missing or both
        creation attempts failed.
    """
    if principal is None or not principal.id:
        return None

    try:
        existing = session.get(User, principal.id)
        if existing is not None:
            return existing.id
        return _create_user(session, principal, principal.id)
    except SQLAlchemyError:
        session.rollback()
        logger.warning(
            "Could not create user with session id %s, retrying with a new id", principal.id
        )

    try:
        return _create_user(session, principal, None)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to ensure user exists for session id %s", principal.id)
        return None
