"""Like / save toggles.

Both reactions share one algorithm: look up the (user, experience) row,
delete it if present, create it otherwise. The unique constraint on the
pair rejects the second of two racing creates, which is reported as
:class:`ReactionConflictError` so the caller can retry with a fresh toggle.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from interview_board.data.models import Experience, Like, Save
from interview_board.services.exceptions import ExperienceNotFoundError, ReactionConflictError

logger = logging.getLogger(__name__)

__all__ = ["toggle_like", "toggle_reaction", "toggle_save"]


def toggle_reaction(
    session: Session, model: type[Like] | type[Save], user_id: str, experience_id: str
) -> bool:
    """Flip the user's reaction row on an experience.

    Args:
        session: Database session.
        model: ``Like`` or ``Save``.
        user_id: Reconciled user id.
        experience_id: Target experience.

    Returns:
        True if the reaction is now on, False if it was removed.

    Raises:
        ExperienceNotFoundError: If the experience does not exist.
        ReactionConflictError: If a concurrent toggle inserted the row first.
    """
    if session.get(Experience, experience_id) is None:
        raise ExperienceNotFoundError(experience_id)

    existing = (
        session.query(model)
        .filter(model.user_id == user_id, model.experience_id == experience_id)
        .first()
    )

    if existing is not None:
        session.delete(existing)
        session.commit()
        return False

    session.add(model(user_id=user_id, experience_id=experience_id))
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.warning(
            "Concurrent %s toggle for user %s on experience %s",
            model.__tablename__,
            user_id,
            experience_id,
        )
        raise ReactionConflictError(
            f"{model.__name__} for experience {experience_id} was created concurrently"
        ) from exc
    return True


def toggle_like(session: Session, user_id: str, experience_id: str) -> bool:
    """Toggle a like; returns the new liked state."""
    return toggle_reaction(session, Like, user_id, experience_id)


def toggle_save(session: Session, user_id: str, experience_id: str) -> bool:
    """Toggle a save; returns the new saved state."""
    return toggle_reaction(session, Save, user_id, experience_id)
