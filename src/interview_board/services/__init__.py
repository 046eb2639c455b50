"""Service layer: identity, authentication, experiences and reactions."""

from interview_board.services.exceptions import (
    ExperienceNotFoundError,
    IdentityReconciliationError,
    ReactionConflictError,
)
from interview_board.services.identity import ensure_user_exists
from interview_board.services.sessions import SessionUser

__all__ = [
    "ExperienceNotFoundError",
    "IdentityReconciliationError",
    "ReactionConflictError",
    "SessionUser",
    "ensure_user_exists",
]
