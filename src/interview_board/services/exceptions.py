"""Domain errors raised by the service layer and translated by the API routes."""

from __future__ import annotations


class ExperienceNotFoundError(LookupError):
    """The referenced experience does not exist."""

    def __init__(self, experience_id: str) -> None:
        super().__init__(f"Experience {experience_id} not found")
        self.experience_id = experience_id


class ReactionConflictError(RuntimeError):
    """A concurrent toggle created the same (user, experience) row first."""


class IdentityReconciliationError(RuntimeError):
    """No persistent user row could be found or created for a session principal."""
