"""Pydantic schemas for experience, like and save API endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from interview_board.api.schemas.common import CamelModel, PaginationMeta


class AuthorSummary(CamelModel):
    """Public view of an experience's author."""

    name: str | None = None
    is_anonymous: bool = False


class ExperienceCounts(CamelModel):
    """Derived reaction counts."""

    likes: int = 0
    saves: int = 0


class ExperienceResponse(CamelModel):
    """Response schema for a single experience, annotated for the viewer."""

    id: str
    title: str
    company: str
    position: str
    content: str
    salary: str | None = None
    location: str | None = None
    difficulty: str
    outcome: str
    tips: str | None = None
    author_id: str
    is_anonymous: bool
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary
    count: ExperienceCounts = Field(alias="_count")
    is_liked_by_user: bool = False
    is_saved_by_user: bool = False


class PaginatedExperiencesResponse(CamelModel):
    """One page of experiences."""

    experiences: list[ExperienceResponse]
    pagination: PaginationMeta


class ExperienceCreateRequest(CamelModel):
    """Request schema for sharing an experience.

    Required fields are declared optional here so that every blank field
    can be reported in a single 400 response.
    """

    title: str | None = Field(None, description="Short headline (required)")
    company: str | None = Field(None, description="Company name (required)")
    position: str | None = Field(None, description="Role interviewed for (required)")
    content: str | None = Field(None, description="Full writeup (required)")
    salary: str | None = Field(None, description="Compensation details")
    location: str | None = Field(None, description="Interview or job location")
    difficulty: str | None = Field(None, description="Easy, Medium or Hard (required)")
    outcome: str | None = Field(None, description="Selected, Rejected or Pending (required)")
    tips: str | None = Field(None, description="Advice for other candidates")
    is_anonymous: bool = Field(False, description="Hide the author's name on this post")


class LikeToggleResponse(CamelModel):
    """New like state after a toggle."""

    liked: bool


class SaveToggleResponse(CamelModel):
    """New save state after a toggle."""

    saved: bool
