"""Experience service for sharing and browsing interview experiences.

This service provides create / list / detail / ranking / saved-collection
queries over the Experience table. Every read can be annotated with the
viewer's own like and save state, and like/save counts are always derived
from the reaction tables at query time.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any, TypedDict

from sqlalchemy import func, select
from sqlalchemy.orm import Query, Session, joinedload

from interview_board.data.models import Experience, Like, Save

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "RANKING_SIZE",
    "RANKING_WINDOW",
    "REQUIRED_FIELDS",
    "ExperienceData",
    "build_pagination",
    "clamp_limit",
    "clamp_page",
    "create_experience",
    "empty_page",
    "find_missing_fields",
    "get_experience",
    "get_weekly_ranking",
    "list_experiences",
    "list_saved_experiences",
]

DEFAULT_LIMIT = 10
MAX_LIMIT = 50
RANKING_SIZE = 10
RANKING_WINDOW = timedelta(days=7)
ANONYMOUS_DISPLAY_NAME = "Anonymous"

SORT_RECENT = "recent"
SORT_POPULAR = "popular"

REQUIRED_FIELDS = ("title", "company", "position", "content", "difficulty", "outcome")
_OPTIONAL_FIELDS = ("salary", "location", "tips")


class ExperienceData(TypedDict, total=False):
    """TypedDict for experience creation data."""

    title: str
    company: str
    position: str
    content: str
    salary: str | None
    location: str | None
    difficulty: str
    outcome: str
    tips: str | None
    is_anonymous: bool


# ---------------------------------------------------------------------------
# Pagination helpers
# ---------------------------------------------------------------------------


def clamp_page(page: int | None) -> int:
    """Return ``page`` clamped to the first page or later."""
    if page is None:
        return 1
    return max(1, page)


def clamp_limit(limit: int | None) -> int:
    """Return ``limit`` clamped to ``1..MAX_LIMIT``."""
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, limit))


def build_pagination(page: int, limit: int, total: int) -> dict[str, Any]:
    """Build the pagination block returned alongside a page of experiences."""
    pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": pages,
        "has_more": page < pages,
    }


def empty_page(page: int = 1, limit: int = DEFAULT_LIMIT) -> dict[str, Any]:
    """Return an empty page with zeroed totals."""
    return {"experiences": [], "pagination": build_pagination(page, limit, 0)}


# ---------------------------------------------------------------------------
# Query building
# ---------------------------------------------------------------------------


def _like_count():
    return (
        select(func.count(Like.id))
        .where(Like.experience_id == Experience.id)
        .correlate(Experience)
        .scalar_subquery()
    )


def _save_count():
    return (
        select(func.count(Save.id))
        .where(Save.experience_id == Experience.id)
        .correlate(Experience)
        .scalar_subquery()
    )


def _annotated_query(session: Session) -> tuple[Query, Any]:
    """Return a query yielding ``(Experience, like_count, save_count)`` rows.

    The like-count expression is also returned so callers can order by it.
    """
    like_count = _like_count().label("like_count")
    save_count = _save_count().label("save_count")
    query = session.query(Experience, like_count, save_count).options(
        joinedload(Experience.author)
    )
    return query, like_count


def _viewer_reactions(
    session: Session, viewer_id: str | None, experience_ids: list[str]
) -> tuple[set[str], set[str]]:
    """Return the subsets of ``experience_ids`` the viewer has liked and saved."""
    if not viewer_id or not experience_ids:
        return set(), set()

    liked = {
        row[0]
        for row in session.query(Like.experience_id)
        .filter(Like.user_id == viewer_id, Like.experience_id.in_(experience_ids))
        .all()
    }
    saved = {
        row[0]
        for row in session.query(Save.experience_id)
        .filter(Save.user_id == viewer_id, Save.experience_id.in_(experience_ids))
        .all()
    }
    return liked, saved


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite returns naive datetimes; every stored value is UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _experience_to_dict(
    experience: Experience,
    like_count: int,
    save_count: int,
    is_liked: bool,
    is_saved: bool,
) -> dict[str, Any]:
    """Convert an Experience model and its derived values to a dictionary."""
    author = experience.author
    author_anonymous = bool(author.is_anonymous) if author is not None else True
    hide_author = experience.is_anonymous or author_anonymous
    return {
        "id": experience.id,
        "title": experience.title,
        "company": experience.company,
        "position": experience.position,
        "content": experience.content,
        "salary": experience.salary,
        "location": experience.location,
        "difficulty": experience.difficulty,
        "outcome": experience.outcome,
        "tips": experience.tips,
        "author_id": experience.author_id,
        "is_anonymous": experience.is_anonymous,
        "created_at": _as_utc(experience.created_at),
        "updated_at": _as_utc(experience.updated_at),
        "author": {
            "name": ANONYMOUS_DISPLAY_NAME if hide_author else author.name,
            "is_anonymous": author_anonymous,
        },
        "count": {"likes": like_count or 0, "saves": save_count or 0},
        "is_liked_by_user": is_liked,
        "is_saved_by_user": is_saved,
    }


def _rows_to_dicts(
    session: Session,
    rows: Iterable[tuple[Experience, int, int]],
    viewer_id: str | None,
    *,
    always_saved: bool = False,
) -> list[dict[str, Any]]:
    rows = list(rows)
    liked, saved = _viewer_reactions(session, viewer_id, [row[0].id for row in rows])
    return [
        _experience_to_dict(
            experience,
            like_count,
            save_count,
            is_liked=experience.id in liked,
            is_saved=always_saved or experience.id in saved,
        )
        for experience, like_count, save_count in rows
    ]


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def find_missing_fields(data: ExperienceData) -> list[str]:
    """Return the required fields that are absent or blank, in declaration order."""
    return [field for field in REQUIRED_FIELDS if _clean(data.get(field)) is None]


def create_experience(
    session: Session,
    author_id: str,
    data: ExperienceData,
    session_is_anonymous: bool = False,
) -> dict[str, Any]:
    """Create a new experience authored by ``author_id``.

    Callers validate ``data`` with :func:`find_missing_fields` first.
    The stored anonymity flag is forced on for anonymous sessions, so an
    anonymous author can never be de-anonymized on their posts.

    Returns:
        Dictionary with the created experience, counts zeroed.
    """
    values = {field: _clean(data.get(field)) for field in REQUIRED_FIELDS + _OPTIONAL_FIELDS}
    experience = Experience(
        **values,
        author_id=author_id,
        is_anonymous=bool(data.get("is_anonymous")) or bool(session_is_anonymous),
    )
    session.add(experience)
    session.commit()
    session.refresh(experience)

    logger.info("Experience %s created by %s", experience.id, author_id)
    return _experience_to_dict(experience, 0, 0, is_liked=False, is_saved=False)


def list_experiences(
    session: Session,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
    sort_by: str = SORT_RECENT,
    viewer_id: str | None = None,
) -> dict[str, Any]:
    """Return one page of experiences with pagination metadata.

    Args:
        session: Database session.
        page: 1-based page number.
        limit: Page size.
        sort_by: ``"recent"`` (newest first) or ``"popular"`` (most liked
            first, newest first among ties).
        viewer_id: User whose like/save state annotates each item.

    Returns:
        ``{"experiences": [...], "pagination": {...}}``
    """
    page = clamp_page(page)
    limit = clamp_limit(limit)

    query, like_count = _annotated_query(session)
    if sort_by == SORT_POPULAR:
        query = query.order_by(
            like_count.desc(), Experience.created_at.desc(), Experience.id.desc()
        )
    else:
        query = query.order_by(Experience.created_at.desc(), Experience.id.desc())

    total = session.query(func.count(Experience.id)).scalar() or 0
    rows = query.offset((page - 1) * limit).limit(limit).all()

    return {
        "experiences": _rows_to_dicts(session, rows, viewer_id),
        "pagination": build_pagination(page, limit, total),
    }


def get_experience(
    session: Session, experience_id: str, viewer_id: str | None = None
) -> dict[str, Any] | None:
    """Return a single experience, or None if it does not exist."""
    query, _ = _annotated_query(session)
    row = query.filter(Experience.id == experience_id).first()
    if row is None:
        return None
    return _rows_to_dicts(session, [row], viewer_id)[0]


def get_weekly_ranking(
    session: Session, viewer_id: str | None = None, now: datetime | None = None
) -> list[dict[str, Any]]:
    """Return the most liked experiences shared within the last seven days."""
    cutoff = (now or datetime.now(UTC)) - RANKING_WINDOW

    query, like_count = _annotated_query(session)
    rows = (
        query.filter(Experience.created_at >= cutoff)
        .order_by(like_count.desc(), Experience.created_at.desc(), Experience.id.desc())
        .limit(RANKING_SIZE)
        .all()
    )
    return _rows_to_dicts(session, rows, viewer_id)


def list_saved_experiences(
    session: Session,
    user_id: str,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
) -> dict[str, Any]:
    """Return one page of the user's saved experiences, newest experience first."""
    page = clamp_page(page)
    limit = clamp_limit(limit)

    total = session.query(func.count(Save.id)).filter(Save.user_id == user_id).scalar() or 0

    query, _ = _annotated_query(session)
    rows = (
        query.join(Save, Save.experience_id == Experience.id)
        .filter(Save.user_id == user_id)
        .order_by(Experience.created_at.desc(), Experience.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "experiences": _rows_to_dicts(session, rows, user_id, always_saved=True),
        "pagination": build_pagination(page, limit, total),
    }
