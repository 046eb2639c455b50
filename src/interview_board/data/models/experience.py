"""Experience model for shared interview writeups.

Each experience belongs to exactly one author (1:many with User). Like and
save counts are derived from the reaction tables and never stored here.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from interview_board.data.db import Base
from interview_board.data.models.user import generate_id

if TYPE_CHECKING:
    from interview_board.data.models.reaction import Like, Save
    from interview_board.data.models.user import User


class Experience(Base):
    """Interview experience shared by a user.

    Attributes:
        id: Opaque string primary key.
        title: Short headline.
        company: Company that ran the interview.
        position: Role interviewed for.
        content: Free-text writeup.
        salary: Offered or discussed compensation, optional.
        location: Interview or job location, optional.
        difficulty: Open vocabulary, conventionally Easy/Medium/Hard.
        outcome: Open vocabulary, conventionally Selected/Rejected/Pending.
        tips: Advice for other candidates, optional.
        author_id: Foreign key to users table.
        is_anonymous: Hide the author's name regardless of the author's own flag.
        created_at: UTC timestamp when the experience was shared.
        updated_at: UTC timestamp of the last modification.
    """

    __tablename__ = "experiences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    salary: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    difficulty: Mapped[str] = mapped_column(String(50), nullable=False)
    outcome: Mapped[str] = mapped_column(String(50), nullable=False)
    tips: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    author: Mapped[User] = relationship("User", back_populates="experiences")
    likes: Mapped[list[Like]] = relationship(
        "Like", back_populates="experience", cascade="all, delete-orphan"
    )
    saves: Mapped[list[Save]] = relationship(
        "Save", back_populates="experience", cascade="all, delete-orphan"
    )
