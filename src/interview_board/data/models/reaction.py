"""Join tables relating users to experiences they liked or saved.

Both tables enforce a unique (user_id, experience_id) pair, so a user can
like or save a given experience at most once.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from interview_board.data.db import Base
from interview_board.data.models.user import generate_id

if TYPE_CHECKING:
    from interview_board.data.models.experience import Experience
    from interview_board.data.models.user import User


class Like(Base):
    """A user's like on an experience."""

    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("user_id", "experience_id", name="uq_like_user_experience"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    experience_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("experiences.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    user: Mapped[User] = relationship("User", back_populates="likes")
    experience: Mapped[Experience] = relationship("Experience", back_populates="likes")


class Save(Base):
    """An experience bookmarked into a user's saved collection."""

    __tablename__ = "saves"
    __table_args__ = (UniqueConstraint("user_id", "experience_id", name="uq_save_user_experience"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    experience_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("experiences.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    user: Mapped[User] = relationship("User", back_populates="saves")
    experience: Mapped[Experience] = relationship("Experience", back_populates="saves")
