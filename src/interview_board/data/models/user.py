"""User account model.

A user is either credentialed (email + salted PBKDF2 password hash) or
anonymous (neither email nor password). Anonymous rows are created by the
anonymous sign-in flow and by identity reconciliation.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from interview_board.data.db import Base

if TYPE_CHECKING:
    from interview_board.data.models.experience import Experience
    from interview_board.data.models.reaction import Like, Save


def generate_id() -> str:
    """Return a new opaque identifier for a row."""
    return str(uuid.uuid4())


class User(Base):
    """Application user account.

    Attributes:
        id: Opaque string primary key (also the session token subject).
        email: Unique login email, None for anonymous users.
        name: Display name.
        password: Salted hash of the user's password, None unless credentialed.
        is_anonymous: Whether the account was created by the anonymous flow.
        created_at: UTC timestamp when the account was created.
        updated_at: UTC timestamp of the last modification.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password: Mapped[str | None] = mapped_column(String(256), nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    experiences: Mapped[list[Experience]] = relationship(
        "Experience", back_populates="author", cascade="all, delete-orphan"
    )
    likes: Mapped[list[Like]] = relationship(
        "Like", back_populates="user", cascade="all, delete-orphan"
    )
    saves: Mapped[list[Save]] = relationship(
        "Save", back_populates="user", cascade="all, delete-orphan"
    )
