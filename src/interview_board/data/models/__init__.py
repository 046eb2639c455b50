"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- User: Credentialed or anonymous accounts
- Experience: Shared interview writeups
- Like: User likes on experiences
- Save: Experiences saved into a user's collection

All models inherit from the shared Base declarative class defined in data.db.
"""

from interview_board.data.db import Base
from interview_board.data.models.experience import Experience
from interview_board.data.models.reaction import Like, Save
from interview_board.data.models.user import User

__all__ = ["Base", "Experience", "Like", "Save", "User"]
