"""Route handlers for the API."""

from interview_board.api.routes import auth, experiences, health, saved

__all__ = [
    "auth",
    "experiences",
    "health",
    "saved",
]
