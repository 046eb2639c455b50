"""Signed session tokens carrying the caller's identity.

A token is an HS256 JWT whose claims mirror :class:`SessionUser`. The
token is the only thing the server trusts about the caller; the matching
database row is reconciled separately (see ``services.identity``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from interview_board import config
from interview_board.data.models import User


@dataclass(frozen=True)
class SessionUser:
    """Identity principal supplied by a valid session token."""

    id: str
    name: str | None = None
    email: str | None = None
    is_anonymous: bool = False

    @classmethod
    def from_user(cls, user: User) -> SessionUser:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            is_anonymous=user.is_anonymous,
        )


def create_session_token(principal: SessionUser, expires_in: timedelta | None = None) -> str:
    """Sign a session token for the given principal."""
    expire = datetime.now(UTC) + (expires_in or timedelta(days=config.SESSION_MAX_AGE_DAYS))
    claims = {
        "sub": principal.id,
        "name": principal.name,
        "email": principal.email,
        "is_anonymous": principal.is_anonymous,
        "exp": expire,
    }
    return jwt.encode(claims, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_session_token(token: str) -> SessionUser | None:
    """Return the principal encoded in ``token``, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        return None

    subject = payload.get("sub")
    if not subject:
        return None

    return SessionUser(
        id=subject,
        name=payload.get("name"),
        email=payload.get("email"),
        is_anonymous=bool(payload.get("is_anonymous", False)),
    )
