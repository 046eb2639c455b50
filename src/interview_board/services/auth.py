"""Account authentication helpers.

This module provides the sign-up / sign-in / anonymous sign-in flows
backed by the users table. Passwords are stored as salted PBKDF2 hashes.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from interview_board.data.models import User

logger = logging.getLogger(__name__)

__all__ = [
    "ANONYMOUS_NAME",
    "MIN_PASSWORD_LENGTH",
    "authenticate_user",
    "create_anonymous_user",
    "create_user",
    "hash_password",
    "verify_password",
]

ANONYMOUS_NAME = "Anonymous User"
MIN_PASSWORD_LENGTH = 6

_HASH_SCHEME = "pbkdf2_sha256"
_PBKDF2_ITERATIONS = 120_000
_SALT_BYTES = 16


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    """Hash ``password`` as ``pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>``.

    Verification uses the iteration count stored in the value.
    """
    salt = os.urandom(_SALT_BYTES)
    digest = _derive(password, salt, _PBKDF2_ITERATIONS)
    return "$".join((_HASH_SCHEME, str(_PBKDF2_ITERATIONS), salt.hex(), digest.hex()))


def verify_password(password: str, stored: str) -> bool:
    """Check ``password`` against a value produced by :func:`hash_password`."""
    parts = stored.split("$")
    if len(parts) != 4 or parts[0] != _HASH_SCHEME:
        return False
    _, iterations, salt_hex, digest_hex = parts
    try:
        rounds = int(iterations)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
    except ValueError:
        return False
    if rounds <= 0:
        return False
    return hmac.compare_digest(_derive(password, salt, rounds), expected)


def create_anonymous_user(session: Session) -> User:
    """Create and persist a new anonymous account."""
    user = User(name=ANONYMOUS_NAME, email=None, password=None, is_anonymous=True)
    session.add(user)
    session.commit()
    return user


def create_user(
    session: Session, email: str, password: str, name: str
) -> tuple[User | None, str | None]:
    """Create a new credentialed account.

    Returns:
        Tuple of (user, error message). On success, error is None.
    """
    name_clean = name.strip()
    email_clean = email.strip()
    if not name_clean:
        return None, "Name cannot be empty."
    if len(password) < MIN_PASSWORD_LENGTH:
        return None, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."

    existing = session.query(User).filter(User.email == email_clean).first()
    if existing is not None:
        return None, "Email already registered."

    user = User(
        email=email_clean,
        name=name_clean,
        password=hash_password(password),
        is_anonymous=False,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Lost a race against a concurrent sign-up for the same email
        session.rollback()
        logger.warning("Sign-up collided on existing email %s", email_clean)
        return None, "Email already registered."
    return user, None


def authenticate_user(session: Session, email: str, password: str) -> User | None:
    """Return the user matching the credentials, or None when they are invalid."""
    email_clean = email.strip()
    if not email_clean or not password:
        return None

    user = session.query(User).filter(User.email == email_clean).first()
    if user is None or not user.password:
        return None

    if not verify_password(password, user.password):
        return None

    return user
