"""Pydantic schemas for sign-up / sign-in endpoints."""

from __future__ import annotations

from pydantic import EmailStr, Field

from interview_board.api.schemas.common import CamelModel


class SignUpRequest(CamelModel):
    """Request schema for creating a credentialed account."""

    email: EmailStr
    password: str = Field(..., description="At least 6 characters")
    name: str = Field(..., description="Display name")


class SignInRequest(CamelModel):
    """Request schema for signing in with email and password."""

    email: EmailStr
    password: str


class SessionUserResponse(CamelModel):
    """Identity carried by the caller's session."""

    id: str
    name: str | None = None
    email: str | None = None
    is_anonymous: bool = False


class TokenResponse(CamelModel):
    """Session token issued after a successful sign-in."""

    access_token: str
    token_type: str = "bearer"
    user: SessionUserResponse
