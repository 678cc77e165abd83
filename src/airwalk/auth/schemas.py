"""Request/response schemas for account endpoints."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator

from airwalk.schemas import SuccessResponse


class RegisterRequest(BaseModel):
    """
    Registration request.

    With only ``email`` the pending application for that email is converted
    into an account. With ``username`` and ``password`` the account is created
    directly from the given credentials.
    """

    email: EmailStr
    username: str | None = Field(None, min_length=3, max_length=64)
    password: str | None = Field(None, min_length=1, max_length=128)
    town_hall_id: int | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class RegisterResponse(SuccessResponse):
    user_id: int
    username: str


class LoginRequest(BaseModel):
    """Login with username (or email) + password."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class LoginResponse(SuccessResponse):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: int
    username: str


class RecoverRequest(BaseModel):
    email: EmailStr
