"""Shared response envelope."""

from __future__ import annotations

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Base for every successful response body."""

    success: bool = True
    message: str | None = None


class ErrorResponse(BaseModel):
    """Body returned for every failure."""

    success: bool = False
    message: str
