"""Pydantic models for account lifecycle request bodies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

VALID_EMAIL_REQUIRED = "Valid email address required"
PASSWORD_REQUIRED = "Password required"


class LenientModel(BaseModel):
    """Base model ignoring unknown fields; presence rules are checked separately."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=False)


class RegisterRequest(LenientModel):
    """HTTP request model for account registration."""

    email: str | None = None
    password: str | None = None
    username: str | None = None


class PasswordResetRequest(LenientModel):
    """HTTP request model for forgot-password requests."""

    email: str | None = None
