"""Pydantic schemas for the login endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Email/password pair submitted by the login form."""

    email: str | None = None
    password: str | None = None


class UsageSummary(BaseModel):
    used: int
    max: int


class LoginUser(BaseModel):
    id: str
    email: str
    usage: UsageSummary


class LoginResponse(BaseModel):
    """Session token plus the account summary shown after login."""

    token: str
    user: LoginUser
    expires_in: int = Field(alias="expiresIn")

    model_config = {"populate_by_name": True}


__all__ = ["LoginRequest", "LoginResponse", "LoginUser", "UsageSummary"]
