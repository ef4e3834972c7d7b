"""Pydantic schemas for administrative endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ResetUsageRequest(BaseModel):
    """Credential plus optional target user for a usage reset."""

    model_config = ConfigDict(populate_by_name=True)

    admin_credential: str | None = Field(default=None, alias="adminCredential")
    user_id: str | None = Field(default=None, alias="userId")


class ResetDemoUsersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_credential: str | None = Field(default=None, alias="adminCredential")


__all__ = ["ResetDemoUsersRequest", "ResetUsageRequest"]
