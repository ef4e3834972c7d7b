"""SQLAlchemy ORM models for user accounts."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, false, func
from sqlalchemy.orm import Mapped, mapped_column

from config.usage import DEFAULT_MAX_USAGE
from infrastructure.db.base import Base

USER_STATUS_ACTIVE = "active"
USER_STATUS_INACTIVE = "inactive"


def _utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp for ORM defaults."""
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """A demo account with its generation allowance."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("current_usage >= 0", name="ck_users_current_usage_non_negative"),
        CheckConstraint("max_usage > 0", name="ck_users_max_usage_positive"),
        CheckConstraint("custom_limit IS NULL OR custom_limit > 0", name="ck_users_custom_limit_positive"),
        CheckConstraint("status IN ('active', 'inactive')", name="ck_users_status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    current_usage: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    max_usage: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_MAX_USAGE, server_default=str(DEFAULT_MAX_USAGE)
    )
    custom_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=USER_STATUS_ACTIVE, server_default=USER_STATUS_ACTIVE
    )
    # Entitlement: may override the default generation temperature
    can_set_temperature: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_demo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )

    @property
    def effective_limit(self) -> int:
        return self.custom_limit if self.custom_limit is not None else self.max_usage

    @property
    def is_active(self) -> bool:
        return self.status == USER_STATUS_ACTIVE


__all__ = ["USER_STATUS_ACTIVE", "USER_STATUS_INACTIVE", "User"]
