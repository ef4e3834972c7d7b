"""Per-user generation counters and their quota checks.

The ledger never commits. Callers own the transaction boundary, which lets
the generate flow commit a claimed slot before it calls the speech API and
roll back bookkeeping failures without losing that claim.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import PersistenceError, UserNotFoundError
from features.accounts.db_models import USER_STATUS_ACTIVE, User

logger = logging.getLogger(__name__)

_EFFECTIVE_LIMIT = func.coalesce(User.custom_limit, User.max_usage)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class UsageSnapshot:
    """Point-in-time view of one user's allowance."""

    user_id: str
    current: int
    effective_limit: int
    status: str

    @property
    def remaining(self) -> int:
        return max(self.effective_limit - self.current, 0)

    @property
    def is_active(self) -> bool:
        return self.status == USER_STATUS_ACTIVE

    @property
    def limit_reached(self) -> bool:
        return self.current >= self.effective_limit

    def as_dict(self) -> dict[str, int | str]:
        return {
            "current": self.current,
            "effectiveLimit": self.effective_limit,
            "remaining": self.remaining,
            "status": self.status,
        }


class UsageLedger:
    """Read and mutate ``users.current_usage`` against the effective limit."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _load(self, user_id: str) -> User:
        query = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        result = await self._session.execute(query)
        user = result.scalars().first()
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _current_usage(self, user_id: str) -> int:
        value = await self._session.scalar(select(User.current_usage).where(User.id == user_id))
        if value is None:
            raise UserNotFoundError(user_id)
        return int(value)

    async def get_usage(self, user_id: str) -> UsageSnapshot:
        user = await self._load(user_id)
        return UsageSnapshot(
            user_id=user.id,
            current=user.current_usage,
            effective_limit=user.effective_limit,
            status=user.status,
        )

    async def try_reserve(self, user_id: str) -> bool:
        """Return whether one more generation fits; the stored row is untouched."""

        snapshot = await self.get_usage(user_id)
        allowed = snapshot.is_active and not snapshot.limit_reached
        if not allowed:
            logger.info(
                "Reservation refused for user_id=%s (current=%s limit=%s status=%s)",
                user_id,
                snapshot.current,
                snapshot.effective_limit,
                snapshot.status,
            )
        return allowed

    async def increment(self, user_id: str) -> int:
        """Add one generation to the counter and return the new count."""

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(current_usage=User.current_usage + 1, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
            if result.rowcount == 0:
                raise UserNotFoundError(user_id)
            new_count = await self._current_usage(user_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to increment usage for user_id=%s: %s", user_id, exc)
            raise PersistenceError("Failed to update usage count", operation="increment") from exc

        logger.info("Usage incremented for user_id=%s -> %s", user_id, new_count)
        return new_count

    async def claim(self, user_id: str) -> int | None:
        """Atomically take one slot if the user is active and below the limit.

        Returns the new count, or ``None`` when the guarded update matched no
        row. Concurrent claims cannot push the counter past the limit.
        """

        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.status == USER_STATUS_ACTIVE,
                User.current_usage < _EFFECTIVE_LIMIT,
            )
            .values(current_usage=User.current_usage + 1, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
            if result.rowcount == 0:
                logger.info("Usage claim refused for user_id=%s", user_id)
                return None
            new_count = await self._current_usage(user_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to claim usage for user_id=%s: %s", user_id, exc)
            raise PersistenceError("Failed to reserve usage", operation="claim") from exc

        logger.info("Usage claimed for user_id=%s -> %s", user_id, new_count)
        return new_count

    async def release(self, user_id: str) -> bool:
        """Undo a claim; never drives the counter below zero."""

        stmt = (
            update(User)
            .where(User.id == user_id, User.current_usage > 0)
            .values(current_usage=User.current_usage - 1, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to release usage", operation="release") from exc
        released = result.rowcount > 0
        logger.info("Usage released for user_id=%s (applied=%s)", user_id, released)
        return released

    async def reset_all(self) -> int:
        """Set every user's counter to zero and return how many rows changed."""

        stmt = update(User).values(current_usage=0, updated_at=_utcnow()).execution_options(
            synchronize_session=False
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to reset usage", operation="reset_all") from exc
        logger.warning("Usage reset for all users (%s rows)", result.rowcount)
        return result.rowcount

    async def reset_one(self, user_id: str) -> int:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(current_usage=0, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to reset usage", operation="reset_one") from exc
        if result.rowcount == 0:
            raise UserNotFoundError(user_id)
        logger.warning("Usage reset for user_id=%s", user_id)
        return result.rowcount

    async def reset_demo_users(self) -> int:
        """Zero the counters of demo accounts and reactivate them."""

        stmt = (
            update(User)
            .where(User.is_demo.is_(True))
            .values(current_usage=0, status=USER_STATUS_ACTIVE, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to reset demo users", operation="reset_demo_users") from exc
        logger.warning("Demo users reset (%s rows)", result.rowcount)
        return result.rowcount


__all__ = ["UsageLedger", "UsageSnapshot"]
