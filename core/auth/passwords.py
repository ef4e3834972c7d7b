"""bcrypt helpers for stored password hashes."""

from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger(__name__)

SALT_ROUNDS = 10


def hash_password(password: str, *, rounds: int = SALT_ROUNDS) -> str:
    """Return a bcrypt hash suitable for the ``users.password_hash`` column."""

    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Return True when ``password`` matches ``password_hash``."""

    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (TypeError, ValueError):
        logger.exception("Password hash verification failed")
        return False


__all__ = ["SALT_ROUNDS", "hash_password", "verify_password"]
