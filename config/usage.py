"""Usage quota configuration."""

from __future__ import annotations

import os
from typing import Literal

from core.utils.env import get_int_env

ReservationMode = Literal["strict", "soft"]

DEFAULT_MAX_USAGE = get_int_env("USAGE_DEFAULT_MAX", 3)


def get_reservation_mode() -> ReservationMode:
    """Return how the generate flow reserves quota.

    ``strict`` claims a slot atomically before calling the speech API and
    releases it when the generation fails. ``soft`` checks the counter first
    and increments it after the audio has been stored.
    """

    raw = os.getenv("USAGE_RESERVATION_MODE", "strict").strip().lower()
    if raw == "soft":
        return "soft"
    return "strict"


def get_admin_reset_secret() -> str | None:
    """Return the administrative credential for reset endpoints."""

    return os.getenv("ADMIN_RESET_SECRET") or None


__all__ = [
    "DEFAULT_MAX_USAGE",
    "ReservationMode",
    "get_admin_reset_secret",
    "get_reservation_mode",
]
