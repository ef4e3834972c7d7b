"""Utility helpers shared across TTS services and routes."""

from __future__ import annotations

import logging
from typing import Mapping

from config.tts import DEFAULT_TEMPERATURE, MAX_TEMPERATURE, MAX_TEXT_LENGTH, MIN_TEMPERATURE
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def normalise_text(text: str | None, *, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Strip ``text`` and enforce the non-empty and maximum length rules."""

    if text is None or not isinstance(text, str):
        raise ValidationError("Text is required", field="text")

    cleaned = text.strip()
    if not cleaned:
        raise ValidationError("Text is required", field="text")
    if len(cleaned) > max_length:
        raise ValidationError(
            f"Text exceeds the maximum length of {max_length} characters",
            field="text",
        )
    return cleaned


def resolve_temperature(requested: float | None, *, entitled: bool) -> float:
    """Return the temperature sent upstream.

    Accounts without the entitlement always get the default; their requested
    value is ignored rather than rejected.
    """

    if requested is None or not entitled:
        if requested is not None and requested != DEFAULT_TEMPERATURE:
            logger.debug("Ignoring temperature override %.2f for non-entitled account", requested)
        return DEFAULT_TEMPERATURE

    if not MIN_TEMPERATURE <= requested <= MAX_TEMPERATURE:
        raise ValidationError(
            f"Temperature must be between {MIN_TEMPERATURE:g} and {MAX_TEMPERATURE:g}",
            field="temperature",
        )
    return float(requested)


def resolve_client_ip(headers: Mapping[str, str], client_host: str | None) -> str | None:
    """Return the originating client address behind proxies."""

    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",", 1)[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return client_host


__all__ = ["normalise_text", "resolve_client_ip", "resolve_temperature"]
