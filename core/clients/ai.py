"""Initialise AI provider clients used across the application."""

from __future__ import annotations

import logging
from typing import Dict

from google import genai

from config.api_keys import GEMINI_API_KEY
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ai_clients: Dict[str, object] = {}

try:
    if GEMINI_API_KEY:
        ai_clients["gemini"] = genai.Client(api_key=GEMINI_API_KEY)
        logger.info("Initialised Gemini client")
except Exception as exc:  # pragma: no cover - init failure should crash fast
    logger.error("Error initialising AI clients: %s", exc)
    raise

logger.info("Initialised %s AI client(s)", len(ai_clients))


def get_gemini_client() -> genai.Client:
    """Return a cached Gemini client, failing when no API key is configured."""

    client = ai_clients.get("gemini")
    if client is not None:
        return client  # type: ignore[return-value]

    if not GEMINI_API_KEY:
        raise ConfigurationError("GEMINI_API_KEY is not configured", key="GEMINI_API_KEY")

    client = genai.Client(api_key=GEMINI_API_KEY)
    ai_clients["gemini"] = client
    logger.info("Initialised Gemini client via helper")
    return client


__all__ = ["ai_clients", "get_gemini_client"]
