"""Provider Resolvers - Dynamic Resolution of speech providers at runtime.

Uses the registries from :mod:`core.providers.registries` to select the
provider named in the supplied settings.
"""

from __future__ import annotations

import logging
from typing import Dict

from config.tts import DEFAULT_PROVIDER
from core.exceptions import ConfigurationError
from core.providers.registries import _tts_providers, registered_tts_providers
from core.providers.tts_base import BaseTTSProvider

logger = logging.getLogger(__name__)


def get_tts_provider(settings: Dict[str, object] | None = None) -> BaseTTSProvider:
    """Return a text-to-speech provider instance based on requested settings.

    The provider name comes from ``settings["tts"]["provider"]`` and falls
    back to the configured default provider.
    """

    tts_settings = settings.get("tts", {}) if settings else {}
    if not isinstance(tts_settings, dict):
        tts_settings = {}

    provider_name = str(tts_settings.get("provider") or DEFAULT_PROVIDER).strip().lower()

    if provider_name not in _tts_providers:
        raise ConfigurationError(
            f"TTS provider {provider_name} not registered. Available: {registered_tts_providers()}",
            key=f"provider.{provider_name}",
        )

    provider_class = _tts_providers[provider_name]
    provider = provider_class()
    logger.debug(
        "Resolved tts provider instance %s for provider name %s",
        provider_class.__name__,
        provider_name,
    )
    provider.configure(tts_settings)
    return provider


__all__ = ["get_tts_provider"]
