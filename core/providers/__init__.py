"""Provider Registry - Import-Time Registration of speech providers.

Importing this package registers every available text-to-speech provider so
that :func:`core.providers.resolvers.get_tts_provider` can resolve it by name.

Usage Example:
    from core.providers import get_tts_provider
    provider = get_tts_provider({"tts": {"provider": "gemini"}})
    result = await provider.generate(TTSRequest(text="Hello", voice="orus", temperature=1.0))
"""

import logging

from core.providers.registries import register_tts_provider
from core.providers.resolvers import get_tts_provider
from core.providers.tts.gemini import GeminiTTSProvider

logger = logging.getLogger(__name__)

register_tts_provider("gemini", GeminiTTSProvider)

logger.debug("Registered speech providers: gemini")

__all__ = ["GeminiTTSProvider", "get_tts_provider", "register_tts_provider"]
