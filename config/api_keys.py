"""API key loading for external providers."""

from __future__ import annotations

import os
from typing import Dict


def load_api_keys() -> Dict[str, str]:
    """Load API keys from the environment with sensible defaults."""

    return {
        # Speech generation; GOOGLE_API_KEY kept as a fallback name
        "gemini": os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", ""),
        # AWS
        "aws_access_key": os.getenv("AWS_ACCESS_KEY_ID", ""),
        "aws_secret_key": os.getenv("AWS_SECRET_ACCESS_KEY", ""),
        "aws_region": os.getenv("AWS_REGION", "eu-central-1"),
    }


API_KEYS = load_api_keys()

GEMINI_API_KEY = API_KEYS["gemini"]
AWS_ACCESS_KEY_ID = API_KEYS["aws_access_key"]
AWS_SECRET_ACCESS_KEY = API_KEYS["aws_secret_key"]
AWS_REGION = API_KEYS["aws_region"]

__all__ = [
    "API_KEYS",
    "AWS_ACCESS_KEY_ID",
    "AWS_REGION",
    "AWS_SECRET_ACCESS_KEY",
    "GEMINI_API_KEY",
    "load_api_keys",
]
