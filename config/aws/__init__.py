"""AWS-specific configuration values."""

from __future__ import annotations

import os
from typing import Dict

from config.environment import ENVIRONMENT

_ENVIRONMENT_DEFAULTS: Dict[str, Dict[str, str]] = {
    "production": {
        "aws_region": "eu-central-1",
        "s3_bucket": "voice-overs",
    },
    "development": {
        "aws_region": "eu-central-1",
        "s3_bucket": "voice-overs-nonprod",
    },
    "local": {
        "aws_region": "eu-central-1",
        "s3_bucket": "voice-overs-nonprod",
    },
}

_defaults = _ENVIRONMENT_DEFAULTS.get(ENVIRONMENT, _ENVIRONMENT_DEFAULTS["local"])

AWS_REGION = os.getenv("AWS_REGION", _defaults["aws_region"])
TTS_S3_BUCKET = os.getenv("TTS_S3_BUCKET", _defaults["s3_bucket"])
# Optional CDN / public host placed in front of the bucket
TTS_PUBLIC_BASE_URL = os.getenv("TTS_PUBLIC_BASE_URL", "")

__all__ = [
    "AWS_REGION",
    "TTS_PUBLIC_BASE_URL",
    "TTS_S3_BUCKET",
]
