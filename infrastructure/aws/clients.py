"""Initialise AWS service clients used by the infrastructure layer."""

from __future__ import annotations

import logging
from typing import Any, Dict

import boto3
from botocore.config import Config as BotoConfig

from config.api_keys import AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY
from config.aws import AWS_REGION

logger = logging.getLogger(__name__)

_boto_config = BotoConfig(
    region_name=AWS_REGION,
    retries={"max_attempts": 3, "mode": "standard"},
    connect_timeout=10,
    read_timeout=30,
)

aws_clients: Dict[str, Any] = {}


def _build_client(service_name: str) -> Any:
    """Return a boto3 client for ``service_name`` using static credentials."""

    return boto3.client(
        service_name,
        aws_access_key_id=AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=AWS_SECRET_ACCESS_KEY or None,
        config=_boto_config,
    )


try:
    if AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY:
        aws_clients["s3"] = _build_client("s3")
        logger.info("Initialised AWS clients (S3)")
    else:
        logger.warning("AWS credentials not found, AWS clients not initialised")
except Exception as exc:  # pragma: no cover - rely on boto3 for correctness
    logger.error("Error initialising AWS clients: %s", exc)
    raise


def get_s3_client() -> Any:
    """Return the cached S3 client or ``None`` when unavailable."""

    return aws_clients.get("s3")


__all__ = ["aws_clients", "get_s3_client"]
