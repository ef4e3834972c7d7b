"""AWS infrastructure helpers (clients and services)."""

from .clients import aws_clients, get_s3_client
from .storage import StorageService, build_voiceover_key, slugify

__all__ = [
    "aws_clients",
    "build_voiceover_key",
    "get_s3_client",
    "slugify",
    "StorageService",
]
