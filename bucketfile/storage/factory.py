"""Factory for building storage backends from environment configuration."""

from __future__ import annotations

from urllib.parse import urlparse

from bucketfile.core.config import Settings, get_settings
from bucketfile.storage.minio_impl import MinioBackend


def _normalize_endpoint(endpoint: str) -> tuple[str, bool]:
    """Extract host:port from endpoint URL and determine if secure (https).

    Returns:
        Tuple of (host:port, secure_flag)
    """
    parsed = urlparse(endpoint)
    secure = parsed.scheme == "https"
    host = parsed.netloc or parsed.path.rstrip("/")
    return host, secure


def build_backend(settings: Settings | None = None) -> MinioBackend:
    """Build a MinioBackend from settings.

    Environment variables:
        S3_ENDPOINT: Full URL to MinIO/S3 endpoint (e.g., http://localhost:9000)
        S3_ACCESS_KEY: Access key; leave empty to use the SDK credential chain
        S3_SECRET_KEY: Secret key
        S3_REGION: Region, optional
        LIST_PAGE_SIZE: Names requested per listing page (default: 1000)
    """
    settings = settings or get_settings()
    host, secure = _normalize_endpoint(settings.S3_ENDPOINT)
    return MinioBackend(
        host,
        access_key=settings.S3_ACCESS_KEY,
        secret_key=settings.S3_SECRET_KEY,
        secure=secure,
        region=settings.S3_REGION,
        page_size=settings.LIST_PAGE_SIZE,
    )


__all__ = ["build_backend"]
