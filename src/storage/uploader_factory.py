# src/storage/uploader_factory.py
"""Factory: instantiate the S3 uploader from configuration."""

from __future__ import annotations

from opshelpers.config.settings import Settings
from opshelpers.storage.s3_uploader import S3Uploader


def create_uploader(settings: Settings) -> S3Uploader:
    """Create an S3Uploader from the S3_* settings.

    Raises:
        ValueError: If no bucket is configured.
    """
    if not settings.s3_bucket:
        raise ValueError("S3_BUCKET must be set to upload files")
    return S3Uploader(
        bucket=settings.s3_bucket,
        endpoint=settings.s3_endpoint or None,
        access_key_id=settings.s3_access_key_id or None,
        secret_access_key=settings.s3_secret_access_key.get_secret_value() or None,
        region=settings.s3_region or None,
        secure=settings.s3_secure,
        prefix=settings.s3_prefix,
    )
