# src/storage/s3_uploader.py
"""Upload local files to S3-compatible object storage.

Supports AWS S3, MinIO, and other S3-compatible endpoints.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

_CONTENT_TYPES: dict[str, str] = {
    ".gz": "application/x-gzip",
    ".tar": "application/x-tar",
    ".txt": "text/plain",
    ".dat": "text/plain",
    ".log": "text/plain",
    ".csv": "text/csv",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(path: str | os.PathLike[str]) -> str:
    """Content type from the last extension of ``path`` (case-insensitive)."""
    return _CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def endpoint_url(endpoint: str, secure: bool = True) -> str:
    """Add a scheme to bare ``host:port`` endpoints."""
    if "://" in endpoint:
        return endpoint
    return f"{'https' if secure else 'http'}://{endpoint}"


class S3Uploader:
    """Put local files into one bucket."""

    def __init__(
        self,
        bucket: str,
        endpoint: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region: str | None = None,
        secure: bool = True,
        prefix: str = "",
    ) -> None:
        """Initialize the boto3 client.

        Args:
            bucket: Target bucket name.
            endpoint: Custom endpoint for MinIO/compatible storage, with or
                without scheme. None uses AWS.
            access_key_id: Static credentials; None uses the boto3 chain.
            secret_access_key: Static credentials secret.
            region: AWS region (optional, uses boto3 default if not set).
            secure: Use https for scheme-less endpoints.
            prefix: Key prefix prepended to every upload.
        """
        import boto3

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint:
            kwargs["endpoint_url"] = endpoint_url(endpoint, secure)
        if access_key_id:
            kwargs["aws_access_key_id"] = access_key_id
            kwargs["aws_secret_access_key"] = secret_access_key

        self._s3 = boto3.client("s3", **kwargs)
        self._bucket = bucket
        self._prefix = prefix.rstrip("/") + "/" if prefix else ""

    def full_key(self, key: str) -> str:
        return f"{self._prefix}{key.lstrip('/')}"

    def upload_file(self, source: str | os.PathLike[str], key: str) -> int:
        """Upload ``source`` as ``key`` and return the number of bytes sent.

        Raises:
            OSError: ``source`` cannot be read.
            botocore.exceptions.ClientError / BotoCoreError: upload failed.
        """
        size = os.path.getsize(source)
        full_key = self.full_key(key)
        self._s3.upload_file(
            os.fspath(source),
            self._bucket,
            full_key,
            ExtraArgs={"ContentType": content_type_for(source)},
        )
        logger.info(
            "Uploaded %s to s3://%s/%s (%d bytes)", source, self._bucket, full_key, size,
        )
        return size
