# tests/unit/storage/test_unit_s3_uploader.py
"""Tests for storage/s3_uploader.py and uploader_factory.py: mocked S3 client."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from opshelpers.config.settings import Settings
from opshelpers.storage.s3_uploader import S3Uploader, content_type_for, endpoint_url
from opshelpers.storage.uploader_factory import create_uploader


@pytest.fixture
def mock_uploader():
    """S3Uploader with a mocked boto3 client."""
    with patch("opshelpers.storage.s3_uploader.S3Uploader.__init__", return_value=None):
        uploader = S3Uploader.__new__(S3Uploader)
        uploader._s3 = MagicMock()
        uploader._bucket = "test-bucket"
        uploader._prefix = "incoming/"
    return uploader


class TestContentType:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("a.tar.gz", "application/x-gzip"),
            ("a.tar", "application/x-tar"),
            ("a.TXT", "text/plain"),
            ("a.dat", "text/plain"),
            ("a.log", "text/plain"),
            ("a.csv", "text/csv"),
            ("a.bin", "application/octet-stream"),
            ("noext", "application/octet-stream"),
        ],
    )
    def test_mapping(self, name, expected):
        assert content_type_for(name) == expected


class TestEndpointUrl:
    def test_adds_https(self):
        assert endpoint_url("minio:9000") == "https://minio:9000"

    def test_adds_http_when_insecure(self):
        assert endpoint_url("minio:9000", secure=False) == "http://minio:9000"

    def test_keeps_scheme(self):
        assert endpoint_url("http://minio:9000", secure=True) == "http://minio:9000"


class TestS3Uploader:
    def test_upload_file(self, mock_uploader, tmp_path: Path):
        src = tmp_path / "batch.tar.gz"
        src.write_bytes(b"x" * 42)
        sent = mock_uploader.upload_file(src, "2024/batch.tar.gz")
        assert sent == 42
        mock_uploader._s3.upload_file.assert_called_once_with(
            str(src),
            "test-bucket",
            "incoming/2024/batch.tar.gz",
            ExtraArgs={"ContentType": "application/x-gzip"},
        )

    def test_missing_source(self, mock_uploader, tmp_path: Path):
        with pytest.raises(OSError):
            mock_uploader.upload_file(tmp_path / "missing.csv", "k")
        mock_uploader._s3.upload_file.assert_not_called()

    def test_full_key(self, mock_uploader):
        assert mock_uploader.full_key("/a.txt") == "incoming/a.txt"

    def test_client_kwargs(self):
        with patch("boto3.client") as client:
            S3Uploader(
                bucket="b",
                endpoint="minio:9000",
                access_key_id="AK",
                secret_access_key="SK",
                region="eu-west-1",
                secure=False,
                prefix="p/",
            )
        client.assert_called_once_with(
            "s3",
            region_name="eu-west-1",
            endpoint_url="http://minio:9000",
            aws_access_key_id="AK",
            aws_secret_access_key="SK",
        )

    def test_default_credential_chain(self):
        with patch("boto3.client") as client:
            uploader = S3Uploader(bucket="b")
        client.assert_called_once_with("s3")
        assert uploader.full_key("k") == "k"


class TestCreateUploader:
    def test_requires_bucket(self):
        with pytest.raises(ValueError, match="S3_BUCKET"):
            create_uploader(Settings(_env_file=None))

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            s3_endpoint="minio:9000",
            s3_bucket="archives",
            s3_access_key_id="AK",
            s3_secret_access_key="SK",
            s3_prefix="daily",
        )
        with patch("boto3.client") as client:
            uploader = create_uploader(settings)
        assert uploader.full_key("x.tar.gz") == "daily/x.tar.gz"
        kwargs = client.call_args.kwargs
        assert kwargs["endpoint_url"] == "https://minio:9000"
        assert kwargs["aws_secret_access_key"] == "SK"
