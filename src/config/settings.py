# src/config/settings.py
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: logging, archive
defaults, the database connection, the S3 upload target and the SFTP server.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from opshelpers.db.models import DatabaseConfig
from opshelpers.logging.handlers import parse_size
from opshelpers.sftp.models import SftpConfig


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from the environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 6
    log_max_age_days: int = 30
    log_console: bool | None = None

    # === Archives ===
    archive_batch_recursive: bool = False
    archive_purge_sources: bool = True
    archive_fail_fast: bool = False

    # === Database ===
    db_dialect: Literal["none", "mysql", "postgres"] = "none"
    db_username: str = ""
    db_password: SecretStr = SecretStr("")
    db_host: str = "localhost"
    db_port: int = 0
    db_database: str = ""
    db_connect_timeout: int = 5

    # === S3 upload ===
    s3_endpoint: str = ""
    s3_access_key_id: str = ""
    s3_secret_access_key: SecretStr = SecretStr("")
    s3_bucket: str = ""
    s3_prefix: str = ""
    s3_region: str = ""
    s3_secure: bool = True

    # === SFTP ===
    sftp_host: str = ""
    sftp_port: int = 22
    sftp_username: str = ""
    sftp_password: SecretStr = SecretStr("")
    sftp_private_key_file: Path | None = None
    sftp_timeout: float = 5.0
    sftp_connect_retries: int = 3
    sftp_strict_host_keys: bool = False

    # --- Validators ---

    @field_validator("log_rotation")
    @classmethod
    def validate_log_rotation(cls, v: str) -> str:
        parse_size(v)
        return v

    @field_validator("log_retention", "log_max_age_days", "db_connect_timeout")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("db_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 <= v <= 65535:
            raise ValueError("db_port must be between 0 and 65535")
        return v

    @field_validator("sftp_port")
    @classmethod
    def validate_sftp_port(cls, v: int) -> int:
        if not 0 < v <= 65535:
            raise ValueError("sftp_port must be between 1 and 65535")
        return v

    @field_validator("sftp_connect_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Cross-field rules."""
        errors: list[str] = []

        if self.db_dialect != "none":
            if not self.db_database:
                errors.append("DB_DATABASE is required when DB_DIALECT is set")
            if not self.db_username:
                errors.append("DB_USERNAME is required when DB_DIALECT is set")

        if self.s3_endpoint and not self.s3_bucket:
            errors.append("S3_BUCKET is required when S3_ENDPOINT is set")

        if self.sftp_host:
            if not self.sftp_username:
                errors.append("SFTP_USERNAME is required when SFTP_HOST is set")
            if not self.sftp_password.get_secret_value() and self.sftp_private_key_file is None:
                errors.append(
                    "SFTP_PASSWORD or SFTP_PRIVATE_KEY_FILE is required when SFTP_HOST is set"
                )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def effective_db_port(self) -> int:
        """Configured port, or the dialect's default."""
        if self.db_port:
            return self.db_port
        return {"mysql": 3306, "postgres": 5432}.get(self.db_dialect, 0)

    @property
    def database_config(self) -> DatabaseConfig:
        if self.db_dialect == "none":
            raise ConfigurationError("No database configured (DB_DIALECT=none)")
        return DatabaseConfig(
            username=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.effective_db_port,
            database=self.db_database,
            connect_timeout=self.db_connect_timeout,
        )

    @property
    def sftp_config(self) -> SftpConfig:
        if not self.sftp_host:
            raise ConfigurationError("No SFTP server configured (SFTP_HOST is empty)")
        return SftpConfig(
            host=self.sftp_host,
            port=self.sftp_port,
            username=self.sftp_username,
            password=self.sftp_password,
            private_key_file=self.sftp_private_key_file,
            timeout=self.sftp_timeout,
            connect_retries=self.sftp_connect_retries,
            strict_host_keys=self.sftp_strict_host_keys,
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
