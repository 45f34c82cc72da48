# src/sftp/models.py
"""SFTP models: SftpConfig, RemoteFile."""

from __future__ import annotations

import stat
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr


class SftpConfig(BaseModel):
    """Address and credentials of one SFTP server.

    A readable ``private_key_file`` is used for authentication; otherwise
    ``password`` is.
    """

    host: str = Field(min_length=1)
    port: int = Field(default=22, gt=0, le=65535)
    username: str = Field(min_length=1)
    password: SecretStr = SecretStr("")
    private_key_file: Path | None = None
    timeout: float = Field(default=5.0, gt=0)
    connect_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=2.0, ge=0)
    strict_host_keys: bool = False

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class RemoteFile(BaseModel):
    """One directory listing entry on the server."""

    name: str
    size: int = 0
    mode: int = 0
    modified: datetime | None = None

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)
