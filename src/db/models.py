# src/db/models.py
"""Database connection parameters."""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr


class DatabaseConfig(BaseModel):
    """Credentials and address of one database."""

    username: str
    password: SecretStr = SecretStr("")
    host: str = "localhost"
    port: int = Field(gt=0, le=65535)
    database: str
    connect_timeout: int = 5
