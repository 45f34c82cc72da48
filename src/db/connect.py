# src/db/connect.py
"""Pooled SQLAlchemy engines for MySQL and PostgreSQL.

The engine returned by ``connect_mysql``/``connect_postgres`` belongs to the
caller: call ``engine.dispose()`` when done, or use ``database_engine``.
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from opshelpers.db.dsn import mysql_url, postgres_url, render_url
from opshelpers.db.models import DatabaseConfig

logger = logging.getLogger(__name__)

POOL_DEFAULTS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 0,
    "pool_recycle": 180,  # seconds
    "pool_pre_ping": True,
}


class DatabaseUnavailableError(Exception):
    """The database host is unreachable or refused the connection."""


def check_port(host: str, port: int, timeout: float = 5.0) -> None:
    """Open and close a TCP connection to ``host:port``.

    Some drivers wait minutes before giving up on an unreachable host; this
    fails within ``timeout`` seconds instead.
    """
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except OSError as exc:
        raise DatabaseUnavailableError(f"Cannot reach {host}:{port}: {exc}") from exc


def create_pooled_engine(url: URL | str, **pool_options: Any) -> Engine:
    """Create an engine with POOL_DEFAULTS, overridable per call."""
    options = {**POOL_DEFAULTS, **pool_options}
    return create_engine(url, **options)


def verify_connection(engine: Engine) -> None:
    """Run ``SELECT 1``; raises DatabaseUnavailableError on failure."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise DatabaseUnavailableError(f"Connection check failed: {exc}") from exc


def _connect(url: URL, config: DatabaseConfig, **pool_options: Any) -> Engine:
    check_port(config.host, config.port, timeout=config.connect_timeout)
    engine = create_pooled_engine(url, **pool_options)
    try:
        verify_connection(engine)
    except DatabaseUnavailableError:
        engine.dispose()
        raise
    logger.info("Connected to %s", render_url(url))
    return engine


def connect_mysql(config: DatabaseConfig, **pool_options: Any) -> Engine:
    """Connect to MySQL in autocommit mode."""
    pool_options.setdefault("isolation_level", "AUTOCOMMIT")
    return _connect(mysql_url(config), config, **pool_options)


def connect_postgres(config: DatabaseConfig, **pool_options: Any) -> Engine:
    return _connect(postgres_url(config), config, **pool_options)


@contextmanager
def database_engine(url: URL | str, **pool_options: Any) -> Iterator[Engine]:
    """Yield a pooled engine and dispose of it on exit."""
    engine = create_pooled_engine(url, **pool_options)
    try:
        yield engine
    finally:
        engine.dispose()
