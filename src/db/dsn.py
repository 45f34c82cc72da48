# src/db/dsn.py
"""Connection URLs for MySQL and PostgreSQL, plus password masking for logs."""

from __future__ import annotations

import re

from sqlalchemy.engine import URL

from opshelpers.db.models import DatabaseConfig

MYSQL_DRIVER = "mysql+pymysql"
POSTGRES_DRIVER = "postgresql+psycopg"

# userinfo runs to the last "@" of its whitespace-delimited token, so
# passwords may contain "/" or "@".
_CREDENTIALS_RE = re.compile(
    r"(?:^|(?<=[\s=\"']))"
    r"(?P<scheme>[A-Za-z][\w+.-]*://)?"
    r"(?P<user>[^:/@\s]+):(?!//)"
    r"(?P<password>\S*)@(?=[^@\s]*(?:\s|$))"
)


def mysql_url(config: DatabaseConfig) -> URL:
    """SQLAlchemy URL for MySQL via PyMySQL, with a connect timeout."""
    return URL.create(
        MYSQL_DRIVER,
        username=config.username,
        password=config.password.get_secret_value(),
        host=config.host,
        port=config.port,
        database=config.database,
        query={"connect_timeout": str(config.connect_timeout)},
    )


def postgres_url(config: DatabaseConfig) -> URL:
    """SQLAlchemy URL for PostgreSQL via psycopg 3, with a connect timeout."""
    return URL.create(
        POSTGRES_DRIVER,
        username=config.username,
        password=config.password.get_secret_value(),
        host=config.host,
        port=config.port,
        database=config.database,
        query={"connect_timeout": str(config.connect_timeout)},
    )


def render_url(url: URL, hide_password: bool = True) -> str:
    return url.render_as_string(hide_password=hide_password)


def mask_password(dsn: str) -> str:
    """Replace the password of the first ``user:password@`` with asterisks.

    >>> mask_password("postgresql://bob:secret@db:5432/app")
    'postgresql://bob:******@db:5432/app'
    """
    return _CREDENTIALS_RE.sub(
        lambda m: f"{m['scheme'] or ''}{m['user']}:{'*' * len(m['password'])}@",
        dsn, count=1,
    )
