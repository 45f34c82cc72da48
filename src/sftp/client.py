# src/sftp/client.py
"""SFTP client on paramiko: connect, list, upload, download and delete.

Usage:
    with SftpClient(config) as sftp:
        sftp.upload_file("daily.tar.gz", "/incoming/daily.tar.gz")
"""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from typing import Any

from opshelpers.sftp.models import RemoteFile, SftpConfig

logger = logging.getLogger(__name__)


class SftpConnectionError(Exception):
    """The server is unreachable, refused authentication or has no SFTP subsystem."""


def load_private_key(config: SftpConfig) -> Any | None:
    """Parse ``config.private_key_file``, or return None when it is unusable.

    None means password authentication should be used. Without a password
    the key error is raised as SftpConnectionError.
    """
    import paramiko

    if config.private_key_file is None:
        if not config.password.get_secret_value():
            raise SftpConnectionError("No private key or password configured")
        return None
    try:
        return paramiko.PKey.from_path(config.private_key_file)
    except (OSError, paramiko.SSHException) as exc:
        if not config.password.get_secret_value():
            raise SftpConnectionError(
                f"Cannot load private key {config.private_key_file}: {exc}"
            ) from exc
        logger.warning(
            "Private key %s unusable (%s); falling back to password",
            config.private_key_file, exc,
        )
        return None


class SftpClient:
    """One SSH connection with an SFTP session on top."""

    def __init__(self, config: SftpConfig) -> None:
        self._config = config
        self._ssh: Any = None
        self._sftp: Any = None

    def __enter__(self) -> SftpClient:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        return self._sftp is not None

    def connect(self) -> None:
        """Dial the server, retrying on timeouts only, and open SFTP.

        Raises:
            SftpConnectionError: Every attempt timed out, the server refused
                the connection or the credentials, or SFTP is unavailable.
        """
        import paramiko

        config = self._config
        pkey = load_private_key(config)
        auth: dict[str, Any] = (
            {"pkey": pkey} if pkey is not None
            else {"password": config.password.get_secret_value()}
        )

        for attempt in range(1, config.connect_retries + 1):
            ssh = paramiko.SSHClient()
            if config.strict_host_keys:
                ssh.load_system_host_keys()
                ssh.set_missing_host_key_policy(paramiko.RejectPolicy())
            else:
                ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
            try:
                ssh.connect(
                    config.host,
                    port=config.port,
                    username=config.username,
                    timeout=config.timeout,
                    allow_agent=False,
                    look_for_keys=False,
                    **auth,
                )
            except TimeoutError as exc:
                ssh.close()
                logger.warning(
                    "Timed out connecting to %s (attempt %d/%d)",
                    config.address, attempt, config.connect_retries,
                )
                if attempt == config.connect_retries:
                    raise SftpConnectionError(
                        f"Unable to connect to SSH server {config.address}: {exc}"
                    ) from exc
                time.sleep(config.retry_delay)
                continue
            except (OSError, paramiko.SSHException) as exc:
                ssh.close()
                raise SftpConnectionError(
                    f"Unable to connect to SSH server {config.address}: {exc}"
                ) from exc
            break

        try:
            self._sftp = ssh.open_sftp()
        except (OSError, paramiko.SSHException) as exc:
            ssh.close()
            raise SftpConnectionError(f"Unable to create SFTP client: {exc}") from exc
        self._ssh = ssh
        logger.info("Connected to sftp://%s@%s", config.username, config.address)

    def close(self) -> None:
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._ssh is not None:
            self._ssh.close()
            self._ssh = None

    def _session(self) -> Any:
        if self._sftp is None:
            raise SftpConnectionError("Not connected")
        return self._sftp

    def list_files(self, path: str = ".") -> list[RemoteFile]:
        """Entries of the remote directory ``path``, sorted by name."""
        files = [
            RemoteFile(
                name=attr.filename,
                size=attr.st_size or 0,
                mode=attr.st_mode or 0,
                modified=(
                    datetime.fromtimestamp(attr.st_mtime, tz=timezone.utc)
                    if attr.st_mtime is not None else None
                ),
            )
            for attr in self._session().listdir_attr(path)
        ]
        return sorted(files, key=lambda f: f.name)

    def upload_file(self, local_path: str | os.PathLike[str], remote_path: str) -> int:
        """Copy a local file to ``remote_path`` and return the bytes sent.

        Raises:
            OSError: The local file cannot be read or the remote one written.
        """
        size = os.path.getsize(local_path)
        self._session().put(os.fspath(local_path), remote_path)
        logger.info(
            "Uploaded %s to sftp://%s%s (%d bytes)",
            local_path, self._config.address, remote_path, size,
        )
        return size

    def download_file(self, remote_path: str, local_path: str | os.PathLike[str]) -> int:
        """Copy ``remote_path`` to a local file, created or truncated.

        Returns the size of the local file.
        """
        self._session().get(remote_path, os.fspath(local_path))
        size = os.path.getsize(local_path)
        logger.info(
            "Downloaded sftp://%s%s to %s (%d bytes)",
            self._config.address, remote_path, local_path, size,
        )
        return size

    def delete_file(self, remote_path: str) -> None:
        self._session().remove(remote_path)
        logger.info("Deleted sftp://%s%s", self._config.address, remote_path)
