# src/main.py
"""CLI entry point: archive, extract, extract-all, gzip, gunzip, extract-date,
upload, sftp-upload, sftp-list, db-check.

Usage:
    opshelpers archive <archive> <source> [--relative-root DIR] [--keep-sources]
    opshelpers extract <archive> <dest>
    opshelpers extract-all <source_dir> <dest> [--recursive]
    opshelpers gzip <source> <dest>
    opshelpers gunzip <source> <dest>
    opshelpers extract-date <text>
    opshelpers upload <source> [--key KEY]
    opshelpers sftp-upload <source> [--remote PATH]
    opshelpers sftp-list [path]
    opshelpers db-check

Defaults not given on the command line come from Settings (.env).
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from opshelpers.version import __version__

if TYPE_CHECKING:
    from opshelpers.config.settings import Settings

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from opshelpers.config.settings import ConfigurationError, Settings

    try:
        settings = Settings()
    except (ConfigurationError, ValueError) as exc:
        print(f"Invalid configuration: {exc}")
        return 1
    _setup_logging(args.verbose, settings)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    args.settings = settings
    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="opshelpers",
        description=f"opshelpers v{__version__}: archive and file helpers",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- archive ---
    p_archive = subparsers.add_parser(
        "archive", help="Archive a directory into a tar.gz (consumes its files)",
    )
    p_archive.add_argument("archive", type=Path, help="Archive file to create")
    p_archive.add_argument("source", type=Path, help="Directory to archive")
    p_archive.add_argument(
        "--relative-root", type=Path, default=None,
        help="Compute entry names relative to this ancestor of SOURCE",
    )
    p_archive.add_argument(
        "--keep-sources", action="store_true",
        help="Do not delete archived files",
    )
    p_archive.add_argument(
        "--fail-fast", action="store_true",
        help="Abort on the first unreadable entry",
    )
    p_archive.set_defaults(func=_cmd_archive)

    # --- extract ---
    p_extract = subparsers.add_parser("extract", help="Extract one tar.gz archive")
    p_extract.add_argument("archive", type=Path, help="Archive to extract")
    p_extract.add_argument("dest", type=Path, help="Destination directory")
    p_extract.set_defaults(func=_cmd_extract)

    # --- extract-all ---
    p_all = subparsers.add_parser(
        "extract-all", help="Extract and remove every *.tar.gz in a directory",
    )
    p_all.add_argument("source_dir", type=Path, help="Directory to scan")
    p_all.add_argument("dest", type=Path, help="Destination directory")
    p_all.add_argument(
        "-r", "--recursive", action="store_true",
        help="Scan subdirectories too",
    )
    p_all.set_defaults(func=_cmd_extract_all)

    # --- gzip / gunzip ---
    p_gzip = subparsers.add_parser("gzip", help="Gzip a single file")
    p_gzip.add_argument("source", type=Path)
    p_gzip.add_argument("dest", type=Path)
    p_gzip.set_defaults(func=_cmd_gzip)

    p_gunzip = subparsers.add_parser("gunzip", help="Decompress a single gzip file")
    p_gunzip.add_argument("source", type=Path)
    p_gunzip.add_argument("dest", type=Path)
    p_gunzip.set_defaults(func=_cmd_gunzip)

    # --- extract-date ---
    p_date = subparsers.add_parser(
        "extract-date", help="Print the YYYYMMDD date found in a string",
    )
    p_date.add_argument("text", help="String to search, e.g. a file name")
    p_date.set_defaults(func=_cmd_extract_date)

    # --- upload ---
    p_upload = subparsers.add_parser("upload", help="Upload a file to the S3 bucket")
    p_upload.add_argument("source", type=Path, help="File to upload")
    p_upload.add_argument(
        "--key", default=None,
        help="Object key below S3_PREFIX (default: file name)",
    )
    p_upload.set_defaults(func=_cmd_upload)

    # --- sftp ---
    p_sftp_up = subparsers.add_parser(
        "sftp-upload", help="Upload a file to the SFTP server",
    )
    p_sftp_up.add_argument("source", type=Path, help="File to upload")
    p_sftp_up.add_argument(
        "--remote", default=None,
        help="Remote path (default: file name in the login directory)",
    )
    p_sftp_up.set_defaults(func=_cmd_sftp_upload)

    p_sftp_ls = subparsers.add_parser("sftp-list", help="List a directory on the SFTP server")
    p_sftp_ls.add_argument("path", nargs="?", default=".", help="Remote directory")
    p_sftp_ls.set_defaults(func=_cmd_sftp_list)

    # --- db-check ---
    p_db = subparsers.add_parser("db-check", help="Verify the configured database")
    p_db.set_defaults(func=_cmd_db_check)

    return parser


def _cmd_archive(args: argparse.Namespace) -> int:
    from opshelpers.archive.writer import create_archive

    source: Path = args.source
    if not source.is_dir():
        logger.error("Not a directory: %s", source)
        return 1

    settings = args.settings
    report = create_archive(
        args.archive, source, args.relative_root,
        purge=settings.archive_purge_sources and not args.keep_sources,
        fail_fast=args.fail_fast or settings.archive_fail_fast,
    )
    print(f"\nArchive written: {report.archive_path}")
    print(f"  Entries:   {len(report.entries)}")
    print(f"  Files:     {len(report.archived_files)}")
    print(f"  Failures:  {len(report.failures)}")
    return 0 if report.ok else 2


def _cmd_extract(args: argparse.Namespace) -> int:
    from opshelpers.archive.reader import extract_archive_file

    archive: Path = args.archive
    if not archive.is_file():
        logger.error("File not found: %s", archive)
        return 1

    entries = extract_archive_file(archive, args.dest)
    print(f"Extracted {len(entries)} entries into {args.dest}")
    return 0


def _cmd_extract_all(args: argparse.Namespace) -> int:
    from opshelpers.archive.batch import extract_all_in_directory

    source_dir: Path = args.source_dir
    if not source_dir.is_dir():
        logger.error("Not a directory: %s", source_dir)
        return 1

    result = extract_all_in_directory(
        source_dir, args.dest,
        recursive=args.recursive or args.settings.archive_batch_recursive,
    )
    print("\nBatch complete:")
    print(f"  Archives found:  {result.total_found}")
    print(f"  Extracted:       {result.succeeded}")
    print(f"  Failed:          {result.failed}")
    print(f"  Duration:        {result.duration_seconds:.1f}s")
    return 0 if result.failed == 0 else 2


def _cmd_gzip(args: argparse.Namespace) -> int:
    from opshelpers.files.compression import gzip_file

    gzip_file(args.source, args.dest)
    return 0


def _cmd_gunzip(args: argparse.Namespace) -> int:
    from opshelpers.files.compression import gunzip_file

    gunzip_file(args.source, args.dest)
    return 0


def _cmd_extract_date(args: argparse.Namespace) -> int:
    from opshelpers.text.dates import DateNotFoundError, extract_date

    try:
        print(extract_date(args.text))
    except DateNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def _cmd_upload(args: argparse.Namespace) -> int:
    from opshelpers.storage.uploader_factory import create_uploader

    source: Path = args.source
    if not source.is_file():
        logger.error("File not found: %s", source)
        return 1

    uploader = create_uploader(args.settings)
    key = args.key or source.name
    size = uploader.upload_file(source, key)
    print(f"Uploaded {size} bytes to {uploader.full_key(key)}")
    return 0


def _cmd_sftp_upload(args: argparse.Namespace) -> int:
    from opshelpers.sftp.client import SftpClient

    source: Path = args.source
    if not source.is_file():
        logger.error("File not found: %s", source)
        return 1

    with SftpClient(args.settings.sftp_config) as sftp:
        size = sftp.upload_file(source, args.remote or source.name)
    print(f"Uploaded {size} bytes to {args.remote or source.name}")
    return 0


def _cmd_sftp_list(args: argparse.Namespace) -> int:
    from opshelpers.sftp.client import SftpClient

    with SftpClient(args.settings.sftp_config) as sftp:
        files = sftp.list_files(args.path)
    for f in files:
        print(f"{'d' if f.is_dir else '-'} {f.size:>12} {f.name}")
    return 0


def _cmd_db_check(args: argparse.Namespace) -> int:
    from opshelpers.db.connect import (
        DatabaseUnavailableError,
        connect_mysql,
        connect_postgres,
    )

    settings = args.settings
    config = settings.database_config
    connect = connect_mysql if settings.db_dialect == "mysql" else connect_postgres
    try:
        engine = connect(config)
    except DatabaseUnavailableError as exc:
        logger.error("%s", exc)
        return 2
    engine.dispose()
    print(f"Database reachable: {settings.db_dialect}://{config.host}:{config.port}/{config.database}")
    return 0


def _setup_logging(verbose: bool, settings: Settings) -> None:
    """Configure logging for CLI usage; console output is on unless disabled."""
    from opshelpers.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        max_age_days=settings.log_max_age_days,
        console=True if settings.log_console is None else settings.log_console,
    )
    # Quiet noisy libraries
    for name in ("botocore", "boto3", "urllib3", "sqlalchemy.engine", "paramiko"):
        logging.getLogger(name).setLevel(logging.WARNING)


if __name__ == "__main__":
    raise SystemExit(main())
