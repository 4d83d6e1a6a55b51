"""Command-line interface for bunchmail.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog

from bunchmail import __version__
from bunchmail.config import Settings, get_settings
from bunchmail.exceptions import BunchmailError, ConfigurationError
from bunchmail.models import Bucket, RunSummary
from bunchmail.pipeline import Buncher

logger = structlog.get_logger()

CONFIRMATION_TEMPLATE = """
Using the following settings:

------
Output Maildir: {output_dir}
(The output Maildir will be cleared!!!)

Inboxes to bunch: {inboxes}

Archive boxes to bunch: {archives}

Your identities: {identities}

Flags to remove: {remove_flags}

Eliminate duplicates: {no_dupes}
-----

Is this OK? (y/n): """


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bunchmail",
        description="Bunch several inbox and archive maildirs into one de-duplicated maildir",
    )
    parser.add_argument(
        "--bunchpath",
        default=None,
        help="The directory path to the bunch (output) maildir. It will be cleared!",
    )
    parser.add_argument("--inboxes", default=None, help="Comma separated list of Inbox maildir paths")
    parser.add_argument(
        "--archives", default=None, help="Comma separated list of Archive maildir paths"
    )
    parser.add_argument(
        "--identities",
        default=None,
        help="Comma separated list of all mail addresses you use(d) to send mail (for sent mail collation)",
    )
    parser.add_argument(
        "--removeflags", default=None, help='Flags to remove from mail (e.g. "FRT")'
    )
    parser.add_argument(
        "--nodupes",
        action="store_true",
        default=None,
        help="Discard duplicate messages instead of writing them",
    )
    parser.add_argument(
        "--domain", default=None, help="The domain to use for message files (default: bunchmail.local)"
    )
    parser.add_argument(
        "--dupes-log", type=Path, default=None, help="Where to write the duplicate audit log"
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    parser.add_argument(
        "-y", "--yes", action="store_true", help="Do not ask for confirmation before starting"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _settings_from_args(parsed: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {
        "output_dir": parsed.bunchpath,
        "inbox_paths": parsed.inboxes,
        "archive_paths": parsed.archives,
        "identities": parsed.identities,
        "remove_flags": parsed.removeflags,
        "no_dupes": parsed.nodupes,
        "domain": parsed.domain,
        "dupes_log_path": parsed.dupes_log,
        "log_level": parsed.log_level,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if not overrides:
        return get_settings()
    return Settings(**overrides)


def _configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def _confirm(settings: Settings, ask: Callable[[str], str] = input) -> bool:
    prompt = CONFIRMATION_TEMPLATE.format(
        output_dir=settings.output_dir,
        inboxes=[str(p) for p in settings.inbox_paths],
        archives=[str(p) for p in settings.archive_paths],
        identities=settings.identities,
        remove_flags=settings.remove_flags,
        no_dupes=settings.no_dupes,
    )
    try:
        answer = ask(prompt)
    except EOFError:
        return False
    return answer.strip().upper() == "Y"


def _print_summary(summary: RunSummary) -> None:
    print(
        f"Total Messages: {summary.total_messages} Duplicates: {summary.duplicates} "
        f"No Date: {summary.no_timestamp} No Message-ID: {summary.no_message_id}"
    )
    print(
        f"Size of inbox: {summary.bucket_sizes.get(Bucket.INBOX, 0)}, "
        f"Size of archives: {summary.bucket_sizes.get(Bucket.ARCHIVE, 0)}, "
        f"Size of sent: {summary.bucket_sizes.get(Bucket.SENT, 0)}"
    )
    print(f"Written: {summary.total_written}")


def main(args: list[str] | None = None, ask: Callable[[str], str] = input) -> int:
    """Main entry point for the bunchmail CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.
        ask: Prompt function used for the confirmation question.

    Returns:
        Exit code (0 for success, 1 for a failed run, 2 for bad usage or a
        declined confirmation).
    """
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        settings = _settings_from_args(parsed)
        settings.validate_for_run()
    except (ConfigurationError, ValueError) as exc:
        print(exc, file=sys.stderr)
        parser.print_usage(sys.stderr)
        print("Cannot continue", file=sys.stderr)
        return 2

    _configure_logging(settings)
    logger.info("bunchmail_started", version=__version__)

    if not parsed.yes and not _confirm(settings, ask):
        logger.info("bunchmail_cancelled")
        return 2

    try:
        with Buncher(settings) as buncher:
            summary = buncher.run()
    except BunchmailError as exc:
        logger.error("bunchmail_failed", error=str(exc))
        return 1

    _print_summary(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
