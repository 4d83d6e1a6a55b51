"""Write messages into the consolidated output maildir."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import structlog

from bunchmail.exceptions import OutputWriteError
from bunchmail.maildir.parsing import FLAGS_DELIMITER
from bunchmail.models import Bucket, MailMessage
from bunchmail.utils import copy_file_contents, reset_directory

logger = structlog.get_logger()

MAILDIR_SUBDIRS = ("cur", "new", "tmp")


def kept_flags(flags: str, remove_flags: str) -> str:
    """Drop every flag listed in ``remove_flags`` (case-insensitive), keeping order."""

    removed = set(remove_flags.upper())
    return "".join(flag for flag in flags if flag.upper() not in removed)


def build_filename(unix_time: int, sequence: int, domain: str, flags: str) -> str:
    """``<unix time>.<sequence, 9 digits>.<domain>:2,<flags>``"""

    return f"{unix_time}.{sequence:09d}.{domain}{FLAGS_DELIMITER}{flags}"


def prepare_output_root(root: Path) -> None:
    """Clear ``root`` and create an empty maildir for every bucket below it.

    Raises:
        OutputWriteError: If the old tree cannot be removed or the new one created.
    """

    root = Path(root)
    try:
        reset_directory(root)
        for bucket in Bucket:
            for subdir in MAILDIR_SUBDIRS:
                (root / bucket.value / subdir).mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputWriteError(f"Cannot prepare bunch directory {root}: {exc}") from exc

    logger.info("output_root_prepared", path=str(root))


def save_message(
    message: MailMessage,
    bucket_dir: Path,
    domain: str,
    remove_flags: str,
    sequence: Iterator[int],
) -> Path:
    """Copy a message into a bucket maildir under a new, unique file name.

    Messages that keep any flags go to ``cur/``, the rest to ``new/``. The
    copy's modification time is set to the message timestamp.

    Args:
        message: Message to write.
        bucket_dir: Maildir of the target bucket (contains cur/new/tmp).
        domain: Domain part of the generated file name.
        remove_flags: Flags to drop from the message.
        sequence: Source of unique sequence numbers.

    Returns:
        Path of the written file.

    Raises:
        OutputWriteError: If copying or setting the file time fails.
    """

    flags = kept_flags(message.flags, remove_flags)
    name = build_filename(message.unix_time, next(sequence), domain, flags)
    target = Path(bucket_dir) / ("cur" if flags else "new") / name

    try:
        copy_file_contents(message.source_path, target)
        mtime = message.timestamp.timestamp()
        os.utime(target, (mtime, mtime))
    except OSError as exc:
        raise OutputWriteError(
            f"Cannot write {message.source_path} to {target}: {exc}"
        ) from exc

    logger.debug("message_saved", source=str(message.source_path), target=str(target))
    return target
