"""Filesystem helpers used by the maildir reader and writer."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import structlog

from bunchmail.exceptions import MaildirError

logger = structlog.get_logger()

_COPY_CHUNK_SIZE = 1024 * 1024


def list_messages(path: Path) -> list[Path]:
    """List the message files of one maildir subfolder (``cur``, ``new`` or ``tmp``).

    Entries are returned sorted by name so that runs over the same input
    visit messages in the same order.

    Args:
        path: Directory to list.

    Returns:
        Paths of all entries in the directory.

    Raises:
        MaildirError: If the directory cannot be listed or contains a directory.
    """

    try:
        entries = sorted(os.scandir(path), key=lambda e: e.name)
    except OSError as exc:
        raise MaildirError(f"Cannot list {path}: {exc}") from exc

    files: list[Path] = []
    for entry in entries:
        if entry.is_dir():
            raise MaildirError(f"There shouldn't be a directory here! ({entry.path})")
        files.append(Path(entry.path))
    return files


def reset_directory(path: Path) -> None:
    """Remove ``path`` and everything below it, if it exists."""

    if path.exists() or path.is_symlink():
        logger.info("removing_directory", path=str(path))
        shutil.rmtree(path)


def copy_file_contents(src: Path, dst: Path) -> None:
    """Copy ``src`` to a new file ``dst`` byte for byte and flush it to disk.

    Raises:
        OSError: If either file cannot be opened, read or written.
    """

    with open(src, "rb") as fin, open(dst, "xb") as fout:
        shutil.copyfileobj(fin, fout, _COPY_CHUNK_SIZE)
        fout.flush()
        os.fsync(fout.fileno())
