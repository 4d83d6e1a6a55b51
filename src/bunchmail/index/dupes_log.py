"""Tab separated audit log of duplicate messages."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TextIO

import structlog

from bunchmail.exceptions import OutputWriteError
from bunchmail.models import MailMessage

logger = structlog.get_logger()

HEADER = ("Message-ID", "From", "Subject", "Time", "Filename")

_FIELD_BREAKS = re.compile(r"[\t\r\n]+")


def _field(value: object) -> str:
    return _FIELD_BREAKS.sub(" ", str(value))


class DuplicateLog:
    """Writes one line per duplicate: id, sender, subject, time, source file.

    Use as a context manager, or call :meth:`open` and :meth:`close`.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._fh: TextIO | None = None
        self.count = 0

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> None:
        try:
            self._fh = open(self._path, "w", encoding="utf-8", errors="replace", newline="\n")
            self._fh.write("\t".join(HEADER) + "\n")
        except OSError as exc:
            raise OutputWriteError(f"Cannot create duplicate log {self._path}: {exc}") from exc
        logger.debug("duplicate_log_opened", path=str(self._path))

    def record(self, message: MailMessage) -> None:
        if self._fh is None:
            raise RuntimeError("DuplicateLog.record() called before open()")
        row = (
            message.id,
            message.from_email,
            message.subject,
            message.timestamp.isoformat(),
            message.source_path,
        )
        try:
            self._fh.write("\t".join(_field(v) for v in row) + "\n")
        except OSError as exc:
            raise OutputWriteError(f"Cannot write duplicate log {self._path}: {exc}") from exc
        self.count += 1

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> DuplicateLog:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
