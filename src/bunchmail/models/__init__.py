"""Data models for bunchmail."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .mail_message import UNIX_EPOCH, MailMessage


class Bucket(str, Enum):
    """Output folder a message is filed into.

    The values double as the folder names inside the output maildir.
    """

    INBOX = "Inbox"
    SENT = "Sent"
    ARCHIVE = "Archive"


@dataclass(frozen=True)
class RunSummary:
    """Counters reported at the end of a run."""

    total_messages: int
    duplicates: int
    no_timestamp: int
    no_message_id: int
    bucket_sizes: dict[Bucket, int] = field(default_factory=dict)
    written: dict[Bucket, int] = field(default_factory=dict)

    @property
    def total_written(self) -> int:
        return sum(self.written.values())


__all__ = ["Bucket", "MailMessage", "RunSummary", "UNIX_EPOCH"]
