"""Maildir message metadata model.

The model only references the file on disk; message bodies are never held
in memory, so tens of thousands of records can be collected before any
output is written.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class MailMessage(BaseModel):
    """A message loaded from a maildir, plus the facts derived from its headers."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Canonical Message-ID (synthesized when absent)")
    timestamp: datetime = Field(
        default=UNIX_EPOCH, description="Best guess of when the message was handled"
    )
    subject: str = Field(default="", description="Subject header")
    from_email: str = Field(default="", description="Parsed sender address, empty if unparseable")
    flags: str = Field(default="", description="Maildir flags taken from the file name")
    source_path: Path = Field(description="File the message was loaded from")

    is_duplicate: bool = Field(default=False, description="Another message had this id first")
    has_synthetic_id: bool = Field(default=False, description="id was derived from content")
    has_no_timestamp: bool = Field(default=False, description="No header yielded a date")

    @property
    def unix_time(self) -> int:
        """Timestamp as whole seconds since the epoch."""
        return math.floor(self.timestamp.timestamp())
