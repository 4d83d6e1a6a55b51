"""Helpers for deriving message metadata from raw maildir headers."""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone
from email.message import Message
from email.utils import parseaddr, parsedate_to_datetime
from pathlib import Path

import structlog

from bunchmail.exceptions import MessageLoadError
from bunchmail.models import UNIX_EPOCH

logger = structlog.get_logger()

FLAGS_DELIMITER = ":2,"

_COMMENT_RE = re.compile(r"\s\(.+\)")
_MESSAGE_ID_STRIP = " <>\t\r\n"


def header_value(message: Message, name: str) -> str:
    """Return the first ``name`` header as text, or an empty string."""

    value = message.get(name)
    if value is None:
        return ""
    # Undecodable 8-bit headers come back as email.header.Header objects.
    return str(value)


def flags_from_filename(path: Path) -> str:
    """Return the maildir info flags of a message file (``1234.host:2,RS`` -> ``RS``).

    Raises:
        MessageLoadError: If the file name has no ``:2,`` info part.
    """

    name = path.name
    if FLAGS_DELIMITER not in name:
        raise MessageLoadError(f"{path} is not a maildir message file (no '{FLAGS_DELIMITER}')")
    return name.split(FLAGS_DELIMITER)[1]


def parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError, OverflowError):
        return None
    if parsed.tzinfo is None:
        # "-0000" means the zone is unknown; treat it as UTC.
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def time_from_received(received: str) -> datetime | None:
    """Parse the date-time clause that ends a ``Received`` trace header.

    ``from a by b; Tue, 10 Jan 2020 10:00:00 +0000 (UTC)`` -> 2020-01-10 10:00 UTC
    """

    clause = received.split(";")[-1].strip(" \t\r\n")
    clause = _COMMENT_RE.sub("", clause)
    return parse_date(clause)


def resolve_timestamp(message: Message, source: Path | str = "") -> tuple[datetime, bool]:
    """Find the most trustworthy time a message was handled.

    The latest parseable ``Received`` header wins, since every hop appends
    one but they are not reliably in order. Without a usable ``Received``
    header the ``Date`` header is used, and without that the Unix epoch.

    Args:
        message: Parsed message headers.
        source: File the message came from, for log context.

    Returns:
        The resolved timestamp and whether no header yielded a date.
    """

    received_headers = [str(h) for h in message.get_all("Received") or []]

    latest: datetime | None = None
    for position, received in enumerate(received_headers):
        parsed = time_from_received(received)
        if parsed is None:
            if position == 0:
                logger.warning(
                    "received_header_unparseable",
                    path=str(source),
                    header=received.strip()[-80:],
                )
            continue
        if latest is None or parsed > latest:
            latest = parsed

    if latest is not None:
        return latest, False

    if received_headers:
        logger.warning("received_headers_unusable_falling_back_to_date", path=str(source))

    date = parse_date(header_value(message, "Date"))
    if date is not None:
        return date, False

    return UNIX_EPOCH, True


def clean_message_id(raw: str) -> str:
    return raw.strip(_MESSAGE_ID_STRIP)


def synthesize_message_id(path: Path, domain: str) -> str:
    """Build a Message-ID from the MD5 of the file's bytes: ``<hexdigest>@<domain>``.

    Byte-identical files always get the same id.

    Raises:
        MessageLoadError: If the file cannot be read.
    """

    digest = hashlib.md5(usedforsecurity=False)
    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(65536), b""):
                digest.update(chunk)
    except OSError as exc:
        raise MessageLoadError(f"Cannot read {path} to create a Message-ID: {exc}") from exc
    return f"{digest.hexdigest()}@{domain}"


def resolve_identity(message: Message, path: Path, domain: str) -> tuple[str, bool]:
    """Return the message's canonical id and whether it had to be synthesized."""

    message_id = clean_message_id(header_value(message, "Message-ID"))
    if message_id:
        return message_id, False
    return synthesize_message_id(path, domain), True


def sender_address(message: Message) -> str:
    """Return the bare ``From`` address, or ``""`` if it cannot be parsed.

    Odd charsets (iso-8859-9, koi8, ...) often break the header; such
    senders are treated as unknown rather than failing the message.
    """

    raw = header_value(message, "From")
    if not raw:
        return ""
    _, address = parseaddr(raw)
    if "@" not in address:
        return ""
    return address
