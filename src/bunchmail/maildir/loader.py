"""Load maildir message files into :class:`~bunchmail.models.MailMessage` records."""

from __future__ import annotations

from email import errors, message_from_binary_file
from email.message import Message
from pathlib import Path

import structlog

from bunchmail.exceptions import MessageLoadError
from bunchmail.maildir.parsing import (
    flags_from_filename,
    header_value,
    resolve_identity,
    resolve_timestamp,
    sender_address,
)
from bunchmail.models import MailMessage

logger = structlog.get_logger()

# Defects that mean the header block itself could not be read.
_FATAL_DEFECTS = (
    errors.MissingHeaderBodySeparatorDefect,
    errors.FirstHeaderLineIsContinuationDefect,
)


def _read_headers(path: Path) -> Message:
    try:
        with open(path, "rb") as fh:
            parsed = message_from_binary_file(fh)
    except OSError as exc:
        raise MessageLoadError(f"Cannot read {path}: {exc}") from exc

    if not parsed.keys():
        raise MessageLoadError(f"No header section in {path}")
    for defect in parsed.defects:
        if isinstance(defect, _FATAL_DEFECTS):
            raise MessageLoadError(f"Malformed header section in {path}: {defect!r}")
    return parsed


def load_message(path: Path, domain: str) -> MailMessage:
    """Load one maildir message file.

    Header problems (no Message-ID, no usable date, odd sender) are
    recorded on the returned record; they never fail the load.

    Args:
        path: Message file, named ``<anything>:2,<FLAGS>``.
        domain: Domain used when a Message-ID has to be synthesized.

    Returns:
        MailMessage: The loaded record, not yet checked for duplicates.

    Raises:
        MessageLoadError: If the file is unreadable, malformed, or not
            named like a maildir message.
    """

    path = Path(path)
    flags = flags_from_filename(path)
    parsed = _read_headers(path)

    timestamp, no_timestamp = resolve_timestamp(parsed, path)
    message_id, synthetic = resolve_identity(parsed, path, domain)

    if synthetic:
        logger.warning("message_without_id", path=str(path), synthesized_id=message_id)
    if no_timestamp:
        logger.warning("message_without_timestamp", path=str(path), using="unix_epoch")

    return MailMessage(
        id=message_id,
        timestamp=timestamp,
        subject=header_value(parsed, "Subject"),
        from_email=sender_address(parsed),
        flags=flags,
        source_path=path,
        has_synthetic_id=synthetic,
        has_no_timestamp=no_timestamp,
    )
