"""Decide which output folder a message belongs in."""

from __future__ import annotations

from collections.abc import Iterable

from bunchmail.models import Bucket, MailMessage


def is_own_address(address: str, identities: Iterable[str]) -> bool:
    """True if ``address`` equals one of ``identities``, ignoring case."""

    if not address:
        return False
    wanted = address.casefold()
    return any(identity.strip().casefold() == wanted for identity in identities)


def classify(message: MailMessage, is_archive_source: bool, identities: Iterable[str]) -> Bucket:
    """File mail sent from one of our own addresses under Sent, whatever its source.

    Everything else goes to Archive when it came from an archive maildir,
    otherwise to Inbox.
    """

    if is_own_address(message.from_email, identities):
        return Bucket.SENT
    if is_archive_source:
        return Bucket.ARCHIVE
    return Bucket.INBOX
