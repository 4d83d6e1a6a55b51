"""In-memory Message-ID index for a single run."""

from __future__ import annotations


class DeduplicationIndex:
    """Remembers which message ids have been seen in this run.

    The first message with a given id is the original; every later one is a
    duplicate. Which copy counts as first therefore follows input order.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def observe(self, message_id: str) -> bool:
        """Record ``message_id`` and report whether it had been seen before."""

        if message_id in self._seen:
            return True
        self._seen.add(message_id)
        return False

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)
