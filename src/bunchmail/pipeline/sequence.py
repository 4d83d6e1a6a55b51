"""Unique sequence numbers for output file names.

Two messages with the same timestamp would otherwise get the same file
name, so every write draws a number from a :class:`SequenceIssuer`.
"""

from __future__ import annotations

import queue
import threading

import structlog

logger = structlog.get_logger()


class SequenceIssuer:
    """Hands out 0, 1, 2, ... from a background thread.

    The producer thread holds at most one number in a single-slot queue and
    blocks until it is taken, so values are never skipped or repeated no
    matter how many threads call :meth:`next`.
    """

    def __init__(self, start: int = 0) -> None:
        self._slot: queue.Queue[int] = queue.Queue(maxsize=1)
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._produce, args=(start,), name="bunchmail-sequence", daemon=True
        )
        self._thread.start()

    def _produce(self, start: int) -> None:
        value = start
        while not self._stop.is_set():
            self._slot.put(value)
            value += 1

    def next(self) -> int:
        """Block until the next number is available and return it."""
        return self._slot.get()

    def __next__(self) -> int:
        return self.next()

    def __iter__(self) -> SequenceIssuer:
        return self

    def close(self) -> None:
        """Stop the producer thread. Numbers already handed out stay unique.

        Taking the pending value frees the slot, so a producer blocked in
        ``put`` wakes up, sees the stop flag and exits after at most one
        more put.
        """

        self._stop.set()
        while self._thread.is_alive():
            try:
                self._slot.get_nowait()
            except queue.Empty:
                pass
            self._thread.join(timeout=0.01)
        logger.debug("sequence_issuer_stopped")

    def __enter__(self) -> SequenceIssuer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
