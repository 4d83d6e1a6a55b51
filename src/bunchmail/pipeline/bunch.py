"""The bunching run: read every input maildir, then write the output maildir.

Reading is strictly sequential, so the deduplication index and the bucket
lists in :class:`BunchContext` need no locking.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from bunchmail.config import Settings
from bunchmail.index import DeduplicationIndex, DuplicateLog
from bunchmail.maildir import load_message, prepare_output_root, save_message
from bunchmail.models import Bucket, MailMessage, RunSummary
from bunchmail.pipeline.classifier import classify
from bunchmail.pipeline.sequence import SequenceIssuer
from bunchmail.utils import list_messages

logger = structlog.get_logger()

MAILDIR_READ_ORDER = ("new", "cur", "tmp")
BUCKET_WRITE_ORDER = (Bucket.INBOX, Bucket.SENT, Bucket.ARCHIVE)


@dataclass
class BunchContext:
    """Mutable state of one run."""

    duplicate_log: DuplicateLog
    dedup: DeduplicationIndex = field(default_factory=DeduplicationIndex)
    buckets: dict[Bucket, list[MailMessage]] = field(
        default_factory=lambda: {bucket: [] for bucket in Bucket}
    )
    written: dict[Bucket, int] = field(default_factory=lambda: {bucket: 0 for bucket in Bucket})
    total: int = 0
    duplicates: int = 0
    no_timestamp: int = 0
    no_message_id: int = 0

    def summary(self) -> RunSummary:
        return RunSummary(
            total_messages=self.total,
            duplicates=self.duplicates,
            no_timestamp=self.no_timestamp,
            no_message_id=self.no_message_id,
            bucket_sizes={bucket: len(msgs) for bucket, msgs in self.buckets.items()},
            written=dict(self.written),
        )


class Buncher:
    """Collects messages from the configured maildirs and files them into one.

    Typical use::

        with Buncher(settings) as buncher:
            summary = buncher.run()
    """

    def __init__(
        self,
        settings: Settings,
        sequence: Iterator[int] | None = None,
        context: BunchContext | None = None,
    ) -> None:
        """Initialize a run.

        Args:
            settings: Run configuration; ``validate_for_run`` should have passed.
            sequence: Source of unique file name numbers. If None, starts a
                :class:`SequenceIssuer` owned by this run.
            context: Run state. If None, a fresh one writing duplicates to
                ``settings.dupes_log_path``.
        """

        self.settings = settings
        self._owns_sequence = sequence is None
        self.sequence: Iterator[int] = sequence if sequence is not None else SequenceIssuer()
        self.context = context or BunchContext(duplicate_log=DuplicateLog(settings.dupes_log_path))

    def ingest_file(self, path: Path, is_archive: bool) -> MailMessage:
        """Load, de-duplicate and classify a single message file."""

        ctx = self.context
        message = load_message(path, self.settings.domain)

        if ctx.dedup.observe(message.id):
            message = message.model_copy(update={"is_duplicate": True})
            ctx.duplicate_log.record(message)
            ctx.duplicates += 1
        if message.has_no_timestamp:
            ctx.no_timestamp += 1
        if message.has_synthetic_id:
            ctx.no_message_id += 1

        bucket = classify(message, is_archive, self.settings.identities)
        ctx.buckets[bucket].append(message)
        ctx.total += 1

        if ctx.total % self.settings.progress_interval == 0:
            logger.info("read_progress", messages=ctx.total)
        return message

    def ingest_directory(self, path: Path, is_archive: bool) -> int:
        """Read every message in one ``cur``/``new``/``tmp`` directory.

        Returns:
            Number of messages read.
        """

        files = list_messages(Path(path))
        for file_path in files:
            self.ingest_file(file_path, is_archive)
        logger.debug("directory_ingested", path=str(path), messages=len(files), archive=is_archive)
        return len(files)

    def ingest_maildir(self, maildir: Path, is_archive: bool) -> int:
        """Read the ``new``, ``cur`` and ``tmp`` folders of one maildir."""

        count = sum(
            self.ingest_directory(Path(maildir) / subdir, is_archive)
            for subdir in MAILDIR_READ_ORDER
        )
        logger.info("maildir_ingested", path=str(maildir), messages=count, archive=is_archive)
        return count

    def ingest(self) -> None:
        """Read all inbox maildirs, then all archive maildirs, logging duplicates."""

        with self.context.duplicate_log:
            for maildir in self.settings.inbox_paths:
                self.ingest_maildir(maildir, is_archive=False)
            for maildir in self.settings.archive_paths:
                self.ingest_maildir(maildir, is_archive=True)

    def write_buckets(self) -> None:
        """Create the output maildir and write every collected message into it."""

        root = Path(self.settings.output_dir)
        prepare_output_root(root)

        ctx = self.context
        interval = self.settings.progress_interval
        for bucket in BUCKET_WRITE_ORDER:
            messages = ctx.buckets[bucket]
            for message in messages:
                if self.settings.no_dupes and message.is_duplicate:
                    continue
                save_message(
                    message,
                    root / bucket.value,
                    self.settings.domain,
                    self.settings.remove_flags,
                    self.sequence,
                )
                ctx.written[bucket] += 1
                if ctx.written[bucket] % interval == 0:
                    logger.info("write_progress", bucket=bucket.value, messages=ctx.written[bucket])
            logger.info(
                "bucket_written",
                bucket=bucket.value,
                written=ctx.written[bucket],
                total=len(messages),
                skipped_duplicates=len(messages) - ctx.written[bucket],
            )

    def run(self) -> RunSummary:
        """Ingest all inputs, then write the output maildir.

        Raises:
            MaildirError: On any unreadable input or failed write. Output
                written so far is left in place.
        """

        self.ingest()
        self.write_buckets()

        summary = self.context.summary()
        logger.info(
            "bunch_completed",
            total=summary.total_messages,
            duplicates=summary.duplicates,
            no_timestamp=summary.no_timestamp,
            no_message_id=summary.no_message_id,
            written=summary.total_written,
            duplicates_log=str(self.context.duplicate_log.path),
        )
        return summary

    def close(self) -> None:
        if self._owns_sequence and isinstance(self.sequence, SequenceIssuer):
            self.sequence.close()

    def __enter__(self) -> Buncher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
