"""Unit tests for the output maildir writer."""

from __future__ import annotations

import itertools
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from bunchmail.exceptions import OutputWriteError
from bunchmail.maildir import prepare_output_root, save_message
from bunchmail.maildir.writer import build_filename, kept_flags
from bunchmail.models import Bucket, MailMessage

JAN_10 = datetime(2020, 1, 10, 10, 0, tzinfo=timezone.utc)
JAN_10_UNIX = 1578650400


@pytest.mark.parametrize(
    ("flags", "remove", "expected"),
    [
        ("FRS", "", "FRS"),
        ("FRS", "S", "FR"),
        ("FRS", "FRT", "S"),
        ("FRS", "frs", ""),
        ("DS", "x", "DS"),
    ],
)
def test_kept_flags(flags: str, remove: str, expected: str) -> None:
    assert kept_flags(flags, remove) == expected


def test_build_filename() -> None:
    assert build_filename(JAN_10_UNIX, 42, "test.local", "RS") == "1578650400.000000042.test.local:2,RS"
    assert build_filename(0, 0, "d", "") == "0.000000000.d:2,"


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    root = tmp_path / "bunch"
    prepare_output_root(root)
    return root


def _message(path: Path, flags: str, timestamp: datetime = JAN_10) -> MailMessage:
    return MailMessage(id="abc@x", timestamp=timestamp, flags=flags, source_path=path)


def test_prepare_output_root_creates_every_bucket(tmp_path: Path) -> None:
    root = tmp_path / "bunch"
    (root / "stale").mkdir(parents=True)
    (root / "stale" / "old-message").write_text("x")

    prepare_output_root(root)

    assert not (root / "stale").exists()
    for bucket in Bucket:
        for subdir in ("cur", "new", "tmp"):
            assert (root / bucket.value / subdir).is_dir()


def test_prepare_output_root_fails_on_a_file(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")

    with pytest.raises(OutputWriteError):
        prepare_output_root(blocker / "bunch")


def test_save_message_stripped_flags_go_to_new(tmp_path: Path, output_root: Path) -> None:
    source = tmp_path / "1000.abc:2,S"
    source.write_bytes(b"Subject: hi\n\nbody\n")

    target = save_message(
        _message(source, "S"), output_root / "Inbox", "test.local", "S", itertools.count(7)
    )

    assert target == output_root / "Inbox" / "new" / "1578650400.000000007.test.local:2,"
    assert target.read_bytes() == source.read_bytes()
    assert int(os.stat(target).st_mtime) == JAN_10_UNIX


def test_save_message_kept_flags_go_to_cur(tmp_path: Path, output_root: Path) -> None:
    source = tmp_path / "1000.abc:2,FS"
    source.write_bytes(b"Subject: hi\n\nbody\n")

    target = save_message(
        _message(source, "FS"), output_root / "Sent", "test.local", "F", itertools.count()
    )

    assert target.parent == output_root / "Sent" / "cur"
    assert target.name.endswith(":2,S")


def test_same_timestamp_gets_distinct_names(tmp_path: Path, output_root: Path) -> None:
    source = tmp_path / "1.a:2,"
    source.write_bytes(b"Subject: hi\n\n")
    sequence = itertools.count()

    first = save_message(_message(source, ""), output_root / "Inbox", "d", "", sequence)
    second = save_message(_message(source, ""), output_root / "Inbox", "d", "", sequence)

    assert first != second
    assert first.exists() and second.exists()


def test_save_message_missing_source(tmp_path: Path, output_root: Path) -> None:
    with pytest.raises(OutputWriteError):
        save_message(
            _message(tmp_path / "gone:2,", ""), output_root / "Inbox", "d", "", itertools.count()
        )
