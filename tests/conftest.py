"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

MessageWriter = Callable[..., Path]


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo logging configuration done by the CLI."""
    yield
    structlog.reset_defaults()


def build_message(headers: list[tuple[str, str]], body: str = "Hello.\n") -> bytes:
    lines = [f"{name}: {value}" for name, value in headers]
    return ("\n".join(lines) + "\n\n" + body).encode("utf-8")


@pytest.fixture
def message_bytes() -> Callable[..., bytes]:
    """Render headers and a body as raw RFC 5322 bytes."""
    return build_message


@pytest.fixture
def write_message() -> MessageWriter:
    """Write a message file: ``write_message(directory, name, headers, body=...)``."""

    def _write(
        directory: Path,
        name: str,
        headers: list[tuple[str, str]],
        body: str = "Hello.\n",
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_bytes(build_message(headers, body))
        return path

    return _write


@pytest.fixture
def make_maildir() -> Callable[[Path], Path]:
    """Create an empty maildir (cur/new/tmp) at the given path."""

    def _make(path: Path) -> Path:
        for subdir in ("cur", "new", "tmp"):
            (path / subdir).mkdir(parents=True, exist_ok=True)
        return path

    return _make


@pytest.fixture
def settings(tmp_path: Path):
    """Provide settings pointing at temporary directories."""
    from bunchmail.config import Settings

    return Settings(
        output_dir=tmp_path / "bunch",
        inbox_paths=[tmp_path / "inbox"],
        archive_paths=[tmp_path / "archive"],
        identities=["me@example.com"],
        domain="test.local",
        dupes_log_path=tmp_path / "dupes.log",
        log_level="DEBUG",
    )


@pytest.fixture
def counter():
    """A plain, deterministic sequence source."""
    import itertools

    return itertools.count()
