"""Unit tests for the command-line interface."""

from __future__ import annotations

from pathlib import Path

import pytest

from bunchmail.cli import main


@pytest.fixture
def inputs(tmp_path: Path, make_maildir, write_message) -> Path:
    inbox = make_maildir(tmp_path / "inbox")
    write_message(inbox / "new", "1.a:2,", [("Message-ID", "<abc@x>"), ("From", "me@example.com")])
    return tmp_path


def _args(root: Path, *extra: str) -> list[str]:
    return [
        "--bunchpath",
        str(root / "bunch"),
        "--inboxes",
        str(root / "inbox"),
        "--identities",
        "me@example.com",
        "--dupes-log",
        str(root / "dupes.log"),
        *extra,
    ]


def test_missing_output_dir_is_a_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--inboxes", "/somewhere"], ask=lambda _: "y") == 2
    assert "output" in capsys.readouterr().err


def test_blank_output_dir_is_a_usage_error(
    inputs: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(inputs)
    (inputs / "precious.txt").write_text("keep me")

    assert main(["--bunchpath", "", "--inboxes", str(inputs / "inbox"), "-y"]) == 2

    assert "output" in capsys.readouterr().err
    assert (inputs / "precious.txt").exists()
    assert (inputs / "inbox" / "new" / "1.a:2,").exists()


def test_input_inside_output_is_a_usage_error(inputs: Path) -> None:
    args = _args(inputs, "-y")
    args[args.index("--bunchpath") + 1] = str(inputs)

    assert main(args) == 2
    assert (inputs / "inbox" / "new" / "1.a:2,").exists()


def test_declined_confirmation_does_nothing(inputs: Path) -> None:
    prompts: list[str] = []

    def answer(prompt: str) -> str:
        prompts.append(prompt)
        return "n"

    assert main(_args(inputs), ask=answer) == 2
    assert "The output Maildir will be cleared" in prompts[0]
    assert not (inputs / "bunch").exists()


def test_confirmed_run_writes_the_bunch(inputs: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(_args(inputs), ask=lambda _: " y ") == 0

    sent = list((inputs / "bunch" / "Sent" / "new").iterdir())
    assert len(sent) == 1
    assert "Total Messages: 1 Duplicates: 0" in capsys.readouterr().out


def test_yes_skips_the_prompt(inputs: Path) -> None:
    def never(prompt: str) -> str:
        raise AssertionError("should not prompt")

    assert main(_args(inputs, "--yes"), ask=never) == 0


def test_environment_fault_exits_nonzero(tmp_path: Path) -> None:
    args = ["--bunchpath", str(tmp_path / "bunch"), "--archives", str(tmp_path / "missing"), "-y"]
    args += ["--dupes-log", str(tmp_path / "dupes.log")]

    assert main(args) == 1
