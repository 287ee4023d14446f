from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from cafebot.cli import app

runner = CliRunner()


def test_run_prints_replies() -> None:
    result = runner.invoke(app, ["run", "what can you do"])

    assert result.exit_code == 0
    assert "I can help you book a table" in result.stdout
    assert "Is there anything else I can help you with ?" in result.stdout


def test_run_resumes_dialog_from_state_dir(tmp_path: Path) -> None:
    first = runner.invoke(app, ["run", "book a table in Seattle", "--state-dir", str(tmp_path)])
    second = runner.invoke(app, ["run", "tomorrow", "--state-dir", str(tmp_path)])

    assert first.exit_code == 0
    assert "What day would you like the table for?" in first.stdout
    assert second.exit_code == 0
    assert "What time?" in second.stdout


def test_run_with_card_payload() -> None:
    result = runner.invoke(app, ["run", "--card", '{"text": "hello"}'])

    assert result.exit_code == 0
    assert "You said: 'hello'." in result.stdout


def test_chat_loop_until_exit() -> None:
    result = runner.invoke(app, ["chat", "--session-id", "cli"], input="hi\nAda\nexit\n")

    assert result.exit_code == 0
    assert "bot> Hello, I'm the cafe bot. What's your name?" in result.stdout
    assert "bot> Hello Ada, nice to meet you!" in result.stdout


def test_hooks_command_lists_builtin() -> None:
    result = runner.invoke(app, ["hooks"])

    assert result.exit_code == 0
    assert "provide_dialogs: builtin" in result.stdout


def test_run_honours_configured_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CAFEBOT_LOG_LEVEL", "DEBUG")
    verbose = runner.invoke(app, ["run", "what can you do"])

    monkeypatch.setenv("CAFEBOT_LOG_LEVEL", "ERROR")
    quiet = runner.invoke(app, ["run", "what can you do"])

    assert verbose.exit_code == 0
    assert "dispatch.begin" in verbose.output
    assert quiet.exit_code == 0
    assert "turn.done" not in quiet.output
