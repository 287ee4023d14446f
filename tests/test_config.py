from __future__ import annotations

from pathlib import Path

import pytest

from cafebot.config import Settings, get_settings
from cafebot.dispatcher import SUGGESTED_QUERIES


def test_defaults() -> None:
    settings = Settings()
    assert settings.state_dir is None
    assert settings.suggested_queries == list(SUGGESTED_QUERIES)


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CAFEBOT_STATE_DIR", str(tmp_path))
    monkeypatch.setenv("CAFEBOT_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.state_dir == tmp_path
    assert settings.log_level == "debug"


def test_explicit_override_beats_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CAFEBOT_STATE_DIR", "/nowhere")

    assert get_settings(state_dir=tmp_path).state_dir == tmp_path
