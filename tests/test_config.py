"""Tests for the environment-backed settings."""

from __future__ import annotations

import os

import pytest
from pydantic import ValidationError

from newsroom import config


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch, tmp_path):
    """Ensure each test starts with a clean configuration environment."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_settings", None)

    for key in list(os.environ):
        if key.startswith("NEWSROOM_"):
            monkeypatch.delenv(key, raising=False)

    yield


def test_list_environment_settings_reflects_defaults():
    entries = {entry.field: entry for entry in config.list_environment_settings()}

    assert entries["max_highlights"].env_name == "NEWSROOM_MAX_HIGHLIGHTS"
    assert entries["max_highlights"].value == entries["max_highlights"].default == 5
    assert entries["summary_max_length"].value == 1000
    assert entries["drafting_backend"].env_name == "NEWSROOM_DRAFTING_BACKEND"
    assert "NEWSROOM_OPENAI_API_KEY" in {entry.env_name for entry in entries.values()}


def test_environment_overrides_are_read(monkeypatch):
    monkeypatch.setenv("NEWSROOM_MAX_HIGHLIGHTS", "8")
    monkeypatch.setenv("newsroom_transcription_backend", "none")

    settings = config.get_settings()

    assert settings.max_highlights == 8
    assert settings.transcription_backend == "none"
    assert config.get_settings() is settings


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("NEWSROOM_LOG_LEVEL=DEBUG\n", encoding="utf-8")

    assert config.get_settings().log_level == "DEBUG"


def test_reset_settings_rereads_environment(monkeypatch):
    assert config.get_settings().summary_max_length == 1000

    monkeypatch.setenv("NEWSROOM_SUMMARY_MAX_LENGTH", "400")
    config.reset_settings()

    assert config.get_settings().summary_max_length == 400


def test_invalid_limits_are_rejected(monkeypatch):
    monkeypatch.setenv("NEWSROOM_MAX_HIGHLIGHTS", "0")

    with pytest.raises(ValidationError):
        config.Settings()
