"""Tests for settings loading."""

import logging
import os

import pytest

from noterelay.config import RelaySettings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run without the developer's .env or NOTERELAY_* variables."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("NOTERELAY_"):
            monkeypatch.delenv(key)


class TestRelaySettings:
    def test_defaults(self):
        settings = RelaySettings()
        assert settings.telegram_bot_token is None
        assert settings.user_id is None
        assert settings.note_type == 0
        assert settings.enable_ai is False
        assert settings.summary_language == "English"
        assert settings.retry_max_attempts == 3
        assert settings.retry_base_delay == 1.0

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("NOTERELAY_TELEGRAM_BOT_TOKEN", "123:abc")
        monkeypatch.setenv("NOTERELAY_USER_ID", "42")
        monkeypatch.setenv("NOTERELAY_ENABLE_JINA", "true")
        monkeypatch.setenv("NOTERELAY_RETRY_BASE_DELAY", "0.5")

        settings = RelaySettings()

        assert settings.telegram_bot_token == "123:abc"
        assert settings.user_id == 42
        assert settings.enable_jina is True
        assert settings.retry_base_delay == 0.5

    def test_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("NOTERELAY_API_URL=https://notes.test\nOTHER_KEY=ignored\n")

        assert RelaySettings().api_url == "https://notes.test"


class TestLoadSettings:
    def test_warns_on_missing_token(self, caplog):
        with caplog.at_level(logging.WARNING, logger="noterelay.config"):
            load_settings()
        assert any("API_TOKEN" in r.message for r in caplog.records)

    def test_warns_on_plain_http(self, monkeypatch, caplog):
        monkeypatch.setenv("NOTERELAY_API_URL", "http://notes.local")
        monkeypatch.setenv("NOTERELAY_API_TOKEN", "t")
        with caplog.at_level(logging.WARNING, logger="noterelay.config"):
            load_settings()
        assert [r.message for r in caplog.records if "not https" in r.message]

    def test_quiet_when_configured(self, monkeypatch, caplog):
        monkeypatch.setenv("NOTERELAY_API_URL", "https://notes.test")
        monkeypatch.setenv("NOTERELAY_API_TOKEN", "t")
        with caplog.at_level(logging.WARNING, logger="noterelay.config"):
            load_settings()
        assert caplog.records == []
