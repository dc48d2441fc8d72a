"""Tests for crm_sync.config."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from crm_sync.config import RetryConfig, Settings, SheetsConfig


class TestSheetsConfig:
    def test_defaults(self):
        cfg = SheetsConfig(spreadsheet_id="abc")
        assert cfg.spreadsheet_id == "abc"
        assert cfg.sheet_name is None
        assert cfg.credentials_file == "credentials.json"
        assert cfg.timeout_seconds == 30.0

    def test_spreadsheet_id_required(self, monkeypatch):
        monkeypatch.delenv("SHEETS_SPREADSHEET_ID", raising=False)
        with pytest.raises(ValidationError):
            SheetsConfig()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SHEETS_SPREADSHEET_ID", "from-env")
        monkeypatch.setenv("SHEETS_SHEET_NAME", "Emails")
        cfg = SheetsConfig()
        assert cfg.spreadsheet_id == "from-env"
        assert cfg.sheet_name == "Emails"


class TestRetryConfig:
    def test_defaults(self):
        cfg = RetryConfig()
        assert cfg.max_attempts == 3
        assert cfg.initial_wait_seconds == 0.5
        assert cfg.max_wait_seconds == 10.0
        assert cfg.multiplier == 2.0


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("CRM_SYNC_PORT", raising=False)
        cfg = Settings(sheets=SheetsConfig(spreadsheet_id="abc"))
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 3000
        assert cfg.log_level == "INFO"
        assert cfg.log_json is True
        assert cfg.date_timezone is None
        assert cfg.queue_maxsize == 1000
        assert cfg.retry.max_attempts == 3

    def test_fixture_values(self, settings: Settings):
        assert settings.port == 13000
        assert settings.sheets.spreadsheet_id == "sheet-123"
        assert settings.retry.initial_wait_seconds == 0.01

    def test_plain_port_env(self, monkeypatch):
        monkeypatch.delenv("CRM_SYNC_PORT", raising=False)
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("SHEETS_SPREADSHEET_ID", "abc")
        assert Settings().port == 8080

    def test_prefixed_env(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.setenv("CRM_SYNC_PORT", "9090")
        monkeypatch.setenv("CRM_SYNC_DATE_TIMEZONE", "Europe/Moscow")
        monkeypatch.setenv("SHEETS_SPREADSHEET_ID", "abc")
        cfg = Settings()
        assert cfg.port == 9090
        assert cfg.date_timezone == "Europe/Moscow"
        assert cfg.sheets.spreadsheet_id == "abc"
