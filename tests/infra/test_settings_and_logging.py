"""Tests for settings loading, log redaction and the exception taxonomy."""

from __future__ import annotations

import pytest

from splicedesk.infra.exceptions import (
    GatewayError,
    JournalError,
    NotFoundError,
    SpliceDeskError,
    StateConflictError,
    ValidationError,
)
from splicedesk.infra.logging import redact_secrets
from splicedesk.infra.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in ("OME_HOST", "OME_PORT", "EVENT_ID_START", "API_PORT", "JOURNAL_PATH"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)
        assert settings.ome_base_url == "http://localhost:8081/v1"
        assert settings.event_id_start == 100023
        assert settings.api_port == 8700
        assert settings.journal_path is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("OME_HOST", "ome.internal")
        monkeypatch.setenv("OME_PORT", "9000")
        monkeypatch.setenv("DISPATCH_SWEEP_SECONDS", "1.5")
        settings = Settings(_env_file=None)
        assert settings.ome_base_url == "http://ome.internal:9000/v1"
        assert settings.dispatch_sweep_seconds == 1.5

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("OME_APP", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("OME_APP=live\nJOURNAL_PATH=/var/lib/splicedesk/journal.jsonl\n")
        settings = Settings(_env_file=str(env_file))
        assert settings.ome_app == "live"
        assert settings.journal_path == "/var/lib/splicedesk/journal.jsonl"

    def test_sweep_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, DISPATCH_SWEEP_SECONDS=0)

    def test_event_id_start_must_fit_32_bits(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, EVENT_ID_START=0x100000000)

    def test_dispatch_workers_must_be_positive(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, DISPATCH_WORKERS=0)


class TestRedaction:
    def test_secret_keys_redacted(self):
        event = redact_secrets(None, None, {"event": "x", "ome_access_token": "admin:pw", "stream": "s1"})
        assert event["ome_access_token"] == "***REDACTED***"
        assert event["stream"] == "s1"

    def test_secret_patterns_in_values(self):
        event = redact_secrets(None, None, {"event": "fetch", "url": "http://ome/v1?token=abc123&x=1"})
        assert "abc123" not in event["url"]
        assert "token=***" in event["url"]

    def test_nested_values(self):
        event = redact_secrets(None, None, {"event": "x", "detail": {"items": ["password=hunter2"]}})
        assert event["detail"]["items"] == ["password=***"]


class TestExceptions:
    @pytest.mark.parametrize(
        "cls, code",
        [
            (ValidationError, "VALIDATION_ERROR"),
            (StateConflictError, "STATE_CONFLICT"),
            (NotFoundError, "NOT_FOUND"),
            (GatewayError, "GATEWAY_ERROR"),
            (JournalError, "JOURNAL_ERROR"),
        ],
    )
    def test_default_codes(self, cls, code):
        error = cls("boom")
        assert isinstance(error, SpliceDeskError)
        assert error.code == code
        assert error.message == "boom"

    def test_specific_code_overrides_default(self):
        error = ValidationError("bad id", "INVALID_EVENT_ID")
        assert error.code == "INVALID_EVENT_ID"
        assert ValidationError.code == "VALIDATION_ERROR"
