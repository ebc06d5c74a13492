"""Tests for errchain.settings module."""

import pytest
from pydantic import ValidationError

from errchain.settings import ErrchainSettings, get_settings, reset_settings


class TestErrchainSettings:
    """Test defaults and environment overrides."""

    def test_defaults(self):
        settings = ErrchainSettings()
        assert settings.capture_trace is True
        assert settings.trace_limit == 32
        assert settings.log_level == "INFO"
        assert settings.log_json is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ERRCHAIN_CAPTURE_TRACE", "0")
        monkeypatch.setenv("ERRCHAIN_TRACE_LIMIT", "5")
        monkeypatch.setenv("ERRCHAIN_LOG_LEVEL", "DEBUG")
        settings = ErrchainSettings()
        assert settings.capture_trace is False
        assert settings.trace_limit == 5
        assert settings.log_level == "DEBUG"

    def test_trace_limit_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("ERRCHAIN_TRACE_LIMIT", "0")
        with pytest.raises(ValidationError):
            ErrchainSettings()


class TestGetSettings:
    """Test the settings cache."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("ERRCHAIN_TRACE_LIMIT", "7")
        assert get_settings() is first
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.trace_limit == 7

    def test_reset(self, monkeypatch):
        first = get_settings()
        reset_settings()
        assert get_settings() is not first
