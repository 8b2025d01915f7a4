"""Tests for environment-driven configuration helpers."""
from __future__ import annotations

import pytest

from pulse_metrics import config
from pulse_metrics.exceptions import ConfigurationError


def test_env_int_falls_back_on_garbage(monkeypatch):
    monkeypatch.setenv("PULSE_MAX_IN_FLIGHT", "many")
    assert config._env_int("PULSE_MAX_IN_FLIGHT", 8) == 8


def test_env_int_ignores_non_positive(monkeypatch):
    monkeypatch.setenv("PULSE_MAX_IN_FLIGHT", "0")
    assert config._env_int("PULSE_MAX_IN_FLIGHT", 8) == 8


def test_env_int_reads_value(monkeypatch):
    monkeypatch.setenv("PULSE_MAX_IN_FLIGHT", "3")
    assert config._env_int("PULSE_MAX_IN_FLIGHT", 8) == 3


@pytest.mark.parametrize(
    "raw,expected",
    [("false", False), ("OFF", False), ("0", False), ("true", True), ("yes", True), ("", True)],
)
def test_env_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("PULSE_ENABLE_MOCK_DATA", raw)
    assert config._env_flag("PULSE_ENABLE_MOCK_DATA", True) is expected


def test_upstream_settings_from_env(monkeypatch):
    monkeypatch.setenv("OSPREY_BASE_URL", "https://survey.test/api/v1")
    monkeypatch.setenv("OSPREY_TOKEN", "tok")
    monkeypatch.setenv("OSPREY_COMPANY_ID", "4")
    monkeypatch.setenv("PULSE_UPSTREAM_MAX_ATTEMPTS", "5")

    settings = config.UpstreamSettings.from_env()

    assert settings.require_base_url() == "https://survey.test/api/v1"
    assert settings.token == "tok"
    assert settings.company_id == "4"
    assert settings.max_attempts == 5


def test_missing_base_url_raises():
    with pytest.raises(ConfigurationError):
        config.UpstreamSettings(base_url="").require_base_url()
