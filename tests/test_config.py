from __future__ import annotations

import pytest

from pyhadash.config import HaConfig
from pyhadash.exceptions import HaConfigError


def test_from_env_reads_connection_and_tuning(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HA_URL", "http://ha.local:8123/")
    monkeypatch.setenv("HA_TOKEN", "abc")
    monkeypatch.setenv("HA_SETTINGS_DEBOUNCE", "0.5")
    monkeypatch.setenv("HA_VERIFY_SSL", "no")

    config = HaConfig.from_env()

    assert config.api_root == "http://ha.local:8123"
    assert config.token == "abc"
    assert config.settings_debounce == 0.5
    assert config.verify_ssl is False
    assert config.is_configured


def test_explicit_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HA_URL", "http://ha.local:8123")
    monkeypatch.setenv("HA_TOKEN", "abc")
    monkeypatch.setenv("HA_REQUEST_TIMEOUT", "not-a-number")

    config = HaConfig.from_env(request_timeout=3.0, token="override")

    assert config.request_timeout == 3.0
    assert config.token == "override"


def test_invalid_float_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HA_POST_ACTION_REFRESH_DELAY", "soon")
    with pytest.raises(HaConfigError, match="HA_POST_ACTION_REFRESH_DELAY"):
        HaConfig.from_env()


def test_unconfigured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HA_URL", raising=False)
    monkeypatch.delenv("HA_TOKEN", raising=False)

    config = HaConfig.from_env()

    assert not config.is_configured
    with pytest.raises(HaConfigError):
        config.require_configured()
