"""Client configuration for pyhadash."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyhadash._constants import (
    DEFAULT_POST_ACTION_REFRESH_DELAY,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SETTINGS_DEBOUNCE,
    DEFAULT_SETTINGS_ENTITY_PREFIX,
)
from pyhadash.exceptions import HaConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class HaConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Home Assistant base URL (e.g. ``"http://homeassistant.local:8123"``).
        A trailing slash is ignored.
    token : str
        Long-lived access token sent as a bearer token.
    request_timeout : float
        Total timeout in seconds for a single REST request.
    settings_debounce : float
        Quiet period in seconds before a settings record is written.
        Repeated saves for the same record inside this window collapse
        into one write carrying the last value.
    post_action_refresh_delay : float
        Seconds to wait after a successful service call before the
        entity snapshot is refreshed once.
    settings_entity_prefix : str
        Prefix of the four pseudo-entities used to persist dashboard
        customizations.
    verify_ssl : bool
        Verify TLS certificates.
    api_trace_enabled : bool
        Log request and response bodies (redacted) at DEBUG level.
    """

    base_url: str
    token: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    settings_debounce: float = DEFAULT_SETTINGS_DEBOUNCE
    post_action_refresh_delay: float = DEFAULT_POST_ACTION_REFRESH_DELAY
    settings_entity_prefix: str = DEFAULT_SETTINGS_ENTITY_PREFIX
    verify_ssl: bool = True
    api_trace_enabled: bool = False

    @property
    def api_root(self) -> str:
        return self.base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url.strip() and self.token.strip())

    def require_configured(self) -> None:
        if not self.is_configured:
            raise HaConfigError("Home Assistant is not configured (base_url and token are required)")

    @classmethod
    def from_env(cls, **overrides: Any) -> HaConfig:
        """Create configuration from environment variables.

        Reads ``HA_URL``, ``HA_TOKEN`` and optional ``HA_*`` variables.
        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "HA_URL": "base_url",
            "HA_TOKEN": "token",
            "HA_SETTINGS_ENTITY_PREFIX": "settings_entity_prefix",
        }
        config_kwargs: dict[str, Any] = {"base_url": "", "token": ""}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "HA_REQUEST_TIMEOUT": "request_timeout",
            "HA_SETTINGS_DEBOUNCE": "settings_debounce",
            "HA_POST_ACTION_REFRESH_DELAY": "post_action_refresh_delay",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = float(val)
                except ValueError as exc:
                    raise HaConfigError(f"{env_key} must be a number, got {val!r}") from exc

        if "verify_ssl" not in overrides:
            config_kwargs["verify_ssl"] = _env_bool(env.get("HA_VERIFY_SSL"), True)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(env.get("HA_API_TRACE_ENABLED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
