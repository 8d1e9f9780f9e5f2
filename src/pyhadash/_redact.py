"""Helpers for safe debug logging.

Requests carry a long-lived bearer token and settings records may carry
arbitrary user data. :func:`redact_for_log` masks credentials (both as
mapping keys and as ``Bearer ...`` fragments inside strings) and keeps
large payloads such as full state snapshots readable in DEBUG logs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "token",
        "access_token",
        "refresh_token",
        "password",
        "code",
        "cookie",
    }
)

_BEARER_RE = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/=-]+")

_MAX_DEPTH = 20
_MAX_ITEMS = 50
_REDACTED = "<redacted>"


def _redact_string(value: str, max_string: int) -> str:
    value = _BEARER_RE.sub(f"Bearer {_REDACTED}", value)
    if len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value


def _redact_mapping(value: Mapping[Any, Any], max_string: int, depth: int) -> dict[str, Any]:
    return {
        str(key): _REDACTED
        if str(key).lower() in _SENSITIVE_KEYS
        else redact_for_log(item, max_string=max_string, _depth=depth + 1)
        for key, item in value.items()
    }


def _redact_sequence(value: Sequence[Any], max_string: int, depth: int) -> list[Any]:
    shown = [redact_for_log(item, max_string=max_string, _depth=depth + 1) for item in value[:_MAX_ITEMS]]
    if len(value) > _MAX_ITEMS:
        shown.append(f"<{len(value) - _MAX_ITEMS} more>")
    return shown


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs.

    State snapshots are long lists; only the first 50 items are kept.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _redact_string(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return _redact_mapping(value, max_string, _depth)
    if isinstance(value, Sequence):
        return _redact_sequence(value, max_string, _depth)
    return repr(value)
