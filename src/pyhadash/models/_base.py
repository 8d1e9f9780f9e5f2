"""Base model and shared field types for Home Assistant payloads.

Every pyhadash model inherits from :class:`HaBaseModel` which provides
an immutable, extra-tolerant configuration: the REST API adds attributes
between releases and the client must keep working when it does.

:data:`HaTimestamp` coerces the ISO-8601 strings Home Assistant emits
(``"2026-01-01T10:00:00.123456+00:00"``) into timezone-aware datetimes
and maps the empty string to ``None``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


def parse_ha_timestamp(value: Any) -> datetime | None:
    """Convert a Home Assistant timestamp to a UTC-aware datetime.

    Returns ``None`` for ``None``, empty strings, and unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=UTC)
    text = str(value).strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


HaTimestamp = Annotated[datetime | None, BeforeValidator(parse_ha_timestamp)]
"""Annotated type that coerces Home Assistant ISO strings to UTC datetimes."""


class HaBaseModel(BaseModel):
    """Base for Home Assistant payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
