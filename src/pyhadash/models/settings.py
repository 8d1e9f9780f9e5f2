"""Dashboard preferences model.

The record is stored remotely as camelCase JSON (``{"refreshInterval": 30}``)
so other dashboard clients reading the same pseudo-entity understand it.
Keys this version does not know about are kept and written back unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AppSettings(BaseModel):
    """Flat record of user preferences; one logical instance per deployment."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    primary_weather_entity: str | None = None
    """Entity id of the preferred weather entity."""
    calendar_pattern: str = ""
    """Pattern matching the calendars to display."""
    people_pattern: str = ""
    """Case-insensitive regex selecting the people to display."""
    ai_insights_enabled: bool = True
    refresh_interval: float = Field(default=30, gt=0)
    """Seconds between periodic refreshes."""
    pinned_entities: list[str] = Field(default_factory=list)
    pinned_automations: list[str] = Field(default_factory=list)
    notification_recipients: list[str] = Field(default_factory=list)

    @classmethod
    def _field_name(cls, key: str) -> str:
        for name, info in cls.model_fields.items():
            if key in (name, info.alias):
                return name
        return key

    def merged(self, changes: Mapping[str, Any]) -> AppSettings:
        """Return a validated copy with *changes* applied.

        Keys may be given as snake_case field names or camelCase aliases.
        """
        data = self.model_dump()
        for key, value in changes.items():
            data[self._field_name(key)] = value
        return AppSettings.model_validate(data)

    def to_stored(self) -> dict[str, Any]:
        """Payload written to the remote settings record."""
        return self.model_dump(mode="json", by_alias=True)
