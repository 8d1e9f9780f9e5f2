"""Read-only projections handed to UI collaborators."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pyhadash._constants import BINARY_SENSOR, SENSOR
from pyhadash.models._base import HaBaseModel
from pyhadash.models.entity import Entity
from pyhadash.models.registry import Area


class EntityType(StrEnum):
    LIGHT = "light"
    FAN = "fan"
    SWITCH = "switch"
    LOCK = "lock"
    COVER = "cover"
    CLIMATE = "climate"
    VACUUM = "vacuum"
    ALARM = "alarm"
    VALVE = "valve"
    AUTOMATION = "automation"
    SCRIPT = "script"
    CAMERA = "camera"
    SENSOR = "sensor"
    BINARY_SENSOR = "binary_sensor"
    OTHER = "other"


class RelatedEntity(HaBaseModel):
    """A sibling entity exposed by the same physical device."""

    entity: Entity
    entity_type: EntityType


class AreaView(HaBaseModel):
    """Visible entities of one area, grouped by domain.

    ``area`` is ``None`` for the unassigned bucket.
    """

    area: Area | None = None
    name: str
    entities: dict[str, tuple[Entity, ...]] = Field(default_factory=dict)
    """Domain -> entities sorted by display name."""
    filtered_counts: dict[str, int] = Field(default_factory=dict)
    """Domain -> number of entities suppressed by the relevance filter."""

    @property
    def area_id(self) -> str | None:
        return self.area.area_id if self.area is not None else None

    @property
    def is_unassigned(self) -> bool:
        return self.area is None

    def get(self, domain: str) -> tuple[Entity, ...]:
        return self.entities.get(domain, ())

    @property
    def entity_count(self) -> int:
        return sum(len(items) for items in self.entities.values())

    @property
    def filtered_sensor_count(self) -> int:
        return self.filtered_counts.get(SENSOR, 0)

    @property
    def filtered_binary_sensor_count(self) -> int:
        return self.filtered_counts.get(BINARY_SENSOR, 0)

    @property
    def has_content(self) -> bool:
        return self.entity_count > 0 or any(count > 0 for count in self.filtered_counts.values())


class AreaClimate(HaBaseModel):
    """Formatted temperature/humidity summary of an area."""

    temperature: str | None = None
    humidity: str | None = None
