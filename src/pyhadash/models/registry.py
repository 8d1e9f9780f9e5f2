"""Area, device and entity-registry models."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import AliasChoices, Field

from pyhadash.models._base import HaBaseModel


class Area(HaBaseModel):
    """A named room or zone."""

    area_id: str = Field(validation_alias=AliasChoices("area_id", "id"))
    name: str = ""
    picture: str | None = None


class Device(HaBaseModel):
    """A physical unit that may expose several entities."""

    device_id: str = Field(validation_alias=AliasChoices("device_id", "id"))
    name: str = ""
    manufacturer: str = ""
    model: str = ""
    area_id: str | None = None


class RegistryEntry(HaBaseModel):
    """Entity -> area/device link. Only used to build the lookup maps."""

    entity_id: str
    area_id: str | None = None
    device_id: str | None = None


class Registry(HaBaseModel):
    """Resolved registry metadata for one connection."""

    areas: tuple[Area, ...] = ()
    devices: tuple[Device, ...] = ()
    entity_area_map: dict[str, str] = Field(default_factory=dict)
    entity_device_map: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_entries(
        cls,
        *,
        areas: Iterable[Area],
        entries: Iterable[RegistryEntry],
        devices: Iterable[Device],
    ) -> Registry:
        """Build the lookup maps; entries without an area/device are skipped."""
        entity_area_map: dict[str, str] = {}
        entity_device_map: dict[str, str] = {}
        for entry in entries:
            if entry.area_id:
                entity_area_map[entry.entity_id] = entry.area_id
            if entry.device_id:
                entity_device_map[entry.entity_id] = entry.device_id
        return cls(
            areas=tuple(areas),
            devices=tuple(devices),
            entity_area_map=entity_area_map,
            entity_device_map=entity_device_map,
        )

    def area_id_for(self, entity_id: str) -> str | None:
        return self.entity_area_map.get(entity_id) or None

    def device_id_for(self, entity_id: str) -> str | None:
        return self.entity_device_map.get(entity_id) or None

    def get_area(self, area_id: str) -> Area | None:
        return next((area for area in self.areas if area.area_id == area_id), None)

    def get_device(self, device_id: str) -> Device | None:
        return next((device for device in self.devices if device.device_id == device_id), None)
