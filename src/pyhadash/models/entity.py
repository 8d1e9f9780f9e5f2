"""Entity state model."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from pyhadash.models._base import HaBaseModel, HaTimestamp


def split_entity_id(entity_id: str) -> tuple[str, str]:
    """Split ``"<domain>.<object_id>"`` into its two parts."""
    domain, sep, object_id = entity_id.partition(".")
    if not sep:
        return "", entity_id
    return domain, object_id


class Entity(HaBaseModel):
    """One entity as returned by ``GET /api/states``.

    Entities are immutable snapshots. The store replaces them wholesale,
    either on refresh or through an optimistic patch built with
    :meth:`with_state`.
    """

    entity_id: str
    """Domain-qualified id, e.g. ``"light.kitchen"``."""
    state: str = ""
    """Primary state string (``"on"``, ``"21.5"``, ``"unavailable"``...)."""
    attributes: dict[str, Any] = Field(default_factory=dict)
    """Entity attributes."""
    last_changed: HaTimestamp = None
    last_updated: HaTimestamp = None

    @field_validator("entity_id")
    @classmethod
    def _entity_id_has_domain(cls, value: str) -> str:
        entity_id = value.strip()
        domain, object_id = split_entity_id(entity_id)
        if not domain or not object_id:
            raise ValueError(f"entity_id must look like '<domain>.<object_id>', got {value!r}")
        return entity_id

    @field_validator("state", mode="before")
    @classmethod
    def _coerce_state(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("attributes", mode="before")
    @classmethod
    def _coerce_attributes(cls, value: Any) -> dict[str, Any]:
        return dict(value) if isinstance(value, dict) else {}

    @property
    def domain(self) -> str:
        return split_entity_id(self.entity_id)[0]

    @property
    def object_id(self) -> str:
        return split_entity_id(self.entity_id)[1]

    @property
    def friendly_name(self) -> str | None:
        name = self.attributes.get("friendly_name")
        return str(name) if name else None

    @property
    def default_name(self) -> str:
        """Friendly name, falling back to the entity id."""
        return self.friendly_name or self.entity_id

    @property
    def device_class(self) -> str | None:
        value = self.attributes.get("device_class")
        return str(value) if value else None

    @property
    def unit_of_measurement(self) -> str | None:
        value = self.attributes.get("unit_of_measurement")
        return str(value) if value else None

    def with_state(self, state: str, **attributes: Any) -> Entity:
        """Return a copy with a new state and optionally merged attributes."""
        update: dict[str, Any] = {"state": state}
        if attributes:
            update["attributes"] = {**self.attributes, **attributes}
        return self.model_copy(update=update)
