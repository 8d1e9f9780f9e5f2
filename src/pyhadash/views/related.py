"""Related entities: siblings exposed by the same physical device."""

from __future__ import annotations

from collections.abc import Iterable

from pyhadash.models.entity import Entity, split_entity_id
from pyhadash.models.registry import Registry
from pyhadash.models.views import EntityType, RelatedEntity

_DOMAIN_TYPES: dict[str, EntityType] = {
    "light": EntityType.LIGHT,
    "switch": EntityType.SWITCH,
    "sensor": EntityType.SENSOR,
    "binary_sensor": EntityType.BINARY_SENSOR,
    "climate": EntityType.CLIMATE,
    "vacuum": EntityType.VACUUM,
    "alarm_control_panel": EntityType.ALARM,
    "valve": EntityType.VALVE,
    "fan": EntityType.FAN,
    "lock": EntityType.LOCK,
    "cover": EntityType.COVER,
    "automation": EntityType.AUTOMATION,
    "script": EntityType.SCRIPT,
    "camera": EntityType.CAMERA,
}

#: Controllable types first, diagnostics last.
TYPE_PRIORITY: dict[EntityType, int] = {
    EntityType.LIGHT: 1,
    EntityType.FAN: 2,
    EntityType.SWITCH: 3,
    EntityType.LOCK: 4,
    EntityType.COVER: 5,
    EntityType.CLIMATE: 6,
    EntityType.VACUUM: 7,
    EntityType.ALARM: 8,
    EntityType.VALVE: 9,
    EntityType.AUTOMATION: 10,
    EntityType.SCRIPT: 11,
    EntityType.CAMERA: 12,
    EntityType.SENSOR: 13,
    EntityType.BINARY_SENSOR: 14,
    EntityType.OTHER: 15,
}


def entity_type_for(entity_id: str) -> EntityType:
    domain, _ = split_entity_id(entity_id)
    return _DOMAIN_TYPES.get(domain, EntityType.OTHER)


def related_entities(entity_id: str, registry: Registry, entities: Iterable[Entity]) -> list[RelatedEntity]:
    """Other entities on the device of *entity_id*, ordered by type priority.

    Discovery follows the registry's device map order; ``sorted`` is stable,
    so entities of the same type keep that order. Entities missing from the
    snapshot are skipped.
    """
    device_id = registry.device_id_for(entity_id)
    if device_id is None:
        return []

    by_id = {entity.entity_id: entity for entity in entities}
    related: list[RelatedEntity] = []
    for other_id, other_device_id in registry.entity_device_map.items():
        if other_device_id != device_id or other_id == entity_id:
            continue
        entity = by_id.get(other_id)
        if entity is not None:
            related.append(RelatedEntity(entity=entity, entity_type=entity_type_for(other_id)))
    return sorted(related, key=lambda item: TYPE_PRIORITY[item.entity_type])
