"""Sensor relevance policy.

Decides which sensors are worth showing outside edit mode. The area view
builder only depends on the :class:`RelevanceFilter` call signature, so the
rules below can change (or be replaced entirely) without touching grouping.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from pyhadash._constants import BINARY_SENSOR, SENSOR, UNAVAILABLE_STATES
from pyhadash.models.entity import Entity

#: Sensor device classes shown on the dashboard.
IMPORTANT_SENSOR_CLASSES: frozenset[str] = frozenset({"temperature", "humidity"})

#: Binary sensor classes that are only interesting while ``on``.
ALERT_WHEN_ON_CLASSES: frozenset[str] = frozenset(
    {
        "door",
        "garage_door",
        "window",
        "opening",
        "motion",
        "occupancy",
        "presence",
        "vibration",
        "smoke",
        "gas",
        "moisture",
        "problem",
        "safety",
        "tamper",
        "sound",
    }
)

#: Binary sensor classes that are only interesting while ``off`` (unlocked).
ALERT_WHEN_OFF_CLASSES: frozenset[str] = frozenset({"lock"})

#: Diagnostic binary sensor classes that are never shown.
HIDDEN_BINARY_CLASSES: frozenset[str] = frozenset(
    {"connectivity", "update", "plug", "running", "power", "battery", "battery_charging"}
)


class RelevanceFilter(Protocol):
    """Predicate deciding whether a sensor-like entity is shown by default."""

    def __call__(self, entity: Entity) -> bool: ...


def should_show_sensor(entity: Entity) -> bool:
    if entity.state in UNAVAILABLE_STATES:
        return False
    return entity.device_class in IMPORTANT_SENSOR_CLASSES


def should_show_binary_sensor(entity: Entity) -> bool:
    """Show binary sensors only in their alert state."""
    if entity.state in UNAVAILABLE_STATES:
        return False
    device_class = entity.device_class
    if device_class is None or device_class in HIDDEN_BINARY_CLASSES:
        return False
    is_on = entity.state == "on"
    if device_class in ALERT_WHEN_ON_CLASSES:
        return is_on
    if device_class in ALERT_WHEN_OFF_CLASSES:
        return not is_on
    return False


def default_relevance_filter(entity: Entity) -> bool:
    """Dispatch on domain; non-sensor entities are always relevant."""
    if entity.domain == SENSOR:
        return should_show_sensor(entity)
    if entity.domain == BINARY_SENSOR:
        return should_show_binary_sensor(entity)
    return True


def show_everything(entity: Entity) -> bool:
    return True


def count_filtered(entities: Iterable[Entity], relevance_filter: RelevanceFilter = default_relevance_filter) -> int:
    """Number of entities *relevance_filter* would suppress."""
    return sum(1 for entity in entities if not relevance_filter(entity))
