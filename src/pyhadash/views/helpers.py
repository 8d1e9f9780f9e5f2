"""Small read-only projections used next to the area view."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence

from pyhadash.models.entity import Entity
from pyhadash.models.registry import Registry
from pyhadash.models.views import AreaClimate

_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def display_name_for(key: str, default: str, custom_names: Mapping[str, str]) -> str:
    """Custom name for an entity or area id, else *default*."""
    return custom_names.get(key) or default


def get_display_name(entity: Entity, custom_names: Mapping[str, str]) -> str:
    return display_name_for(entity.entity_id, entity.default_name, custom_names)


def get_device_name(entity_id: str, registry: Registry) -> str | None:
    """Name of the device exposing *entity_id*, if known."""
    device_id = registry.device_id_for(entity_id)
    if device_id is None:
        return None
    device = registry.get_device(device_id)
    if device is None or not device.name:
        return None
    return device.name


def filter_people(people: Iterable[Entity], pattern: str) -> list[Entity]:
    """Select people whose name matches *pattern*.

    The pattern is a case-insensitive regular expression; when it does not
    compile it is used as a plain substring instead. An empty pattern keeps
    everyone.
    """
    people = list(people)
    if not pattern:
        return people
    try:
        regex = re.compile(pattern, re.IGNORECASE)
    except re.error:
        needle = pattern.casefold()
        return [person for person in people if needle in person.default_name.casefold()]
    return [person for person in people if regex.search(person.default_name)]


def primary_weather(weather: Sequence[Entity], preferred_entity_id: str | None) -> Entity | None:
    if preferred_entity_id:
        for entity in weather:
            if entity.entity_id == preferred_entity_id:
                return entity
    return weather[0] if weather else None


def parse_leading_float(value: str) -> float | None:
    """Parse the numeric prefix of *value* (``"21.5 °C"`` -> 21.5)."""
    match = _LEADING_NUMBER_RE.match(value)
    if match is None:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def area_climate(sensors: Iterable[Entity]) -> AreaClimate:
    """Temperature and humidity of the first matching sensors, formatted."""
    sensors = list(sensors)
    temperature = next((s for s in sensors if s.device_class == "temperature"), None)
    humidity = next((s for s in sensors if s.device_class == "humidity"), None)

    temp_value = parse_leading_float(temperature.state) if temperature is not None else None
    humidity_value = parse_leading_float(humidity.state) if humidity is not None else None
    return AreaClimate(
        temperature=f"{_round_half_up(temp_value)}°" if temp_value is not None else None,
        humidity=f"{_round_half_up(humidity_value)}%" if humidity_value is not None else None,
    )
