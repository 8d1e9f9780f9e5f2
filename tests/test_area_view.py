from __future__ import annotations

from collections.abc import Iterable

from pyhadash.models.entity import Entity
from pyhadash.models.registry import Area, Registry, RegistryEntry
from pyhadash.state.reducer import group_by_domain
from pyhadash.views.areas import build_area_view
from pyhadash.views.filters import show_everything


def _entity(entity_id: str, state: str = "on", **attributes: object) -> Entity:
    return Entity(entity_id=entity_id, state=state, attributes=attributes)


def _registry(areas: Iterable[tuple[str, str]], links: dict[str, str | None]) -> Registry:
    return Registry.from_entries(
        areas=[Area(area_id=area_id, name=name) for area_id, name in areas],
        entries=[RegistryEntry(entity_id=entity_id, area_id=area_id) for entity_id, area_id in links.items()],
        devices=[],
    )


def _ids(entities: Iterable[Entity]) -> list[str]:
    return [entity.entity_id for entity in entities]


def test_entities_land_in_exactly_their_area_bucket() -> None:
    entities = [_entity("light.kitchen"), _entity("light.hall"), _entity("switch.loose")]
    registry = _registry(
        [("kitchen", "Kitchen"), ("hall", "Hall")],
        {"light.kitchen": "kitchen", "light.hall": "hall", "switch.loose": None},
    )

    views = build_area_view(group_by_domain(entities), registry)

    assert [view.name for view in views] == ["Hall", "Kitchen", "Other"]
    placements = {
        entity_id: [view.name for view in views if entity_id in _ids(view.get(entity_id.split(".")[0]))]
        for entity_id in ("light.kitchen", "light.hall", "switch.loose")
    }
    assert placements == {
        "light.kitchen": ["Kitchen"],
        "light.hall": ["Hall"],
        "switch.loose": ["Other"],
    }
    assert views[-1].is_unassigned
    assert views[-1].area_id is None


def test_unassigned_bucket_is_all_devices_when_there_are_no_areas() -> None:
    views = build_area_view(group_by_domain([_entity("light.a"), _entity("switch.b")]), Registry())

    assert len(views) == 1
    assert views[0].name == "All Devices"
    assert _ids(views[0].get("light")) == ["light.a"]


def test_unassigned_bucket_is_all_devices_when_every_area_is_empty() -> None:
    registry = _registry([("kitchen", "Kitchen")], {})
    views = build_area_view(group_by_domain([_entity("light.a")]), registry)
    assert [view.name for view in views] == ["All Devices"]


def test_empty_areas_and_empty_unassigned_bucket_are_omitted() -> None:
    registry = _registry([("kitchen", "Kitchen"), ("attic", "Attic")], {"light.a": "kitchen"})
    views = build_area_view(group_by_domain([_entity("light.a")]), registry)
    assert [view.name for view in views] == ["Kitchen"]


def test_hidden_entities_are_excluded_outside_edit_mode() -> None:
    entities = [_entity("light.a"), _entity("light.b")]
    registry = _registry([("kitchen", "Kitchen")], {"light.a": "kitchen", "light.b": "kitchen"})

    views = build_area_view(group_by_domain(entities), registry, hidden_entities={"light.b"})
    assert _ids(views[0].get("light")) == ["light.a"]

    views = build_area_view(group_by_domain(entities), registry, hidden_entities={"light.b"}, edit_mode=True)
    assert _ids(views[0].get("light")) == ["light.a", "light.b"]


def test_hidden_rooms_are_skipped_unless_editing() -> None:
    entities = [_entity("light.a"), _entity("light.b")]
    registry = _registry([("kitchen", "Kitchen"), ("hall", "Hall")], {"light.a": "kitchen", "light.b": "hall"})

    views = build_area_view(group_by_domain(entities), registry, hidden_rooms={"hall"})
    assert [view.name for view in views] == ["Kitchen"]

    views = build_area_view(group_by_domain(entities), registry, hidden_rooms={"hall"}, edit_mode=True)
    assert [view.name for view in views] == ["Hall", "Kitchen"]


def test_relevance_filter_accounting() -> None:
    sensors = [
        _entity("sensor.temp", "21.5", device_class="temperature"),
        _entity("sensor.hum", "40", device_class="humidity"),
        _entity("sensor.power", "150", device_class="power"),
        _entity("sensor.battery", "80", device_class="battery"),
        _entity("sensor.misc", "1"),
    ]
    registry = _registry([("kitchen", "Kitchen")], {s.entity_id: "kitchen" for s in sensors})

    (view,) = build_area_view(group_by_domain(sensors), registry)

    assert view.filtered_sensor_count == 3
    assert len(view.get("sensor")) == 2
    assert view.filtered_binary_sensor_count == 0


def test_room_with_only_filtered_sensors_is_still_listed() -> None:
    sensors = [_entity("binary_sensor.door", "off", device_class="door")]
    registry = _registry([("porch", "Porch")], {"binary_sensor.door": "porch"})

    views = build_area_view(group_by_domain(sensors), registry)

    assert [view.name for view in views] == ["Porch"]
    assert views[0].entity_count == 0
    assert views[0].filtered_binary_sensor_count == 1


def test_edit_mode_disables_relevance_filter() -> None:
    sensors = [_entity("sensor.power", "150", device_class="power")]
    registry = _registry([("kitchen", "Kitchen")], {"sensor.power": "kitchen"})

    (view,) = build_area_view(group_by_domain(sensors), registry, edit_mode=True)

    assert _ids(view.get("sensor")) == ["sensor.power"]
    assert view.filtered_sensor_count == 0


def test_relevance_filter_is_pluggable() -> None:
    sensors = [_entity("sensor.power", "150", device_class="power")]
    registry = _registry([("kitchen", "Kitchen")], {"sensor.power": "kitchen"})

    (view,) = build_area_view(group_by_domain(sensors), registry, relevance_filter=show_everything)

    assert _ids(view.get("sensor")) == ["sensor.power"]


def test_relevance_filter_never_applies_to_controllable_domains() -> None:
    registry = _registry([("kitchen", "Kitchen")], {"light.a": "kitchen"})

    (view,) = build_area_view(group_by_domain([_entity("light.a")]), registry, relevance_filter=lambda entity: False)

    assert _ids(view.get("light")) == ["light.a"]


def test_entities_sorted_case_insensitively_by_display_name() -> None:
    entities = [
        _entity("light.one", friendly_name="banana"),
        _entity("light.two", friendly_name="Apple"),
        _entity("light.three"),
        _entity("light.four", friendly_name="cherry"),
    ]
    registry = _registry([("k", "Kitchen")], {e.entity_id: "k" for e in entities})

    (view,) = build_area_view(group_by_domain(entities), registry, custom_names={"light.four": "aardvark"})

    assert _ids(view.get("light")) == ["light.four", "light.two", "light.one", "light.three"]


def test_areas_sorted_alphabetically_ignoring_case() -> None:
    entities = [_entity("light.a"), _entity("light.b"), _entity("light.c")]
    registry = _registry(
        [("z", "zen room"), ("b", "Bedroom"), ("a", "attic")],
        {"light.a": "z", "light.b": "b", "light.c": "a"},
    )

    views = build_area_view(group_by_domain(entities), registry)

    assert [view.name for view in views] == ["attic", "Bedroom", "zen room"]


def test_entity_linked_to_unknown_area_is_unassigned() -> None:
    registry = _registry([("kitchen", "Kitchen")], {"light.a": "kitchen", "light.b": "deleted-area"})

    views = build_area_view(group_by_domain([_entity("light.a"), _entity("light.b")]), registry)

    assert [view.name for view in views] == ["Kitchen", "Other"]
    assert _ids(views[1].get("light")) == ["light.b"]
