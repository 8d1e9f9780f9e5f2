"""Area-grouped view of the entity snapshot."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence, Set
from typing import TYPE_CHECKING

from pyhadash._constants import AREA_VIEW_DOMAINS, SENSOR_DOMAINS, UNASSIGNED_AREA_NAME, UNASSIGNED_ONLY_AREA_NAME
from pyhadash.models.entity import Entity
from pyhadash.models.registry import Area, Registry
from pyhadash.models.views import AreaView
from pyhadash.views.filters import RelevanceFilter, default_relevance_filter
from pyhadash.views.helpers import get_display_name

if TYPE_CHECKING:
    from pyhadash.state.reducer import DashboardState

# Area id -> domain -> entities. ``None`` is the unassigned bucket.
_Buckets = defaultdict[str | None, defaultdict[str, list[Entity]]]


def _new_buckets() -> _Buckets:
    return defaultdict(lambda: defaultdict(list))


def _sort_key(entity: Entity, custom_names: Mapping[str, str]) -> tuple[str, str]:
    return get_display_name(entity, custom_names).casefold(), entity.entity_id


def _make_view(
    area: Area | None,
    name: str,
    shown: Mapping[str, list[Entity]],
    filtered_counts: Mapping[str, int],
    custom_names: Mapping[str, str],
) -> AreaView:
    entities = {
        domain: tuple(sorted(shown.get(domain, ()), key=lambda e: _sort_key(e, custom_names)))
        for domain in AREA_VIEW_DOMAINS
    }
    return AreaView(area=area, name=name, entities=entities, filtered_counts=dict(filtered_counts))


def build_area_view(
    by_domain: Mapping[str, Sequence[Entity]],
    registry: Registry,
    *,
    hidden_entities: Set[str] = frozenset(),
    hidden_rooms: Set[str] = frozenset(),
    edit_mode: bool = False,
    relevance_filter: RelevanceFilter = default_relevance_filter,
    custom_names: Mapping[str, str] | None = None,
) -> list[AreaView]:
    """Group visible entities by area.

    Parameters
    ----------
    by_domain : Mapping[str, Sequence[Entity]]
        Entities per domain. Only the area-view domains are used.
    registry : Registry
        Resolved area list and entity -> area map.
    hidden_entities, hidden_rooms : Set[str]
        Ignored in edit mode.
    edit_mode : bool
        Show everything, including hidden entities, hidden rooms and
        sensors the relevance filter would suppress.
    relevance_filter : RelevanceFilter
        Applied to sensor and binary sensor entities outside edit mode.
    custom_names : Mapping[str, str], optional
        Display-name overrides used for sorting.

    Returns
    -------
    list[AreaView]
        Known areas sorted by name, followed by the unassigned bucket when it
        has content. The unassigned bucket is named ``"All Devices"`` when it
        is the only bucket, otherwise ``"Other"``. Entities linked to an area
        that is not in the registry land in the unassigned bucket.
    """
    names = custom_names or {}
    known_area_ids = {area.area_id for area in registry.areas}
    shown = _new_buckets()
    filtered: defaultdict[str | None, defaultdict[str, int]] = defaultdict(lambda: defaultdict(int))

    for domain in AREA_VIEW_DOMAINS:
        apply_filter = not edit_mode and domain in SENSOR_DOMAINS
        for entity in by_domain.get(domain, ()):
            if not edit_mode and entity.entity_id in hidden_entities:
                continue
            area_id = registry.area_id_for(entity.entity_id)
            if area_id not in known_area_ids:
                area_id = None
            if apply_filter and not relevance_filter(entity):
                filtered[area_id][domain] += 1
                continue
            shown[area_id][domain].append(entity)

    views: list[AreaView] = []
    for area in registry.areas:
        if not edit_mode and area.area_id in hidden_rooms:
            continue
        view = _make_view(area, area.name, shown[area.area_id], filtered[area.area_id], names)
        if view.has_content:
            views.append(view)
    views.sort(key=lambda view: (view.name.casefold(), view.area_id or ""))

    unassigned = _make_view(
        None,
        UNASSIGNED_ONLY_AREA_NAME if not views else UNASSIGNED_AREA_NAME,
        shown[None],
        filtered[None],
        names,
    )
    if unassigned.has_content:
        views.append(unassigned)
    return views


def build_area_view_for_state(
    state: DashboardState,
    *,
    edit_mode: bool = False,
    relevance_filter: RelevanceFilter = default_relevance_filter,
) -> list[AreaView]:
    return build_area_view(
        state.by_domain,
        state.registry,
        hidden_entities=state.hidden_entities,
        hidden_rooms=state.hidden_rooms,
        edit_mode=edit_mode,
        relevance_filter=relevance_filter,
        custom_names=state.custom_names,
    )
