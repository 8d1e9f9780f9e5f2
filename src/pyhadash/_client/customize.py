"""Customization mutations for :class:`pyhadash.client.DashboardClient`.

Each mutation updates the store first and then hands the new value of the
affected record to the settings sync service. A mutation that leaves the
state unchanged writes nothing. Persistence is also skipped while sync is
disabled; the local change still applies.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pyhadash.models.sync import SyncRecord
from pyhadash.state.actions import (
    Action,
    HideEntity,
    HideRoom,
    RemoveCustomName,
    SetCustomName,
    SetHiddenEntities,
    SetHiddenRooms,
    ShowEntity,
    ShowRoom,
    UpdateSettings,
)

if TYPE_CHECKING:
    from pyhadash.client import DashboardClient


_RECORD_FIELDS: dict[SyncRecord, str] = {
    SyncRecord.HIDDEN_ENTITIES: "hidden_entities",
    SyncRecord.HIDDEN_ROOMS: "hidden_rooms",
    SyncRecord.CUSTOM_NAMES: "custom_names",
    SyncRecord.SETTINGS: "settings",
}


def _apply(client: DashboardClient, action: Action, record: SyncRecord) -> None:
    previous = client.store.state
    state = client.store.dispatch(action)
    if state is not previous:
        client._persist(record, getattr(state, _RECORD_FIELDS[record]))


def hide_entity(client: DashboardClient, entity_id: str) -> None:
    _apply(client, HideEntity(entity_id=entity_id), SyncRecord.HIDDEN_ENTITIES)


def show_entity(client: DashboardClient, entity_id: str) -> None:
    _apply(client, ShowEntity(entity_id=entity_id), SyncRecord.HIDDEN_ENTITIES)


def show_all_entities(client: DashboardClient) -> None:
    _apply(client, SetHiddenEntities(entity_ids=frozenset()), SyncRecord.HIDDEN_ENTITIES)


def hide_room(client: DashboardClient, area_id: str) -> None:
    _apply(client, HideRoom(area_id=area_id), SyncRecord.HIDDEN_ROOMS)


def show_room(client: DashboardClient, area_id: str) -> None:
    _apply(client, ShowRoom(area_id=area_id), SyncRecord.HIDDEN_ROOMS)


def show_all_rooms(client: DashboardClient) -> None:
    _apply(client, SetHiddenRooms(area_ids=frozenset()), SyncRecord.HIDDEN_ROOMS)


def set_custom_name(client: DashboardClient, key: str, name: str) -> None:
    """Override the display name of an entity or area.

    A blank name removes the override.
    """
    name = name.strip()
    if not name:
        remove_custom_name(client, key)
        return
    _apply(client, SetCustomName(key=key, name=name), SyncRecord.CUSTOM_NAMES)


def remove_custom_name(client: DashboardClient, key: str) -> None:
    _apply(client, RemoveCustomName(key=key), SyncRecord.CUSTOM_NAMES)


def update_settings(client: DashboardClient, changes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
    """Merge *changes* (and keyword changes) into the settings.

    Raises :class:`pydantic.ValidationError` for invalid values; the store
    is left unchanged in that case.
    """
    merged = {**(changes or {}), **kwargs}
    if not merged:
        return
    _apply(client, UpdateSettings(changes=merged), SyncRecord.SETTINGS)
