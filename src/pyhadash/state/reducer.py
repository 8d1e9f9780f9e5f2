"""Pure reducer for the dashboard state.

``reduce(state, action)`` never mutates its input and has no side effects,
so every transition can be replayed deterministically in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyhadash._constants import TRACKED_DOMAINS
from pyhadash.models.entity import Entity
from pyhadash.models.registry import Registry
from pyhadash.models.settings import AppSettings
from pyhadash.state.actions import (
    Action,
    ClearError,
    ConnectionStatus,
    HideEntity,
    HideRoom,
    LoadSyncedData,
    RemoveCustomName,
    SetConnectionStatus,
    SetCustomName,
    SetCustomNames,
    SetEntities,
    SetError,
    SetHiddenEntities,
    SetHiddenRooms,
    SetRegistry,
    SetSettingsError,
    ShowEntity,
    ShowRoom,
    UpdateEntity,
    UpdateSettings,
)

_logger = logging.getLogger(__name__)

#: Allowed connection transitions. ``error`` only leaves through an explicit reconnect.
CONNECTION_TRANSITIONS: dict[ConnectionStatus, frozenset[ConnectionStatus]] = {
    ConnectionStatus.DISCONNECTED: frozenset({ConnectionStatus.CONNECTING}),
    ConnectionStatus.CONNECTING: frozenset(
        {ConnectionStatus.CONNECTED, ConnectionStatus.ERROR, ConnectionStatus.DISCONNECTED}
    ),
    ConnectionStatus.CONNECTED: frozenset(
        {ConnectionStatus.ERROR, ConnectionStatus.CONNECTING, ConnectionStatus.DISCONNECTED}
    ),
    ConnectionStatus.ERROR: frozenset({ConnectionStatus.CONNECTING, ConnectionStatus.DISCONNECTED}),
}


def group_by_domain(entities: Iterable[Entity]) -> dict[str, tuple[Entity, ...]]:
    """Split entities into one collection per tracked domain (in snapshot order)."""
    buckets: dict[str, list[Entity]] = {domain: [] for domain in TRACKED_DOMAINS}
    for entity in entities:
        bucket = buckets.get(entity.domain)
        if bucket is not None:
            bucket.append(entity)
    return {domain: tuple(items) for domain, items in buckets.items()}


class DashboardState(BaseModel):
    """Immutable snapshot of everything the dashboard knows."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    configured: bool = False
    connection_status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    settings_loaded: bool = False
    sync_enabled: bool = False
    settings_error: str | None = None

    entities: tuple[Entity, ...] = ()
    by_domain: dict[str, tuple[Entity, ...]] = Field(default_factory=lambda: group_by_domain(()))
    """Tracked domain -> entities of that domain."""
    registry: Registry = Field(default_factory=Registry)

    hidden_entities: frozenset[str] = frozenset()
    hidden_rooms: frozenset[str] = frozenset()
    custom_names: dict[str, str] = Field(default_factory=dict)
    settings: AppSettings = Field(default_factory=AppSettings)

    error: str | None = None
    last_updated: datetime | None = None

    def domain(self, domain: str) -> tuple[Entity, ...]:
        return self.by_domain.get(domain, ())

    def get_entity(self, entity_id: str) -> Entity | None:
        return next((entity for entity in self.entities if entity.entity_id == entity_id), None)

    @property
    def visible_entities(self) -> tuple[Entity, ...]:
        """Snapshot minus hidden entities."""
        return tuple(entity for entity in self.entities if entity.entity_id not in self.hidden_entities)


def _replace(state: DashboardState, **changes: Any) -> DashboardState:
    return state.model_copy(update=changes)


def _changed(state: DashboardState, field: str, value: Any) -> DashboardState:
    """Replace one field; the same state object comes back when the value is equal."""
    if getattr(state, field) == value:
        return state
    return _replace(state, **{field: value})


def _set_connection_status(state: DashboardState, action: SetConnectionStatus) -> DashboardState:
    current = state.connection_status
    if action.status == current and action.error == state.error:
        return state
    if action.status != current and action.status not in CONNECTION_TRANSITIONS[current]:
        _logger.debug("Ignoring connection transition %s -> %s", current, action.status)
        return state
    return _replace(state, connection_status=action.status, error=action.error)


def _set_entities(state: DashboardState, action: SetEntities) -> DashboardState:
    return _replace(
        state,
        entities=action.entities,
        by_domain=group_by_domain(action.entities),
        last_updated=action.received_at or state.last_updated,
    )


def _update_entity(state: DashboardState, action: UpdateEntity) -> DashboardState:
    entity = action.entity
    entity_id = entity.entity_id
    current = state.get_entity(entity_id)
    if current is None or current == entity:
        return state

    def swap(items: tuple[Entity, ...]) -> tuple[Entity, ...]:
        return tuple(entity if item.entity_id == entity_id else item for item in items)

    by_domain = dict(state.by_domain)
    if entity.domain in by_domain:
        by_domain[entity.domain] = swap(by_domain[entity.domain])
    return _replace(
        state,
        entities=swap(state.entities),
        by_domain=by_domain,
        last_updated=action.received_at or state.last_updated,
    )


def _update_settings(state: DashboardState, action: UpdateSettings) -> DashboardState:
    settings = state.settings.merged(action.changes)
    if settings == state.settings:
        return state
    return _replace(state, settings=settings)


def _load_synced_data(state: DashboardState, action: LoadSyncedData) -> DashboardState:
    data = action.data
    return _replace(
        state,
        settings=data.settings if data.settings is not None else state.settings,
        hidden_entities=data.hidden_entities if data.hidden_entities is not None else state.hidden_entities,
        hidden_rooms=data.hidden_rooms if data.hidden_rooms is not None else state.hidden_rooms,
        custom_names=dict(data.custom_names) if data.custom_names is not None else state.custom_names,
        sync_enabled=action.sync_enabled,
        settings_loaded=True,
    )


def _without(names: dict[str, str], key: str) -> dict[str, str]:
    return {k: v for k, v in names.items() if k != key}


_HANDLERS: dict[type[Any], Callable[[DashboardState, Any], DashboardState]] = {
    SetConnectionStatus: _set_connection_status,
    SetEntities: _set_entities,
    SetRegistry: lambda state, action: _changed(state, "registry", action.registry),
    UpdateEntity: _update_entity,
    SetHiddenEntities: lambda state, action: _changed(state, "hidden_entities", action.entity_ids),
    HideEntity: lambda state, action: _changed(state, "hidden_entities", state.hidden_entities | {action.entity_id}),
    ShowEntity: lambda state, action: _changed(state, "hidden_entities", state.hidden_entities - {action.entity_id}),
    SetHiddenRooms: lambda state, action: _changed(state, "hidden_rooms", action.area_ids),
    HideRoom: lambda state, action: _changed(state, "hidden_rooms", state.hidden_rooms | {action.area_id}),
    ShowRoom: lambda state, action: _changed(state, "hidden_rooms", state.hidden_rooms - {action.area_id}),
    SetCustomName: lambda state, action: _changed(
        state, "custom_names", {**state.custom_names, action.key: action.name}
    ),
    SetCustomNames: lambda state, action: _changed(state, "custom_names", dict(action.names)),
    RemoveCustomName: lambda state, action: _changed(state, "custom_names", _without(state.custom_names, action.key)),
    UpdateSettings: _update_settings,
    LoadSyncedData: _load_synced_data,
    SetError: lambda state, action: _changed(state, "error", action.message),
    ClearError: lambda state, action: _changed(state, "error", None),
    SetSettingsError: lambda state, action: _changed(state, "settings_error", action.message),
}


def reduce(state: DashboardState, action: Action) -> DashboardState:
    """Apply *action* to *state* and return the new state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unsupported action: {type(action).__name__}")
    return handler(state, action)
