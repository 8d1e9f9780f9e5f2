"""Store actions.

Every change to :class:`~pyhadash.state.reducer.DashboardState` is expressed
as one of these immutable action objects and applied by the pure reducer.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyhadash.models.entity import Entity
from pyhadash.models.registry import Registry
from pyhadash.models.sync import SyncedData


class ConnectionStatus(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SetConnectionStatus(_Action):
    status: ConnectionStatus
    error: str | None = None


class SetEntities(_Action):
    """Replace the whole entity snapshot."""

    entities: tuple[Entity, ...]
    received_at: datetime | None = None


class SetRegistry(_Action):
    registry: Registry


class UpdateEntity(_Action):
    """Replace one entity by id (optimistic patch or revert)."""

    entity: Entity
    received_at: datetime | None = None


class SetHiddenEntities(_Action):
    entity_ids: frozenset[str] = frozenset()


class HideEntity(_Action):
    entity_id: str


class ShowEntity(_Action):
    entity_id: str


class SetHiddenRooms(_Action):
    area_ids: frozenset[str] = frozenset()


class HideRoom(_Action):
    area_id: str


class ShowRoom(_Action):
    area_id: str


class SetCustomName(_Action):
    """``key`` is an entity id or an area id."""

    key: str
    name: str


class SetCustomNames(_Action):
    names: dict[str, str] = Field(default_factory=dict)


class RemoveCustomName(_Action):
    key: str


class UpdateSettings(_Action):
    """Partial settings update; keys may be snake_case or camelCase."""

    changes: dict[str, Any]

    @field_validator("changes", mode="before")
    @classmethod
    def _copy_changes(cls, value: Any) -> dict[str, Any]:
        if isinstance(value, Mapping):
            return dict(value)
        raise TypeError("changes must be a mapping")


class LoadSyncedData(_Action):
    """Result of the initial settings load.

    ``None`` pieces of ``data`` keep the current (default) values.
    """

    data: SyncedData
    sync_enabled: bool


class SetError(_Action):
    message: str


class ClearError(_Action):
    pass


class SetSettingsError(_Action):
    message: str | None


Action = (
    SetConnectionStatus
    | SetEntities
    | SetRegistry
    | UpdateEntity
    | SetHiddenEntities
    | HideEntity
    | ShowEntity
    | SetHiddenRooms
    | HideRoom
    | ShowRoom
    | SetCustomName
    | SetCustomNames
    | RemoveCustomName
    | UpdateSettings
    | LoadSyncedData
    | SetError
    | ClearError
    | SetSettingsError
)
