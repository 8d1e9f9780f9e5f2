"""Settings-sync models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pyhadash.models.settings import AppSettings


class SyncRecord(StrEnum):
    """The four logical records persisted on the remote platform."""

    SETTINGS = "settings"
    HIDDEN_ENTITIES = "hidden_entities"
    HIDDEN_ROOMS = "hidden_rooms"
    CUSTOM_NAMES = "custom_names"


class SyncStatus(BaseModel):
    """Process-wide state of the remote settings store."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    available: bool = False
    last_sync: datetime | None = None
    error: str | None = None


class SyncedData(BaseModel):
    """Result of loading all four records.

    ``None`` means "no usable data": the record was missing, empty,
    unreadable, or not valid JSON.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    settings: AppSettings | None = None
    hidden_entities: frozenset[str] | None = None
    hidden_rooms: frozenset[str] | None = None
    custom_names: dict[str, str] | None = Field(default=None)
