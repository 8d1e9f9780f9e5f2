"""Data models for Home Assistant payloads and derived views."""

from pyhadash.models._base import HaBaseModel, HaTimestamp, parse_ha_timestamp
from pyhadash.models.entity import Entity, split_entity_id
from pyhadash.models.registry import Area, Device, Registry, RegistryEntry
from pyhadash.models.settings import AppSettings
from pyhadash.models.sync import SyncedData, SyncRecord, SyncStatus
from pyhadash.models.views import AreaClimate, AreaView, EntityType, RelatedEntity

__all__ = [
    "AppSettings",
    "Area",
    "AreaClimate",
    "AreaView",
    "Device",
    "Entity",
    "EntityType",
    "HaBaseModel",
    "HaTimestamp",
    "Registry",
    "RegistryEntry",
    "RelatedEntity",
    "SyncRecord",
    "SyncStatus",
    "SyncedData",
    "parse_ha_timestamp",
    "split_entity_id",
]
