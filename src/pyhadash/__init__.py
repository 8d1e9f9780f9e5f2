"""pyhadash - Async Python core for a Home Assistant dashboard."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyhadash")
except PackageNotFoundError:
    __version__ = "0+local"
from pyhadash.client import DashboardClient
from pyhadash.config import HaConfig
from pyhadash.exceptions import (
    HaApiError,
    HaConfigError,
    HaConnectionError,
    HaError,
    HaRefreshError,
    HaTransportError,
    OptimisticActionError,
    RegistryFetchError,
    StoredDataParseError,
    SyncUnavailableError,
)
from pyhadash.models import (
    AppSettings,
    Area,
    AreaClimate,
    AreaView,
    Device,
    Entity,
    EntityType,
    Registry,
    RelatedEntity,
    SyncedData,
    SyncRecord,
    SyncStatus,
)
from pyhadash.state import ConnectionStatus, DashboardState, EntityStore

__all__ = [
    "__version__",
    "AppSettings",
    "Area",
    "AreaClimate",
    "AreaView",
    "ConnectionStatus",
    "DashboardClient",
    "DashboardState",
    "Device",
    "Entity",
    "EntityStore",
    "EntityType",
    "HaApiError",
    "HaConfig",
    "HaConfigError",
    "HaConnectionError",
    "HaError",
    "HaRefreshError",
    "HaTransportError",
    "OptimisticActionError",
    "Registry",
    "RegistryFetchError",
    "RelatedEntity",
    "StoredDataParseError",
    "SyncRecord",
    "SyncStatus",
    "SyncUnavailableError",
    "SyncedData",
]
