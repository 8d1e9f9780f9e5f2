"""Registry resolver.

Fetches areas, entity->area/device links and devices once per connection.
Each piece is fetched independently; a failing piece degrades to an empty
result so the dashboard still works with ungrouped entities.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from typing import TypeVar

from pyhadash._api.registry import fetch_areas, fetch_devices, fetch_entity_registry
from pyhadash._constants import REGISTRY_DOMAINS
from pyhadash._transport import Transport
from pyhadash.exceptions import RegistryFetchError
from pyhadash.models.registry import Registry

_logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _or_empty(piece: str, fetch: Awaitable[list[T]]) -> list[T]:
    try:
        return await fetch
    except RegistryFetchError as exc:
        _logger.warning("Registry %s unavailable, continuing without it: %s", piece, exc)
        return []


async def resolve_registry(
    transport: Transport,
    *,
    domains: Sequence[str] = REGISTRY_DOMAINS,
) -> Registry:
    """Resolve the registry lookup tables. Never raises :class:`RegistryFetchError`."""
    areas, entries, devices = await asyncio.gather(
        _or_empty("areas", fetch_areas(transport)),
        _or_empty("entity links", fetch_entity_registry(transport, domains)),
        _or_empty("devices", fetch_devices(transport)),
    )
    registry = Registry.from_entries(areas=areas, entries=entries, devices=devices)
    _logger.debug(
        "Resolved registry: %d areas, %d area links, %d device links, %d devices",
        len(registry.areas),
        len(registry.entity_area_map),
        len(registry.entity_device_map),
        len(registry.devices),
    )
    return registry
