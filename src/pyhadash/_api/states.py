"""State endpoints: /api/, /api/states and /api/states/{entity_id}."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyhadash._transport import Transport
from pyhadash.exceptions import HaTransportError
from pyhadash.models.entity import Entity

_logger = logging.getLogger(__name__)


def parse_states(payload: Any, *, endpoint: str = "/api/states") -> list[Entity]:
    """Parse a state list; malformed items are skipped, not fatal."""
    if not isinstance(payload, list):
        raise HaTransportError(f"Expected a list of states from {endpoint}", endpoint=endpoint)
    entities: list[Entity] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            entities.append(Entity.model_validate(item))
        except ValidationError:
            _logger.debug("Skipping malformed state item from %s: %r", endpoint, item.get("entity_id"))
    return entities


async def check_api(transport: Transport) -> None:
    """Reachability + authentication check. Raises on failure."""
    await transport.request_json("GET", "/api/")


async def fetch_states(transport: Transport) -> list[Entity]:
    """Fetch the full entity snapshot."""
    payload = await transport.request_json("GET", "/api/states")
    return parse_states(payload)


async def fetch_state_payload(transport: Transport, entity_id: str) -> dict[str, Any]:
    """Fetch one entity as a raw dict (``state`` + ``attributes``)."""
    endpoint = f"/api/states/{entity_id}"
    payload = await transport.request_json("GET", endpoint)
    if not isinstance(payload, dict):
        raise HaTransportError(f"Expected an object from {endpoint}", endpoint=endpoint)
    return payload


async def fetch_state(transport: Transport, entity_id: str) -> Entity:
    payload = await fetch_state_payload(transport, entity_id)
    try:
        return Entity.model_validate(payload)
    except ValidationError as exc:
        raise HaTransportError(
            f"Invalid entity payload for {entity_id}: {exc}",
            endpoint=f"/api/states/{entity_id}",
        ) from exc


async def set_state(
    transport: Transport,
    entity_id: str,
    *,
    state: str,
    attributes: dict[str, Any],
) -> dict[str, Any]:
    """Create or overwrite the state of *entity_id*."""
    endpoint = f"/api/states/{entity_id}"
    payload = await transport.request_json("POST", endpoint, {"state": state, "attributes": attributes})
    return payload if isinstance(payload, dict) else {}
