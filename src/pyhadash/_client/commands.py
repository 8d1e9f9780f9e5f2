"""Service calls and optimistic commands for :class:`pyhadash.client.DashboardClient`.

Optimistic commands follow one pattern: keep the current entity, patch it in
the store, call the service, and put the kept entity back when the call
fails. Failures are logged and reported through the return value; they never
propagate to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from pyhadash._api.services import call_service as call_service_api
from pyhadash._constants import FAN, LIGHT, LOCK, SWITCH, VALVE
from pyhadash.exceptions import HaError, OptimisticActionError
from pyhadash.models.entity import Entity

if TYPE_CHECKING:
    from pyhadash.client import DashboardClient

_logger = logging.getLogger(__name__)


async def call_service(
    client: DashboardClient,
    domain: str,
    service: str,
    data: Mapping[str, Any] | None = None,
    *,
    entity_id: str | None = None,
) -> list[Entity]:
    """Invoke a service and schedule one delayed refresh on success.

    Raises :class:`~pyhadash.exceptions.HaTransportError` when the call fails.
    """
    payload = dict(data or {})
    if entity_id is not None:
        payload["entity_id"] = entity_id
    transport = client._require_transport()
    changed = await call_service_api(transport, domain, service, payload)
    client.schedule_refresh_after(client.config.post_action_refresh_delay)
    return changed


async def run_optimistic(
    client: DashboardClient,
    optimistic: Entity,
    action: Callable[[], Awaitable[Any]],
    *,
    confirmed: Entity | None = None,
) -> bool:
    """Apply *optimistic*, run *action*, revert on failure.

    Parameters
    ----------
    optimistic : Entity
        Patched entity shown while *action* runs.
    action : Callable[[], Awaitable[Any]]
        The remote call.
    confirmed : Entity, optional
        Entity to show once *action* succeeded (e.g. ``locked`` after
        ``locking``).

    Returns
    -------
    bool
        ``True`` if *action* succeeded, ``False`` if the entity was reverted.
    """
    store = client.store
    previous = store.get_entity(optimistic.entity_id)
    store.update_entity(optimistic)
    try:
        await action()
    except HaError as exc:
        if previous is not None:
            store.update_entity(previous)
        error = OptimisticActionError(
            f"{optimistic.entity_id}: {exc}",
            entity_id=optimistic.entity_id,
        )
        _logger.warning("Reverted optimistic update: %s", error)
        return False
    if confirmed is not None:
        store.update_entity(confirmed)
    return True


def _toggle_plan(entity: Entity) -> tuple[str, str, str | None]:
    """Service, optimistic state and confirmed state for a toggle."""
    domain = entity.domain
    if domain in (LIGHT, SWITCH, FAN):
        is_on = entity.state == "on"
        return ("turn_off" if is_on else "turn_on", "off" if is_on else "on", None)
    if domain == VALVE:
        is_open = entity.state == "open"
        return ("close_valve" if is_open else "open_valve", "closed" if is_open else "open", None)
    if domain == LOCK:
        is_locked = entity.state == "locked"
        if is_locked:
            return ("unlock", "unlocking", "unlocked")
        return ("lock", "locking", "locked")
    raise ValueError(f"Cannot toggle entities of domain {domain!r}")


async def toggle(client: DashboardClient, entity_id: str) -> bool:
    """Toggle a light, switch, fan, valve or lock optimistically.

    Raises :class:`ValueError` for unknown entities and unsupported domains.
    """
    entity = client.store.get_entity(entity_id)
    if entity is None:
        raise ValueError(f"Unknown entity {entity_id!r}")
    service, optimistic_state, confirmed_state = _toggle_plan(entity)

    async def _call() -> None:
        await call_service(client, entity.domain, service, entity_id=entity_id)

    return await run_optimistic(
        client,
        entity.with_state(optimistic_state),
        _call,
        confirmed=entity.with_state(confirmed_state) if confirmed_state is not None else None,
    )
