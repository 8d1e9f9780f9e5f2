"""Service endpoint: /api/services/{domain}/{service}."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pyhadash._api.states import parse_states
from pyhadash._transport import Transport
from pyhadash.models.entity import Entity


async def call_service(
    transport: Transport,
    domain: str,
    service: str,
    data: Mapping[str, Any] | None = None,
) -> list[Entity]:
    """Invoke a service.

    Home Assistant answers with the states that changed while the call
    was processed; slow devices usually report later, so the list may
    already be stale.
    """
    endpoint = f"/api/services/{domain}/{service}"
    payload = await transport.request_json("POST", endpoint, dict(data or {}))
    if isinstance(payload, list):
        return parse_states(payload, endpoint=endpoint)
    return []
