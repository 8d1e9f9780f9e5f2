from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyhadash.config import HaConfig
from pyhadash.exceptions import HaApiError, HaTransportError


def state_payload(entity_id: str, state: str = "on", **attributes: Any) -> dict[str, Any]:
    return {
        "entity_id": entity_id,
        "state": state,
        "attributes": attributes,
        "last_changed": "2026-01-01T10:00:00+00:00",
        "last_updated": "2026-01-01T10:00:00+00:00",
    }


def render_area(template: str, area: Any) -> str:
    """Render one area the way Home Assistant would for *template*.

    Values are JSON-escaped only where the template pipes them through
    ``tojson``; anything that is not a well-formed area is emitted as-is.
    """
    if not isinstance(area, dict) or "area_id" not in area:
        return json.dumps(area)
    area_id, name = area["area_id"], area.get("name", "")
    id_text = json.dumps(area_id) if "area_id | tojson" in template else f'"{area_id}"'
    name_text = json.dumps(name) if "area_name(area_id) | tojson" in template else f'"{name}"'
    return f'{{"area_id": {id_text}, "name": {name_text}}}'


@dataclass
class FakeHomeAssistant:
    """In-memory Home Assistant implementing the ``Transport`` protocol."""

    states: dict[str, dict[str, Any]] = field(default_factory=dict)
    areas: list[dict[str, Any]] = field(default_factory=list)
    entity_links: list[dict[str, Any]] = field(default_factory=list)
    devices: list[dict[str, Any]] = field(default_factory=list)
    errors: dict[tuple[str, str], Exception] = field(default_factory=dict)
    """(method, endpoint) -> exception raised for every matching request."""
    template_errors: set[str] = field(default_factory=set)
    """Registry pieces ("areas", "entities", "devices") whose template fails."""
    calls: list[tuple[str, str, Any]] = field(default_factory=list)
    writes: list[tuple[float, str, dict[str, Any]]] = field(default_factory=list)
    """(loop time, entity_id, body) of every POST /api/states/{id}."""
    service_calls: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)
    service_latency: float = 0.0

    def add(self, entity_id: str, state: str = "on", **attributes: Any) -> None:
        self.states[entity_id] = state_payload(entity_id, state, **attributes)

    def store_record(self, entity_id: str, data: str) -> None:
        self.states[entity_id] = state_payload(entity_id, "2026-01-01T00:00:00+00:00", data=data)

    def record_data(self, entity_id: str) -> str | None:
        payload = self.states.get(entity_id)
        if payload is None:
            return None
        return payload["attributes"].get("data")

    def writes_to(self, entity_id: str) -> list[dict[str, Any]]:
        return [body for _, written_id, body in self.writes if written_id == entity_id]

    def count(self, method: str, endpoint: str) -> int:
        return sum(1 for m, e, _ in self.calls if m == method and e == endpoint)

    def _check_error(self, method: str, endpoint: str) -> None:
        error = self.errors.get((method, endpoint))
        if error is not None:
            raise error

    async def request_json(self, method: str, endpoint: str, payload: Any = None) -> Any:
        self.calls.append((method, endpoint, payload))
        self._check_error(method, endpoint)

        if endpoint == "/api/":
            return {"message": "API running."}
        if endpoint == "/api/states" and method == "GET":
            return [dict(item) for item in self.states.values()]
        if endpoint.startswith("/api/states/"):
            entity_id = endpoint.removeprefix("/api/states/")
            if method == "GET":
                if entity_id not in self.states:
                    raise HaApiError("API error: 404 Not Found", status_code=404, endpoint=endpoint)
                return dict(self.states[entity_id])
            body = dict(payload)
            self.writes.append((asyncio.get_running_loop().time(), entity_id, body))
            self.states[entity_id] = {"entity_id": entity_id, **body}
            return self.states[entity_id]
        if endpoint.startswith("/api/services/"):
            domain, service = endpoint.removeprefix("/api/services/").split("/")
            if self.service_latency:
                await asyncio.sleep(self.service_latency)
            self.service_calls.append((domain, service, dict(payload)))
            return []
        raise AssertionError(f"Unexpected endpoint in fake Home Assistant: {method} {endpoint}")

    async def request_text(self, method: str, endpoint: str, payload: Any = None) -> str:
        self.calls.append((method, endpoint, payload))
        self._check_error(method, endpoint)
        if endpoint != "/api/template":
            raise AssertionError(f"Unexpected text endpoint: {endpoint}")

        template = payload["template"]
        if "areas()" in template:
            piece, body = "areas", "[" + ",".join(render_area(template, area) for area in self.areas) + "]"
        elif "device_attr" in template:
            # Devices are rendered as bare objects, each followed by a comma.
            piece, body = "devices", "".join(json.dumps(device) + ",\n" for device in self.devices)
        else:
            piece, body = "entities", "[" + "".join(json.dumps(link) + "," for link in self.entity_links) + "]"
        if piece in self.template_errors:
            raise HaApiError("API error: 500 Internal Server Error", status_code=500, endpoint=endpoint)
        return body


@pytest.fixture
def fake_ha() -> FakeHomeAssistant:
    return FakeHomeAssistant()


@pytest.fixture
def config() -> HaConfig:
    return HaConfig(
        base_url="http://homeassistant.test:8123",
        token="test-token",
        settings_debounce=0.05,
        post_action_refresh_delay=0.05,
    )


@pytest.fixture
def offline_error() -> HaTransportError:
    return HaTransportError("Request to /api/ failed: connection refused", endpoint="/api/")
