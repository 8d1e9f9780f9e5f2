from __future__ import annotations

import asyncio

import pytest

from pyhadash.client import DashboardClient
from pyhadash.config import HaConfig
from pyhadash.exceptions import HaApiError, HaError
from pyhadash.state.actions import ConnectionStatus

SETTINGS_ID = "sensor.ha_dashboard_settings"
HIDDEN_ENTITIES_ID = "sensor.ha_dashboard_hidden_entities"
CUSTOM_NAMES_ID = "sensor.ha_dashboard_custom_names"


def _server_error(endpoint: str) -> HaApiError:
    return HaApiError("API error: 500 Internal Server Error", status_code=500, endpoint=endpoint)


@pytest.fixture
def home(fake_ha):
    fake_ha.add("light.kitchen", "on", friendly_name="Kitchen Light")
    fake_ha.add("light.hall", "off", friendly_name="Hall Light")
    fake_ha.add("switch.plug", "off", friendly_name="Plug")
    fake_ha.add("sensor.plug_power", "12", device_class="power")
    fake_ha.add("sensor.kitchen_temp", "21.4", device_class="temperature")
    fake_ha.add("lock.front", "unlocked", friendly_name="Front Door")
    fake_ha.add("person.alice", "home", friendly_name="Alice")
    fake_ha.add("weather.home", "sunny")
    fake_ha.areas = [{"area_id": "kitchen", "name": "Kitchen"}, {"area_id": "hall", "name": "Hall"}]
    fake_ha.entity_links = [
        {"entity_id": "light.kitchen", "area_id": "kitchen", "device_id": None},
        {"entity_id": "sensor.kitchen_temp", "area_id": "kitchen", "device_id": None},
        {"entity_id": "light.hall", "area_id": "hall", "device_id": None},
        {"entity_id": "switch.plug", "area_id": "hall", "device_id": "plug"},
        {"entity_id": "sensor.plug_power", "area_id": "hall", "device_id": "plug"},
    ]
    fake_ha.devices = [{"device_id": "plug", "name": "Smart Plug"}]
    return fake_ha


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_connect_loads_entities_registry_and_settings(config: HaConfig, home) -> None:
    async with DashboardClient(config, transport=home) as client:
        assert await client.connect() is True
        assert client.connection_status is ConnectionStatus.CONNECTED

        state = client.state
        assert [e.entity_id for e in state.domain("light")] == ["light.kitchen", "light.hall"]
        assert state.registry.entity_area_map["switch.plug"] == "hall"
        assert state.last_updated is not None

        assert await client.wait_settings_loaded() is True
        assert client.state.settings_loaded
        assert client.state.sync_enabled
        assert client.sync_status.available

        views = client.area_view()
        assert [view.name for view in views] == ["Hall", "Kitchen", "Other"]
        hall = views[0]
        assert [e.entity_id for e in hall.get("switch")] == ["switch.plug"]
        assert hall.filtered_sensor_count == 1
        assert client.area_climate(views[1]).temperature == "21°"
        assert [e.entity_id for e in views[2].get("lock")] == ["lock.front"]

        assert [item.entity.entity_id for item in client.related_entities("switch.plug")] == ["sensor.plug_power"]
        assert client.device_name("switch.plug") == "Smart Plug"
        assert [p.entity_id for p in client.filtered_people()] == ["person.alice"]
        assert client.primary_weather().entity_id == "weather.home"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_connect_error_requires_explicit_reconnect(config: HaConfig, home, offline_error) -> None:
    home.errors[("GET", "/api/")] = offline_error

    async with DashboardClient(config, transport=home) as client:
        assert await client.connect() is False
        assert client.connection_status is ConnectionStatus.ERROR
        assert "Cannot reach Home Assistant" in (client.state.error or "")
        assert client.state.entities == ()

        del home.errors[("GET", "/api/")]
        assert await client.reconnect() is True
        assert client.connection_status is ConnectionStatus.CONNECTED
        assert client.state.error is None


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_refresh_failure_keeps_previous_snapshot(config: HaConfig, home) -> None:
    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        snapshot = client.state.entities

        home.errors[("GET", "/api/states")] = _server_error("/api/states")
        assert await client.refresh() is False

        assert client.connection_status is ConnectionStatus.ERROR
        assert client.state.entities == snapshot
        assert "Failed to refresh" in (client.state.error or "")
        # no refresh outside the connected status
        assert await client.refresh() is False


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_service_call_schedules_one_refresh(config: HaConfig, home) -> None:
    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        before = home.count("GET", "/api/states")

        await client.call_service("light", "turn_on", {"brightness": 128}, entity_id="light.hall")
        assert home.service_calls == [("light", "turn_on", {"brightness": 128, "entity_id": "light.hall"})]
        assert home.count("GET", "/api/states") == before

        home.add("light.hall", "on", friendly_name="Hall Light")
        await asyncio.sleep(0.2)

        assert home.count("GET", "/api/states") == before + 1
        assert client.state.get_entity("light.hall").state == "on"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_toggle_reverts_on_failure(config: HaConfig, home) -> None:
    home.errors[("POST", "/api/services/light/turn_off")] = _server_error("/api/services/light/turn_off")

    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        await client.wait_settings_loaded()
        seen: list[str] = []
        client.store.subscribe(lambda state, _action: seen.append(state.get_entity("light.kitchen").state))

        assert await client.toggle("light.kitchen") is False

        assert seen == ["off", "on"]
        assert client.state.get_entity("light.kitchen").state == "on"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_lock_toggle_shows_transitional_state(config: HaConfig, home) -> None:
    home.service_latency = 0.05

    async with DashboardClient(config, transport=home) as client:
        await client.connect()

        task = asyncio.ensure_future(client.toggle("lock.front"))
        await asyncio.sleep(0.01)
        assert client.state.get_entity("lock.front").state == "locking"

        assert await task is True
        assert client.state.get_entity("lock.front").state == "locked"
        assert home.service_calls == [("lock", "lock", {"entity_id": "lock.front"})]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_toggle_rejects_unsupported_domains(config: HaConfig, home) -> None:
    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        with pytest.raises(ValueError):
            await client.toggle("sensor.kitchen_temp")
        with pytest.raises(ValueError):
            await client.toggle("light.missing")


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_remote_customizations_are_loaded(config: HaConfig, home) -> None:
    home.store_record(HIDDEN_ENTITIES_ID, '["light.hall"]')
    home.store_record(CUSTOM_NAMES_ID, '{"kitchen":"Cuisine"}')
    home.store_record(SETTINGS_ID, '{"refreshInterval":120,"peoplePattern":"bob"}')

    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        await client.wait_settings_loaded()

        assert client.state.hidden_entities == {"light.hall"}
        assert client.state.settings.refresh_interval == 120
        assert client.display_name("kitchen", "Kitchen") == "Cuisine"
        assert client.filtered_people() == []
        assert home.writes_to(SETTINGS_ID) == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_customizations_are_persisted(config: HaConfig, home) -> None:
    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        await client.wait_settings_loaded()

        client.hide_entity("light.kitchen")
        client.set_custom_name("light.hall", "Corridor")
        client.update_settings(refresh_interval=60)
        await client.flush()

        assert home.record_data(HIDDEN_ENTITIES_ID) == '["light.kitchen"]'
        assert home.record_data(CUSTOM_NAMES_ID) == '{"light.hall":"Corridor"}'
        assert '"refreshInterval":60' in (home.record_data(SETTINGS_ID) or "")

        kitchen = next(view for view in client.area_view() if view.area_id == "kitchen")
        assert kitchen.get("light") == ()
        edit_kitchen = next(view for view in client.area_view(edit_mode=True) if view.area_id == "kitchen")
        assert [e.entity_id for e in edit_kitchen.get("light")] == ["light.kitchen"]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_repeated_customization_writes_once(config: HaConfig, home) -> None:
    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        await client.wait_settings_loaded()
        seen: list[object] = []
        client.store.subscribe(lambda _state, action: seen.append(action))

        client.hide_entity("light.kitchen")
        await client.flush()
        hidden_writes = len(home.writes_to(HIDDEN_ENTITIES_ID))
        name_writes = len(home.writes_to(CUSTOM_NAMES_ID))

        client.hide_entity("light.kitchen")
        client.show_entity("light.hall")
        client.set_custom_name("light.kitchen", "  ")
        await client.flush()
        await asyncio.sleep(0.1)

        assert len(home.writes_to(HIDDEN_ENTITIES_ID)) == hidden_writes
        assert len(home.writes_to(CUSTOM_NAMES_ID)) == name_writes
        assert len(seen) == 1


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_connect_without_settings_never_writes(config: HaConfig, home) -> None:
    async with DashboardClient(config, transport=home) as client:
        assert await client.connect(load_settings=False) is True
        assert await client.wait_settings_loaded() is False

        assert client.state.entities != ()
        assert not client.state.settings_loaded
        assert not client.sync_status.available

    assert home.writes == []
    assert not any(endpoint.startswith("/api/states/sensor.ha_dashboard") for _, endpoint, _ in home.calls)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_pending_writes_are_flushed_on_exit(config: HaConfig, home) -> None:
    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        await client.wait_settings_loaded()
        client.hide_room("hall")
        assert home.record_data("sensor.ha_dashboard_hidden_rooms") == "[]"

    assert home.record_data("sensor.ha_dashboard_hidden_rooms") == '["hall"]'


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_sync_unavailable_keeps_local_customizations(config: HaConfig, home) -> None:
    home.errors[("GET", f"/api/states/{SETTINGS_ID}")] = _server_error(f"/api/states/{SETTINGS_ID}")

    async with DashboardClient(config, transport=home) as client:
        await client.connect()
        assert await client.wait_settings_loaded() is False

        assert client.state.settings_loaded
        assert not client.state.sync_enabled
        assert "unreachable" in (client.state.settings_error or "")
        assert client.connection_status is ConnectionStatus.CONNECTED

        client.hide_entity("light.kitchen")
        await client.flush()

        assert client.state.hidden_entities == {"light.kitchen"}
        assert home.writes == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_polling_uses_current_refresh_interval(config: HaConfig, home) -> None:
    home.errors[("GET", f"/api/states/{SETTINGS_ID}")] = _server_error(f"/api/states/{SETTINGS_ID}")

    async with DashboardClient(config, transport=home) as client:
        client.update_settings(refresh_interval=0.05)
        await client.connect()
        before = home.count("GET", "/api/states")

        await asyncio.sleep(0.25)
        assert home.count("GET", "/api/states") >= before + 2

        await client.disconnect()
        stopped_at = home.count("GET", "/api/states")
        await asyncio.sleep(0.15)
        assert home.count("GET", "/api/states") == stopped_at


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_client_requires_context_manager(config: HaConfig, home) -> None:
    client = DashboardClient(config, transport=home)
    with pytest.raises(HaError, match="Client not initialized"):
        await client.connect()
