"""High-level async client for a Home Assistant dashboard."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

import aiohttp

from pyhadash._api.states import check_api, fetch_states
from pyhadash._client import commands as _commands
from pyhadash._client import customize as _customize
from pyhadash._constants import PERSON, SENSOR, WEATHER
from pyhadash._transport import RestTransport, Transport
from pyhadash.config import HaConfig
from pyhadash.exceptions import HaConnectionError, HaError, HaRefreshError
from pyhadash.models.entity import Entity
from pyhadash.models.sync import SyncRecord, SyncStatus
from pyhadash.models.views import AreaClimate, AreaView, RelatedEntity
from pyhadash.registry import resolve_registry
from pyhadash.state.actions import (
    ConnectionStatus,
    LoadSyncedData,
    SetRegistry,
    SetSettingsError,
)
from pyhadash.state.reducer import DashboardState
from pyhadash.state.store import EntityStore
from pyhadash.sync.settings_sync import SettingsSyncService
from pyhadash.views import helpers as _helpers
from pyhadash.views.areas import build_area_view_for_state
from pyhadash.views.filters import RelevanceFilter, default_relevance_filter
from pyhadash.views.related import related_entities as _related_entities

_logger = logging.getLogger(__name__)


class DashboardClient:
    """Async client holding the dashboard state for one Home Assistant instance.

    Usage::

        async with DashboardClient(HaConfig.from_env()) as client:
            await client.connect()
            for view in client.area_view():
                print(view.name, view.entity_count)

    The client owns the entity store, the settings sync service and the
    refresh timers. Network failures are turned into state (connection
    ``error``, sync unavailable, reverted entities) instead of exceptions.
    """

    def __init__(
        self,
        config: HaConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        relevance_filter: RelevanceFilter = default_relevance_filter,
        flush_on_close: bool = True,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._injected_transport = transport is not None
        self._relevance_filter = relevance_filter
        self._flush_on_close = flush_on_close
        self._store = EntityStore(DashboardState(configured=config.is_configured))
        self._sync: SettingsSyncService | None = None
        self._settings_task: asyncio.Task[bool] | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._delayed_refreshes: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DashboardClient:
        self._config.require_configured()
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = RestTransport(self._config, self._http_session)
        self._sync = SettingsSyncService(
            self._transport,
            entity_prefix=self._config.settings_entity_prefix,
            debounce=self._config.settings_debounce,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close(flush=self._flush_on_close)

    async def close(self, *, flush: bool = True) -> None:
        """Stop timers, settle pending writes and release the HTTP session."""
        await self._stop_polling()
        await self._cancel_and_wait(*self._delayed_refreshes)
        if self._settings_task is not None and not self._settings_task.done():
            await self._cancel_and_wait(self._settings_task)
        if self._sync is not None:
            await self._sync.close(flush=flush)
            self._sync = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._injected_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None or self._sync is None:
            raise HaError("Client not initialized. Use 'async with DashboardClient(...) as client:'")
        return self._transport

    def _require_sync(self) -> SettingsSyncService:
        self._require_transport()
        assert self._sync is not None  # noqa: S101
        return self._sync

    def _persist(self, record: SyncRecord, value: Any) -> None:
        """Hand a record to the sync service when sync is enabled."""
        if self._sync is None or not self._store.state.sync_enabled:
            return
        self._sync.save(record, value)

    @staticmethod
    async def _cancel_and_wait(*tasks: asyncio.Task[Any]) -> None:
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> HaConfig:
        return self._config

    @property
    def store(self) -> EntityStore:
        return self._store

    @property
    def state(self) -> DashboardState:
        return self._store.state

    @property
    def connection_status(self) -> ConnectionStatus:
        return self._store.connection_status

    @property
    def sync_status(self) -> SyncStatus:
        return self._sync.status if self._sync is not None else SyncStatus()

    # ------------------------------------------------------------------
    # Connection / refresh
    # ------------------------------------------------------------------

    async def connect(self, *, load_settings: bool = True) -> bool:
        """Check the API, load entities and registry, then start polling.

        With ``load_settings=False`` the settings records are neither
        created nor loaded, so the session never writes to Home Assistant.

        Returns ``False`` when the connection failed; the status is then
        ``error`` with a message and only another :meth:`connect` (or
        :meth:`reconnect`) leaves it.
        """
        transport = self._require_transport()
        if self.connection_status is ConnectionStatus.CONNECTING:
            return False
        await self._stop_polling()
        self._store.set_connection_status(ConnectionStatus.CONNECTING)

        try:
            await check_api(transport)
        except HaError as exc:
            return self._connect_failed(HaConnectionError(f"Cannot reach Home Assistant: {exc}"))
        try:
            entities, registry = await asyncio.gather(fetch_states(transport), resolve_registry(transport))
        except HaError as exc:
            return self._connect_failed(HaConnectionError(f"Failed to fetch states: {exc}"))

        self._store.dispatch(SetRegistry(registry=registry))
        self._store.set_entities(entities)
        self._store.set_connection_status(ConnectionStatus.CONNECTED)
        _logger.info("Connected to Home Assistant at %s (%d entities)", self._config.api_root, len(entities))

        self._start_polling()
        if load_settings and self._settings_task is None and not self._store.state.settings_loaded:
            self._settings_task = asyncio.ensure_future(self.initialize_settings())
        return True

    async def reconnect(self, *, load_settings: bool = True) -> bool:
        """Explicit recovery from the ``error`` status."""
        return await self.connect(load_settings=load_settings)

    async def disconnect(self) -> None:
        await self._stop_polling()
        self._store.set_connection_status(ConnectionStatus.DISCONNECTED)

    def _connect_failed(self, error: HaConnectionError) -> bool:
        _logger.warning("%s", error)
        self._store.set_connection_status(ConnectionStatus.ERROR, str(error))
        return False

    async def refresh(self) -> bool:
        """Replace the entity snapshot with a fresh one.

        Only runs while connected. On failure the status becomes ``error``
        and the previous snapshot stays in place.

        Refreshes are not sequenced: when two overlap, whichever response
        arrives last wins, even if it was requested first.
        """
        if self.connection_status is not ConnectionStatus.CONNECTED:
            return False
        transport = self._require_transport()
        try:
            entities = await fetch_states(transport)
        except HaError as exc:
            error = HaRefreshError(f"Failed to refresh: {exc}")
            _logger.warning("%s", error)
            self._store.set_connection_status(ConnectionStatus.ERROR, str(error))
            return False
        self._store.set_entities(entities)
        return True

    def schedule_refresh_after(self, delay: float) -> None:
        """Refresh once after *delay* seconds."""

        async def _delayed() -> None:
            await asyncio.sleep(delay)
            await self.refresh()

        task = asyncio.ensure_future(_delayed())
        self._delayed_refreshes.add(task)
        task.add_done_callback(self._delayed_refreshes.discard)

    def _start_polling(self) -> None:
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.ensure_future(self._poll_loop())

    async def _stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is not None and task is not asyncio.current_task():
            await self._cancel_and_wait(task)

    async def _poll_loop(self) -> None:
        # The interval is read at every cycle so a settings change applies to the next sleep.
        while self.connection_status is ConnectionStatus.CONNECTED:
            await asyncio.sleep(self._store.state.settings.refresh_interval)
            if self.connection_status is not ConnectionStatus.CONNECTED:
                break
            await self.refresh()
        _logger.debug("Polling stopped (status %s)", self.connection_status)

    # ------------------------------------------------------------------
    # Settings sync
    # ------------------------------------------------------------------

    async def initialize_settings(self) -> bool:
        """Initialize the remote settings store and load it into the state.

        Returns whether sync is available. When it is not, the store keeps
        its defaults, ``sync_enabled`` stays ``False`` and
        ``settings_error`` carries the reason.
        """
        sync = self._require_sync()
        available = await sync.initialize_sync()
        data = await sync.load_all()
        self._store.dispatch(LoadSyncedData(data=data, sync_enabled=available))
        self._store.dispatch(SetSettingsError(message=None if available else sync.status.error))
        return available

    async def wait_settings_loaded(self) -> bool:
        """Wait for the settings load started by :meth:`connect`."""
        if self._settings_task is None:
            return self._store.state.settings_loaded
        return await self._settings_task

    async def flush(self) -> None:
        """Write pending settings records now."""
        await self._require_sync().flush()

    # ------------------------------------------------------------------
    # Entity commands
    # ------------------------------------------------------------------

    def update_entity(self, entity: Entity) -> None:
        """Optimistically replace one entity; keep the old value to revert."""
        self._store.update_entity(entity)

    async def call_service(
        self,
        domain: str,
        service: str,
        data: Mapping[str, Any] | None = None,
        *,
        entity_id: str | None = None,
    ) -> list[Entity]:
        return await _commands.call_service(self, domain, service, data, entity_id=entity_id)

    async def run_optimistic(
        self,
        optimistic: Entity,
        action: Callable[[], Awaitable[Any]],
        *,
        confirmed: Entity | None = None,
    ) -> bool:
        return await _commands.run_optimistic(self, optimistic, action, confirmed=confirmed)

    async def toggle(self, entity_id: str) -> bool:
        return await _commands.toggle(self, entity_id)

    # ------------------------------------------------------------------
    # Customizations
    # ------------------------------------------------------------------

    def hide_entity(self, entity_id: str) -> None:
        _customize.hide_entity(self, entity_id)

    def show_entity(self, entity_id: str) -> None:
        _customize.show_entity(self, entity_id)

    def show_all_entities(self) -> None:
        _customize.show_all_entities(self)

    def hide_room(self, area_id: str) -> None:
        _customize.hide_room(self, area_id)

    def show_room(self, area_id: str) -> None:
        _customize.show_room(self, area_id)

    def show_all_rooms(self) -> None:
        _customize.show_all_rooms(self)

    def set_custom_name(self, key: str, name: str) -> None:
        _customize.set_custom_name(self, key, name)

    def remove_custom_name(self, key: str) -> None:
        _customize.remove_custom_name(self, key)

    def update_settings(self, changes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        _customize.update_settings(self, changes, **kwargs)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def area_view(self, *, edit_mode: bool = False, relevance_filter: RelevanceFilter | None = None) -> list[AreaView]:
        return build_area_view_for_state(
            self._store.state,
            edit_mode=edit_mode,
            relevance_filter=relevance_filter or self._relevance_filter,
        )

    def related_entities(self, entity_id: str) -> list[RelatedEntity]:
        state = self._store.state
        return _related_entities(entity_id, state.registry, state.entities)

    def display_name(self, key: str, default: str) -> str:
        return _helpers.display_name_for(key, default, self._store.state.custom_names)

    def device_name(self, entity_id: str) -> str | None:
        return _helpers.get_device_name(entity_id, self._store.state.registry)

    def filtered_people(self) -> list[Entity]:
        state = self._store.state
        return _helpers.filter_people(state.domain(PERSON), state.settings.people_pattern)

    def primary_weather(self) -> Entity | None:
        state = self._store.state
        return _helpers.primary_weather(state.domain(WEATHER), state.settings.primary_weather_entity)

    @staticmethod
    def area_climate(view: AreaView | Iterable[Entity]) -> AreaClimate:
        sensors = view.get(SENSOR) if isinstance(view, AreaView) else view
        return _helpers.area_climate(sensors)
