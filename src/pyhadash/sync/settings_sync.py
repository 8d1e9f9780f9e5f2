"""Persist dashboard customizations in Home Assistant.

Each of the four records (settings, hidden entities, hidden rooms, custom
names) lives in one pseudo-entity ``<prefix>_<record>``. The entity state
only holds the timestamp of the last write (states are length limited); the
JSON payload is kept in the ``data`` attribute.

Lifecycle::

    sync = SettingsSyncService(transport, entity_prefix="sensor.ha_dashboard")
    if await sync.initialize_sync():
        data = await sync.load_all()
    sync.save(SyncRecord.HIDDEN_ENTITIES, {"switch.pool"})
    await sync.close()

``save`` is refused until ``load_all`` has completed with sync available, so
local defaults can never overwrite remote data that was not read yet.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from pyhadash._api.states import fetch_state_payload, set_state
from pyhadash._constants import DEFAULT_SETTINGS_DEBOUNCE, DEFAULT_SETTINGS_ENTITY_PREFIX, SETTINGS_RECORD_ICON
from pyhadash._transport import Transport
from pyhadash.exceptions import HaApiError, HaError, StoredDataParseError, SyncUnavailableError
from pyhadash.models.settings import AppSettings
from pyhadash.models.sync import SyncedData, SyncRecord, SyncStatus
from pyhadash.sync.debounce import KeyedDebouncer

_logger = logging.getLogger(__name__)

RECORD_FRIENDLY_NAMES: dict[SyncRecord, str] = {
    SyncRecord.SETTINGS: "Dashboard Settings",
    SyncRecord.HIDDEN_ENTITIES: "Dashboard Hidden Entities",
    SyncRecord.HIDDEN_ROOMS: "Dashboard Hidden Rooms",
    SyncRecord.CUSTOM_NAMES: "Dashboard Custom Names",
}

#: Payload written when a record is created for the first time.
RECORD_DEFAULTS: dict[SyncRecord, str] = {
    SyncRecord.SETTINGS: "{}",
    SyncRecord.HIDDEN_ENTITIES: "[]",
    SyncRecord.HIDDEN_ROOMS: "[]",
    SyncRecord.CUSTOM_NAMES: "{}",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ------------------------------------------------------------------
# Payload codecs
# ------------------------------------------------------------------


def encode_record(record: SyncRecord, value: Any) -> str:
    """Serialize a local value into the stored JSON string."""
    if record is SyncRecord.SETTINGS:
        payload = value.to_stored() if isinstance(value, AppSettings) else dict(value)
    elif record in (SyncRecord.HIDDEN_ENTITIES, SyncRecord.HIDDEN_ROOMS):
        payload = sorted(str(item) for item in value)
    else:
        payload = {str(key): str(name) for key, name in dict(value).items()}
    return json.dumps(payload, separators=(",", ":"))


def _decode_id_set(raw: Any) -> frozenset[str]:
    if not isinstance(raw, list):
        raise StoredDataParseError(f"expected a JSON array, got {type(raw).__name__}")
    return frozenset(str(item) for item in raw)


def _decode_names(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        raise StoredDataParseError(f"expected a JSON object, got {type(raw).__name__}")
    return {str(key): str(name) for key, name in raw.items() if isinstance(name, str)}


def _decode_settings(raw: Any) -> AppSettings:
    if not isinstance(raw, dict):
        raise StoredDataParseError(f"expected a JSON object, got {type(raw).__name__}")
    try:
        return AppSettings.model_validate(raw)
    except ValidationError as exc:
        raise StoredDataParseError(f"invalid settings: {exc}") from exc


_DECODERS: dict[SyncRecord, Callable[[Any], Any]] = {
    SyncRecord.SETTINGS: _decode_settings,
    SyncRecord.HIDDEN_ENTITIES: _decode_id_set,
    SyncRecord.HIDDEN_ROOMS: _decode_id_set,
    SyncRecord.CUSTOM_NAMES: _decode_names,
}


def decode_record(record: SyncRecord, text: str | None, *, entity_id: str = "") -> Any:
    """Parse a stored payload.

    Returns ``None`` for an absent payload (empty or ``"unknown"``); raises
    :class:`StoredDataParseError` for malformed content.
    """
    if not text or text == "unknown":
        return None
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StoredDataParseError(f"Malformed JSON in {entity_id or record}: {exc}", entity_id=entity_id) from exc
    try:
        return _DECODERS[record](raw)
    except StoredDataParseError as exc:
        raise StoredDataParseError(f"Unexpected payload in {entity_id or record}: {exc}", entity_id=entity_id) from exc


# ------------------------------------------------------------------
# Service
# ------------------------------------------------------------------


class SettingsSyncService:
    """Remote key-value store for dashboard customizations.

    Parameters
    ----------
    transport : Transport
        Transport used for ``/api/states/{entity_id}`` reads and writes.
    entity_prefix : str
        Prefix of the pseudo-entity ids.
    debounce : float
        Quiet period in seconds before a record is written.
    clock : Callable[[], datetime]
        Source of the timestamps written to record states and
        :attr:`SyncStatus.last_sync`.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        entity_prefix: str = DEFAULT_SETTINGS_ENTITY_PREFIX,
        debounce: float = DEFAULT_SETTINGS_DEBOUNCE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._entity_prefix = entity_prefix
        self._clock = clock
        self._debouncer = KeyedDebouncer(debounce)
        self._status = SyncStatus()
        self._loaded = False

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def loaded(self) -> bool:
        """True once :meth:`load_all` has completed."""
        return self._loaded

    @property
    def can_save(self) -> bool:
        return self._loaded and self._status.available

    def entity_id_for(self, record: SyncRecord) -> str:
        return f"{self._entity_prefix}_{record.value}"

    def _mark(self, **changes: Any) -> None:
        self._status = self._status.model_copy(update=changes)

    # --------------------------------------------------------------
    # Initialization
    # --------------------------------------------------------------

    async def _exists(self, record: SyncRecord) -> bool:
        entity_id = self.entity_id_for(record)
        try:
            await fetch_state_payload(self._transport, entity_id)
        except HaApiError as exc:
            if exc.is_not_found:
                return False
            raise
        return True

    async def _ensure_records(self) -> None:
        records = list(SyncRecord)
        found = await asyncio.gather(*(self._exists(record) for record in records))
        for record, exists in zip(records, found, strict=True):
            if exists:
                continue
            entity_id = self.entity_id_for(record)
            _logger.info("Creating settings record %s", entity_id)
            try:
                await self._write_payload(record, RECORD_DEFAULTS[record])
            except HaError as exc:
                raise SyncUnavailableError(f"Could not create {entity_id}: {exc}") from exc

    async def initialize_sync(self) -> bool:
        """Make sure all records exist without touching existing ones.

        Only records that are reported absent (HTTP 404) are created. Any
        other failure leaves sync unavailable for this session.
        """
        try:
            await self._ensure_records()
        except SyncUnavailableError as exc:
            return self._unavailable(str(exc))
        except HaError as exc:
            return self._unavailable(f"Settings store unreachable: {exc}")
        self._status = SyncStatus(available=True, last_sync=self._clock(), error=None)
        _logger.info("Settings sync available")
        return True

    def _unavailable(self, message: str) -> bool:
        self._status = SyncStatus(available=False, last_sync=None, error=message)
        _logger.warning("Settings sync unavailable: %s", message)
        return False

    # --------------------------------------------------------------
    # Load
    # --------------------------------------------------------------

    async def _load(self, record: SyncRecord) -> Any:
        entity_id = self.entity_id_for(record)
        try:
            payload = await fetch_state_payload(self._transport, entity_id)
            attributes = payload.get("attributes")
            text = attributes.get("data") if isinstance(attributes, dict) else None
            return decode_record(record, text if isinstance(text, str) else None, entity_id=entity_id)
        except HaError as exc:
            _logger.warning("Ignoring settings record %s: %s", entity_id, exc)
            return None

    async def load_all(self) -> SyncedData:
        """Load the four records in parallel.

        Each record resolves to ``None`` on its own when it is missing,
        unreadable or malformed. The save gate opens once this returns.
        """
        if not self._status.available:
            self._loaded = True
            return SyncedData()
        settings, hidden_entities, hidden_rooms, custom_names = await asyncio.gather(
            self._load(SyncRecord.SETTINGS),
            self._load(SyncRecord.HIDDEN_ENTITIES),
            self._load(SyncRecord.HIDDEN_ROOMS),
            self._load(SyncRecord.CUSTOM_NAMES),
        )
        if settings is not None:
            self._mark(last_sync=self._clock())
        self._loaded = True
        return SyncedData(
            settings=settings,
            hidden_entities=hidden_entities,
            hidden_rooms=hidden_rooms,
            custom_names=custom_names,
        )

    # --------------------------------------------------------------
    # Save
    # --------------------------------------------------------------

    def save(self, record: SyncRecord, value: AppSettings | Mapping[str, Any] | Iterable[str]) -> bool:
        """Schedule a debounced write of *value*.

        Returns ``False`` (and schedules nothing) while the initial load has
        not completed or sync is unavailable.
        """
        if not self.can_save:
            _logger.debug("Not saving %s: settings not loaded or sync unavailable", record)
            return False
        payload = encode_record(record, value)

        async def _write() -> None:
            await self._write(record, payload)

        self._debouncer.schedule(record, _write)
        return True

    async def _write_payload(self, record: SyncRecord, payload: str) -> None:
        await set_state(
            self._transport,
            self.entity_id_for(record),
            state=self._clock().isoformat(),
            attributes={
                "friendly_name": RECORD_FRIENDLY_NAMES[record],
                "data": payload,
                "icon": SETTINGS_RECORD_ICON,
            },
        )

    async def _write(self, record: SyncRecord, payload: str) -> bool:
        try:
            await self._write_payload(record, payload)
        except HaError as exc:
            _logger.warning("Failed to save %s: %s", self.entity_id_for(record), exc)
            self._mark(error=str(exc))
            return False
        self._mark(last_sync=self._clock(), error=None)
        return True

    def is_pending(self, record: SyncRecord) -> bool:
        return self._debouncer.is_pending(record)

    async def flush(self) -> None:
        """Write every pending record now."""
        await self._debouncer.flush()

    async def close(self, *, flush: bool = False) -> None:
        """Stop scheduling writes; pending ones are flushed or dropped."""
        if flush:
            await self._debouncer.flush()
        else:
            self._debouncer.cancel_all()
            await self._debouncer.wait_idle()
