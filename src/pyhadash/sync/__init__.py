"""Remote persistence of dashboard customizations."""

from pyhadash.sync.debounce import KeyedDebouncer
from pyhadash.sync.settings_sync import SettingsSyncService, decode_record, encode_record

__all__ = ["KeyedDebouncer", "SettingsSyncService", "decode_record", "encode_record"]
