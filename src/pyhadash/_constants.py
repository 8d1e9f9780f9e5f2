"""Internal constants shared across the library."""

USER_AGENT = "pyhadash"

DEFAULT_REQUEST_TIMEOUT: float = 10.0
DEFAULT_SETTINGS_DEBOUNCE: float = 0.3
DEFAULT_POST_ACTION_REFRESH_DELAY: float = 2.0
DEFAULT_SETTINGS_ENTITY_PREFIX = "sensor.ha_dashboard"

# Values Home Assistant reports when a device cannot be read.
UNAVAILABLE_STATES: frozenset[str] = frozenset({"unavailable", "unknown"})

# ------------------------------------------------------------------
# Entity domains
# ------------------------------------------------------------------

LIGHT = "light"
SWITCH = "switch"
SENSOR = "sensor"
BINARY_SENSOR = "binary_sensor"
WEATHER = "weather"
PERSON = "person"
CAMERA = "camera"
CALENDAR = "calendar"
CLIMATE = "climate"
VACUUM = "vacuum"
ALARM_CONTROL_PANEL = "alarm_control_panel"
VALVE = "valve"
FAN = "fan"
LOCK = "lock"
COVER = "cover"
AUTOMATION = "automation"
SCRIPT = "script"

#: Domains the store keeps a dedicated collection for.
TRACKED_DOMAINS: tuple[str, ...] = (
    LIGHT,
    SWITCH,
    SENSOR,
    BINARY_SENSOR,
    WEATHER,
    PERSON,
    CAMERA,
    CALENDAR,
    CLIMATE,
    VACUUM,
    ALARM_CONTROL_PANEL,
    VALVE,
    FAN,
    LOCK,
    COVER,
    AUTOMATION,
    SCRIPT,
)

#: Domains grouped into the area view, in display order.
AREA_VIEW_DOMAINS: tuple[str, ...] = (
    LIGHT,
    SWITCH,
    SENSOR,
    BINARY_SENSOR,
    CLIMATE,
    VACUUM,
    ALARM_CONTROL_PANEL,
    VALVE,
    FAN,
    LOCK,
    COVER,
)

#: Domains subject to the relevance filter outside edit mode.
SENSOR_DOMAINS: frozenset[str] = frozenset({SENSOR, BINARY_SENSOR})

#: Domains queried for entity -> area/device registry mappings.
REGISTRY_DOMAINS: tuple[str, ...] = (
    LIGHT,
    SWITCH,
    SENSOR,
    BINARY_SENSOR,
    CLIMATE,
    VACUUM,
    ALARM_CONTROL_PANEL,
    VALVE,
    FAN,
    CAMERA,
    LOCK,
    COVER,
)

UNASSIGNED_AREA_NAME = "Other"
UNASSIGNED_ONLY_AREA_NAME = "All Devices"

# ------------------------------------------------------------------
# Settings pseudo-entities
# ------------------------------------------------------------------

SETTINGS_RECORD_ICON = "mdi:cog"
