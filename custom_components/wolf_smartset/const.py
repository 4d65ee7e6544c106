from __future__ import annotations
from homeassistant.const import Platform

DOMAIN = "wolf_smartset"
MANUFACTURER = "Wolf"

# Config keys
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_EXPERT_PASSWORD = "expert_password"
CONF_SYSTEM_NUMBER = "system_number"
CONF_REFRESH_INTERVAL = "refresh_interval"
CONF_VERIFY_SSL = "verify_ssl"

# Refresh cadence (seconds)
DEFAULT_REFRESH_INTERVAL = 300
MIN_REFRESH_INTERVAL = 60
MAX_REFRESH_INTERVAL = 86400

# Persisted installation state
STORAGE_VERSION = 1

# Services
SERVICE_WRITE_VALUE = "write_value"
SERVICE_REFRESH_PARAMETERS = "refresh_parameters"
SERVICE_LOGOUT = "logout"
ATTR_ENTRY_ID = "entry_id"
ATTR_IDENTIFIER = "identifier"
ATTR_VALUE = "value"
ATTR_FORCE_REAUTH = "force_reauth"

# Entity attributes
ATTR_CATEGORY = "category"
ATTR_PARAMETER = "parameter"

PLATFORMS: list[Platform] = [Platform.SENSOR, Platform.NUMBER, Platform.SELECT, Platform.SWITCH]


def storage_key(entry_id: str) -> str:
    return f"{DOMAIN}.{entry_id}"
