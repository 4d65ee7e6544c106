from __future__ import annotations

from enum import Enum

# Portal
BASE_URL = "https://www.wolf-smartset.com/portal/"
LANGUAGE = "de-DE"
USER_AGENT = "pywolfsmartset/1.0 (Home Assistant)"
JSON_CONTENT_TYPE = "application/json;charset=UTF-8"

# Timeouts (seconds)
CONNECT_TIMEOUT = 10
REQUEST_TIMEOUT = 30

# Endpoints (relative to BASE_URL)
TOKEN_PATH = "connect/token"
EXPERT_LOGIN_PATH = "api/portal/ExpertLogin"
UPDATE_SESSION_PATH = "api/portal/UpdateSession"
SYSTEM_LIST_PATH = "api/portal/GetSystemList"
GUI_DESCRIPTION_PATH = "api/portal/GetGuiDescriptionForGateway"
SYSTEM_STATE_LIST_PATH = "api/portal/GetSystemStateList"
PARAMETER_VALUES_PATH = "api/portal/GetParameterValues"
WRITE_PARAMETER_VALUES_PATH = "api/portal/WriteParameterValues"

# Extra headers sent with batched reads
POLL_HEADERS = {
    "X-Requested-With": "XMLHttpRequest",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

DEFAULT_EXPERT_PASSWORD = "1111"
INITIAL_LAST_ACCESS = "1900-01-01T00:00:00Z"

# Descriptor handling
PLACEHOLDER_PARAMETER_NAME = "Reglertyp"  # portal never returns a value for it
CHOICE_CONTROL_TYPES = frozenset({0, 1, 6, 13, 14, 19, 24})
SWITCH_CONTROL_TYPE = 5
VENTILATION_ICON_PREFIX = "Icon_Lueftung"
VENTILATION_ICON = "Intensity"


class PortalStatus(str, Enum):
    """Connection status surfaced to the host."""

    OK = "ok"
    INACTIVE = "inactive"
    AUTH_FAILED = "auth_failed"
    NO_CREDENTIALS = "no_credentials"
    COMM_ERROR = "comm_error"


class NetworkStatus(str, Enum):
    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"
