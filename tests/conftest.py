"""Pytest configuration and fixtures for Wolf Smartset tests."""

import copy
import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

ROOT = Path(__file__).parent.parent

# custom_components from the repository root; pywolfsmartset standalone from the
# component directory, appended so its select.py never shadows the stdlib module
sys.path.insert(0, str(ROOT))
sys.path.append(str(ROOT / "custom_components" / "wolf_smartset"))

from pywolfsmartset import InstallationStorage  # noqa: E402

HEADERS = {
    "Authorization": "Bearer cached-token",
    "Accept-Language": "de-DE,de;q=0.8,en;q=0.6,en-US;q=0.4",
    "Content-Type": "application/json;charset=UTF-8",
}

TOKEN = {"access_token": "fresh-token", "token_type": "Bearer", "expires_in": 3600}

SYSTEM_LIST = [
    {
        "Id": 1234,
        "GatewayId": 5678,
        "SystemShareId": 0,
        "Name": "Heizung Keller",
        "GatewaySoftwareVersion": "3.1.2",
        "OperatorName": "Max Mustermann",
        "Location": "Musterstadt",
    },
    {
        "Id": 4321,
        "GatewayId": 8765,
        "SystemShareId": 1,
        "Name": "Ferienhaus",
    },
]

GUI_DESCRIPTION = {
    "MenuItems": [
        {
            "Name": "Heizung",
            "SortId": 1,
            "TabViews": [
                {
                    "TabName": "Übersicht",
                    "GuiId": 7,
                    "ParameterDescriptors": [
                        {
                            "ParameterId": 501,
                            "Name": "Betriebsart",
                            "ControlType": 1,
                            "ValueId": 9001,
                            "SortId": 1,
                            "IsReadOnly": False,
                            "ListItems": [
                                {"Value": 0, "DisplayText": "Aus"},
                                {"Value": 1, "DisplayText": "Auto", "ImageName": "Icon_Lueftung_Auto"},
                                {"Value": 2, "DisplayText": "Heizen"},
                            ],
                        },
                        {
                            "ParameterId": 502,
                            "Name": "Vorlauftemperatur",
                            "ControlType": 3,
                            "Decimals": 1,
                            "ValueId": 9002,
                            "Unit": "°C",
                            "MinValue": 0,
                            "MaxValue": 90,
                            "StepWidth": 0.5,
                            "IsReadOnly": True,
                        },
                        {
                            "ParameterId": 503,
                            "Name": "Warmwasser",
                            "ControlType": 5,
                            "ValueId": 9003,
                            "IsReadOnly": False,
                        },
                        {
                            "ParameterId": 504,
                            "Name": "Reglertyp",
                            "ControlType": 3,
                            "ValueId": 9004,
                        },
                        {
                            "Name": "Fehlercode",
                            "ControlType": 3,
                            "ValueId": 9005,
                        },
                    ],
                },
                {
                    "TabName": "Lüftung",
                    "GuiId": 8,
                    "ParameterDescriptors": [
                        {
                            "ParameterId": 601,
                            "Name": "Lüftungsstufe",
                            "ControlType": 6,
                            "ValueId": 9006,
                            "IsReadOnly": True,
                        },
                    ],
                },
            ],
        }
    ]
}

VALUES_GROUP_7 = {
    "Values": [
        {"ValueId": 9001, "Value": "1"},
        {"ValueId": 9002, "Value": "42.5"},
        {"ValueId": 9003, "Value": "0"},
        {"ValueId": 9005, "Value": "E12"},
    ],
    "LastAccess": "2026-10-19T08:00:00Z",
}

VALUES_GROUP_8 = {
    "Values": [{"ValueId": 9006, "Value": "42"}],
    "LastAccess": "2026-10-19T08:00:01Z",
}

ONLINE = [{"GatewayState": {"IsOnline": 1}}]
OFFLINE = [{"GatewayState": {"IsOnline": 0}}]


class MemoryStore:
    """In-memory stand-in for Home Assistant's Store (same async load/save/remove trio)."""

    def __init__(self, data=None):
        self._data = copy.deepcopy(data)
        self.save_count = 0

    async def async_load(self):
        return copy.deepcopy(self._data)

    async def async_save(self, data):
        self._data = copy.deepcopy(data)
        self.save_count += 1

    async def async_remove(self):
        self._data = None


def parameter_values_by_group(responses):
    """Side effect for async_get_parameter_values answering per GuiId."""

    async def _respond(headers, body):
        return copy.deepcopy(responses.get(body["GuiId"]))

    return _respond


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def storage(memory_store):
    return InstallationStorage(memory_store)


@pytest_asyncio.fixture
async def logged_in_storage(storage):
    """Storage holding a cached session."""
    await storage.async_write_session(json.dumps(HEADERS))
    return storage


@pytest.fixture
def mock_client():
    """WolfPortalClient double answering like a healthy portal."""
    client = MagicMock()
    client.language = "de-DE"
    client.last_failure = None
    client.async_token = AsyncMock(return_value=copy.deepcopy(TOKEN))
    client.async_expert_login = AsyncMock(return_value={})
    client.async_update_session = AsyncMock(return_value={})
    client.async_get_system_list = AsyncMock(return_value=copy.deepcopy(SYSTEM_LIST))
    client.async_get_gui_description = AsyncMock(return_value=copy.deepcopy(GUI_DESCRIPTION))
    client.async_get_system_state_list = AsyncMock(return_value=copy.deepcopy(ONLINE))
    client.async_get_parameter_values = AsyncMock(
        side_effect=parameter_values_by_group({7: VALUES_GROUP_7, 8: VALUES_GROUP_8})
    )
    client.async_write_parameter_values = AsyncMock(return_value={})
    return client
