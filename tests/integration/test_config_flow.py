"""Tests for the Home Assistant glue (config flow validation, entity mapping, coordinator)."""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

pytest.importorskip("homeassistant")

from custom_components.wolf_smartset.config_flow import (  # noqa: E402
    CannotConnect,
    InvalidAuth,
    validate_credentials,
)
from custom_components.wolf_smartset.const import (  # noqa: E402
    CONF_REFRESH_INTERVAL,
    MIN_REFRESH_INTERVAL,
)
from custom_components.wolf_smartset.coordinator import (  # noqa: E402
    DataUpdateCoordinator,
    WolfSmartsetCoordinator,
    refresh_interval,
)
from custom_components.wolf_smartset.entity import (  # noqa: E402
    PLATFORM_NUMBER,
    PLATFORM_SELECT,
    PLATFORM_SENSOR,
    PLATFORM_SWITCH,
    platform_for,
)
from custom_components.wolf_smartset.pywolfsmartset import (  # noqa: E402
    DataPoint,
    DataPointType,
    PortalFailure,
    PortalStatus,
)
from custom_components.wolf_smartset.pywolfsmartset.client import FAILURE_HTTP, FAILURE_NETWORK  # noqa: E402
from custom_components.wolf_smartset.pywolfsmartset.datapoints import Association  # noqa: E402


class TestValidateCredentials:
    """Test the login check run by the config flow."""

    @pytest.mark.asyncio
    async def test_returns_systems(self, mock_client):
        systems = await validate_credentials(mock_client, "user", "secret", "1111")

        assert [s["Id"] for s in systems] == [1234, 4321]
        mock_client.async_expert_login.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rejected_token(self, mock_client):
        mock_client.async_token.return_value = None
        mock_client.last_failure = PortalFailure(FAILURE_HTTP, status=400)

        with pytest.raises(InvalidAuth):
            await validate_credentials(mock_client, "user", "wrong", "1111")

    @pytest.mark.asyncio
    async def test_token_without_access_token(self, mock_client):
        mock_client.async_token.return_value = {"error": "invalid_grant"}

        with pytest.raises(InvalidAuth):
            await validate_credentials(mock_client, "user", "wrong", "1111")

    @pytest.mark.asyncio
    async def test_unreachable_portal(self, mock_client):
        mock_client.async_token.return_value = None
        mock_client.last_failure = PortalFailure(FAILURE_NETWORK, detail="timeout")

        with pytest.raises(CannotConnect):
            await validate_credentials(mock_client, "user", "secret", "1111")

    @pytest.mark.asyncio
    async def test_rejected_expert_password(self, mock_client):
        mock_client.async_expert_login.return_value = None
        mock_client.last_failure = PortalFailure(FAILURE_HTTP, status=401)

        with pytest.raises(InvalidAuth):
            await validate_credentials(mock_client, "user", "secret", "0000")

    @pytest.mark.asyncio
    async def test_unusable_system_list(self, mock_client):
        mock_client.async_get_system_list.return_value = {"unexpected": True}

        with pytest.raises(CannotConnect):
            await validate_credentials(mock_client, "user", "secret", "1111")


def make_data_point(data_type, writable=True, associations=()):
    return DataPoint(
        id=1,
        ident="ID1",
        name="P",
        parent_id=None,
        data_type=data_type,
        writable=writable,
        associations=list(associations),
    )


@pytest.mark.parametrize(
    "data_point, platform",
    [
        (make_data_point(DataPointType.FLOAT, writable=False), PLATFORM_SENSOR),
        (make_data_point(DataPointType.BOOLEAN), PLATFORM_SWITCH),
        (make_data_point(DataPointType.INTEGER, associations=[Association(0, "Aus")]), PLATFORM_SELECT),
        (make_data_point(DataPointType.INTEGER), PLATFORM_NUMBER),
        (make_data_point(DataPointType.FLOAT), PLATFORM_NUMBER),
        (make_data_point(DataPointType.STRING), PLATFORM_SENSOR),
    ],
)
def test_platform_for(data_point, platform):
    assert platform_for(data_point) == platform


def test_refresh_interval_has_floor():
    entry = MagicMock()
    entry.data = {}
    entry.options = {CONF_REFRESH_INTERVAL: 5}
    assert refresh_interval(entry) == MIN_REFRESH_INTERVAL

    entry.options = {CONF_REFRESH_INTERVAL: "600"}
    assert refresh_interval(entry) == 600

    entry.options = {}
    assert refresh_interval(entry) == 300


class TestCoordinatorSerialization:
    """Test that one installation's entry points never overlap."""

    @staticmethod
    def make_coordinator():
        installation = MagicMock()
        installation.status = PortalStatus.OK
        installation.catalog.data_points = []
        running = {"now": 0, "peak": 0}

        async def slow(*args, **kwargs):
            running["now"] += 1
            running["peak"] = max(running["peak"], running["now"])
            await asyncio.sleep(0.01)
            running["now"] -= 1
            return PortalStatus.OK

        installation.async_refresh = AsyncMock(side_effect=slow)
        installation.async_write_value = AsyncMock(side_effect=slow)
        installation.async_get_system_info = AsyncMock(side_effect=slow)
        installation.async_logout = AsyncMock(side_effect=slow)

        entry = MagicMock()
        entry.entry_id = "entry"
        entry.data = {}
        entry.options = {}
        with patch.object(DataUpdateCoordinator, "__init__", return_value=None):
            coordinator = WolfSmartsetCoordinator(MagicMock(), entry, installation)
        coordinator.async_set_updated_data = MagicMock()
        return coordinator, running

    @pytest.mark.asyncio
    async def test_refresh_and_service_calls_run_one_at_a_time(self):
        coordinator, running = self.make_coordinator()

        await asyncio.gather(
            coordinator._async_update_data(),
            coordinator.async_write_value("501", 2),
            coordinator.async_refresh_parameters(),
            coordinator.async_logout(),
        )

        assert running["peak"] == 1
        assert coordinator.async_set_updated_data.call_count == 3
