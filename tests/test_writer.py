"""Tests for writing a parameter value."""
import pytest
import pytest_asyncio

from pywolfsmartset import PortalFailure, WolfInstallation
from pywolfsmartset.client import FAILURE_HTTP
from pywolfsmartset.const import PortalStatus
from pywolfsmartset.registry import ParameterRegistry
from pywolfsmartset.writer import resolve_entry


@pytest_asyncio.fixture
async def installation(mock_client, storage):
    installation = await WolfInstallation.async_create(mock_client, storage, "user@example.com", "secret")
    await installation.async_refresh()
    mock_client.async_get_parameter_values.reset_mock()
    return installation


def data_point_for(installation, registry, identifier):
    return installation.catalog.get(registry.find(identifier)[1].data_point_id)


@pytest.mark.asyncio
async def test_write_sends_value_and_polls(installation, mock_client, storage):
    assert await installation.async_write_value("501", 2) is True

    body = mock_client.async_write_parameter_values.await_args.args[1]
    assert body == {
        "WriteParameterValues": [{"ValueId": 9001, "Value": 2, "ParameterName": "NULL"}],
        "SystemId": "1234",
        "GatewayId": "5678",
    }
    assert mock_client.async_get_parameter_values.await_count == 2


@pytest.mark.asyncio
async def test_optimistic_value_is_kept_until_next_read(installation, mock_client, storage):
    mock_client.async_get_parameter_values.side_effect = None
    mock_client.async_get_parameter_values.return_value = None
    registry = await storage.async_load_registry()

    await installation.async_write_value("501", "2")

    data_point = data_point_for(installation, registry, "501")
    assert data_point.value == 2
    stored = await storage.async_load_catalog()
    assert stored.get(data_point.id).value == 2


@pytest.mark.asyncio
async def test_poll_brings_authoritative_value(installation, mock_client, storage):
    registry = await storage.async_load_registry()

    await installation.async_write_value("501", 2)

    # the mocked portal still reports 1
    assert data_point_for(installation, registry, "501").value == 1


@pytest.mark.asyncio
async def test_data_point_ident_is_accepted(installation, mock_client):
    assert await installation.async_write_value("ID503", True) is True

    body = mock_client.async_write_parameter_values.await_args.args[1]
    assert body["WriteParameterValues"][0]["ValueId"] == 9003


@pytest.mark.asyncio
async def test_unknown_identifier_is_ignored(installation, mock_client):
    assert await installation.async_write_value("999", 1) is False

    mock_client.async_write_parameter_values.assert_not_awaited()
    mock_client.async_get_parameter_values.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_write_still_polls(installation, mock_client):
    mock_client.async_write_parameter_values.return_value = None

    assert await installation.async_write_value("501", 0) is True
    assert mock_client.async_get_parameter_values.await_count == 2


@pytest.mark.asyncio
async def test_rejected_session_is_dropped(installation, mock_client, storage):
    mock_client.async_write_parameter_values.return_value = None
    mock_client.last_failure = PortalFailure(FAILURE_HTTP, status=401)

    assert await installation.async_write_value("501", 0) is False

    assert await storage.async_read_session() == ""
    assert installation.status is PortalStatus.COMM_ERROR
    mock_client.async_get_parameter_values.assert_not_awaited()


@pytest.mark.asyncio
async def test_write_without_session(mock_client, storage):
    mock_client.async_token.return_value = None
    installation = await WolfInstallation.async_create(mock_client, storage, "u", "p")

    assert await installation.async_write_value("501", 1) is False
    mock_client.async_write_parameter_values.assert_not_awaited()


def test_resolve_entry():
    registry = ParameterRegistry()
    registry.upsert(7, "501", 9001, 3)

    assert resolve_entry(registry, 501).value_id == 9001
    assert resolve_entry(registry, "ID501").value_id == 9001
    assert resolve_entry(registry, "ID999") is None
