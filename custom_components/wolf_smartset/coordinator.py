"""
Coordinator for the Wolf Smartset integration.

One coordinator per config entry drives the installation's scheduled cycle:
- First run (empty parameter registry) or after a portal error: reload the
  GUI description and build/patch the parameter tree
- Otherwise: one batched value poll

Update Frequency:
- refresh_interval from the config entry (default 5 minutes, minimum 1 minute)
"""
from __future__ import annotations

import asyncio
import logging
import ssl
from datetime import timedelta
from typing import Any

from aiohttp import ClientSession, TCPConnector
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .pywolfsmartset import PortalStatus, WolfInstallation
from .const import (
    CONF_REFRESH_INTERVAL,
    DEFAULT_REFRESH_INTERVAL,
    DOMAIN,
    MIN_REFRESH_INTERVAL,
)

_LOGGER = logging.getLogger(__name__)


def create_session(hass: HomeAssistant, verify_ssl: bool = True) -> ClientSession:
    """
    Create a ClientSession with optional SSL verification disabled.

    Args:
        hass: HomeAssistant instance
        verify_ssl: If False, disables SSL certificate verification (security risk!)

    Returns:
        ClientSession configured with appropriate SSL settings
    """
    if verify_ssl:
        return async_get_clientsession(hass)

    _LOGGER.warning(
        "Wolf Smartset: SSL certificate verification is DISABLED. "
        "This is a security risk and should only be used as a workaround for server-side certificate issues."
    )

    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE

    connector = TCPConnector(ssl=ssl_context)
    return ClientSession(connector=connector)


def refresh_interval(entry: ConfigEntry) -> int:
    value = entry.options.get(CONF_REFRESH_INTERVAL, entry.data.get(CONF_REFRESH_INTERVAL, DEFAULT_REFRESH_INTERVAL))
    try:
        return max(MIN_REFRESH_INTERVAL, int(value))
    except (TypeError, ValueError):
        return DEFAULT_REFRESH_INTERVAL


class WolfSmartsetCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Schedules the installation's entry points and publishes data point values.

    Scheduled refreshes, service calls and entity writes of one installation
    share a lock, so its entry points never overlap.
    """

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry, installation: WolfInstallation) -> None:
        super().__init__(
            hass,
            logger=_LOGGER,
            name=f"{DOMAIN}_{entry.entry_id}",
            update_interval=timedelta(seconds=refresh_interval(entry)),
        )
        self.entry = entry
        self.installation = installation
        self._lock = asyncio.Lock()

    def snapshot(self) -> dict[str, Any]:
        installation = self.installation
        return {
            "status": installation.status.value,
            "network_status": installation.network_status.value,
            "values": {dp.id: dp.value for dp in installation.catalog.data_points},
        }

    async def _async_update_data(self) -> dict[str, Any]:
        async with self._lock:
            status = await self.installation.async_refresh()
            if status is not PortalStatus.OK:
                raise UpdateFailed(f"Wolf Smartset portal status: {status.value}")
            return self.snapshot()

    async def async_write_value(self, identifier: Any, value: Any) -> bool:
        async with self._lock:
            written = await self.installation.async_write_value(identifier, value)
            self.async_set_updated_data(self.snapshot())
        return written

    async def async_refresh_parameters(self, force_reauth: bool = False) -> None:
        async with self._lock:
            await self.installation.async_get_system_info(force_reauth)
            self.async_set_updated_data(self.snapshot())

    async def async_logout(self) -> None:
        async with self._lock:
            await self.installation.async_logout()
            self.async_set_updated_data(self.snapshot())
