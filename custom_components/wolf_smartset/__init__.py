from __future__ import annotations

import logging
from typing import Any

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.helpers.storage import Store

from .pywolfsmartset import InstallationStorage, WolfInstallation, WolfPortalClient
from .pywolfsmartset.const import DEFAULT_EXPERT_PASSWORD
from .const import (
    ATTR_ENTRY_ID,
    ATTR_FORCE_REAUTH,
    ATTR_IDENTIFIER,
    ATTR_VALUE,
    CONF_EXPERT_PASSWORD,
    CONF_PASSWORD,
    CONF_SYSTEM_NUMBER,
    CONF_USERNAME,
    CONF_VERIFY_SSL,
    DOMAIN,
    PLATFORMS,
    SERVICE_LOGOUT,
    SERVICE_REFRESH_PARAMETERS,
    SERVICE_WRITE_VALUE,
    STORAGE_VERSION,
    storage_key,
)
from .coordinator import WolfSmartsetCoordinator, create_session

_LOGGER = logging.getLogger(__name__)

WRITE_VALUE_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): cv.string,
        vol.Required(ATTR_IDENTIFIER): cv.string,
        vol.Required(ATTR_VALUE): vol.Any(bool, int, float, str),
    }
)
REFRESH_PARAMETERS_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): cv.string,
        vol.Optional(ATTR_FORCE_REAUTH, default=False): cv.boolean,
    }
)
LOGOUT_SCHEMA = vol.Schema({vol.Optional(ATTR_ENTRY_ID): cv.string})


def _coordinators(hass: HomeAssistant, call: ServiceCall) -> list[WolfSmartsetCoordinator]:
    bags: dict[str, dict[str, Any]] = hass.data.get(DOMAIN, {})
    entry_id = call.data.get(ATTR_ENTRY_ID)
    if entry_id:
        bag = bags.get(entry_id)
        if bag is None:
            _LOGGER.warning("Wolf Smartset: no loaded entry %s", entry_id)
            return []
        return [bag["coordinator"]]
    return [bag["coordinator"] for bag in bags.values()]


def _async_register_services(hass: HomeAssistant) -> None:
    if hass.services.has_service(DOMAIN, SERVICE_WRITE_VALUE):
        return

    async def handle_write_value(call: ServiceCall) -> None:
        identifier = call.data[ATTR_IDENTIFIER]
        value = call.data[ATTR_VALUE]
        _LOGGER.debug("Wolf Smartset write_value service: %s <- %r", identifier, value)
        for coordinator in _coordinators(hass, call):
            await coordinator.async_write_value(identifier, value)

    async def handle_refresh_parameters(call: ServiceCall) -> None:
        for coordinator in _coordinators(hass, call):
            await coordinator.async_refresh_parameters(call.data.get(ATTR_FORCE_REAUTH, False))

    async def handle_logout(call: ServiceCall) -> None:
        for coordinator in _coordinators(hass, call):
            await coordinator.async_logout()

    hass.services.async_register(DOMAIN, SERVICE_WRITE_VALUE, handle_write_value, schema=WRITE_VALUE_SCHEMA)
    hass.services.async_register(
        DOMAIN, SERVICE_REFRESH_PARAMETERS, handle_refresh_parameters, schema=REFRESH_PARAMETERS_SCHEMA
    )
    hass.services.async_register(DOMAIN, SERVICE_LOGOUT, handle_logout, schema=LOGOUT_SCHEMA)


# ----------------------------
# HA entry points
# ----------------------------
async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload integration when options are updated."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Wolf Smartset from a config entry."""
    session = create_session(hass, entry.data.get(CONF_VERIFY_SSL, True))
    client = WolfPortalClient(session)
    storage = InstallationStorage(Store[dict[str, Any]](hass, STORAGE_VERSION, storage_key(entry.entry_id)))

    installation = await WolfInstallation.async_create(
        client,
        storage,
        entry.data[CONF_USERNAME],
        entry.data[CONF_PASSWORD],
        expert_password=entry.data.get(CONF_EXPERT_PASSWORD, DEFAULT_EXPERT_PASSWORD),
        system_number=int(entry.options.get(CONF_SYSTEM_NUMBER, entry.data.get(CONF_SYSTEM_NUMBER, 0))),
    )
    coordinator = WolfSmartsetCoordinator(hass, entry, installation)

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = {
        "coordinator": coordinator,
        "client": client,
        "session": session,
        "storage": storage,
    }

    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    await coordinator.async_config_entry_first_refresh()

    _async_register_services(hass)
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        bag = hass.data[DOMAIN].pop(entry.entry_id, None)
        if bag:
            await bag["coordinator"].installation.async_logout()
            if not entry.data.get(CONF_VERIFY_SSL, True):
                # Own session, not the shared Home Assistant one
                await bag["session"].close()
        if not hass.data[DOMAIN]:
            for service in (SERVICE_WRITE_VALUE, SERVICE_REFRESH_PARAMETERS, SERVICE_LOGOUT):
                hass.services.async_remove(DOMAIN, service)
    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Drop the persisted session, registry and data points of a removed entry."""
    storage = InstallationStorage(Store[dict[str, Any]](hass, STORAGE_VERSION, storage_key(entry.entry_id)))
    await storage.async_clear()
