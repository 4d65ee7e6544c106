from __future__ import annotations

from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry

from .const import DOMAIN
from .coordinator import WolfSmartsetCoordinator
from .entity import PLATFORM_SWITCH, WolfDataPointEntity, data_points_for


async def async_setup_entry(hass, entry: ConfigEntry, async_add_entities):
    coordinator: WolfSmartsetCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities(
        WolfDataPointSwitch(coordinator, entry, dp) for dp in data_points_for(coordinator, PLATFORM_SWITCH)
    )


class WolfDataPointSwitch(WolfDataPointEntity, SwitchEntity):
    @property
    def is_on(self) -> bool | None:
        value = self.native_data
        return None if value is None else bool(value)

    async def async_turn_on(self, **kwargs: Any) -> None:
        await self.async_write(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self.async_write(False)
