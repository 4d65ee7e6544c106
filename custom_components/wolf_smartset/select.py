from __future__ import annotations

from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry

from .pywolfsmartset import DataPoint
from .const import DOMAIN
from .coordinator import WolfSmartsetCoordinator
from .entity import PLATFORM_SELECT, WolfDataPointEntity, data_points_for


async def async_setup_entry(hass, entry: ConfigEntry, async_add_entities):
    coordinator: WolfSmartsetCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities(
        WolfDataPointSelect(coordinator, entry, dp) for dp in data_points_for(coordinator, PLATFORM_SELECT)
    )


class WolfDataPointSelect(WolfDataPointEntity, SelectEntity):
    """Writable choice parameter; options are the association labels."""

    def __init__(self, coordinator: WolfSmartsetCoordinator, entry: ConfigEntry, data_point: DataPoint) -> None:
        super().__init__(coordinator, entry, data_point)
        self._value_by_label = {a.label: a.value for a in data_point.associations}
        self._label_by_value = {a.value: a.label for a in data_point.associations}
        self._attr_options = list(self._value_by_label)

    @property
    def current_option(self) -> str | None:
        value = self.native_data
        if value is None:
            return None
        try:
            return self._label_by_value.get(int(value))
        except (TypeError, ValueError):
            return None

    async def async_select_option(self, option: str) -> None:
        await self.async_write(self._value_by_label[option])
