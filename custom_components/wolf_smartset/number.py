from __future__ import annotations

from homeassistant.components.number import NumberEntity, NumberMode
from homeassistant.config_entries import ConfigEntry

from .pywolfsmartset import DataPoint, DataPointType
from .const import DOMAIN
from .coordinator import WolfSmartsetCoordinator
from .entity import PLATFORM_NUMBER, WolfDataPointEntity, data_points_for


async def async_setup_entry(hass, entry: ConfigEntry, async_add_entities):
    coordinator: WolfSmartsetCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    async_add_entities(
        WolfDataPointNumber(coordinator, entry, dp) for dp in data_points_for(coordinator, PLATFORM_NUMBER)
    )


class WolfDataPointNumber(WolfDataPointEntity, NumberEntity):
    _attr_mode = NumberMode.BOX

    def __init__(self, coordinator: WolfSmartsetCoordinator, entry: ConfigEntry, data_point: DataPoint) -> None:
        super().__init__(coordinator, entry, data_point)
        self._is_float = data_point.data_type is DataPointType.FLOAT
        self._attr_native_min_value = float(data_point.minimum if data_point.minimum is not None else 0)
        self._attr_native_max_value = float(data_point.maximum if data_point.maximum is not None else 100)
        self._attr_native_step = float(data_point.step or 1)
        self._attr_native_unit_of_measurement = data_point.unit or None

    @property
    def native_value(self) -> float | None:
        value = self.native_data
        if value is None or isinstance(value, str):
            return None
        return float(value)

    async def async_set_native_value(self, value: float) -> None:
        await self.async_write(value if self._is_float else int(round(value)))
