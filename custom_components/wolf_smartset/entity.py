from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .pywolfsmartset import DataPoint, DataPointType
from .const import ATTR_CATEGORY, ATTR_PARAMETER, DOMAIN, MANUFACTURER
from .coordinator import WolfSmartsetCoordinator

PLATFORM_SENSOR = "sensor"
PLATFORM_NUMBER = "number"
PLATFORM_SELECT = "select"
PLATFORM_SWITCH = "switch"


def platform_for(data_point: DataPoint) -> str:
    """Pick the entity platform that represents a data point."""
    if not data_point.writable:
        return PLATFORM_SENSOR
    if data_point.data_type is DataPointType.BOOLEAN:
        return PLATFORM_SWITCH
    if data_point.data_type is DataPointType.INTEGER and data_point.associations:
        return PLATFORM_SELECT
    if data_point.data_type in (DataPointType.INTEGER, DataPointType.FLOAT):
        return PLATFORM_NUMBER
    return PLATFORM_SENSOR


def data_points_for(coordinator: WolfSmartsetCoordinator, platform: str) -> list[DataPoint]:
    return [
        dp for dp in coordinator.installation.catalog.data_points if platform_for(dp) == platform
    ]


def build_device_info(coordinator: WolfSmartsetCoordinator, entry: ConfigEntry) -> DeviceInfo:
    system = coordinator.installation.system
    info = coordinator.installation.system_info
    return DeviceInfo(
        identifiers={(DOMAIN, entry.entry_id)},
        name=system.get("name") or entry.title or "Wolf Smartset",
        manufacturer=MANUFACTURER,
        model="Smartset",
        sw_version=info.get("gateway_software_version") or None,
    )


class WolfSmartsetEntity(CoordinatorEntity[WolfSmartsetCoordinator]):
    _attr_has_entity_name = True

    def __init__(self, coordinator: WolfSmartsetCoordinator, entry: ConfigEntry) -> None:
        super().__init__(coordinator)
        self._entry = entry

    @property
    def device_info(self) -> DeviceInfo:
        return build_device_info(self.coordinator, self._entry)


class WolfDataPointEntity(WolfSmartsetEntity):
    """Entity backed by one data point of the installation's catalog."""

    def __init__(self, coordinator: WolfSmartsetCoordinator, entry: ConfigEntry, data_point: DataPoint) -> None:
        super().__init__(coordinator, entry)
        self._data_point_id = data_point.id
        self._attr_name = data_point.name
        self._attr_unique_id = f"{entry.entry_id}_{data_point.id}"
        catalog = coordinator.installation.catalog
        self._category = " / ".join(catalog.path(data_point.parent_id)[1:])
        self._parameter = data_point.ident[2:] if data_point.ident.startswith("ID") else data_point.ident

    @property
    def data_point(self) -> DataPoint | None:
        return self.coordinator.installation.catalog.get(self._data_point_id)

    @property
    def native_data(self) -> Any:
        values = (self.coordinator.data or {}).get("values") or {}
        if self._data_point_id in values:
            return values[self._data_point_id]
        data_point = self.data_point
        return data_point.value if data_point is not None else None

    @property
    def available(self) -> bool:
        return super().available and self.data_point is not None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        return {ATTR_CATEGORY: self._category, ATTR_PARAMETER: self._parameter}

    async def async_write(self, value: Any) -> None:
        await self.coordinator.async_write_value(self._parameter, value)
