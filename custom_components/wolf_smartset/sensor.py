from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory

from .pywolfsmartset import DataPoint, DataPointType
from .const import DOMAIN
from .coordinator import WolfSmartsetCoordinator
from .entity import (
    PLATFORM_SENSOR,
    WolfDataPointEntity,
    WolfSmartsetEntity,
    data_points_for,
)


async def async_setup_entry(hass, entry: ConfigEntry, async_add_entities):
    coordinator: WolfSmartsetCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]

    entities: list[SensorEntity] = [
        WolfPortalStatusSensor(coordinator, entry),
        WolfNetworkStatusSensor(coordinator, entry),
    ]
    entities.extend(
        WolfDataPointSensor(coordinator, entry, dp) for dp in data_points_for(coordinator, PLATFORM_SENSOR)
    )
    async_add_entities(entities)


class WolfPortalStatusSensor(WolfSmartsetEntity, SensorEntity):
    _attr_name = "Portal status"
    _attr_icon = "mdi:cloud-check-variant"
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(self, coordinator: WolfSmartsetCoordinator, entry: ConfigEntry) -> None:
        super().__init__(coordinator, entry)
        self._attr_unique_id = f"{entry.entry_id}_portal_status"

    @property
    def available(self) -> bool:
        # Stays available to report why updates fail
        return True

    @property
    def native_value(self) -> str:
        return self.coordinator.installation.status.value

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        return dict(self.coordinator.installation.system_info)


class WolfNetworkStatusSensor(WolfSmartsetEntity, SensorEntity):
    _attr_name = "Gateway"
    _attr_icon = "mdi:router-wireless"
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(self, coordinator: WolfSmartsetCoordinator, entry: ConfigEntry) -> None:
        super().__init__(coordinator, entry)
        self._attr_unique_id = f"{entry.entry_id}_network_status"

    @property
    def available(self) -> bool:
        return True

    @property
    def native_value(self) -> str:
        return self.coordinator.installation.network_status.value


class WolfDataPointSensor(WolfDataPointEntity, SensorEntity):
    """Read-only data point; choice values show their label."""

    def __init__(self, coordinator: WolfSmartsetCoordinator, entry: ConfigEntry, data_point: DataPoint) -> None:
        super().__init__(coordinator, entry, data_point)
        self._attr_native_unit_of_measurement = data_point.unit or None
        if data_point.data_type in (DataPointType.INTEGER, DataPointType.FLOAT) and not data_point.associations:
            self._attr_state_class = SensorStateClass.MEASUREMENT

    @property
    def native_value(self) -> Any:
        value = self.native_data
        data_point = self.data_point
        if data_point is None or value is None:
            return None
        if data_point.associations and not isinstance(value, bool):
            try:
                return data_point.options.get(int(value), value)
            except (TypeError, ValueError):
                return value
        if data_point.data_type is DataPointType.BOOLEAN:
            return "on" if value else "off"
        return value
