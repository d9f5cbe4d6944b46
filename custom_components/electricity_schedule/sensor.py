"""Sensor platform for the Electricity Schedule integration."""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.const import UnitOfPower
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.typing import ConfigType, DiscoveryInfoType
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util

from .config import MeterConfig
from .const import DOMAIN
from .coordinator import ElectricityScheduleCoordinator
from .schedule import ColumnData, RowResult, find_current_row, find_next_change


async def async_setup_platform(
    hass: HomeAssistant,
    config: ConfigType,
    async_add_entities: AddEntitiesCallback,
    discovery_info: DiscoveryInfoType | None = None,
) -> None:
    """Set up Electricity Schedule sensors for a discovered schedule."""
    if discovery_info is None:
        return
    coordinator: ElectricityScheduleCoordinator = hass.data[DOMAIN][
        discovery_info["schedule"]
    ]
    async_add_entities([
        ScheduleSensor(coordinator),
        SlotCostSensor(coordinator),
    ])


def column_attributes(column: ColumnData) -> dict[str, Any]:
    """Serialize a resolved column for state attributes."""
    return {
        "name": column.name,
        "group": column.config.group,
        "enabled": column.enabled,
        "power": column.power,
        "min_price": column.min_price,
        "max_price": column.max_price,
        "min_export_price": column.min_export_price,
        "max_export_price": column.max_export_price,
        "active_color": column.config.active_color,
        "active_text": column.config.active_text,
        "inactive_color": column.config.inactive_color,
        "inactive_text": column.config.inactive_text,
        "active_times": (
            [
                {"start": w.start.isoformat(), "end": w.end.isoformat()}
                for w in column.active_times
            ]
            if column.active_times is not None
            else None
        ),
    }


def meter_attributes(meter: MeterConfig | None) -> dict[str, Any] | None:
    """Serialize the display bands of a meter for state attributes."""
    if meter is None:
        return None
    return {"high_cost": meter.high_cost, "low_cost": meter.low_cost}


def row_attributes(row: RowResult, columns: tuple[ColumnData, ...]) -> dict[str, Any]:
    """Serialize a schedule row for state attributes."""
    return {
        "time": row.time.isoformat(),
        "import_price": row.import_price,
        "export_price": row.export_price,
        "active": [
            column.name
            for column, cell in zip(columns, row.cells)
            if cell.cell_active
        ],
        "total_power": row.total_power,
        "cost": row.cost,
    }


class _ScheduleSensorBase(CoordinatorEntity[ElectricityScheduleCoordinator], SensorEntity):
    """Base class for sensors reporting the current slot of a schedule."""

    _key: str
    _label: str

    def __init__(self, coordinator: ElectricityScheduleCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{coordinator.schedule.slug}_{self._key}"
        self._attr_name = f"{coordinator.schedule.name} {self._label}"

    def _current_row(self) -> RowResult | None:
        if self.coordinator.data is None:
            return None
        return find_current_row(self.coordinator.data.rows, dt_util.now())


class ScheduleSensor(_ScheduleSensorBase):
    """Sensor exposing the schedule table and the power of the current slot."""

    _key = "schedule"
    _label = "Schedule"
    _attr_icon = "mdi:calendar-clock"
    _attr_device_class = SensorDeviceClass.POWER
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfPower.WATT

    @property
    def native_value(self) -> float | None:
        """Return the total scheduled power of the current slot."""
        row = self._current_row()
        if row is None:
            return None
        return round(row.total_power, self.coordinator.schedule.power_decimals)

    @property
    def extra_state_attributes(self) -> dict:
        """Return the full schedule table."""
        if self.coordinator.data is None:
            return {}
        schedule = self.coordinator.schedule
        data = self.coordinator.data
        next_change = find_next_change(data.rows, dt_util.now())
        return {
            "columns": [column_attributes(c) for c in data.columns],
            "rows": [row_attributes(r, data.columns) for r in data.rows],
            "next_change": next_change.isoformat() if next_change else None,
            "import_meter": meter_attributes(schedule.import_meter),
            "export_meter": meter_attributes(schedule.export_meter),
            "price_unit": schedule.price_unit,
            "price_decimals": schedule.price_decimals,
            "power_decimals": schedule.power_decimals,
            "color_config": dict(schedule.color_config),
        }


class SlotCostSensor(_ScheduleSensorBase):
    """Sensor showing the cost of the current slot."""

    _key = "cost"
    _label = "Cost"
    _attr_icon = "mdi:cash"

    def __init__(self, coordinator: ElectricityScheduleCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_native_unit_of_measurement = coordinator.schedule.price_unit

    @property
    def native_value(self) -> float | None:
        """Return the cost of the current slot."""
        row = self._current_row()
        if row is None:
            return None
        return round(row.cost, self.coordinator.schedule.price_decimals)
