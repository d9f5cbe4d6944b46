"""Binary sensor platform for the Electricity Schedule integration."""

from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorEntity
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.typing import ConfigType, DiscoveryInfoType
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util

from .config import ColumnConfig
from .const import DOMAIN
from .coordinator import ElectricityScheduleCoordinator
from .schedule import CellResult, find_current_row


async def async_setup_platform(
    hass: HomeAssistant,
    config: ConfigType,
    async_add_entities: AddEntitiesCallback,
    discovery_info: DiscoveryInfoType | None = None,
) -> None:
    """Set up one binary sensor per column of a discovered schedule."""
    if discovery_info is None:
        return
    coordinator: ElectricityScheduleCoordinator = hass.data[DOMAIN][
        discovery_info["schedule"]
    ]
    async_add_entities(
        ColumnActiveBinarySensor(coordinator, column)
        for column in coordinator.schedule.columns
    )


class ColumnActiveBinarySensor(
    CoordinatorEntity[ElectricityScheduleCoordinator], BinarySensorEntity
):
    """Binary sensor that is on while a column is active in the current slot."""

    _attr_icon = "mdi:timer-play-outline"

    def __init__(
        self, coordinator: ElectricityScheduleCoordinator, column: ColumnConfig
    ) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator)
        self._column = column
        label = f"{column.group} {column.name}" if column.group else column.name
        self._attr_name = f"{coordinator.schedule.name} {label}"
        self._attr_unique_id = f"{coordinator.schedule.slug}_column_{column.slug}"

    def _current_cell(self) -> CellResult | None:
        data = self.coordinator.data
        if data is None:
            return None
        # Disabled columns are not part of the table
        index = next(
            (i for i, c in enumerate(data.columns) if c.config == self._column),
            None,
        )
        if index is None:
            return None
        row = find_current_row(data.rows, dt_util.now())
        if row is None:
            return None
        return row.cells[index]

    @property
    def is_on(self) -> bool:
        """Return True if the column is active now."""
        cell = self._current_cell()
        return cell is not None and cell.cell_active

    @property
    def extra_state_attributes(self) -> dict:
        """Return why the column is or is not active."""
        data = self.coordinator.data
        if data is None:
            return {}
        cell = self._current_cell()
        return {
            "enabled": any(c.config == self._column for c in data.columns),
            "power": self._column.power,
            "is_active_time": cell.is_active_time if cell else None,
            "is_active_cost": cell.is_active_cost if cell else None,
        }
