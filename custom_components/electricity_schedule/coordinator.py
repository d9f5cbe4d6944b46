"""DataUpdateCoordinator for the Electricity Schedule integration."""

from __future__ import annotations

from collections.abc import Callable
import logging

from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from .config import ScheduleConfig, referenced_entities
from .const import DOMAIN
from .exceptions import ElectricityScheduleError
from .schedule import DisplayData, calculate_table_data
from .states import SensorState

_LOGGER = logging.getLogger(__name__)


def snapshot_states(hass: HomeAssistant, entity_ids: list[str]) -> dict[str, SensorState]:
    """Copy the current state of the given entities.

    Entities missing from the state machine are left out of the snapshot,
    which the schedule computation reports as unknown.
    """
    snapshot: dict[str, SensorState] = {}
    for entity_id in entity_ids:
        state = hass.states.get(entity_id)
        if state is None:
            continue
        snapshot[entity_id] = SensorState(state.state, dict(state.attributes))
    return snapshot


class ElectricityScheduleCoordinator(DataUpdateCoordinator[DisplayData]):
    """Coordinator that recomputes one schedule table on every refresh."""

    def __init__(self, hass: HomeAssistant, schedule: ScheduleConfig) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_{schedule.slug}",
            config_entry=None,
            update_interval=schedule.refresh_interval,
        )
        self.schedule = schedule
        self._entity_ids = referenced_entities(schedule)
        self._unsub_state_changes: Callable[[], None] | None = None

    @callback
    def async_start(self) -> None:
        """Start listening for state changes of referenced entities."""
        # Recalculate as soon as any referenced entity changes
        if self._entity_ids:
            self._unsub_state_changes = async_track_state_change_event(
                self.hass, self._entity_ids, self._on_state_change
            )

    @callback
    def _on_state_change(self, event: Event) -> None:
        """Handle a state change of a referenced entity."""
        _LOGGER.debug(
            "%s changed, requesting refresh of %s",
            event.data.get("entity_id"), self.schedule.name,
        )
        self.hass.async_create_task(self.async_request_refresh())

    async def _async_update_data(self) -> DisplayData:
        """Compute the schedule table from the current state."""
        now = dt_util.now()
        states = snapshot_states(self.hass, self._entity_ids)

        try:
            return calculate_table_data(states, self.schedule, now)
        except ElectricityScheduleError as err:
            raise UpdateFailed(f"Cannot compute schedule {self.schedule.name}: {err}") from err

    async def async_shutdown(self) -> None:
        """Clean up listeners."""
        if self._unsub_state_changes:
            self._unsub_state_changes()
            self._unsub_state_changes = None
        await super().async_shutdown()
