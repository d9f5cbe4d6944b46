"""The Electricity Schedule integration."""

from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.const import EVENT_HOMEASSISTANT_STOP, Platform
from homeassistant.core import Event, HomeAssistant
from homeassistant.helpers.discovery import async_load_platform
from homeassistant.helpers.typing import ConfigType

from .config import SCHEDULES_SCHEMA, parse_schedule_config
from .const import DOMAIN
from .coordinator import ElectricityScheduleCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.SENSOR, Platform.BINARY_SENSOR]

CONFIG_SCHEMA = vol.Schema({DOMAIN: SCHEDULES_SCHEMA}, extra=vol.ALLOW_EXTRA)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Electricity Schedule schedules from configuration.yaml."""
    if DOMAIN not in config:
        return True

    coordinators: dict[str, ElectricityScheduleCoordinator] = {}
    hass.data[DOMAIN] = coordinators

    for schedule_conf in config[DOMAIN]:
        schedule = parse_schedule_config(schedule_conf)
        coordinator = ElectricityScheduleCoordinator(hass, schedule)
        # A failed first pass leaves the entities unavailable until a refresh succeeds
        await coordinator.async_refresh()
        coordinator.async_start()
        coordinators[schedule.slug] = coordinator
        _LOGGER.debug("Set up schedule %s with %d columns", schedule.name, len(schedule.columns))

        for platform in PLATFORMS:
            hass.async_create_task(
                async_load_platform(
                    hass, platform, DOMAIN, {"schedule": schedule.slug}, config
                )
            )

    async def _async_shutdown(event: Event) -> None:
        for coordinator in coordinators.values():
            await coordinator.async_shutdown()

    hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, _async_shutdown)
    return True
