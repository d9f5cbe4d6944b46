"""Tests for the Electricity Schedule coordinator."""

from __future__ import annotations

from datetime import timedelta

from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util

from custom_components.electricity_schedule.config import (
    ColumnConfig,
    MeterConfig,
    ScheduleConfig,
)
from custom_components.electricity_schedule.coordinator import (
    ElectricityScheduleCoordinator,
    snapshot_states,
)

RATES_ENTITY = "event.import_current_day_rates"
MAX_PRICE_ENTITY = "input_number.ev_max_price"


def _current_rates() -> list[dict]:
    """Two half-hour rates: the slot containing now (30p) and the next one (10p)."""
    now = dt_util.now()
    start = now.replace(minute=30 if now.minute >= 30 else 0, second=0, microsecond=0)
    return [
        {
            "start": (start + timedelta(minutes=30 * i)).isoformat(),
            "end": (start + timedelta(minutes=30 * (i + 1))).isoformat(),
            "value_inc_vat": price,
            "is_capped": False,
        }
        for i, price in enumerate([0.30, 0.10])
    ]


def _schedule() -> ScheduleConfig:
    return ScheduleConfig(
        name="Home",
        import_meter=MeterConfig(current_rates_entity=RATES_ENTITY),
        columns=(ColumnConfig(name="EV", max_price_entity=MAX_PRICE_ENTITY, power=7000),),
    )


async def test_snapshot_skips_missing_entities(hass: HomeAssistant) -> None:
    """Only entities present in the state machine are copied."""
    hass.states.async_set(MAX_PRICE_ENTITY, "20", {"unit_of_measurement": "p"})

    snapshot = snapshot_states(hass, [MAX_PRICE_ENTITY, "switch.missing"])

    assert list(snapshot) == [MAX_PRICE_ENTITY]
    assert snapshot[MAX_PRICE_ENTITY].state == "20"
    assert snapshot[MAX_PRICE_ENTITY].attributes["unit_of_measurement"] == "p"


async def test_coordinator_computes_schedule(hass: HomeAssistant) -> None:
    """A refresh builds the table from the current entity states."""
    hass.states.async_set(RATES_ENTITY, "unknown", {"rates": _current_rates()})
    hass.states.async_set(MAX_PRICE_ENTITY, "20")

    coordinator = ElectricityScheduleCoordinator(hass, _schedule())
    await coordinator.async_refresh()

    assert coordinator.last_update_success
    rows = coordinator.data.rows
    assert len(rows) == 2
    assert rows[0].total_power == 0
    assert rows[1].total_power == 7000

    await coordinator.async_shutdown()


async def test_coordinator_fails_on_missing_entity(hass: HomeAssistant) -> None:
    """A missing entity fails the refresh instead of publishing a partial table."""
    hass.states.async_set(RATES_ENTITY, "unknown", {"rates": _current_rates()})

    coordinator = ElectricityScheduleCoordinator(hass, _schedule())
    await coordinator.async_refresh()

    assert not coordinator.last_update_success
    assert coordinator.data is None

    await coordinator.async_shutdown()


async def test_coordinator_refreshes_on_state_change(hass: HomeAssistant) -> None:
    """Changing a referenced entity triggers a recalculation."""
    hass.states.async_set(RATES_ENTITY, "unknown", {"rates": _current_rates()})
    hass.states.async_set(MAX_PRICE_ENTITY, "20")

    coordinator = ElectricityScheduleCoordinator(hass, _schedule())
    await coordinator.async_refresh()
    coordinator.async_start()
    assert coordinator.data.rows[0].total_power == 0

    hass.states.async_set(MAX_PRICE_ENTITY, "35")
    await hass.async_block_till_done()

    assert coordinator.data.rows[0].total_power == 7000

    await coordinator.async_shutdown()
