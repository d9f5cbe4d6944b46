"""Shared test helpers for Electricity Schedule tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from custom_components.electricity_schedule.config import (
    ColumnConfig,
    MeterConfig,
    ScheduleConfig,
)
from custom_components.electricity_schedule.states import SensorState

# Timezone for testing (UK summer time)
TZ = timezone(timedelta(hours=1), name="BST")

IMPORT_PAST = "event.import_previous_day_rates"
IMPORT_CURRENT = "event.import_current_day_rates"
IMPORT_FUTURE = "event.import_next_day_rates"
EXPORT_CURRENT = "event.export_current_day_rates"


def make_rate(
    hour: int,
    price: float,
    day_offset: int = 0,
    half: int = 0,
    is_capped: bool = False,
) -> dict:
    """Create an Octopus-style 30-minute rate for testing.

    Args:
        hour: Hour of the day (0-23).
        price: Price in GBP/kWh including VAT.
        day_offset: 0 for today, 1 for tomorrow, -1 for yesterday.
        half: 0 for :00, 1 for :30.
        is_capped: Value of the is_capped flag.

    Returns:
        Dict matching one entry of a rates entity's ``rates`` attribute.
    """
    base = datetime(2024, 6, 1, tzinfo=TZ) + timedelta(days=day_offset)
    start = base.replace(hour=hour, minute=half * 30)
    end = start + timedelta(minutes=30)
    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "value_inc_vat": price,
        "is_capped": is_capped,
    }


def make_day_rates(prices: list[float], day_offset: int = 0) -> list[dict]:
    """Create consecutive half-hour rates starting at midnight."""
    return [
        make_rate(i // 2, price, day_offset, i % 2)
        for i, price in enumerate(prices)
    ]


def rates_state(rates: list[dict]) -> SensorState:
    """Wrap rates in the state of a rates entity."""
    return SensorState("unknown", {"rates": rates})


def make_schedule(
    *columns: ColumnConfig,
    show_past: bool = True,
    show_future: bool = True,
    export: bool = False,
) -> ScheduleConfig:
    """Create a schedule reading IMPORT_CURRENT (and EXPORT_CURRENT)."""
    return ScheduleConfig(
        name="Home",
        import_meter=MeterConfig(current_rates_entity=IMPORT_CURRENT),
        export_meter=MeterConfig(current_rates_entity=EXPORT_CURRENT) if export else None,
        columns=columns,
        show_past=show_past,
        show_future=show_future,
    )


def make_coordinator(data=None, schedule: ScheduleConfig | None = None) -> MagicMock:
    """Create a mock coordinator for entity tests."""
    coordinator = MagicMock()
    coordinator.data = data
    coordinator.schedule = schedule or make_schedule(ColumnConfig(name="EV", power=7000))
    return coordinator
