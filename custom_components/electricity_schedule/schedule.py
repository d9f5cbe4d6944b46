"""Schedule table computation for the Electricity Schedule integration.

One pass merges the import and export rate streams, evaluates every
configured column against the current state store and produces one row per
half-hourly slot with the active columns, total power and cost.

Nothing here reads the clock: ``now`` is captured once by the caller and
threaded through every time comparison so that a pass is self-consistent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from .config import ColumnConfig, MeterConfig, ScheduleConfig
from .const import COST_DIVISOR, PENCE_PER_POUND, SLOT_DURATION
from .rates import RateSlot, merge_rates
from .states import (
    SensorState,
    TimeWindow,
    get_rates_attributes,
    get_sensor_state,
    parse_time_entity,
)

_LOGGER = logging.getLogger(__name__)

THRESHOLD_UNCONFIGURED = "unconfigured"
THRESHOLD_OK = "ok"
THRESHOLD_INVALID = "invalid"


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ThresholdReading:
    """A price threshold read from an entity.

    ``value`` is None both when no entity is configured and when the
    entity's state is not a number; ``status`` tells the two apart.
    """

    entity_id: str | None = None
    raw: str | None = None
    value: float | None = None

    @property
    def status(self) -> str:
        if self.entity_id is None:
            return THRESHOLD_UNCONFIGURED
        if self.value is None:
            return THRESHOLD_INVALID
        return THRESHOLD_OK


@dataclass(frozen=True)
class ColumnData:
    """A column together with the values resolved for this pass."""

    config: ColumnConfig
    enabled: bool
    min_price_reading: ThresholdReading = ThresholdReading()
    max_price_reading: ThresholdReading = ThresholdReading()
    min_export_price_reading: ThresholdReading = ThresholdReading()
    max_export_price_reading: ThresholdReading = ThresholdReading()
    active_times: tuple[TimeWindow, ...] | None = None

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def power(self) -> float | None:
        return self.config.power

    @property
    def min_price(self) -> float | None:
        return self.min_price_reading.value

    @property
    def max_price(self) -> float | None:
        return self.max_price_reading.value

    @property
    def min_export_price(self) -> float | None:
        return self.min_export_price_reading.value

    @property
    def max_export_price(self) -> float | None:
        return self.max_export_price_reading.value


@dataclass(frozen=True)
class CellResult:
    """Activation of one column in one slot.

    ``is_active_time``/``is_active_cost`` are None when the column has no
    constraint of that kind (or, for cost, when the slot has no price).
    """

    is_active_time: bool | None
    is_active_cost: bool | None
    cell_active: bool


@dataclass(frozen=True)
class RowResult:
    """One slot of the schedule table."""

    time: datetime
    cells: tuple[CellResult, ...]
    total_power: float
    cost: float
    import_price: float | None = None
    export_price: float | None = None


@dataclass(frozen=True)
class DisplayData:
    """Result of one computation pass: enabled columns and their rows."""

    columns: tuple[ColumnData, ...]
    rows: tuple[RowResult, ...]


# ---------------------------------------------------------------------------
# Column evaluation
# ---------------------------------------------------------------------------

def read_threshold(
    states: Mapping[str, SensorState], entity_id: str | None
) -> ThresholdReading:
    """Read a numeric threshold from an entity's state.

    A state that does not parse as a number is tolerated: a transient
    'unavailable' must not abort the whole schedule.
    """
    state = get_sensor_state(states, entity_id)
    if state is None:
        return ThresholdReading()

    try:
        value = float(state.state)
    except (TypeError, ValueError):
        _LOGGER.warning(
            "Ignoring non-numeric price threshold %s: %r", entity_id, state.state
        )
        value = None
    return ThresholdReading(entity_id=entity_id, raw=state.state, value=value)


def generate_column_data(
    states: Mapping[str, SensorState], column: ColumnConfig, now: datetime
) -> ColumnData:
    """Resolve a column's enablement, thresholds and active time windows.

    A column is enabled when it is not disabled, every enabling entity is in
    its enabled state, and at least one of its time entities (if any) has a
    non-empty window. Thresholds and windows are resolved even for disabled
    columns.
    """
    windows: list[TimeWindow] | None = None
    if column.time_entities is not None:
        windows = []
        for entity_id in column.time_entities:
            window = parse_time_entity(states, entity_id, now)
            if window is not None:
                windows.append(window)

    enabled = _is_column_enabled(states, column, windows)

    return ColumnData(
        config=column,
        enabled=enabled,
        min_price_reading=read_threshold(states, column.min_price_entity),
        max_price_reading=read_threshold(states, column.max_price_entity),
        min_export_price_reading=read_threshold(states, column.min_export_price_entity),
        max_export_price_reading=read_threshold(states, column.max_export_price_entity),
        active_times=tuple(windows) if windows is not None else None,
    )


def _is_column_enabled(
    states: Mapping[str, SensorState],
    column: ColumnConfig,
    windows: list[TimeWindow] | None,
) -> bool:
    if column.disabled:
        return False

    if column.enabled_entities is not None:
        for enabled_entity in column.enabled_entities:
            state = get_sensor_state(states, enabled_entity.entity_name)
            if state is None or state.state != enabled_entity.enabled_value:
                return False

    # One non-empty window among several is enough
    if windows is not None and all(window.is_empty for window in windows):
        return False

    return True


# ---------------------------------------------------------------------------
# Row generation
# ---------------------------------------------------------------------------

def _is_active_cost(column: ColumnData, import_rate: RateSlot | None) -> bool | None:
    # Export price is not used for cost activation
    if import_rate is None:
        return None
    price_p = import_rate.unit_price * PENCE_PER_POUND

    min_price = column.min_price
    max_price = column.max_price
    if min_price is None and max_price is None:
        return None
    if min_price is not None and max_price is not None:
        return min_price <= price_p <= max_price
    if min_price is not None:
        return price_p >= min_price
    return price_p <= max_price


def _combine(is_active_time: bool | None, is_active_cost: bool | None) -> bool:
    if is_active_time is None and is_active_cost is None:
        return False
    if is_active_time is None:
        return is_active_cost
    if is_active_cost is None:
        return is_active_time
    return is_active_time and is_active_cost


def generate_cell(
    column: ColumnData, time: datetime, import_rate: RateSlot | None
) -> CellResult:
    """Evaluate one column against one slot."""
    if column.active_times is None:
        is_active_time = None
    else:
        is_active_time = any(window.contains(time) for window in column.active_times)

    is_active_cost = _is_active_cost(column, import_rate)

    return CellResult(
        is_active_time=is_active_time,
        is_active_cost=is_active_cost,
        cell_active=_combine(is_active_time, is_active_cost),
    )


def calculate_cost(
    total_power: float,
    import_rate: RateSlot | None,
    export_rate: RateSlot | None,
) -> float:
    """Return the cost of running ``total_power`` watts for one slot.

    Prices are per kWh in major units and power is in watts over a
    30-minute slot, so the cost in minor units is ``power * price / 20``.
    Negative power (export/discharge) is priced at the export rate.
    """
    if total_power > 0:
        rate = import_rate
    elif total_power < 0:
        rate = export_rate
    else:
        return 0
    if rate is None:
        return 0
    return total_power * rate.unit_price / COST_DIVISOR


def generate_row(
    time: datetime,
    columns: tuple[ColumnData, ...],
    import_rate: RateSlot | None = None,
    export_rate: RateSlot | None = None,
) -> RowResult:
    """Build the schedule row for the slot starting at ``time``."""
    cells = tuple(generate_cell(column, time, import_rate) for column in columns)
    total_power = sum(
        (column.power or 0) for column, cell in zip(columns, cells) if cell.cell_active
    )

    return RowResult(
        time=time,
        cells=cells,
        total_power=total_power,
        cost=calculate_cost(total_power, import_rate, export_rate),
        import_price=import_rate.unit_price if import_rate is not None else None,
        export_price=export_rate.unit_price if export_rate is not None else None,
    )


def get_rate_data(
    states: Mapping[str, SensorState],
    meter: MeterConfig,
    now: datetime,
    include_past: bool,
    include_future: bool,
) -> list[RateSlot]:
    """Read and merge the past, current and future rates of one meter."""
    streams = [get_rates_attributes(states, e) for e in meter.rates_entities]
    return merge_rates(streams, now, include_past, include_future)


def calculate_table_data(
    states: Mapping[str, SensorState], config: ScheduleConfig, now: datetime
) -> DisplayData:
    """Compute the schedule table for one pass.

    Raises:
        ElectricityScheduleError: A configured entity is missing or has an
            unusable shape. No partial table is returned.
    """
    import_rates = get_rate_data(
        states, config.import_meter, now, config.show_past, config.show_future
    )
    export_rates: list[RateSlot] = []
    if config.export_meter is not None:
        export_rates = get_rate_data(
            states, config.export_meter, now, config.show_past, config.show_future
        )

    columns = tuple(
        column
        for column in (generate_column_data(states, c, now) for c in config.columns)
        if column.enabled
    )

    imports_by_time = {rate.start: rate for rate in import_rates}
    exports_by_time = {rate.start: rate for rate in export_rates}
    times = sorted(set(imports_by_time) | set(exports_by_time))

    rows = tuple(
        generate_row(time, columns, imports_by_time.get(time), exports_by_time.get(time))
        for time in times
    )

    _LOGGER.debug(
        "Computed %s: %d rows, %d of %d columns enabled",
        config.name, len(rows), len(columns), len(config.columns),
    )
    return DisplayData(columns=columns, rows=rows)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def find_current_row(
    rows: tuple[RowResult, ...] | list[RowResult], now: datetime
) -> RowResult | None:
    """Find the row whose slot contains ``now``."""
    for row in rows:
        if row.time <= now < row.time + SLOT_DURATION:
            return row
    return None


def _active_columns(row: RowResult) -> tuple[bool, ...]:
    return tuple(cell.cell_active for cell in row.cells)


def find_next_change(
    rows: tuple[RowResult, ...] | list[RowResult], now: datetime
) -> datetime | None:
    """Find the start of the next slot whose active columns differ from now.

    Returns None if there is no current slot or nothing changes.
    """
    current = find_current_row(rows, now)
    if current is None:
        return None

    current_active = _active_columns(current)
    for row in rows:
        if row.time > now and _active_columns(row) != current_active:
            return row.time
    return None
