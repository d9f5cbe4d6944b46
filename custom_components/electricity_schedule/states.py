"""Read entity state and resolve time entities into concrete windows.

This module contains no Home Assistant dependencies. The state store is a
plain mapping from entity ID to ``SensorState``; the coordinator builds one
snapshot per computation.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from .const import ATTR_AFTER, ATTR_BEFORE, ATTR_END, ATTR_RATES, ATTR_START
from .exceptions import (
    InvalidRatesEntityError,
    UnknownEntityError,
    UnrecognizedTimeEntityShapeError,
)

_LOGGER = logging.getLogger(__name__)

_WALL_CLOCK_RE = re.compile(r"(\d+)(?::(\d\d))?\s*(p?)")


@dataclass(frozen=True)
class SensorState:
    """Current state and attributes of one entity."""

    state: str
    attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TimeWindow:
    """A half-open ``[start, end)`` interval."""

    start: datetime
    end: datetime

    @property
    def is_empty(self) -> bool:
        """Return True if no instant can fall inside the window."""
        return self.start >= self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


@dataclass(frozen=True)
class AbsoluteTimeSource:
    """Time entity exposing ISO timestamps in ``after``/``before``."""

    after: str | datetime
    before: str | datetime

    def resolve(self, now: datetime) -> TimeWindow:
        return TimeWindow(to_datetime(self.after, now), to_datetime(self.before, now))


@dataclass(frozen=True)
class WallClockTimeSource:
    """Time entity exposing a daily ``start``/``end`` wall-clock pair."""

    start: str
    end: str

    def resolve(self, now: datetime) -> TimeWindow:
        start = parse_wall_clock(self.start, now)
        end = parse_wall_clock(self.end, now)

        if end < start:
            # No date part, so end before start means it is after midnight
            end += timedelta(days=1)
        elif end < now:
            # Already over today, use tomorrow's occurrence
            start += timedelta(days=1)
            end += timedelta(days=1)

        return TimeWindow(start, end)


TimeSource = AbsoluteTimeSource | WallClockTimeSource


def to_datetime(value: str | datetime, now: datetime) -> datetime:
    """Convert a value to an aware datetime, handling both strings and datetime objects.

    Entity attributes hold datetime objects when read from the state machine,
    but ISO strings when restored or supplied over the WebSocket API. Naive
    values are taken to be in the same timezone as ``now``.
    """
    if isinstance(value, datetime):
        result = value
    else:
        result = datetime.fromisoformat(value)
    if result.tzinfo is None:
        result = result.replace(tzinfo=now.tzinfo)
    return result


def parse_wall_clock(text: str, now: datetime) -> datetime:
    """Parse ``H[:mm][p]`` into a datetime on the same day as ``now``.

    A trailing ``p`` adds 12 hours. Text that does not match resolves to
    midnight. Hours past 23 roll over into the following day.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    match = _WALL_CLOCK_RE.search(str(text))
    if match is None:
        return midnight

    hours = int(match.group(1)) + (12 if match.group(3) else 0)
    minutes = int(match.group(2)) if match.group(2) else 0
    return midnight + timedelta(hours=hours, minutes=minutes)


def get_sensor_state(
    states: Mapping[str, SensorState], entity_id: str | None
) -> SensorState | None:
    """Return the state of ``entity_id``, or None if it is not configured.

    Raises:
        UnknownEntityError: The entity is configured but not in the store.
    """
    if not entity_id:
        return None
    if entity_id not in states:
        raise UnknownEntityError(entity_id)
    return states[entity_id]


def get_rates_attributes(
    states: Mapping[str, SensorState], entity_id: str | None
) -> Mapping[str, Any] | None:
    """Return the attributes of a rates entity, or None if not configured."""
    state = get_sensor_state(states, entity_id)
    if state is None:
        return None
    if ATTR_RATES not in state.attributes:
        raise InvalidRatesEntityError(entity_id)
    return state.attributes


def time_source_from_attributes(
    entity_id: str, attributes: Mapping[str, Any]
) -> TimeSource:
    """Pick the time source variant that matches the entity's attributes."""
    if ATTR_AFTER in attributes and ATTR_BEFORE in attributes:
        return AbsoluteTimeSource(attributes[ATTR_AFTER], attributes[ATTR_BEFORE])
    if ATTR_START in attributes and ATTR_END in attributes:
        return WallClockTimeSource(attributes[ATTR_START], attributes[ATTR_END])
    raise UnrecognizedTimeEntityShapeError(entity_id)


def parse_time_entity(
    states: Mapping[str, SensorState], entity_id: str | None, now: datetime
) -> TimeWindow | None:
    """Resolve a time entity into its current or next window.

    Returns None when the entity is not configured, which callers treat as
    an inactive window.
    """
    state = get_sensor_state(states, entity_id)
    if state is None:
        return None

    source = time_source_from_attributes(entity_id, state.attributes)
    try:
        window = source.resolve(now)
    except (TypeError, ValueError) as err:
        raise UnrecognizedTimeEntityShapeError(entity_id, str(err)) from err
    if window.is_empty:
        _LOGGER.warning(
            "Time entity %s resolved to an empty window (%s - %s)",
            entity_id, window.start.isoformat(), window.end.isoformat(),
        )
    return window
