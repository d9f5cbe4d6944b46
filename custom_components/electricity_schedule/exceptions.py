"""Errors raised while computing an electricity schedule.

All of these are structural problems with the configuration or the state
store and abort the whole computation. Data quality problems (an
unparseable price threshold, a missing price) are recovered where they
occur and never surface here.
"""

from __future__ import annotations


class ElectricityScheduleError(Exception):
    """Base class for schedule computation errors."""


class UnknownEntityError(ElectricityScheduleError):
    """A configured entity is not present in the state store."""

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"entity {entity_id} not found")
        self.entity_id = entity_id


class UnrecognizedTimeEntityShapeError(ElectricityScheduleError):
    """A time entity lacks after/before and start/end, or holds unreadable values."""

    def __init__(self, entity_id: str, detail: str | None = None) -> None:
        if detail is None:
            detail = "not start/end, not before/after"
        super().__init__(f"Cannot determine type of time entity {entity_id} - {detail}")
        self.entity_id = entity_id


class InvalidRatesEntityError(ElectricityScheduleError):
    """A rates entity has no 'rates' attribute."""

    def __init__(self, entity_id: str) -> None:
        super().__init__(
            f"entity {entity_id} is not a valid rates entity (no 'rates' attribute)"
        )
        self.entity_id = entity_id
