"""Merge tariff rate streams into a single time-ordered series.

A meter direction (import or export) can be backed by up to three rate
entities: previous day, current day and next day. Each exposes a ``rates``
attribute of ``{start, end, value_inc_vat, is_capped}`` entries.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .const import ATTR_RATE_END, ATTR_RATE_IS_CAPPED, ATTR_RATE_START, ATTR_RATE_VALUE, ATTR_RATES
from .states import to_datetime

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateSlot:
    """One priced tariff slot.

    ``start``/``end`` are always derived from the raw attribute values.
    """

    start_raw: str | datetime
    end_raw: str | datetime
    start: datetime
    end: datetime
    unit_price: float
    is_capped: bool = False

    @classmethod
    def from_attributes(cls, rate: Mapping[str, Any], now: datetime) -> RateSlot:
        """Build a slot from one entry of a ``rates`` attribute."""
        start_raw = rate[ATTR_RATE_START]
        end_raw = rate[ATTR_RATE_END]
        slot = cls(
            start_raw=start_raw,
            end_raw=end_raw,
            start=to_datetime(start_raw, now),
            end=to_datetime(end_raw, now),
            unit_price=float(rate[ATTR_RATE_VALUE]),
            is_capped=bool(rate.get(ATTR_RATE_IS_CAPPED, False)),
        )
        if slot.start >= slot.end:
            _LOGGER.warning(
                "Rate slot does not end after it starts: %s - %s", start_raw, end_raw
            )
        return slot


def merge_rates(
    streams: Iterable[Mapping[str, Any] | None],
    now: datetime,
    include_past: bool,
    include_future: bool,
) -> list[RateSlot]:
    """Combine rate streams into one filtered series sorted by start time.

    Args:
        streams: Rate entity attributes in past, current, future order.
            Missing streams are passed as None and ignored.
        now: Start of the computation; used for past/future filtering.
        include_past: Keep slots that ended before ``now``.
        include_future: Keep slots that start after ``now``.

    Returns:
        Slots ascending by start, one per start instant. When several
        streams carry the same start instant, the first one seen wins.
    """
    slots: list[RateSlot] = []
    for attributes in streams:
        if not attributes:
            continue
        for rate in attributes.get(ATTR_RATES) or []:
            try:
                slots.append(RateSlot.from_attributes(rate, now))
            except (ValueError, TypeError, KeyError) as e:
                _LOGGER.warning("Error processing rate %s: %s", rate, e)

    seen: set[datetime] = set()
    merged: list[RateSlot] = []
    for slot in slots:
        if not include_past and slot.end < now:
            continue
        if not include_future and slot.start > now:
            continue
        if slot.start in seen:
            continue
        seen.add(slot.start)
        merged.append(slot)

    merged.sort(key=lambda s: s.start)
    return merged
