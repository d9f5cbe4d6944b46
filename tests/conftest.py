"""Shared test fixtures for Electricity Schedule tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from tests.helpers import TZ, make_day_rates


@pytest.fixture
def now() -> datetime:
    """Return a fixed 'now' for deterministic testing."""
    return datetime(2024, 6, 1, 15, 10, 0, tzinfo=TZ)


@pytest.fixture
def today_rates() -> list[dict]:
    """Return 48 half-hour rates for today.

    Cheap overnight, a 4-7pm peak, moderate otherwise.
    """
    prices = (
        [0.08] * 10      # 00:00-05:00
        + [0.22] * 22    # 05:00-16:00
        + [0.38] * 6     # 16:00-19:00
        + [0.22] * 10    # 19:00-24:00
    )
    return make_day_rates(prices)


@pytest.fixture
def tomorrow_rates() -> list[dict]:
    """Return 48 half-hour rates for tomorrow."""
    return make_day_rates([0.15] * 48, day_offset=1)
