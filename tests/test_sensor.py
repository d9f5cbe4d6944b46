"""Tests for the Electricity Schedule sensor entities."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from unittest.mock import patch

import pytest

from homeassistant.components.sensor import SensorDeviceClass
from homeassistant.const import UnitOfPower

from custom_components.electricity_schedule.config import ColumnConfig, MeterConfig
from custom_components.electricity_schedule.schedule import calculate_table_data
from custom_components.electricity_schedule.sensor import ScheduleSensor, SlotCostSensor
from custom_components.electricity_schedule.states import SensorState

from tests.helpers import IMPORT_CURRENT, TZ, make_coordinator, make_schedule, rates_state

NOW = datetime(2024, 6, 1, 2, 10, tzinfo=TZ)


@pytest.fixture
def schedule():
    return make_schedule(
        ColumnConfig(name="EV", max_price_entity="input_number.max", power=7000),
        ColumnConfig(name="Heater", power=2000, time_entities=("sensor.heating",)),
    )


@pytest.fixture
def data(schedule, today_rates):
    states = {
        IMPORT_CURRENT: rates_state(today_rates),
        "input_number.max": SensorState("10"),
        "sensor.heating": SensorState("on", {"start": "6:00", "end": "7:00"}),
    }
    return calculate_table_data(states, schedule, NOW)


@pytest.fixture(autouse=True)
def fixed_now():
    with patch(
        "custom_components.electricity_schedule.sensor.dt_util.now", return_value=NOW
    ):
        yield


# --- Schedule sensor ---


def test_schedule_sensor_unique_id_and_name(schedule):
    sensor = ScheduleSensor(make_coordinator(schedule=schedule))
    assert sensor.unique_id == "home_schedule"
    assert sensor.name == "Home Schedule"


def test_schedule_sensor_device_class(schedule):
    sensor = ScheduleSensor(make_coordinator(schedule=schedule))
    assert sensor.device_class == SensorDeviceClass.POWER
    assert sensor.native_unit_of_measurement == UnitOfPower.WATT


def test_schedule_sensor_current_power(schedule, data):
    sensor = ScheduleSensor(make_coordinator(data, schedule))
    # 02:00 slot is 8p, under the EV's 10p limit; heating window is 06:00-07:00
    assert sensor.native_value == 7000


def test_schedule_sensor_no_data(schedule):
    sensor = ScheduleSensor(make_coordinator(None, schedule))
    assert sensor.native_value is None
    assert sensor.extra_state_attributes == {}


def test_schedule_sensor_no_current_row(schedule, data):
    sensor = ScheduleSensor(make_coordinator(data, schedule))
    with patch(
        "custom_components.electricity_schedule.sensor.dt_util.now",
        return_value=datetime(2024, 6, 3, 12, 0, tzinfo=TZ),
    ):
        assert sensor.native_value is None


def test_schedule_sensor_attributes(schedule, data):
    sensor = ScheduleSensor(make_coordinator(data, schedule))
    attrs = sensor.extra_state_attributes

    assert [c["name"] for c in attrs["columns"]] == ["EV", "Heater"]
    assert attrs["columns"][0]["max_price"] == 10
    assert attrs["columns"][0]["active_times"] is None
    assert attrs["columns"][1]["active_times"] == [
        {"start": "2024-06-01T06:00:00+01:00", "end": "2024-06-01T07:00:00+01:00"}
    ]

    assert len(attrs["rows"]) == 48
    first = attrs["rows"][0]
    assert first["time"] == "2024-06-01T00:00:00+01:00"
    assert first["active"] == ["EV"]
    assert first["total_power"] == 7000
    assert first["import_price"] == pytest.approx(0.08)
    assert first["export_price"] is None

    heating = attrs["rows"][12]
    assert heating["time"] == "2024-06-01T06:00:00+01:00"
    assert heating["active"] == ["Heater"]

    # EV stops when the price rises at 05:00
    assert attrs["next_change"] == "2024-06-01T05:00:00+01:00"

    assert attrs["import_meter"] == {"high_cost": None, "low_cost": None}
    assert attrs["export_meter"] is None
    assert attrs["price_unit"] == "p"
    assert attrs["power_decimals"] == 1


def test_schedule_sensor_display_settings(today_rates):
    schedule = replace(
        make_schedule(
            ColumnConfig(
                name="EV",
                max_price_entity="input_number.max",
                power=7000.25,
                active_color="green",
                active_text="Charging",
                inactive_text="Idle",
            )
        ),
        import_meter=MeterConfig(
            current_rates_entity=IMPORT_CURRENT, high_cost=30.0, low_cost=10.0
        ),
        power_decimals=0,
        color_config={"low": "green"},
    )
    data = calculate_table_data(
        {
            IMPORT_CURRENT: rates_state(today_rates),
            "input_number.max": SensorState("10"),
        },
        schedule,
        NOW,
    )
    sensor = ScheduleSensor(make_coordinator(data, schedule))
    attrs = sensor.extra_state_attributes

    assert sensor.native_value == 7000
    column = attrs["columns"][0]
    assert column["active_color"] == "green"
    assert column["active_text"] == "Charging"
    assert column["inactive_color"] is None
    assert column["inactive_text"] == "Idle"
    assert attrs["import_meter"] == {"high_cost": 30.0, "low_cost": 10.0}
    assert attrs["color_config"] == {"low": "green"}


# --- Cost sensor ---


def test_cost_sensor_unique_id_and_unit(schedule):
    sensor = SlotCostSensor(make_coordinator(schedule=schedule))
    assert sensor.unique_id == "home_cost"
    assert sensor.native_unit_of_measurement == "p"


def test_cost_sensor_value(schedule, data):
    sensor = SlotCostSensor(make_coordinator(data, schedule))
    # 7 kW for half an hour at 8p/kWh
    assert sensor.native_value == pytest.approx(28.0)


def test_cost_sensor_no_data(schedule):
    sensor = SlotCostSensor(make_coordinator(None, schedule))
    assert sensor.native_value is None
