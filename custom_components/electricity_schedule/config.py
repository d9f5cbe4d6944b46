"""YAML configuration schema and normalized schedule configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import voluptuous as vol

from homeassistant.helpers import config_validation as cv
from homeassistant.util import slugify

from .const import (
    CONF_ACTIVE_COLOR,
    CONF_ACTIVE_TEXT,
    CONF_COLOR_CONFIG,
    CONF_COLUMNS,
    CONF_CURRENT_RATES_ENTITY,
    CONF_DISABLED,
    CONF_ENABLED_ENTITIES,
    CONF_ENABLED_ENTITY,
    CONF_ENABLED_VALUE,
    CONF_ENTITY_NAME,
    CONF_EXPORT_METER,
    CONF_FUTURE_RATES_ENTITY,
    CONF_GROUP,
    CONF_HIGH_COST,
    CONF_IMPORT_METER,
    CONF_INACTIVE_COLOR,
    CONF_INACTIVE_TEXT,
    CONF_LOW_COST,
    CONF_MAX_EXPORT_PRICE_ENTITY,
    CONF_MAX_PRICE_ENTITY,
    CONF_MIN_EXPORT_PRICE_ENTITY,
    CONF_MIN_PRICE_ENTITY,
    CONF_NAME,
    CONF_PAST_RATES_ENTITY,
    CONF_POWER,
    CONF_POWER_DECIMALS,
    CONF_PRICE_DECIMALS,
    CONF_PRICE_UNIT,
    CONF_REFRESH_INTERVAL,
    CONF_SHOW_FUTURE,
    CONF_SHOW_PAST,
    CONF_TIME_ENTITIES,
    CONF_TIME_ENTITY,
    DEFAULT_ENABLED_VALUE,
    DEFAULT_POWER_DECIMALS,
    DEFAULT_PRICE_DECIMALS,
    DEFAULT_PRICE_UNIT,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_SHOW_FUTURE,
    DEFAULT_SHOW_PAST,
)


@dataclass(frozen=True)
class EnabledEntityConfig:
    """An entity whose state must equal ``enabled_value`` for a column to run."""

    entity_name: str
    enabled_value: str = DEFAULT_ENABLED_VALUE


@dataclass(frozen=True)
class ColumnConfig:
    """One appliance column of the schedule table."""

    name: str
    group: str | None = None
    disabled: bool = False
    enabled_entities: tuple[EnabledEntityConfig, ...] | None = None
    time_entities: tuple[str, ...] | None = None
    min_price_entity: str | None = None
    max_price_entity: str | None = None
    min_export_price_entity: str | None = None
    max_export_price_entity: str | None = None
    power: float | None = None
    active_color: str | None = None
    active_text: str | None = None
    inactive_color: str | None = None
    inactive_text: str | None = None

    @property
    def slug(self) -> str:
        """Return an identifier unique within the schedule, qualified by group."""
        if self.group:
            return slugify(f"{self.group} {self.name}")
        return slugify(self.name)


@dataclass(frozen=True)
class MeterConfig:
    """Rate entities for one meter direction."""

    past_rates_entity: str | None = None
    current_rates_entity: str | None = None
    future_rates_entity: str | None = None
    high_cost: float | None = None
    low_cost: float | None = None

    @property
    def rates_entities(self) -> tuple[str | None, str | None, str | None]:
        """Return the rate entities in past, current, future order."""
        return (
            self.past_rates_entity,
            self.current_rates_entity,
            self.future_rates_entity,
        )


@dataclass(frozen=True)
class ScheduleConfig:
    """A complete schedule definition."""

    name: str
    import_meter: MeterConfig
    export_meter: MeterConfig | None = None
    columns: tuple[ColumnConfig, ...] = ()
    show_past: bool = DEFAULT_SHOW_PAST
    show_future: bool = DEFAULT_SHOW_FUTURE
    refresh_interval: timedelta = timedelta(seconds=DEFAULT_REFRESH_INTERVAL)
    price_unit: str = DEFAULT_PRICE_UNIT
    price_decimals: int = DEFAULT_PRICE_DECIMALS
    power_decimals: int = DEFAULT_POWER_DECIMALS
    color_config: dict[str, str] = field(default_factory=dict)

    @property
    def slug(self) -> str:
        return slugify(self.name)


ENABLED_ENTITY_SCHEMA = vol.Any(
    cv.entity_id,
    vol.Schema(
        {
            vol.Required(CONF_ENTITY_NAME): cv.entity_id,
            vol.Optional(CONF_ENABLED_VALUE, default=DEFAULT_ENABLED_VALUE): cv.string,
        }
    ),
)

METER_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_PAST_RATES_ENTITY): cv.entity_id,
        vol.Optional(CONF_CURRENT_RATES_ENTITY): cv.entity_id,
        vol.Optional(CONF_FUTURE_RATES_ENTITY): cv.entity_id,
        vol.Optional(CONF_HIGH_COST): vol.Coerce(float),
        vol.Optional(CONF_LOW_COST): vol.Coerce(float),
    }
)

COLUMN_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_NAME): cv.string,
        vol.Optional(CONF_GROUP): cv.string,
        vol.Optional(CONF_DISABLED, default=False): cv.boolean,
        vol.Optional(CONF_ENABLED_ENTITY): ENABLED_ENTITY_SCHEMA,
        vol.Optional(CONF_ENABLED_ENTITIES): vol.All(
            cv.ensure_list, [ENABLED_ENTITY_SCHEMA]
        ),
        vol.Optional(CONF_TIME_ENTITY): cv.entity_id,
        vol.Optional(CONF_TIME_ENTITIES): cv.entity_ids,
        vol.Optional(CONF_MIN_PRICE_ENTITY): cv.entity_id,
        vol.Optional(CONF_MAX_PRICE_ENTITY): cv.entity_id,
        vol.Optional(CONF_MIN_EXPORT_PRICE_ENTITY): cv.entity_id,
        vol.Optional(CONF_MAX_EXPORT_PRICE_ENTITY): cv.entity_id,
        vol.Optional(CONF_POWER): vol.Coerce(float),
        vol.Optional(CONF_ACTIVE_COLOR): cv.string,
        vol.Optional(CONF_ACTIVE_TEXT): cv.string,
        vol.Optional(CONF_INACTIVE_COLOR): cv.string,
        vol.Optional(CONF_INACTIVE_TEXT): cv.string,
    }
)


def _unique_columns(columns: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Reject columns whose group and name collide once slugified."""
    slugs = [parse_column_config(column).slug for column in columns]
    if len(slugs) != len(set(slugs)):
        raise vol.Invalid("Column names must be unique within a group")
    return columns


SCHEDULE_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_NAME): cv.string,
        vol.Required(CONF_IMPORT_METER): METER_SCHEMA,
        vol.Optional(CONF_EXPORT_METER): METER_SCHEMA,
        vol.Optional(CONF_COLUMNS, default=[]): vol.All(
            cv.ensure_list, [COLUMN_SCHEMA], _unique_columns
        ),
        vol.Optional(CONF_SHOW_PAST, default=DEFAULT_SHOW_PAST): cv.boolean,
        vol.Optional(CONF_SHOW_FUTURE, default=DEFAULT_SHOW_FUTURE): cv.boolean,
        vol.Optional(
            CONF_REFRESH_INTERVAL, default=DEFAULT_REFRESH_INTERVAL
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(CONF_PRICE_UNIT, default=DEFAULT_PRICE_UNIT): cv.string,
        vol.Optional(
            CONF_PRICE_DECIMALS, default=DEFAULT_PRICE_DECIMALS
        ): cv.positive_int,
        vol.Optional(
            CONF_POWER_DECIMALS, default=DEFAULT_POWER_DECIMALS
        ): cv.positive_int,
        vol.Optional(CONF_COLOR_CONFIG, default={}): {cv.string: cv.string},
    }
)


def _unique_names(schedules: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Reject schedules whose names collide once slugified."""
    slugs = [slugify(schedule[CONF_NAME]) for schedule in schedules]
    if len(slugs) != len(set(slugs)):
        raise vol.Invalid("Schedule names must be unique")
    return schedules


SCHEDULES_SCHEMA = vol.All(cv.ensure_list, [SCHEDULE_SCHEMA], _unique_names)


def _parse_enabled_entity(value: str | dict[str, Any]) -> EnabledEntityConfig:
    if isinstance(value, str):
        return EnabledEntityConfig(entity_name=value)
    return EnabledEntityConfig(
        entity_name=value[CONF_ENTITY_NAME],
        enabled_value=value.get(CONF_ENABLED_VALUE, DEFAULT_ENABLED_VALUE),
    )


def parse_column_config(conf: dict[str, Any]) -> ColumnConfig:
    """Normalize a validated column.

    A single ``enabled_entity``/``time_entity`` is folded into the list
    forms. Empty lists are treated as not configured.
    """
    enabled = [_parse_enabled_entity(e) for e in conf.get(CONF_ENABLED_ENTITIES, [])]
    if CONF_ENABLED_ENTITY in conf:
        enabled.append(_parse_enabled_entity(conf[CONF_ENABLED_ENTITY]))

    time_entities = list(conf.get(CONF_TIME_ENTITIES, []))
    if CONF_TIME_ENTITY in conf:
        time_entities.append(conf[CONF_TIME_ENTITY])

    return ColumnConfig(
        name=conf[CONF_NAME],
        group=conf.get(CONF_GROUP),
        disabled=conf.get(CONF_DISABLED, False),
        enabled_entities=tuple(enabled) or None,
        time_entities=tuple(time_entities) or None,
        min_price_entity=conf.get(CONF_MIN_PRICE_ENTITY),
        max_price_entity=conf.get(CONF_MAX_PRICE_ENTITY),
        min_export_price_entity=conf.get(CONF_MIN_EXPORT_PRICE_ENTITY),
        max_export_price_entity=conf.get(CONF_MAX_EXPORT_PRICE_ENTITY),
        power=conf.get(CONF_POWER),
        active_color=conf.get(CONF_ACTIVE_COLOR),
        active_text=conf.get(CONF_ACTIVE_TEXT),
        inactive_color=conf.get(CONF_INACTIVE_COLOR),
        inactive_text=conf.get(CONF_INACTIVE_TEXT),
    )


def parse_meter_config(conf: dict[str, Any]) -> MeterConfig:
    return MeterConfig(
        past_rates_entity=conf.get(CONF_PAST_RATES_ENTITY),
        current_rates_entity=conf.get(CONF_CURRENT_RATES_ENTITY),
        future_rates_entity=conf.get(CONF_FUTURE_RATES_ENTITY),
        high_cost=conf.get(CONF_HIGH_COST),
        low_cost=conf.get(CONF_LOW_COST),
    )


def parse_schedule_config(conf: dict[str, Any]) -> ScheduleConfig:
    """Build a ``ScheduleConfig`` from a dict validated by ``SCHEDULE_SCHEMA``."""
    export_conf = conf.get(CONF_EXPORT_METER)
    return ScheduleConfig(
        name=conf[CONF_NAME],
        import_meter=parse_meter_config(conf[CONF_IMPORT_METER]),
        export_meter=parse_meter_config(export_conf) if export_conf is not None else None,
        columns=tuple(parse_column_config(c) for c in conf.get(CONF_COLUMNS, [])),
        show_past=conf.get(CONF_SHOW_PAST, DEFAULT_SHOW_PAST),
        show_future=conf.get(CONF_SHOW_FUTURE, DEFAULT_SHOW_FUTURE),
        refresh_interval=timedelta(
            seconds=conf.get(CONF_REFRESH_INTERVAL, DEFAULT_REFRESH_INTERVAL)
        ),
        price_unit=conf.get(CONF_PRICE_UNIT, DEFAULT_PRICE_UNIT),
        price_decimals=conf.get(CONF_PRICE_DECIMALS, DEFAULT_PRICE_DECIMALS),
        power_decimals=conf.get(CONF_POWER_DECIMALS, DEFAULT_POWER_DECIMALS),
        color_config=dict(conf.get(CONF_COLOR_CONFIG, {})),
    )


def referenced_entities(config: ScheduleConfig) -> list[str]:
    """Return every entity ID the schedule reads, without duplicates."""
    entity_ids: list[str] = []
    meters = [config.import_meter]
    if config.export_meter is not None:
        meters.append(config.export_meter)
    for meter in meters:
        entity_ids.extend(e for e in meter.rates_entities if e)

    for column in config.columns:
        entity_ids.extend(e.entity_name for e in column.enabled_entities or ())
        entity_ids.extend(column.time_entities or ())
        entity_ids.extend(
            e
            for e in (
                column.min_price_entity,
                column.max_price_entity,
                column.min_export_price_entity,
                column.max_export_price_entity,
            )
            if e
        )

    return list(dict.fromkeys(entity_ids))
