"""Constants for the Electricity Schedule integration."""

from datetime import timedelta

DOMAIN = "electricity_schedule"

# Schedule keys
CONF_NAME = "name"
CONF_SHOW_PAST = "show_past"
CONF_SHOW_FUTURE = "show_future"
CONF_REFRESH_INTERVAL = "refresh_interval"
CONF_IMPORT_METER = "import_meter"
CONF_EXPORT_METER = "export_meter"
CONF_COLUMNS = "columns"
CONF_COLOR_CONFIG = "color_config"
CONF_PRICE_DECIMALS = "price_decimals"
CONF_POWER_DECIMALS = "power_decimals"
CONF_PRICE_UNIT = "price_unit"

# Meter keys
CONF_PAST_RATES_ENTITY = "past_rates_entity"
CONF_CURRENT_RATES_ENTITY = "current_rates_entity"
CONF_FUTURE_RATES_ENTITY = "future_rates_entity"
CONF_HIGH_COST = "high_cost"
CONF_LOW_COST = "low_cost"

# Column keys
CONF_GROUP = "group"
CONF_DISABLED = "disabled"
CONF_ENABLED_ENTITY = "enabled_entity"
CONF_ENABLED_ENTITIES = "enabled_entities"
CONF_ENTITY_NAME = "entity_name"
CONF_ENABLED_VALUE = "enabled_value"
CONF_TIME_ENTITY = "time_entity"
CONF_TIME_ENTITIES = "time_entities"
CONF_MIN_PRICE_ENTITY = "min_price_entity"
CONF_MAX_PRICE_ENTITY = "max_price_entity"
CONF_MIN_EXPORT_PRICE_ENTITY = "min_export_price_entity"
CONF_MAX_EXPORT_PRICE_ENTITY = "max_export_price_entity"
CONF_POWER = "power"
CONF_ACTIVE_COLOR = "active_color"
CONF_ACTIVE_TEXT = "active_text"
CONF_INACTIVE_COLOR = "inactive_color"
CONF_INACTIVE_TEXT = "inactive_text"

# Defaults
DEFAULT_SHOW_PAST = False
DEFAULT_SHOW_FUTURE = True
DEFAULT_REFRESH_INTERVAL = 60  # seconds
DEFAULT_ENABLED_VALUE = "on"
DEFAULT_PRICE_DECIMALS = 1
DEFAULT_POWER_DECIMALS = 1
DEFAULT_PRICE_UNIT = "p"

# Tariff slots are half-hourly
SLOT_DURATION = timedelta(minutes=30)

# price (GBP/kWh) * 100 -> p/kWh
PENCE_PER_POUND = 100

# W * GBP/kWh * 0.5 h * 100 p / 1000 W -> p, i.e. power * price / 20
COST_DIVISOR = 20

# Rate stream attribute keys
ATTR_RATES = "rates"
ATTR_RATE_START = "start"
ATTR_RATE_END = "end"
ATTR_RATE_VALUE = "value_inc_vat"
ATTR_RATE_IS_CAPPED = "is_capped"

# Time entity attribute keys
ATTR_AFTER = "after"
ATTR_BEFORE = "before"
ATTR_START = "start"
ATTR_END = "end"
