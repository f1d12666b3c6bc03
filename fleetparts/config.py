"""Column layout, query sentinels and environment-driven settings."""

import os

# Schedule (vehicle roster) columns
COL_LICENSE = 0
COL_CITY = 1
COL_MODEL = 2
COL_YEAR = 3
SCHEDULE_MIN_COLUMNS = 4

# History (maintenance log) columns
COL_CAR = 0
COL_DATE = 1
COL_DESCRIPTION = 2
COL_MILEAGE = 3
COL_PART_CODE = 4
COL_UNIT = 5
COL_QUANTITY = 6
COL_PRICE = 7
COL_TOTAL_WITH_VAT = 8
COL_STATUS = 9
HISTORY_MIN_COLUMNS = 8

# Query sentinels
ALL_CITIES = "Всі міста"
ALL_STATUSES = "all"
ALL_RECORDS = "all"

CACHE_TTL_MINUTES = 5


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment ("1", "true", "yes", "on")."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def infer_mileage_scale() -> bool:
    """Whether derivation applies the thousands-scale mileage heuristic."""
    return env_flag("FLEET_INFER_MILEAGE_SCALE")


def cache_ttl_minutes() -> float:
    value = os.environ.get("FLEET_CACHE_TTL_MINUTES")
    return float(value) if value else CACHE_TTL_MINUTES
