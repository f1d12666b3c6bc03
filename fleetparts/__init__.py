"""
Fleet part maintenance status models.

This package derives per-part maintenance status for a vehicle fleet:
- Status: Part severity (GOOD, WARNING, CRITICAL)
- normalize: Mileage and date cell normalization
- PartCatalog: Part categories, keywords and threshold rules
- classify: Status evaluation for one part occurrence
- HistoryRecord / PartStatus / Vehicle: Derived entities
- derive / build_snapshot: Join of the roster and maintenance log
- Criteria / filter_vehicles / aggregate: Query layer
"""

from .status import Status
from .normalize import normalize_mileage, normalize_date
from .keywords import matches, matching_parts
from .rule import Basis, Threshold, Rule, PartRule, ModelOverride
from .catalog import CatalogError, PartCatalog, PartDefinition, default_catalog, load_catalog
from .evaluator import classify
from .history_record import HistoryRecord, RecordState
from .part_status import PartStatus
from .vehicle import Vehicle
from .snapshot import Snapshot, load_snapshot, save_snapshot
from .engine import build_snapshot, derive
from .query import (
    Criteria,
    PartFilter,
    Stats,
    aggregate,
    collation_key,
    distinct_cities,
    filter_history,
    filter_vehicles,
    sort_vehicles,
)

__all__ = [
    "Status",
    "normalize_mileage",
    "normalize_date",
    "matches",
    "matching_parts",
    "Basis",
    "Threshold",
    "Rule",
    "PartRule",
    "ModelOverride",
    "CatalogError",
    "PartCatalog",
    "PartDefinition",
    "default_catalog",
    "load_catalog",
    "classify",
    "HistoryRecord",
    "RecordState",
    "PartStatus",
    "Vehicle",
    "Snapshot",
    "load_snapshot",
    "save_snapshot",
    "build_snapshot",
    "derive",
    "Criteria",
    "PartFilter",
    "Stats",
    "aggregate",
    "collation_key",
    "distinct_cities",
    "filter_history",
    "filter_vehicles",
    "sort_vehicles",
]
