"""
Join and derivation engine.

Turns the raw roster (schedule) and maintenance log (history) tables into
fully derived vehicles: the roster is the registry, history rows are joined
to it by license, and every record whose description matches a part's
keywords competes to be that part's last service (highest mileage wins).

Data-quality problems never raise: short rows, unknown vehicles and
unusable mileages are skipped and logged.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from . import config
from .catalog import PartCatalog, default_catalog
from .config import (
    COL_CAR,
    COL_CITY,
    COL_DATE,
    COL_DESCRIPTION,
    COL_LICENSE,
    COL_MILEAGE,
    COL_MODEL,
    COL_PART_CODE,
    COL_PRICE,
    COL_QUANTITY,
    COL_STATUS,
    COL_TOTAL_WITH_VAT,
    COL_UNIT,
    COL_YEAR,
    HISTORY_MIN_COLUMNS,
    SCHEDULE_MIN_COLUMNS,
)
from .evaluator import classify
from .history_record import HistoryRecord
from .keywords import matching_parts
from .normalize import (
    date_sort_key,
    days_between,
    format_time_diff,
    normalize_date,
    normalize_mileage,
    parse_number,
)
from .part_status import PartStatus
from .query import collation_key
from .snapshot import Snapshot
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

RawRow = Sequence[Any]
DateLike = Union[date, str, None]


def _raw(row: RawRow, index: int) -> Any:
    return row[index] if index < len(row) else None


def _cell(row: RawRow, index: int) -> str:
    """Cell as trimmed text; missing trailing cells read as empty."""
    value = _raw(row, index)
    return "" if value is None else str(value).strip()


def _is_blank(row: RawRow) -> bool:
    return all(value is None or not str(value).strip() for value in row)


def _as_date(value: DateLike) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def build_registry(
    schedule_rows: Sequence[RawRow], part_names: Iterable[str]
) -> Dict[str, Vehicle]:
    """
    Build vehicles keyed by license from the roster, skipping the header.

    A later row with the same license replaces the earlier row's data.
    """
    part_names = list(part_names)
    registry: Dict[str, Vehicle] = {}
    for index, row in enumerate(schedule_rows[1:], start=1):
        if len(row) < SCHEDULE_MIN_COLUMNS:
            if not _is_blank(row):
                logger.warning(
                    "Schedule row %d has %d columns (need %d), skipped",
                    index, len(row), SCHEDULE_MIN_COLUMNS,
                )
            continue
        license = _cell(row, COL_LICENSE)
        if not license:
            continue
        if license in registry:
            logger.debug("Schedule row %d repeats vehicle %s", index, license)
        registry[license] = Vehicle(
            license,
            _cell(row, COL_CITY),
            _cell(row, COL_MODEL),
            _cell(row, COL_YEAR),
            part_names,
        )
    return registry


def parse_history_row(
    row: RawRow, vehicle: Vehicle, infer_mileage_scale: bool = False
) -> Optional[HistoryRecord]:
    """Build a record for `vehicle` from a history row; None if the mileage is unusable."""
    mileage = normalize_mileage(_raw(row, COL_MILEAGE), infer_scale=infer_mileage_scale)
    if not mileage:
        return None
    return HistoryRecord(
        car=vehicle.license,
        date=normalize_date(_raw(row, COL_DATE)),
        mileage=mileage,
        description=_cell(row, COL_DESCRIPTION),
        city=vehicle.city,
        part_code=_cell(row, COL_PART_CODE),
        unit=_cell(row, COL_UNIT),
        quantity=parse_number(_raw(row, COL_QUANTITY)),
        price=parse_number(_raw(row, COL_PRICE)),
        total_with_vat=parse_number(_raw(row, COL_TOTAL_WITH_VAT)),
        status=_cell(row, COL_STATUS),
    )


def make_part_status(
    part_name: str,
    record: HistoryRecord,
    vehicle: Vehicle,
    current_date: date,
    catalog: PartCatalog,
) -> PartStatus:
    """Recency metrics and status for a part last serviced by `record`."""
    mileage_diff = vehicle.current_mileage - record.mileage
    days_diff = days_between(current_date, record.date)
    return PartStatus(
        date=record.date,
        mileage=record.mileage,
        current_mileage=vehicle.current_mileage,
        mileage_diff=mileage_diff,
        days_diff=days_diff,
        time_diff=format_time_diff(days_diff),
        status=classify(
            part_name,
            mileage_diff,
            days_diff,
            vehicle.year_number,
            vehicle.model,
            catalog,
        ),
    )


def derive(
    schedule_rows: Sequence[RawRow],
    history_rows: Sequence[RawRow],
    catalog: Optional[PartCatalog] = None,
    current_date: DateLike = None,
    infer_mileage_scale: Optional[bool] = None,
) -> List[Vehicle]:
    """
    Derive every vehicle's part status and history from the raw tables.

    Args:
        schedule_rows: roster rows, header at index 0
        history_rows: maintenance log rows, header at index 0
        catalog: part categories (default: bundled catalog)
        current_date: reference date for time-based metrics (default: today)
        infer_mileage_scale: apply the thousands-scale mileage heuristic
            (default: FLEET_INFER_MILEAGE_SCALE setting)

    Returns:
        Vehicles sorted by city then license; empty when the roster is.
    """
    catalog = catalog or default_catalog()
    today = _as_date(current_date)
    if infer_mileage_scale is None:
        infer_mileage_scale = config.infer_mileage_scale()

    registry = build_registry(schedule_rows or [], catalog.names)

    records: List[HistoryRecord] = []
    orphaned = skipped = 0
    history_rows = history_rows or []
    for index, row in enumerate(history_rows[1:], start=1):
        car = _cell(row, COL_CAR)
        if not car:
            continue
        vehicle = registry.get(car)
        if vehicle is None:
            logger.debug("History row %d references unknown vehicle %s", index, car)
            orphaned += 1
            continue
        if len(row) < HISTORY_MIN_COLUMNS:
            logger.warning(
                "History row %d has %d columns (need %d), skipped",
                index, len(row), HISTORY_MIN_COLUMNS,
            )
            skipped += 1
            continue
        record = parse_history_row(row, vehicle, infer_mileage_scale)
        if record is None:
            logger.debug("History row %d has no usable mileage, skipped", index)
            skipped += 1
            continue
        records.append(record)
        vehicle.history.append(record)
        if record.mileage > vehicle.current_mileage:
            vehicle.current_mileage = record.mileage

    # Parts are evaluated once every vehicle's current mileage is final.
    for record in records:
        vehicle = registry[record.car]
        for part_name in matching_parts(record.description, catalog):
            existing = vehicle.parts[part_name]
            if existing is not None and record.mileage <= existing.mileage:
                continue
            vehicle.parts[part_name] = make_part_status(
                part_name, record, vehicle, today, catalog
            )

    vehicles = sorted(
        registry.values(),
        key=lambda v: (collation_key(v.city), collation_key(v.license)),
    )
    for vehicle in vehicles:
        vehicle.history.sort(key=lambda h: date_sort_key(h.date), reverse=True)

    logger.info(
        "Derived %d vehicles from %d history records (%d orphaned, %d skipped)",
        len(vehicles), len(records), orphaned, skipped,
    )
    return vehicles


def build_snapshot(
    schedule_rows: Sequence[RawRow],
    history_rows: Sequence[RawRow],
    catalog: Optional[PartCatalog] = None,
    current_date: DateLike = None,
    infer_mileage_scale: Optional[bool] = None,
) -> Snapshot:
    """Derive vehicles and wrap them with the reference date and part order."""
    catalog = catalog or default_catalog()
    today = _as_date(current_date)
    vehicles = derive(schedule_rows, history_rows, catalog, today, infer_mileage_scale)
    return Snapshot(
        vehicles=vehicles,
        current_date=today.isoformat(),
        parts_order=catalog.names,
        generated_at=datetime.now(),
    )
