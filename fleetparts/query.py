"""Filtering, sorting and aggregate counts over derived vehicles."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .catalog import PartCatalog, default_catalog
from .config import ALL_CITIES, ALL_RECORDS, ALL_STATUSES
from .history_record import HistoryRecord
from .keywords import matches
from .status import Status
from .vehicle import Vehicle

_UK_ALPHABET = "абвгґдеєжзиіїйклмнопрстуфхцчшщьюя"
_UK_ORDER = {ch: i for i, ch in enumerate(_UK_ALPHABET)}


def collation_key(text: Optional[str]) -> Tuple[tuple, str]:
    """
    Sort key approximating Ukrainian collation.

    Case-insensitive; punctuation and spaces sort first, then digits, Latin
    letters, the Ukrainian alphabet (ґ after г, є after е, і and ї after и),
    then anything else. Ties break on the original text.
    """
    text = text or ""
    key = []
    for ch in text.lower():
        if ch in _UK_ORDER:
            key.append((4, _UK_ORDER[ch]))
        elif ch.isdigit():
            key.append((2, ord(ch)))
        elif "a" <= ch <= "z":
            key.append((3, ord(ch)))
        elif not ch.isalnum():
            key.append((1, ord(ch)))
        else:
            key.append((5, ord(ch)))
    return tuple(key), text


StatusLike = Union[Status, str]


def _status_value(status: StatusLike) -> str:
    return status.value if isinstance(status, Status) else status


@dataclass(frozen=True)
class PartFilter:
    """Keep vehicles with a record for `part`, optionally in a given status."""

    part: str
    status: StatusLike = ALL_RECORDS


@dataclass(frozen=True)
class Criteria:
    """Vehicle list filters; every active filter must pass."""

    text: str = ""
    city: str = ALL_CITIES
    status: StatusLike = ALL_STATUSES
    part: Optional[PartFilter] = None


@dataclass(frozen=True)
class Stats:
    """Vehicle counts; a vehicle counts toward every status it has a part in."""

    total: int = 0
    with_good: int = 0
    with_warning: int = 0
    with_critical: int = 0


def _matches_text(vehicle: Vehicle, term: str) -> bool:
    return any(term in (f or "").lower() for f in (vehicle.license, vehicle.city, vehicle.model))


def _passes(vehicle: Vehicle, criteria: Criteria) -> bool:
    term = criteria.text.strip().lower() if criteria.text else ""
    if term and not _matches_text(vehicle, term):
        return False

    if criteria.city != ALL_CITIES and vehicle.city != criteria.city:
        return False

    status = _status_value(criteria.status)
    if status != ALL_STATUSES:
        if not any(p is not None and p.status.value == status for p in vehicle.parts.values()):
            return False

    if criteria.part is not None:
        part = vehicle.parts.get(criteria.part.part)
        if part is None:
            return False
        wanted = _status_value(criteria.part.status)
        if wanted != ALL_RECORDS and part.status.value != wanted:
            return False

    return True


def filter_vehicles(vehicles: Iterable[Vehicle], criteria: Optional[Criteria] = None) -> List[Vehicle]:
    """Vehicles passing every active criterion, in input order."""
    criteria = criteria or Criteria()
    return [v for v in vehicles if _passes(v, criteria)]


SORT_KEYS = ("city", "license", "model", "year", "mileage", "critical")


def sort_vehicles(
    vehicles: Iterable[Vehicle], sort_by: str = "city", reverse: bool = False
) -> List[Vehicle]:
    """
    Sort vehicles for display.

    Args:
        sort_by: one of SORT_KEYS; "city" orders by city then license
        reverse: descending order when True
    """
    if sort_by == "city":
        key = lambda v: (collation_key(v.city), collation_key(v.license))  # noqa: E731
    elif sort_by == "license":
        key = lambda v: collation_key(v.license)  # noqa: E731
    elif sort_by == "model":
        key = lambda v: (collation_key(v.model), collation_key(v.license))  # noqa: E731
    elif sort_by == "year":
        key = lambda v: (v.year_number, collation_key(v.license))  # noqa: E731
    elif sort_by == "mileage":
        key = lambda v: v.current_mileage  # noqa: E731
    elif sort_by == "critical":
        key = lambda v: v.status_counts()[Status.CRITICAL]  # noqa: E731
    else:
        return list(vehicles)
    return sorted(vehicles, key=key, reverse=reverse)


def aggregate(vehicles: Iterable[Vehicle]) -> Stats:
    total = good = warning = critical = 0
    for vehicle in vehicles:
        total += 1
        if vehicle.has_status(Status.GOOD):
            good += 1
        if vehicle.has_status(Status.WARNING):
            warning += 1
        if vehicle.has_status(Status.CRITICAL):
            critical += 1
    return Stats(total, good, warning, critical)


def distinct_cities(vehicles: Iterable[Vehicle]) -> List[str]:
    """The all-cities sentinel followed by unique non-empty cities, collation-sorted."""
    cities = {v.city for v in vehicles if v.city and v.city != ALL_CITIES}
    return [ALL_CITIES] + sorted(cities, key=collation_key)


def filter_history(
    history: Sequence[HistoryRecord],
    catalog: Optional[PartCatalog] = None,
    part: Optional[str] = None,
    text: str = "",
) -> List[HistoryRecord]:
    """
    Filter one vehicle's history.

    `part` keeps records whose description matches that part's keywords
    (ignored for parts not in the catalog); `text` searches description,
    date, mileage, part code, unit and status. Both must pass.
    """
    records = list(history)
    if part:
        catalog = catalog or default_catalog()
        if part in catalog:
            keywords = catalog.keywords(part)
            records = [r for r in records if matches(r.description, keywords)]
    if text and text.strip():
        records = [r for r in records if r.matches_text(text)]
    return records
