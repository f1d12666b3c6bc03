"""Vehicle class - the derived aggregate of roster data, part status and history."""

from typing import Any, Dict, Iterable, List, Optional

from .history_record import HistoryRecord
from .normalize import date_sort_key, parse_year
from .part_status import PartStatus
from .status import Status


class Vehicle:
    """Roster entry with its current mileage, per-part status and service history."""

    def __init__(
        self,
        license: str,
        city: str = "",
        model: str = "",
        year: str = "",
        part_names: Iterable[str] = (),
        current_mileage: int = 0,
        history: Optional[List[HistoryRecord]] = None,
    ):
        self.license = license
        self.city = city
        self.model = model
        self.year = year
        self.current_mileage = current_mileage
        self.parts: Dict[str, Optional[PartStatus]] = {name: None for name in part_names}
        self.history = history or []

    @property
    def year_number(self) -> int:
        """Model year as an integer, 0 when missing or unparseable."""
        return parse_year(self.year)

    @property
    def last_service(self) -> Optional[HistoryRecord]:
        """The most recent history record by date, then mileage."""
        if not self.history:
            return None
        return max(self.history, key=lambda h: (date_sort_key(h.date), h.mileage))

    def status_counts(self) -> Dict[Status, int]:
        """Number of known parts in each status."""
        counts = {status: 0 for status in Status}
        for part in self.parts.values():
            if part is not None:
                counts[part.status] += 1
        return counts

    def has_status(self, status: Status) -> bool:
        return any(p is not None and p.status == status for p in self.parts.values())

    @property
    def worst_status(self) -> Optional[Status]:
        """Most urgent status across parts; None when no part has a record."""
        known = [p.status for p in self.parts.values() if p is not None]
        if not known:
            return None
        return min(known, key=lambda s: s.urgency)

    def get_history_sorted(
        self, sort_by: str = "date", reverse: bool = True
    ) -> List[HistoryRecord]:
        """
        Get history records sorted by specified field.

        Args:
            sort_by: "date", "mileage" or "price"
            reverse: If True, newest/highest first (default)
        """
        if sort_by == "date":
            return sorted(self.history, key=lambda h: date_sort_key(h.date), reverse=reverse)
        elif sort_by == "mileage":
            return sorted(self.history, key=lambda h: h.mileage, reverse=reverse)
        elif sort_by == "price":
            return sorted(self.history, key=lambda h: h.total_with_vat, reverse=reverse)
        return list(self.history)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "city": self.city,
            "license": self.license,
            "model": self.model,
            "year": self.year,
            "currentMileage": self.current_mileage,
            "parts": {
                name: part.to_dict() if part is not None else None
                for name, part in self.parts.items()
            },
            "history": [h.to_dict() for h in self.history],
        }

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "Vehicle":
        parts = dct.get("parts") or {}
        vehicle = cls(
            dct["license"],
            dct.get("city") or "",
            dct.get("model") or "",
            dct.get("year") or "",
            parts.keys(),
            dct.get("currentMileage") or 0,
            [HistoryRecord.from_dict(h) for h in dct.get("history") or []],
        )
        for name, part in parts.items():
            vehicle.parts[name] = PartStatus.from_dict(part) if part else None
        return vehicle

    def __repr__(self) -> str:
        return f"Vehicle({self.license!r}, city={self.city!r}, model={self.model!r})"
