"""HistoryRecord class for maintenance log line items."""
from enum import Enum
from typing import Any, Dict, Optional


class RecordState(Enum):
    """Coarse bucket of a record's free-text status label."""

    FULFILLED = "fulfilled"
    PENDING = "pending"
    REJECTED = "rejected"
    UNKNOWN = "unknown"


_STATE_KEYWORDS = (
    (RecordState.FULFILLED, ("виконано", "готово", "підтверджено")),
    (RecordState.PENDING, ("очікує", "в обробці", "замовлено")),
    (RecordState.REJECTED, ("відмов", "скасовано", "недоступно")),
)


class HistoryRecord:
    """A maintenance line item joined to its vehicle."""

    def __init__(
            self,
            car: str,
            date: str,
            mileage: int,
            description: str = "",
            city: str = "",
            part_code: str = "",
            unit: str = "",
            quantity: float = 0,
            price: float = 0,
            total_with_vat: float = 0,
            status: str = "",
    ):
        self.car = car
        self.date = date
        self.mileage = mileage
        self.description = description
        self.city = city
        self.part_code = part_code
        self.unit = unit
        self.quantity = quantity
        self.price = price
        self.total_with_vat = total_with_vat
        self.status = status

    @property
    def state(self) -> RecordState:
        """Classify the status label (e.g. 'Виконано' -> FULFILLED)."""
        label = (self.status or "").lower()
        for state, keywords in _STATE_KEYWORDS:
            if any(kw in label for kw in keywords):
                return state
        return RecordState.UNKNOWN

    @property
    def display_unit(self) -> str:
        """Unit label, defaulting to pieces when a quantity is given."""
        if self.unit:
            return self.unit
        return "шт." if self.quantity > 0 else ""

    def matches_text(self, term: Optional[str]) -> bool:
        """Case-insensitive search over description, date, mileage, code, unit and status."""
        if not term or not term.strip():
            return True
        term = term.lower()
        fields = (
            self.description,
            self.date,
            str(self.mileage),
            self.part_code,
            self.unit,
            self.status,
        )
        return any(term in (f or "").lower() for f in fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "city": self.city,
            "car": self.car,
            "mileage": self.mileage,
            "description": self.description,
            "partCode": self.part_code,
            "unit": self.unit,
            "quantity": self.quantity,
            "price": self.price,
            "totalWithVAT": self.total_with_vat,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "HistoryRecord":
        return cls(
            dct["car"],
            dct.get("date") or "",
            dct["mileage"],
            dct.get("description") or "",
            dct.get("city") or "",
            dct.get("partCode") or "",
            dct.get("unit") or "",
            dct.get("quantity") or 0,
            dct.get("price") or 0,
            dct.get("totalWithVAT") or 0,
            dct.get("status") or "",
        )

    def __repr__(self) -> str:
        return f"HistoryRecord({self.car!r}, {self.date!r}, {self.mileage!r}, {self.description!r})"
