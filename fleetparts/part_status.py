"""PartStatus dataclass for a part's derived service state."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .status import Status


@dataclass
class PartStatus:
    """Last qualifying service of a part and how long ago it was."""

    date: str
    mileage: int
    current_mileage: int
    mileage_diff: int
    days_diff: Optional[int]
    time_diff: str
    status: Status

    @property
    def months_diff(self) -> Optional[int]:
        """Whole 30-day months since the service."""
        if self.days_diff is None:
            return None
        return self.days_diff // 30

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "mileage": self.mileage,
            "currentMileage": self.current_mileage,
            "mileageDiff": self.mileage_diff,
            "daysDiff": self.days_diff,
            "timeDiff": self.time_diff,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "PartStatus":
        return cls(
            dct["date"],
            dct["mileage"],
            dct["currentMileage"],
            dct["mileageDiff"],
            dct.get("daysDiff"),
            dct.get("timeDiff") or "",
            Status(dct["status"]),
        )
