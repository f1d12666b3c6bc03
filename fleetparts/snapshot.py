"""Derived snapshot and its YAML cache file."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from . import config
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    """Result of one derivation pass."""

    vehicles: List[Vehicle]
    current_date: str
    parts_order: List[str] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)
    # Inputs the vehicles were derived from (files, catalog, flags)
    settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """No vehicles were derived (empty or missing roster)."""
        return not self.vehicles

    def get_vehicle(self, license: str) -> Optional[Vehicle]:
        for vehicle in self.vehicles:
            if vehicle.license == license:
                return vehicle
        return None

    def age(self, now: Optional[datetime] = None) -> timedelta:
        return (now or datetime.now()) - self.generated_at

    def is_stale(self, max_age_minutes: Optional[float] = None, now: Optional[datetime] = None) -> bool:
        if max_age_minutes is None:
            max_age_minutes = config.cache_ttl_minutes()
        return self.age(now) > timedelta(minutes=max_age_minutes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at.isoformat(timespec="seconds"),
            "currentDate": self.current_date,
            "partsOrder": list(self.parts_order),
            "settings": dict(self.settings),
            "vehicles": [v.to_dict() for v in self.vehicles],
        }

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "Snapshot":
        return cls(
            vehicles=[Vehicle.from_dict(v) for v in dct.get("vehicles") or []],
            current_date=dct["currentDate"],
            parts_order=list(dct.get("partsOrder") or []),
            generated_at=datetime.fromisoformat(dct["generatedAt"]),
            settings=dict(dct.get("settings") or {}),
        )


def save_snapshot(filename: Union[str, Path], snapshot: Snapshot) -> None:
    """Write a snapshot to a YAML cache file."""
    with open(filename, "w", encoding="utf-8") as fp:
        yaml.dump(
            snapshot.to_dict(),
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def load_snapshot(
    filename: Union[str, Path],
    max_age_minutes: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Optional[Snapshot]:
    """
    Load a cached snapshot if it is fresh.

    Returns None when the file is missing, unreadable or older than
    `max_age_minutes` (default: FLEET_CACHE_TTL_MINUTES, 5 minutes).
    """
    path = Path(filename)
    if not path.exists():
        return None
    try:
        with open(path, "rb") as fp:
            snapshot = Snapshot.from_dict(yaml.safe_load(fp))
    except (yaml.YAMLError, KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Ignoring unreadable snapshot %s: %s", path, e)
        return None
    if snapshot.is_stale(max_age_minutes, now):
        logger.info("Snapshot %s is stale (%s old)", path, snapshot.age(now))
        return None
    return snapshot


def clear_snapshot(filename: Union[str, Path]) -> None:
    """Remove a snapshot cache file if present."""
    Path(filename).unlink(missing_ok=True)
