"""Status enum for part maintenance severity."""

from enum import Enum


class Status(Enum):
    """Part status categories, serialized by value."""

    CRITICAL = "critical"
    WARNING = "warning"
    GOOD = "good"

    @property
    def urgency(self) -> int:
        """Lower value = more urgent."""
        return _URGENCY[self]


_URGENCY = {Status.CRITICAL: 1, Status.WARNING: 2, Status.GOOD: 3}
