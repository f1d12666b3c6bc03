"""Threshold rules that classify how overdue a part service is."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .status import Status


class Basis(Enum):
    """What a rule measures: distance, or time in months or years."""

    DISTANCE = "distance"
    MONTHS = "months"
    YEARS = "years"


_UNITS = {Basis.DISTANCE: "km", Basis.MONTHS: "mo", Basis.YEARS: "yr"}


@dataclass(frozen=True)
class Threshold:
    """A limit reached at (inclusive) or beyond (exclusive) its value."""

    value: float
    inclusive: bool = True

    def reached(self, amount: float) -> bool:
        if self.inclusive:
            return amount >= self.value
        return amount > self.value

    def __str__(self) -> str:
        op = ">=" if self.inclusive else ">"
        return f"{op} {self.value:,.0f}"


@dataclass(frozen=True)
class Rule:
    """
    Critical/warning thresholds over one basis.

    Critical is checked first, then warning; otherwise the part is good.
    A rule with no thresholds always yields good.
    """

    basis: Basis = Basis.DISTANCE
    critical: Optional[Threshold] = None
    warning: Optional[Threshold] = None

    def measure(self, mileage_diff: float, days_diff: Optional[int]) -> Optional[float]:
        """Amount this rule compares against its thresholds."""
        if self.basis is Basis.DISTANCE:
            return mileage_diff
        if days_diff is None:
            return None
        if self.basis is Basis.MONTHS:
            return days_diff / 30
        return days_diff / 365

    def evaluate(self, mileage_diff: float, days_diff: Optional[int]) -> Status:
        amount = self.measure(mileage_diff, days_diff)
        if amount is None:
            return Status.GOOD
        if self.critical is not None and self.critical.reached(amount):
            return Status.CRITICAL
        if self.warning is not None and self.warning.reached(amount):
            return Status.WARNING
        return Status.GOOD

    def describe(self) -> str:
        """Human-readable summary, e.g. 'critical >= 15,500 km; warning >= 14,000 km'."""
        unit = _UNITS[self.basis]
        parts = []
        if self.critical is not None:
            parts.append(f"critical {self.critical} {unit}")
        if self.warning is not None:
            parts.append(f"warning {self.warning} {unit}")
        return "; ".join(parts) or "always good"


@dataclass(frozen=True)
class ModelOverride:
    """Replacement rule for vehicles whose model text contains every keyword."""

    model_keywords: Tuple[str, ...]
    rule: Rule

    def applies_to(self, model: Optional[str]) -> bool:
        text = (model or "").lower()
        return bool(self.model_keywords) and all(
            kw.lower() in text for kw in self.model_keywords
        )


@dataclass(frozen=True)
class PartRule:
    """
    The rule set for one part category.

    Selection order: the first model override whose keywords all appear in
    the model text, then the legacy rule for vehicles older than
    `legacy_before_year` (unknown year counts as older), then the base rule.
    """

    rule: Rule
    legacy_rule: Optional[Rule] = None
    legacy_before_year: Optional[int] = None
    overrides: Tuple[ModelOverride, ...] = ()

    def select(self, vehicle_year: int, vehicle_model: Optional[str]) -> Rule:
        for override in self.overrides:
            if override.applies_to(vehicle_model):
                return override.rule
        if (
            self.legacy_rule is not None
            and self.legacy_before_year is not None
            and (vehicle_year or 0) < self.legacy_before_year
        ):
            return self.legacy_rule
        return self.rule


def _threshold_from_dict(dct: Optional[Dict[str, Any]]) -> Optional[Threshold]:
    if not dct:
        return None
    if "atLeast" in dct:
        return Threshold(dct["atLeast"], inclusive=True)
    return Threshold(dct["above"], inclusive=False)


def _threshold_to_dict(threshold: Threshold) -> Dict[str, Any]:
    key = "atLeast" if threshold.inclusive else "above"
    return {key: threshold.value}


def rule_from_dict(dct: Dict[str, Any]) -> Rule:
    """Parse a rule mapping (camelCase keys, as in the catalog YAML)."""
    return Rule(
        Basis(dct.get("basis", Basis.DISTANCE.value)),
        _threshold_from_dict(dct.get("critical")),
        _threshold_from_dict(dct.get("warning")),
    )


def rule_to_dict(rule: Rule) -> Dict[str, Any]:
    d: Dict[str, Any] = {"basis": rule.basis.value}
    if rule.critical is not None:
        d["critical"] = _threshold_to_dict(rule.critical)
    if rule.warning is not None:
        d["warning"] = _threshold_to_dict(rule.warning)
    return d


def part_rule_from_dict(dct: Dict[str, Any]) -> PartRule:
    """Parse a part rule, including its optional legacy rule and overrides."""
    legacy = dct.get("legacy")
    overrides = tuple(
        ModelOverride(tuple(o["modelKeywords"]), rule_from_dict(o))
        for o in dct.get("overrides") or []
    )
    return PartRule(
        rule_from_dict(dct),
        rule_from_dict(legacy) if legacy else None,
        legacy["beforeYear"] if legacy else None,
        overrides,
    )


def part_rule_to_dict(part_rule: PartRule) -> Dict[str, Any]:
    d = rule_to_dict(part_rule.rule)
    if part_rule.legacy_rule is not None:
        legacy = rule_to_dict(part_rule.legacy_rule)
        legacy["beforeYear"] = part_rule.legacy_before_year
        d["legacy"] = legacy
    if part_rule.overrides:
        d["overrides"] = [
            {"modelKeywords": list(o.model_keywords), **rule_to_dict(o.rule)}
            for o in part_rule.overrides
        ]
    return d
