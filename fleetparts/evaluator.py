"""Status evaluation for a single part occurrence."""

from typing import Optional

from .catalog import PartCatalog, default_catalog
from .status import Status


def classify(
    part_name: str,
    mileage_diff: float,
    days_diff: Optional[int],
    vehicle_year: int,
    vehicle_model: Optional[str],
    catalog: Optional[PartCatalog] = None,
) -> Status:
    """
    Classify a part as good, warning or critical.

    The rule comes from the catalog: model overrides first (e.g. Mercedes
    Sprinter timing belts are always good), then the year-dependent legacy
    rule, then the part's own rule. Parts without a rule use the catalog's
    default rule.
    """
    catalog = catalog or default_catalog()
    rule = catalog.rule_for(part_name, vehicle_year, vehicle_model)
    return rule.evaluate(mileage_diff, days_diff)
