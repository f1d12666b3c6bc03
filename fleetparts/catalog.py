"""Part catalog: ordered part categories with keyword sets and status rules."""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from jsonschema import ValidationError, validate

from .rule import PartRule, Rule, part_rule_from_dict, part_rule_to_dict, rule_from_dict, rule_to_dict

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "parts.yaml"
SCHEMA_PATH = DATA_DIR / "catalog_schema.yaml"

# Used when a catalog file doesn't define defaultRule.
FALLBACK_RULE = rule_from_dict(
    {"basis": "distance", "critical": {"above": 50000}, "warning": {"above": 30000}}
)


class CatalogError(Exception):
    """The catalog file is unreadable or doesn't match the schema."""


@dataclass(frozen=True)
class PartDefinition:
    """One tracked part category."""

    name: str
    title: str
    keywords: Tuple[str, ...]
    rule: Optional[PartRule] = None

    @property
    def display_name(self) -> str:
        return self.title or self.name


class PartCatalog:
    """Ordered collection of part definitions."""

    def __init__(self, parts: List[PartDefinition], default_rule: Rule = FALLBACK_RULE):
        names = [p.name for p in parts]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise CatalogError(f"Duplicate part names: {', '.join(duplicates)}")
        self.parts = list(parts)
        self.default_rule = default_rule
        self._by_name = {p.name: p for p in self.parts}

    @property
    def names(self) -> List[str]:
        """Part names in display order."""
        return [p.name for p in self.parts]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self.parts)

    def get(self, name: str) -> Optional[PartDefinition]:
        return self._by_name.get(name)

    def keywords(self, name: str) -> Tuple[str, ...]:
        """Keywords for a part; empty for unknown names."""
        part = self._by_name.get(name)
        return part.keywords if part else ()

    def title(self, name: str) -> str:
        part = self._by_name.get(name)
        return part.display_name if part else name

    def rule_for(self, name: str, vehicle_year: int, vehicle_model: Optional[str]) -> Rule:
        """Rule that applies to this part on the given vehicle."""
        part = self._by_name.get(name)
        if part is None or part.rule is None:
            return self.default_rule
        return part.rule.select(vehicle_year, vehicle_model)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the catalog YAML layout."""
        parts = []
        for part in self.parts:
            d: Dict[str, Any] = {"name": part.name}
            if part.title:
                d["title"] = part.title
            d["keywords"] = list(part.keywords)
            if part.rule is not None:
                d["rule"] = part_rule_to_dict(part.rule)
            parts.append(d)
        return {"defaultRule": rule_to_dict(self.default_rule), "parts": parts}


def load_schema() -> dict:
    """Load the catalog JSON schema (stored as YAML)."""
    with open(SCHEMA_PATH, encoding="utf-8") as f:
        return yaml.safe_load(f)


def catalog_from_dict(data: Dict[str, Any]) -> PartCatalog:
    """Validate a parsed catalog document and build a PartCatalog."""
    try:
        validate(instance=data, schema=load_schema())
    except ValidationError as e:
        path = ".".join(str(p) for p in e.path)
        where = f" at {path}" if path else ""
        raise CatalogError(f"Invalid part catalog{where}: {e.message}") from e

    parts = [
        PartDefinition(
            p["name"],
            p.get("title") or "",
            tuple(p.get("keywords") or ()),
            part_rule_from_dict(p["rule"]) if p.get("rule") else None,
        )
        for p in data["parts"]
    ]
    default = data.get("defaultRule")
    return PartCatalog(parts, rule_from_dict(default) if default else FALLBACK_RULE)


def load_catalog(filename: Union[str, Path]) -> PartCatalog:
    """Load and validate a part catalog YAML file."""
    try:
        with open(filename, "rb") as fp:
            data = yaml.safe_load(fp)
    except yaml.YAMLError as e:
        raise CatalogError(f"YAML parse error in {filename}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"Part catalog {filename} must be a mapping")
    catalog = catalog_from_dict(data)
    logger.debug("Loaded %d part categories from %s", len(catalog), filename)
    return catalog


@lru_cache(maxsize=1)
def default_catalog() -> PartCatalog:
    """The catalog bundled with the package."""
    return load_catalog(DEFAULT_CATALOG_PATH)
