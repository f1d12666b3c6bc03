"""Keyword matching of maintenance descriptions against part categories."""

from typing import Iterable, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .catalog import PartCatalog


def matches(description: str, keywords: Iterable[str]) -> bool:
    """True if any keyword is a case-insensitive substring of description."""
    text = (description or "").lower()
    return any(kw and kw.lower() in text for kw in keywords)


def matching_parts(description: str, catalog: "PartCatalog") -> List[str]:
    """Names of every catalog part whose keywords match, in catalog order."""
    return [
        part.name for part in catalog.parts if matches(description, part.keywords)
    ]
