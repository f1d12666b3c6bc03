"""Cell value normalization for raw spreadsheet rows.

Spreadsheet exports are inconsistent: mileages are written with thousands
separators or in implicit thousands, dates come as day.month.year,
year-month-day or free text, and numeric cells may be empty. These helpers
turn such cells into canonical values without ever raising.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional, Tuple

from dateutil import parser

_DOTTED_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{2}|\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
_CANONICAL_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_SEPARATORS = re.compile(r"[\s,]")

# Fields missing from free-text dates are filled from here, not from today.
_PARSER_DEFAULT = datetime(1970, 1, 1)


def infer_mileage_scale(value: float) -> float:
    """
    Guess whether a mileage was entered in thousands.

    Values in (100, 1000) and in [1000, 100000] are taken as thousands.
    Everything else (including anything above 1,000,000) is already in
    base units. Legitimate odometer readings between 1,000 and 100,000
    are misread by this rule.
    """
    if 100 < value < 1000:
        return value * 1000
    if 1000 <= value <= 100000:
        return value * 1000
    return value


def normalize_mileage(raw: Any, infer_scale: bool = True) -> Optional[int]:
    """
    Convert a raw mileage cell to an integer odometer reading.

    Whitespace and commas are stripped before parsing. Returns None when the
    cell can't be used (empty, not a number, negative), which tells the
    caller to discard the record.
    """
    if raw is None or isinstance(raw, bool):
        return None
    text = _SEPARATORS.sub("", str(raw))
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    if infer_scale:
        value = infer_mileage_scale(value)
    return int(round(value))


def normalize_date(raw: Any) -> str:
    """
    Normalize a date cell to YYYY-MM-DD.

    Accepts day.month.year, year-month-day and other text dateutil can
    parse. Unparseable input is returned trimmed and unchanged.
    """
    if raw is None:
        return ""
    if isinstance(raw, datetime):
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()

    text = str(raw).strip()
    if not text:
        return ""

    try:
        match = _DOTTED_DATE.match(text)
        if match:
            day, month, year = (int(g) for g in match.groups())
            if year < 100:
                year += 2000
            return date(year, month, day).isoformat()
        match = _ISO_DATE.match(text)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return date(year, month, day).isoformat()
        return parser.parse(text, default=_PARSER_DEFAULT).date().isoformat()
    except (ValueError, OverflowError):
        return text


def parse_number(raw: Any) -> float:
    """Parse a numeric cell leniently; 0 when absent, unparseable or negative."""
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = re.sub(r"\s", "", str(raw))
        if "," in text and "." in text:
            text = text.replace(",", "")
        else:
            text = text.replace(",", ".")
        try:
            value = float(text)
        except ValueError:
            return 0
    if math.isnan(value) or math.isinf(value) or value < 0:
        return 0
    return value


def parse_year(raw: Any) -> int:
    """Parse the leading integer of a year cell ("2015", "2015 р."); 0 if none."""
    if raw is None:
        return 0
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else 0


def parse_iso_date(text: Optional[str]) -> Optional[date]:
    """Return the date for a canonical YYYY-MM-DD string, else None."""
    if not text or not _CANONICAL_DATE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def date_sort_key(text: Optional[str]) -> Tuple[int, int]:
    """
    Total ordering key for normalized date strings.

    Calendar dates order chronologically; anything else (empty or raw text)
    orders before every calendar date, i.e. as oldest.
    """
    parsed = parse_iso_date(text)
    if parsed is None:
        return (0, 0)
    return (1, parsed.toordinal())


def days_between(current: date, text: Optional[str]) -> Optional[int]:
    """Whole days from the date in `text` to `current`; None if not a date."""
    parsed = parse_iso_date(text)
    if parsed is None:
        return None
    return (current - parsed).days


def format_time_diff(days: Optional[int]) -> str:
    """Format elapsed days as years/months ('1р 2міс'), or days ('12дн')."""
    if days is None:
        return ""
    if days < 0:
        return f"{days}дн"
    years, rest = divmod(days, 365)
    months = rest // 30
    parts = []
    if years > 0:
        parts.append(f"{years}р")
    if months > 0:
        parts.append(f"{months}міс")
    return " ".join(parts) or f"{days}дн"


def format_date(text: Optional[str]) -> str:
    """Format a normalized date for display as dd.mm.yyyy."""
    if not text:
        return ""
    parsed = parse_iso_date(text)
    if parsed is None:
        return text
    return parsed.strftime("%d.%m.%Y")
