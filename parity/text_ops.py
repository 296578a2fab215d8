# parity/text_ops.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .exceptions import NotANumber


MONTH_CODES = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN",
               "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")

MONTH_NAMES = ("JANUARY", "FEBRUARY", "MARCH", "APRIL", "MAY", "JUNE",
               "JULY", "AUGUST", "SEPTEMBER", "OCTOBER", "NOVEMBER", "DECEMBER")

_MONTH_BY_NAME = {name: code for name, code in zip(MONTH_NAMES, MONTH_CODES)}
_MONTH_BY_NAME.update({code: code for code in MONTH_CODES})

# Month name or abbreviation, optionally followed by a 4-digit year ("JAN 2026").
_LABEL_RE = re.compile(r"^(?P<month>[A-Za-z]+)(?:\s+\d{4})?$")

# Column header on the planning page: "JAN 2026".
MONTH_YEAR_RE = re.compile(r"^(JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC)\s+\d{4}$", re.IGNORECASE)

MAX_PLAUSIBLE_COUNT = 10_000_000
CALENDAR_YEAR_BAND = (1900, 2100)


def parse_count(text: Optional[str]) -> int:
    """
    Parse a locale-formatted count ("1,234" -> 1234).

    Raises NotANumber for empty or non-numeric text; callers treat that as
    "no value in this cell".
    """
    cleaned = (text or "").replace(",", "").strip()
    if not cleaned:
        raise NotANumber("empty cell")
    m = re.match(r"^[+-]?\d+", cleaned)
    if not m:
        raise NotANumber(f"not a number: {text!r}")
    return int(m.group(0))


def parse_label(text: Optional[str]) -> Optional[str]:
    """
    Normalise a month name or abbreviation to its 3-letter code.
      'January' -> 'JAN', 'dec' -> 'DEC', 'SEP 2026' -> 'SEP', 'Total' -> None
    """
    if not text:
        return None
    m = _LABEL_RE.match(text.strip())
    if not m:
        return None
    return _MONTH_BY_NAME.get(m.group("month").upper())


def is_plausible_count(value: int) -> bool:
    return 0 <= value < MAX_PLAUSIBLE_COUNT


def is_calendar_year_artifact(value: int) -> bool:
    """
    True for a number that is really a calendar year leaking into a data row.

    Values below 1000 always survive. A genuine count that falls inside the
    year band (e.g. 1950) is still dropped; see DESIGN.md.
    """
    lo, hi = CALENDAR_YEAR_BAND
    return lo <= value <= hi and not value < 1000


def keep_value(value: int, drop_calendar_years: bool = False) -> bool:
    """Inclusion filter applied to every parsed cell value."""
    if not is_plausible_count(value):
        return False
    if drop_calendar_years and is_calendar_year_artifact(value):
        return False
    return True


def current_month_label(now: Optional[datetime] = None, tz: Optional[str] = None) -> str:
    """Month code for "now" (the alignment pivot)."""
    if now is None:
        now = datetime.now(ZoneInfo(tz)) if tz else datetime.now()
    return MONTH_CODES[now.month - 1]
