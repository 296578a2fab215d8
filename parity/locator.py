# parity/locator.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple

from bs4 import Tag

from .dom import PageSnapshot, cells, rows, text_of
from .text_ops import parse_label

logger = logging.getLogger(__name__)

# A header row needs at least this many month cells to count.
MIN_HEADER_MONTHS = 6

# "[2026-2027]" or "[2026–2027]"
YEAR_RANGE_RE = re.compile(r"\[(\d{4})\s*[-–]\s*(\d{4})\]")


def year_range_pattern(label: str) -> Pattern[str]:
    """Row label followed, within the same bracket-free run, by a year range."""
    return re.compile(re.escape(label) + r"[^\[]*" + YEAR_RANGE_RE.pattern)


@dataclass(frozen=True)
class LocatedRow:
    row: Tag
    header_labels: Tuple[str, ...]
    match: Optional[re.Match] = None


def find_header_labels(table_rows: Sequence[Tag]) -> List[str]:
    """
    Read the month header from the table itself.

    The first row with MIN_HEADER_MONTHS or more month cells wins; its month
    cells, in order, are the labels.
    """
    for row in table_rows:
        labels = []
        for cell in cells(row):
            label = parse_label(text_of(cell))
            if label:
                labels.append(label)
        if len(labels) >= MIN_HEADER_MONTHS:
            return labels
    return []


def row_matches(text: str, label: str, exclude: Sequence[str] = (), pattern: Optional[Pattern[str]] = None):
    """
    Return the pattern match (or True when no pattern) for a qualifying row,
    None otherwise.
    """
    if label not in text:
        return None
    if any(x in text for x in exclude):
        return None
    if pattern is None:
        return True
    return pattern.search(text)


def find_rows(
    snapshot: PageSnapshot,
    label: str,
    exclude: Sequence[str] = (),
    pattern: Optional[Pattern[str]] = None,
) -> List[LocatedRow]:
    """
    Every row, across every table, whose text contains `label`, none of
    `exclude`, and (when given) matches `pattern`.

    Each table is scanned on its own. A table without its own month header
    borrows the nearest preceding table's header.
    """
    found: List[LocatedRow] = []
    seen = set()
    last_header: List[str] = []

    for table in snapshot.tables():
        table_rows = rows(table)
        header = find_header_labels(table_rows)
        if header:
            last_header = header
        elif last_header:
            header = last_header

        for row in table_rows:
            if id(row) in seen:
                continue
            hit = row_matches(text_of(row), label, exclude, pattern)
            if not hit:
                continue
            seen.add(id(row))
            found.append(LocatedRow(
                row=row,
                header_labels=tuple(header),
                match=hit if isinstance(hit, re.Match) else None,
            ))

    logger.debug(f"Located {len(found)} row(s) for {label!r}")
    return found


def find_first_row(
    snapshot: PageSnapshot,
    label: str,
    exclude: Sequence[str] = (),
    pattern: Optional[Pattern[str]] = None,
) -> Optional[LocatedRow]:
    """First qualifying row, or None when the page has none."""
    located = find_rows(snapshot, label, exclude, pattern)
    return located[0] if located else None
