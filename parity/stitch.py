# parity/stitch.py
from __future__ import annotations

import logging
from typing import List, Sequence

from .model import LabeledSeries, RowExtract

logger = logging.getLogger(__name__)

# Largest boundary overlap looked for between consecutive year rows.
# Observed overlaps are 0-2 months.
MAX_BOUNDARY_OVERLAP = 3


def boundary_overlap(prev_labels: Sequence[str], curr_labels: Sequence[str], max_overlap: int = MAX_BOUNDARY_OVERLAP) -> int:
    """
    Length of the longest run where the tail of `prev_labels` equals the head
    of `curr_labels`, capped at `max_overlap`. 0 when nothing lines up.

    Every k is tried; a longer match overrides a shorter one.
    """
    overlap = 0
    for k in range(1, min(max_overlap, len(prev_labels), len(curr_labels)) + 1):
        if list(prev_labels[-k:]) == list(curr_labels[:k]):
            overlap = k
    return overlap


def stitch(rows: Sequence[RowExtract], max_overlap: int = MAX_BOUNDARY_OVERLAP) -> LabeledSeries:
    """
    Concatenate year rows into one continuous monthly series.

    Rows are ordered by origin year (stable). Months repeated at the boundary
    between one row and the next are kept once, from the earlier row.
    """
    ordered = sorted(rows, key=lambda r: r.origin_year)
    if not ordered:
        return LabeledSeries.empty()

    all_labels: List[str] = list(ordered[0].labels)
    all_values: List[int] = list(ordered[0].values)

    for row in ordered[1:]:
        overlap = boundary_overlap(all_labels, row.labels, max_overlap)
        if overlap:
            logger.debug(f"Row {row.origin_year}: dropping {overlap} overlapping month(s)")
        all_labels.extend(row.labels[overlap:])
        all_values.extend(row.values[overlap:])

    return LabeledSeries(all_labels, all_values)
