# parity/compare.py
from __future__ import annotations

import logging
from typing import List, Sequence

from .exceptions import PivotNotFound
from .model import ComparisonResult, LabeledSeries, MismatchRecord

logger = logging.getLogger(__name__)


def find_pivot(pivot_label: str, labels: Sequence[str]) -> int:
    """
    Index of the FIRST occurrence of `pivot_label`.

    A multi-year series repeats month codes; the earliest one is the month
    closest to now. Do not switch this to the last occurrence.
    """
    try:
        return list(labels).index(pivot_label)
    except ValueError:
        raise PivotNotFound(pivot_label, labels) from None


def align_and_compare(
    pivot_label: str,
    left_values: Sequence[int],
    right_labels: Sequence[str],
    right_values: Sequence[int],
) -> ComparisonResult:
    """
    Compare `left_values` (already starting at the pivot month) against the
    right series sliced from its first `pivot_label`.

    Only the overlapping length is compared; `compared_count` reports it so
    callers can reject short comparisons.
    """
    start = find_pivot(pivot_label, right_labels)
    labels_sliced = list(right_labels[start:])
    values_sliced = list(right_values[start:])

    compare_length = min(len(left_values), len(values_sliced))
    mismatches: List[MismatchRecord] = []
    for i in range(compare_length):
        if left_values[i] != values_sliced[i]:
            mismatches.append(MismatchRecord(
                index=i,
                label=labels_sliced[i] if i < len(labels_sliced) else f"Month {i}",
                left_value=left_values[i],
                right_value=values_sliced[i],
            ))

    return ComparisonResult(
        mismatches=mismatches,
        compared_count=compare_length,
        labels=tuple(labels_sliced[:compare_length]),
    )


def compare_by_label(left: LabeledSeries, right: LabeledSeries, name: str = "") -> ComparisonResult:
    """
    Look each left-hand month up in the right series (first occurrence) and
    compare the values found there. Months missing on the right are skipped.
    """
    right_labels = list(right.labels)
    mismatches: List[MismatchRecord] = []
    compared = 0

    for label, left_value in zip(left.labels, left.values):
        if label not in right_labels:
            logger.warning(f"Month {label} not found in planning headers for {name}: {', '.join(right_labels)}")
            continue
        idx = right_labels.index(label)
        compared += 1
        right_value = right.values[idx]
        if left_value != right_value:
            mismatches.append(MismatchRecord(index=idx, label=label, left_value=left_value, right_value=right_value))

    status = "MATCH" if not mismatches else f"{len(mismatches)} MISMATCHES"
    logger.info(f"[Compare] {name}: {status}")
    return ComparisonResult(mismatches=mismatches, compared_count=compared, labels=tuple(left.labels))
