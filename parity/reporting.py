# parity/reporting.py
from __future__ import annotations

import csv
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Sequence

from .policy import Verdict
from .results import UnitResult

logger = logging.getLogger(__name__)

COLUMNS = [
    'timestamp', 'check', 'test_name', 'test_slug', 'brand_key',
    'department', 'category', 'class', 'style', 'color',
    'status', 'verdict', 'duration_ms', 'attempts', 'error_type', 'error_message',
    'lock_signal', 'pivot_label', 'compared_count',
    'left_labels', 'left_values', 'right_labels', 'right_values', 'mismatches',
]


def write_results_csv(results: Sequence[UnitResult], path: Path, append: bool = False) -> Path:
    """Write one row per unit; the header is written unless appending to an existing file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    write_header = not (append and path.exists() and path.stat().st_size > 0)

    with open(path, "a" if append else "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=COLUMNS)
        if write_header:
            writer.writeheader()
        for result in results:
            writer.writerow(result.to_row())

    logger.info(f"Results exported to: {path} ({len(results)} test results saved)")
    return path


def summarise(results: Sequence[UnitResult]) -> Dict[str, int]:
    counts = Counter(r.status for r in results)
    advisory = sum(1 for r in results if r.verdict == Verdict.ADVISORY)
    return {
        'passed': counts.get('passed', 0),
        'failed': counts.get('failed', 0),
        'skipped': counts.get('skipped', 0),
        'advisory': advisory,
    }
