# parity/policy.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

from .dom import PageSnapshot
from .model import MismatchRecord

logger = logging.getLogger(__name__)

LOCK_ICON = ".lucide-lock"
CHECK_ICON = ".lucide-check"


class Verdict(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    ADVISORY = "advisory"


def classify(lock_signal: bool, mismatches: Sequence[MismatchRecord]) -> Verdict:
    """
    Locked forecasts must match exactly. Unlocked ones are still being edited
    upstream, so their differences are only recorded.
    """
    if not mismatches:
        return Verdict.PASS
    if lock_signal:
        return Verdict.FAIL
    return Verdict.ADVISORY


def detect_lock_signal(snapshot: PageSnapshot) -> bool:
    """Locked when both the lock and check icons are on the forecasts page."""
    lock_icons = snapshot.count(LOCK_ICON)
    check_icons = snapshot.count(CHECK_ICON)
    logger.debug(f"Lock icons: {lock_icons}, check icons: {check_icons}")
    return lock_icons > 0 and check_icons > 0
