from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

from .exceptions import MismatchFailure
from .model import LabeledSeries, MismatchRecord
from .policy import Verdict


@dataclass(frozen=True)
class ComparisonUnit:
    """One product (style/colour) in one channel and region."""
    brand_key: str
    department: str
    category: str
    class_name: str
    style: str
    color: str
    channel: str = "ecommerce"
    region: str = "global"

    @property
    def name(self) -> str:
        return f"{self.style} / {self.color}"

    @property
    def slug(self) -> str:
        return re.sub(r"[^a-z0-9]+", "-", self.name.lower())

    def _query(self, with_color: bool) -> str:
        params = [
            ("channel", self.channel),
            ("region", self.region),
            ("department", self.department),
            ("category", self.category),
            ("class", self.class_name),
            ("style", self.style),
        ]
        if with_color:
            params.append(("color", self.color))
        return urlencode(params, quote_via=quote)

    def planning_url(self, domain: str) -> str:
        return f"https://{domain}/brand/{self.brand_key}/supply/planning?{self._query(with_color=True)}"

    def monitoring_url(self, domain: str) -> str:
        return f"https://{domain}/brand/{self.brand_key}/supply/monitoring?{self._query(with_color=False)}"


def _join(items) -> str:
    return ", ".join(str(i) for i in items)


@dataclass
class UnitResult:
    """Outcome of one comparison unit, with everything needed to triage it."""
    unit: ComparisonUnit
    check: str
    left: LabeledSeries = field(default_factory=LabeledSeries.empty)
    right: LabeledSeries = field(default_factory=LabeledSeries.empty)
    lock_signal: Optional[bool] = None
    pivot_label: Optional[str] = None
    mismatches: List[MismatchRecord] = field(default_factory=list)
    compared_count: int = 0
    verdict: Optional[Verdict] = None
    error: Optional[Exception] = None
    skip_reason: Optional[str] = None
    attempts: int = 1
    duration_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def status(self) -> str:
        if self.skip_reason:
            return "skipped"
        if self.error is not None or self.verdict in (None, Verdict.FAIL):
            return "failed"
        return "passed"

    @property
    def error_type(self) -> Optional[str]:
        if self.error is not None:
            return type(self.error).__name__
        if self.verdict == Verdict.FAIL:
            return MismatchFailure.__name__
        return None

    @property
    def error_message(self) -> str:
        if self.error is not None:
            return getattr(self.error, "message", None) or str(self.error)
        if self.verdict == Verdict.FAIL:
            return self.failure_message()
        return ""

    @property
    def diagnostics(self) -> Dict[str, Any]:
        return {
            'left_labels': list(self.left.labels),
            'left_values': list(self.left.values),
            'right_labels': list(self.right.labels),
            'right_values': list(self.right.values),
            'lock_signal': self.lock_signal,
            'pivot_label': self.pivot_label,
        }

    def failure_message(self) -> str:
        lines = [f"{self.unit.name}: {len(self.mismatches)} mismatch(es) in locked data"]
        lines.extend(f"  {m}" for m in self.mismatches)
        return "\n".join(lines)

    def raise_for_verdict(self) -> None:
        """Raise the unit's failure, if any; no-op for pass, advisory or skip."""
        if self.error is not None:
            raise self.error
        if self.verdict == Verdict.FAIL:
            raise MismatchFailure(self.failure_message(), self.mismatches)

    def to_row(self) -> Dict[str, Any]:
        """Flat scalar/string view for CSV or database export."""
        u = self.unit
        return {
            'timestamp': self.timestamp,
            'check': self.check,
            'test_name': u.name,
            'test_slug': u.slug,
            'brand_key': u.brand_key,
            'department': u.department,
            'category': u.category,
            'class': u.class_name,
            'style': u.style,
            'color': u.color,
            'status': self.status,
            'verdict': self.verdict.value if self.verdict else "",
            'duration_ms': self.duration_ms,
            'attempts': self.attempts,
            'error_type': self.error_type or "",
            'error_message': self.error_message.split("\n")[0],
            'lock_signal': "" if self.lock_signal is None else str(self.lock_signal).lower(),
            'pivot_label': self.pivot_label or "",
            'compared_count': self.compared_count,
            'left_labels': _join(self.left.labels),
            'left_values': f"[{_join(self.left.values)}]",
            'right_labels': _join(self.right.labels),
            'right_values': f"[{_join(self.right.values)}]",
            'mismatches': "; ".join(str(m) for m in self.mismatches),
        }
