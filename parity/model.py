from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class LabeledSeries:
    labels: Tuple[str, ...]             # 3-letter month codes, may repeat past 12 entries
    values: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "values", tuple(self.values))
        if len(self.labels) != len(self.values):
            raise ValueError(
                f"labels/values length mismatch: {len(self.labels)} labels, {len(self.values)} values"
            )

    def __len__(self) -> int:
        return len(self.values)

    @classmethod
    def empty(cls) -> "LabeledSeries":
        return cls((), ())


@dataclass(frozen=True)
class RowExtract:
    origin_year: int                    # start year of the row's "[YYYY-YYYY]" range
    labels: Tuple[str, ...]
    values: Tuple[int, ...]


@dataclass(frozen=True)
class MismatchRecord:
    index: int
    label: str
    left_value: int
    right_value: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'label': self.label,
            'left_value': self.left_value,
            'right_value': self.right_value,
        }

    def __str__(self) -> str:
        return f"{self.label}: {self.left_value} != {self.right_value}"


@dataclass
class ComparisonResult:
    mismatches: List[MismatchRecord] = field(default_factory=list)
    compared_count: int = 0
    labels: Optional[Tuple[str, ...]] = None     # right-hand labels from the pivot onward
