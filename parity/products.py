# parity/products.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .results import ComparisonUnit

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["DEPARTMENT", "CATEGORY", "CLASS", "STYLE", "COLOR"]


def load_units(csv_path: Path, brand_key: str, limit: Optional[int] = None) -> List[ComparisonUnit]:
    """
    Read the style/colour list for a brand.

    Rows without a style or colour are dropped; CHANNEL and REGION_NAME fall
    back to "ecommerce" and "global".
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    df = pd.read_csv(csv_path, dtype=str).fillna("")
    df.columns = [c.strip().upper() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{csv_path.name} is missing column(s): {', '.join(missing)}")

    for col in ("CHANNEL", "REGION_NAME"):
        if col not in df.columns:
            df[col] = ""
    df = df.apply(lambda s: s.str.strip())
    df = df[(df["STYLE"] != "") & (df["COLOR"] != "")]

    units = [
        ComparisonUnit(
            brand_key=brand_key,
            department=row.DEPARTMENT,
            category=row.CATEGORY,
            class_name=row.CLASS,
            style=row.STYLE,
            color=row.COLOR,
            channel=row.CHANNEL or "ecommerce",
            region=row.REGION_NAME or "global",
        )
        for row in df.itertuples(index=False)
    ]

    logger.info(f"Loaded {len(units)} style-color combinations from {csv_path.name}")
    if limit is not None:
        units = units[:limit]
    return units
