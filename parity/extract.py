# parity/extract.py
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from bs4 import Tag

from .config_service import ParityConfig
from .dom import PageSnapshot, cells, input_value, text_of
from .exceptions import NotANumber, RowNotFound
from .locator import LocatedRow, find_first_row, find_rows, year_range_pattern
from .model import LabeledSeries, RowExtract
from .stitch import stitch
from .text_ops import MONTH_CODES, keep_value, parse_count

logger = logging.getLogger(__name__)


def extract_row_values(row: Tag, label: str, drop_calendar_years: bool = False) -> List[int]:
    """
    Numbers from a row's data cells, in cell order.

    The cell holding the row label is skipped. An input's current value wins
    over the cell's rendered text. Unparseable cells are skipped.
    """
    values: List[int] = []
    for cell in cells(row, ("td",)):
        cell_text = text_of(cell).strip()
        if label in cell_text:
            continue

        raw = input_value(cell) or cell_text
        try:
            num = parse_count(raw)
        except NotANumber:
            continue

        if keep_value(num, drop_calendar_years=drop_calendar_years):
            values.append(num)
    return values


def pair_with_headers(values: Sequence[int], headers: Sequence[str], label: str) -> Tuple[Tuple[str, ...], Tuple[int, ...]]:
    """Line values up with the header labels, trimming whichever side is longer."""
    n = min(len(values), len(headers))
    if len(values) > len(headers):
        logger.warning(
            f"{label}: {len(values)} values but only {len(headers)} month headers; "
            f"dropping {len(values) - n} trailing value(s)"
        )
    return tuple(headers[:n]), tuple(values[:n])


def label_all_values(values: Sequence[int], headers: Sequence[str], label: str) -> Tuple[str, ...]:
    """
    One month label per value, keeping every value.

    Values past the last header get the months that follow it.
    """
    labels = list(headers[:len(values)])
    if len(values) > len(labels):
        logger.warning(
            f"{label}: {len(values)} values but only {len(headers)} month headers; "
            f"labelling {len(values) - len(labels)} trailing value(s) by month order"
        )
        i = MONTH_CODES.index(labels[-1])
        while len(labels) < len(values):
            i = (i + 1) % 12
            labels.append(MONTH_CODES[i])
    return tuple(labels)


def extract_row(located: LocatedRow, label: str, origin_year: int, drop_calendar_years: bool = False) -> RowExtract:
    values = extract_row_values(located.row, label, drop_calendar_years=drop_calendar_years)
    labels, values = pair_with_headers(values, located.header_labels, label)
    return RowExtract(origin_year=origin_year, labels=labels, values=values)


def extract_supply_series(snapshot: PageSnapshot, config: ParityConfig) -> LabeledSeries:
    """Values of the Supply Planning "Demand forecast" row with their month headers."""
    label = config.supply_label
    located = find_first_row(snapshot, label)
    if located is None:
        raise RowNotFound(f"'{label}' row not found on supply planning page")

    values = extract_row_values(located.row, label)
    if not values:
        raise RowNotFound(f"'{label}' row has no numeric values")
    if not located.header_labels:
        raise RowNotFound(f"No month header for '{label}' ({len(values)} values: {values})")

    series = LabeledSeries(label_all_values(values, located.header_labels, label), values)
    logger.info(f"[Supply] Headers: [{', '.join(series.labels[:6])}...] ({len(series)} total)")
    logger.info(f"[Supply] Values: {list(series.values)}")
    return series


def extract_demand_rows(snapshot: PageSnapshot, config: ParityConfig) -> List[RowExtract]:
    """One RowExtract per "Gross sales [YYYY-YYYY]" row, current-year rows only."""
    label = config.demand_label
    located_rows = find_rows(
        snapshot,
        label,
        exclude=config.demand_exclude,
        pattern=year_range_pattern(label),
    )

    extracts: List[RowExtract] = []
    for located in located_rows:
        year_start = int(located.match.group(1))
        extract = extract_row(
            located,
            label,
            origin_year=year_start,
            drop_calendar_years=config.demand_drop_calendar_years,
        )
        if extract.values and extract.labels:
            extracts.append(extract)
        else:
            logger.warning(f"{label} row for {year_start} yielded no labelled values")
    return extracts


def extract_demand_series(snapshot: PageSnapshot, config: ParityConfig) -> LabeledSeries:
    """Stitch every year row of the Forecasts "Stats by Year" table into one series."""
    extracts = extract_demand_rows(snapshot, config)
    if not extracts:
        raise RowNotFound(f"No '{config.demand_label} [YYYY-YYYY]' rows found on forecasts page")

    series = stitch(extracts, max_overlap=config.max_boundary_overlap)
    logger.info(f"[Demand] {len(extracts)} year row(s) stitched into {len(series)} months")
    logger.info(f"[Demand] Labels: [{', '.join(series.labels)}]")
    return series
