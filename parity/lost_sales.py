# parity/lost_sales.py
"""
Lost Sales - Planning vs. Monitoring.

The Supply Monitoring page shows three months of "Lost sales if you don't
order" per colour; each of those months must carry the same value in the
colour's Supply Planning "Potential Lost Sales" row.
"""
from __future__ import annotations

import logging
import time
from typing import Dict, Iterable, List

from bs4 import Tag

from .compare import compare_by_label
from .config_service import ParityConfig
from .dom import PageSnapshot, closest, next_element_sibling, text_of
from .exceptions import ExtractionError, NotANumber, RowNotFound
from .extract import pair_with_headers
from .model import LabeledSeries
from .policy import classify
from .results import ComparisonUnit, UnitResult
from .text_ops import MONTH_NAMES, MONTH_YEAR_RE, parse_count, parse_label

logger = logging.getLogger(__name__)

CHECK_NAME = "lost-sales"

PLANNING_ROW_LABEL = "Potential Lost Sales"
PLANNING_ROW_EXCLUDE = "Replenishment"
MONITORING_SECTION = "Lost sales if you don't order"
EXPAND_BUTTON = "Expand colors"
PLANNING_LINK_CSS = 'a[href*="supply/planning"][href*="color="]'

MONITORING_MONTHS = 3
MAX_PLANNING_HEADERS = 18
MAX_SIBLING_STEPS = 20


def _is_full_month_name(text: str) -> bool:
    return text.upper() in MONTH_NAMES


def _monitoring_value(h4: Tag) -> int:
    """Number in the element right after a month heading; blank reads as 0."""
    value_el = next_element_sibling(h4)
    try:
        return parse_count(text_of(value_el))
    except NotANumber:
        return 0


def _month_value_pairs(headings: Iterable[Tag]) -> LabeledSeries:
    labels: List[str] = []
    values: List[int] = []
    for h4 in headings:
        if h4.name != "h4":
            continue
        text = text_of(h4).strip()
        if not _is_full_month_name(text):
            continue
        if next_element_sibling(h4) is None:
            continue
        labels.append(parse_label(text))
        values.append(_monitoring_value(h4))
        if len(labels) >= MONITORING_MONTHS:
            break
    return LabeledSeries(labels, values)


def _following_siblings(link: Tag) -> Iterable[Tag]:
    sibling = next_element_sibling(link)
    if sibling is None and link.parent is not None:
        sibling = next_element_sibling(link.parent)
    steps = 0
    while sibling is not None and steps < MAX_SIBLING_STEPS:
        yield sibling
        sibling = next_element_sibling(sibling)
        steps += 1


def extract_monitoring_for_colour(snapshot: PageSnapshot, colour: str) -> LabeledSeries:
    """
    Months and lost-sales values shown for one colour on the monitoring page.

    Reads the h4 month headings inside the colour link's own table row; the
    row must be the `tr`, a wider container would pick up style-level values.
    """
    link = next((a for a in snapshot.find_all("a") if text_of(a).strip() == colour), None)
    if link is None:
        logger.info(f"Color link not found: {colour}")
        return LabeledSeries.empty()

    row = closest(link, "tr")
    if row is not None:
        series = _month_value_pairs(row.find_all("h4"))
    else:
        series = _month_value_pairs(_following_siblings(link))

    logger.info(f"[Monitoring] {colour}: {', '.join(series.labels)} = [{', '.join(map(str, series.values))}]")
    return series


def extract_all_monitoring_colours(snapshot: PageSnapshot) -> Dict[str, LabeledSeries]:
    """Every colour row linking to a planning page, keyed by colour name."""
    colours: Dict[str, LabeledSeries] = {}
    for link in snapshot.select(PLANNING_LINK_CSS):
        name = text_of(link).strip()
        if not name:
            continue
        row = closest(link, "tr")
        if row is None:
            continue
        series = _month_value_pairs(row.find_all("h4"))
        if len(series) == MONITORING_MONTHS:
            colours[name] = series

    logger.info(f"[Monitoring] Extracted {len(colours)} colors")
    return colours


def monitoring_series(snapshot: PageSnapshot, colour: str) -> LabeledSeries:
    """
    Targeted extraction for `colour`, falling back to the batch extraction
    before giving up with RowNotFound.
    """
    series = extract_monitoring_for_colour(snapshot, colour)
    if not len(series):
        logger.info("Primary extraction failed, trying batch extraction...")
        series = extract_all_monitoring_colours(snapshot).get(colour, LabeledSeries.empty())
    if not len(series):
        raise RowNotFound(f"No monitoring lost sales found for colour {colour!r}")
    if len(series) != MONITORING_MONTHS:
        raise ExtractionError(
            f"{colour}: monitoring should show {MONITORING_MONTHS} months, found {len(series)}"
        )
    return series


def _planning_headers(snapshot: PageSnapshot) -> List[str]:
    """Leaf elements reading "MMM YYYY", once per distinct text, in page order."""
    headers: List[str] = []
    seen = set()
    for el in snapshot.elements():
        if el.find(True) is not None:
            continue
        text = text_of(el).strip().upper()
        if not MONTH_YEAR_RE.match(text) or text in seen:
            continue
        seen.add(text)
        headers.append(text.split()[0])
    return headers[:MAX_PLANNING_HEADERS]


def extract_planning_lost_sales(snapshot: PageSnapshot) -> LabeledSeries:
    """The "Potential Lost Sales" row of the Supply Planning page."""
    headers = _planning_headers(snapshot)

    th = next(
        (th for th in snapshot.find_all("th")
         if PLANNING_ROW_LABEL in text_of(th) and PLANNING_ROW_EXCLUDE not in text_of(th)),
        None,
    )
    if th is None:
        raise RowNotFound(f"'{PLANNING_ROW_LABEL}' header cell not found")
    row = closest(th, "tr")
    if row is None:
        raise RowNotFound(f"'{PLANNING_ROW_LABEL}' is not inside a table row")

    values: List[int] = []
    for button in row.find_all("button"):
        try:
            values.append(parse_count(text_of(button)))
        except NotANumber:
            continue

    labels, values = pair_with_headers(values, headers, PLANNING_ROW_LABEL)
    series = LabeledSeries(labels, values)
    logger.info(f"[Planning] Headers: [{', '.join(series.labels[:6])}...] ({len(series)} total)")
    logger.info(f"[Planning] Values: [{', '.join(map(str, series.values[:6]))}...] ({len(series)} total)")
    return series


async def run_lost_sales(unit: ComparisonUnit, driver, config: ParityConfig) -> UnitResult:
    """Monitoring page first, then the colour's planning page, then compare by month."""
    result = UnitResult(unit=unit, check=CHECK_NAME)
    started = time.monotonic()
    logger.info(f"=== Testing: {unit.name} ===")

    try:
        url = unit.monitoring_url(config.domain)
        logger.info(f"Monitoring URL: {url}")
        await driver.goto(url)
        await driver.settle(config.render_wait_ms)

        if not (await driver.snapshot()).contains_text(MONITORING_SECTION):
            result.skip_reason = "No lost sales section"
            logger.info(f"Skipping {unit.name} - {result.skip_reason}")
            return result

        if await driver.click_button_if_present(EXPAND_BUTTON):
            await driver.settle(config.settle_ms)
        result.left = monitoring_series(await driver.snapshot(), unit.color)

        url = unit.planning_url(config.domain)
        logger.info(f"Planning URL: {url}")
        await driver.goto(url)
        if not await driver.wait_for_text(PLANNING_ROW_LABEL, config.lost_sales_timeout_ms):
            raise RowNotFound(f"'{PLANNING_ROW_LABEL}' did not appear within {config.lost_sales_timeout_ms}ms")
        await driver.settle(config.settle_ms)
        result.right = extract_planning_lost_sales(await driver.snapshot())
        if not len(result.right):
            raise RowNotFound(f"{unit.color}: planning page has no lost sales values")

        comparison = compare_by_label(result.left, result.right, unit.name)
        result.mismatches = comparison.mismatches
        result.compared_count = comparison.compared_count
        # Lost sales have no lock status: every mismatch counts.
        result.verdict = classify(True, comparison.mismatches)

        for m in comparison.mismatches:
            logger.info(f"  {m.label}: Monitoring={m.left_value}, Planning={m.right_value}")

    except ExtractionError as e:
        result.error = e
        logger.warning(f"{unit.name}: {type(e).__name__}: {e.message}")
    except Exception as e:
        result.error = e
        logger.error(f"{unit.name}: unexpected error: {e}", exc_info=True)
    finally:
        result.duration_ms = int((time.monotonic() - started) * 1000)

    return result

