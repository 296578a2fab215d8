# parity/demand_supply.py
"""
Demand = Supply check.

Supply: the "Demand forecast" row on the Supply Planning page (one row).
Demand: the "Gross sales [YYYY-YYYY]" rows of the Forecasts page's
"Stats by Year" table, stitched into one series.
Both are aligned at the current month and compared value by value; only
locked forecasts fail on a mismatch.
"""
from __future__ import annotations

import logging
import time
from typing import Optional, Tuple

from .compare import align_and_compare
from .config_service import ParityConfig
from .exceptions import ExtractionError, InsufficientComparison, RowNotFound
from .extract import extract_demand_series, extract_supply_series
from .model import ComparisonResult, LabeledSeries
from .policy import Verdict, classify, detect_lock_signal
from .results import ComparisonUnit, UnitResult
from .text_ops import current_month_label

logger = logging.getLogger(__name__)

CHECK_NAME = "demand-supply"

FORECASTS_LINK = "Forecasts"
FORECAST_TAB = "FORECAST"
LOCK_MARKER_TEXT = "Forecast Predictions"


def compare_unit(
    supply: LabeledSeries,
    demand: LabeledSeries,
    lock_signal: bool,
    pivot_label: str,
    min_compared_months: int = 12,
) -> Tuple[ComparisonResult, Verdict]:
    """
    Align supply against demand at `pivot_label` and classify the outcome.

    Raises PivotNotFound when demand lacks the pivot month and
    InsufficientComparison when fewer than `min_compared_months` line up.
    """
    comparison = align_and_compare(pivot_label, supply.values, demand.labels, demand.values)
    if comparison.compared_count < min_compared_months:
        raise InsufficientComparison(comparison.compared_count, min_compared_months)
    return comparison, classify(lock_signal, comparison.mismatches)


async def read_lock_signal(driver, config: ParityConfig) -> bool:
    """Lock status from the Forecasts page icons; unlocked when the panel never shows."""
    if not await driver.wait_for_text(LOCK_MARKER_TEXT, config.selector_timeout_ms):
        logger.warning(f"'{LOCK_MARKER_TEXT}' not found; treating forecast as unlocked")
        return False
    await driver.settle(config.settle_ms)
    return detect_lock_signal(await driver.snapshot())


async def run_comparison(
    unit: ComparisonUnit,
    driver,
    config: ParityConfig,
    pivot_label: Optional[str] = None,
) -> UnitResult:
    """
    Run one comparison unit against an already-authenticated page driver.

    Supply is captured in full before demand extraction starts. Extraction
    problems end the unit with `error` set; the series gathered so far stay
    on the result for triage.
    """
    result = UnitResult(unit=unit, check=CHECK_NAME)
    started = time.monotonic()
    logger.info(f"=== Testing: {unit.name} ===")

    try:
        # Supply
        url = unit.planning_url(config.domain)
        logger.info(f"Planning URL: {url}")
        await driver.goto(url)
        if not await driver.wait_for_text(config.supply_label, config.selector_timeout_ms):
            raise RowNotFound(f"'{config.supply_label}' did not appear within {config.selector_timeout_ms}ms")
        await driver.settle(config.settle_ms)
        result.left = extract_supply_series(await driver.snapshot(), config)

        # Demand
        await driver.click_link(FORECASTS_LINK, config.selector_timeout_ms)
        result.lock_signal = await read_lock_signal(driver, config)
        await driver.click_text(FORECAST_TAB, config.selector_timeout_ms)
        await driver.reveal_year_rows(config.demand_label, config.settle_ms)
        result.right = extract_demand_series(await driver.snapshot(), config)

        result.pivot_label = pivot_label or current_month_label(tz=config.timezone)
        comparison, verdict = compare_unit(
            result.left,
            result.right,
            result.lock_signal,
            result.pivot_label,
            config.min_compared_months,
        )
        result.mismatches = comparison.mismatches
        result.compared_count = comparison.compared_count
        result.verdict = verdict

        if verdict == Verdict.FAIL:
            logger.error(result.failure_message())
        elif verdict == Verdict.ADVISORY:
            logger.info(
                f"{unit.name}: unlocked forecast differs in {len(comparison.mismatches)} month(s); recorded only"
            )
        else:
            logger.info(f"{unit.name}: {comparison.compared_count} months match")

    except ExtractionError as e:
        result.error = e
        if isinstance(e, InsufficientComparison):
            result.compared_count = e.compared_count
        logger.warning(f"{unit.name}: {type(e).__name__}: {e.message}")
    except Exception as e:
        result.error = e
        logger.error(f"{unit.name}: unexpected error: {e}", exc_info=True)
    finally:
        result.duration_ms = int((time.monotonic() - started) * 1000)

    return result
