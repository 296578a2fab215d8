# parity/runner.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence

from .config_service import ParityConfig
from .results import ComparisonUnit, UnitResult

logger = logging.getLogger(__name__)

CheckFn = Callable[[ComparisonUnit, object, ParityConfig], Awaitable[UnitResult]]


async def run_unit(unit: ComparisonUnit, session, config: ParityConfig, check: CheckFn, check_name: str) -> UnitResult:
    """
    Run one unit in its own browser context, retrying the whole unit when it
    ends in an error. Mismatch verdicts are final and never retried.
    """
    max_attempts = max(1, config.retries + 1)
    result = None

    for attempt in range(1, max_attempts + 1):
        driver = None
        try:
            driver = await session.new_driver()
            result = await check(unit, driver, config)
        except Exception as e:
            logger.error(f"{unit.name}: unexpected error on attempt {attempt}: {e}", exc_info=True)
            result = UnitResult(unit=unit, check=check_name, error=e)
        finally:
            if driver is not None:
                await driver.close()

        result.attempts = attempt
        if result.error is None:
            return result
        if attempt < max_attempts:
            logger.warning(f"{unit.name}: retrying after {type(result.error).__name__} ({attempt}/{max_attempts})")

    logger.debug(f"{unit.name}: diagnostics {result.diagnostics}")
    return result


async def run_units(
    units: Sequence[ComparisonUnit],
    session,
    config: ParityConfig,
    check: CheckFn,
    check_name: str,
    progress_callback=None,
) -> List[UnitResult]:
    """
    Run every unit with at most `config.workers` at once.

    Units share nothing but the browser; each result is returned on its own
    and the list keeps the order of `units`.
    """
    semaphore = asyncio.Semaphore(max(1, config.workers))
    total = len(units)
    done = 0

    def update_progress(result: UnitResult):
        nonlocal done
        done += 1
        msg = f"{result.unit.name}: {result.status}"
        if progress_callback:
            progress_callback(int(done / total * 100), msg)
        logger.info(f"[{done}/{total}] {msg}")

    async def _one(unit: ComparisonUnit) -> UnitResult:
        async with semaphore:
            result = await run_unit(unit, session, config, check, check_name)
        update_progress(result)
        return result

    logger.info(f"Running {total} {check_name} unit(s) with {config.workers} worker(s)")
    return list(await asyncio.gather(*(_one(u) for u in units)))
