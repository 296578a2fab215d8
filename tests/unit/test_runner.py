# tests/unit/test_runner.py
import asyncio
import dataclasses

from parity.exceptions import RowNotFound
from parity.model import MismatchRecord
from parity.policy import Verdict
from parity.results import ComparisonUnit, UnitResult
from parity.runner import run_unit, run_units


class ClosingDriver:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


def make_units(n):
    return [
        ComparisonUnit("uat-bocop", "Mens", "Tops", "Shirts", f"Style {i}", "Black")
        for i in range(n)
    ]


def test_error_is_retried_then_passes(unit, config, fake_session):
    calls = []

    async def flaky(u, driver, cfg):
        calls.append(driver)
        if len(calls) == 1:
            raise RuntimeError("page crashed")
        return UnitResult(unit=u, check="demand-supply", verdict=Verdict.PASS)

    session = fake_session(ClosingDriver)
    result = asyncio.run(run_unit(unit, session, config, flaky, "demand-supply"))

    assert result.status == "passed"
    assert result.attempts == 2
    assert len(session.drivers) == 2
    assert all(d.closed for d in session.drivers)


def test_extraction_error_kept_after_last_attempt(unit, config, fake_session):
    async def always_missing(u, driver, cfg):
        return UnitResult(unit=u, check="demand-supply", error=RowNotFound("row missing"))

    session = fake_session(ClosingDriver)
    result = asyncio.run(run_unit(unit, session, config, always_missing, "demand-supply"))

    assert isinstance(result.error, RowNotFound)
    assert result.attempts == config.retries + 1
    assert result.error_type == "RowNotFound"


def test_unexpected_exception_becomes_result(unit, config, fake_session):
    async def broken(u, driver, cfg):
        raise KeyError("boom")

    no_retry = dataclasses.replace(config, retries=0)
    session = fake_session(ClosingDriver)
    result = asyncio.run(run_unit(unit, session, no_retry, broken, "lost-sales"))

    assert result.check == "lost-sales"
    assert isinstance(result.error, KeyError)
    assert result.attempts == 1
    assert session.drivers[0].closed


def test_mismatch_is_not_retried(unit, config, fake_session):
    async def mismatched(u, driver, cfg):
        record = MismatchRecord(index=0, label="DEC", left_value=1, right_value=2)
        return UnitResult(unit=u, check="demand-supply", mismatches=[record], verdict=Verdict.FAIL)

    session = fake_session(ClosingDriver)
    result = asyncio.run(run_unit(unit, session, config, mismatched, "demand-supply"))

    assert result.status == "failed"
    assert result.attempts == 1
    assert len(session.drivers) == 1


def test_concurrency_bounded_and_order_kept(config, fake_session):
    units = make_units(6)
    active = 0
    peak = 0

    async def slow(u, driver, cfg):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        # later units finish first
        await asyncio.sleep(0.001 * (10 - int(u.style.split()[-1])))
        active -= 1
        return UnitResult(unit=u, check="demand-supply", verdict=Verdict.PASS)

    progress = []
    session = fake_session(ClosingDriver)
    results = asyncio.run(run_units(
        units, session, config, slow, "demand-supply",
        progress_callback=lambda pct, msg: progress.append(pct),
    ))

    assert [r.unit for r in results] == units
    assert peak <= config.workers
    assert progress[-1] == 100
    assert len(progress) == 6
    assert all(d.closed for d in session.drivers)


def test_driver_creation_failure_stays_with_its_unit(config, fake_session):
    units = make_units(3)
    created = []

    def factory():
        created.append(1)
        if len(created) == 2:
            raise RuntimeError("Target page, context or browser has been closed")
        return ClosingDriver()

    async def ok(u, driver, cfg):
        return UnitResult(unit=u, check="demand-supply", verdict=Verdict.PASS)

    sequential = dataclasses.replace(config, workers=1, retries=0)
    session = fake_session(factory)
    results = asyncio.run(run_units(units, session, sequential, ok, "demand-supply"))

    assert [r.unit for r in results] == units
    assert [r.status for r in results] == ["passed", "failed", "passed"]
    assert isinstance(results[1].error, RuntimeError)
    assert results[1].check == "demand-supply"
    assert len(session.drivers) == 2
    assert all(d.closed for d in session.drivers)
