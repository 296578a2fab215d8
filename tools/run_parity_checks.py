#!/usr/bin/env python3
# tools/run_parity_checks.py
"""
Command-line tool to run the planning parity checks for a brand.

Usage:
    python tools/run_parity_checks.py <check> [--brand uat-bocop] [--limit N] [--workers N] [--output results.csv] [--visible]

Checks:
    demand-supply   Supply Planning "Demand forecast" vs Forecasts "Gross sales"
    lost-sales      Supply Monitoring lost sales vs Supply Planning "Potential Lost Sales"

Examples:
    # Demand = Supply for the default brand
    python tools/run_parity_checks.py demand-supply

    # Quick lost-sales validation of the first 10 products
    python tools/run_parity_checks.py lost-sales --brand uat-bocop --limit 10

    # Against production, with a visible browser (for debugging)
    PROD=true python tools/run_parity_checks.py demand-supply --visible --workers 1
"""

import argparse
import asyncio
import dataclasses
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path so we can import from parity
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from config import get_profile
from parity.browser import PlaywrightSession
from parity.config_service import ConfigManager, ParityConfig
from parity.demand_supply import run_comparison, CHECK_NAME as DEMAND_SUPPLY
from parity.exceptions import AuthError
from parity.lost_sales import run_lost_sales, CHECK_NAME as LOST_SALES
from parity.products import load_units
from parity.reporting import summarise, write_results_csv
from parity.runner import run_units

CHECKS = {
    DEMAND_SUPPLY: run_comparison,
    LOST_SALES: run_lost_sales,
}


def print_progress(pct: int, msg: str):
    """Print progress updates"""
    print(f"[{pct:3d}%] {msg}")


def build_config(args) -> ParityConfig:
    load_dotenv()
    environ = dict(os.environ)
    if args.brand:
        environ["BRAND_KEY"] = args.brand
    config = ParityConfig.from_manager(ConfigManager(args.config), environ)

    overrides = {}
    if args.limit is not None:
        overrides["test_limit"] = args.limit
    if args.workers is not None:
        overrides["workers"] = args.workers
    if args.visible:
        overrides["headless"] = False
    return dataclasses.replace(config, **overrides)


async def main() -> int:
    parser = argparse.ArgumentParser(
        description="Run planning page parity checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("check", choices=sorted(CHECKS), help="Which comparison to run")
    parser.add_argument("--brand", help="Brand key (default: BRAND_KEY env or config default_brand)")
    parser.add_argument("--config", default="config.json", help="Path to config.json")
    parser.add_argument("--products", help="Override the brand's product CSV")
    parser.add_argument("--limit", type=int, help="Only run the first N products")
    parser.add_argument("--workers", type=int, help="Parallel browser contexts")
    parser.add_argument("--output", "-o", help="CSV results file (default: profile RESULTS_FILE)")
    parser.add_argument("--append", action="store_true", help="Append to the results file")
    parser.add_argument("--visible", action="store_true", help="Run browser in visible mode (not headless)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = build_config(args)
    output = args.output or get_profile(os.environ).RESULTS_FILE
    products_csv = args.products or config.products_csv
    if not products_csv:
        print(f"ERROR: No product CSV configured for brand {config.brand_key}")
        return 2

    try:
        units = load_units(Path(products_csv), config.brand_key, limit=config.test_limit)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 2

    print(f"=== Planning parity: {args.check} ===")
    print(f"Brand: {config.brand_key}")
    print(f"Domain: {config.domain}")
    print(f"Products: {len(units)}")
    print(f"Workers: {config.workers}")
    print(f"Headless: {config.headless}")
    print()

    try:
        async with PlaywrightSession(
            Path(config.storage_state),
            headless=config.headless,
            navigation_timeout_ms=config.navigation_timeout_ms,
        ) as session:
            results = await run_units(
                units, session, config, CHECKS[args.check], args.check, progress_callback=print_progress
            )
    except AuthError as e:
        print(f"ERROR: {e.message}")
        print("\nPlease run authentication bootstrap first:")
        print("    python tools/auth_bootstrap.py")
        return 1

    output_path = write_results_csv(results, Path(output), append=args.append)

    summary = summarise(results)
    print()
    print("=== Results ===")
    print(f"  Passed:   {summary['passed']}  (advisory: {summary['advisory']})")
    print(f"  Failed:   {summary['failed']}")
    print(f"  Skipped:  {summary['skipped']}")

    failed = [r for r in results if r.status == "failed"]
    if failed:
        print("\nFailures:")
        for r in failed:
            print(f"  - {r.unit.name} [{r.error_type}] {r.error_message.splitlines()[0] if r.error_message else ''}")

    print(f"\nResults saved to: {output_path.resolve()}")
    return 0 if not failed else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
