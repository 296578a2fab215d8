import json
import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from config import get_profile


# Configure logging
logger = logging.getLogger(__name__)


class ConfigManager:
    def __init__(self, config_path="config.json"):
        self._config_path = config_path
        if os.path.isabs(config_path):
            self._resolved_path = config_path
        else:
            self._resolved_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), self._config_path)
        self._last_load_error = None
        self.config = self._load_config()

    @property
    def last_load_error(self):
        return self._last_load_error

    @property
    def resolved_path(self):
        return self._resolved_path

    def _load_config(self):
        """Load configuration from the file or initialize an empty config."""
        path = self._resolved_path
        if os.path.exists(path):
            try:
                with open(path, "r") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                self._last_load_error = str(e)
                logger.error(f"Invalid JSON in {path}. Loading empty configuration.")
        return {}

    def resolve(self, path):
        """Path from config.json, taken relative to the directory config.json lives in."""
        if path is None or os.path.isabs(path):
            return path
        return os.path.join(os.path.dirname(self._resolved_path), path)

    def get(self, *keys, default=None):
        """
        Access nested values.
        Supports both:
          get("a", "b", "c")  and  get("a.b.c")
        """
        # Allow a single dotted string
        if len(keys) == 1 and isinstance(keys[0], str) and "." in keys[0]:
            keys = keys[0].split(".")

        node = self.config
        for k in keys:
            if isinstance(node, dict) and k in node:
                node = node[k]
            else:
                return default
        return node


@dataclass(frozen=True)
class ParityConfig:
    """Everything a comparison unit needs, passed explicitly into each run."""
    brand_key: str = "uat-bocop"
    domain: str = "staging.flagshipai.com"
    products_csv: Optional[str] = None
    test_limit: Optional[int] = None
    headless: bool = True

    selector_timeout_ms: int = 10000
    lost_sales_timeout_ms: int = 15000
    navigation_timeout_ms: int = 30000
    settle_ms: int = 1000
    render_wait_ms: int = 5000

    supply_label: str = "Demand forecast"
    demand_label: str = "Gross sales"
    demand_exclude: Tuple[str, ...] = ("(LY)", "(LLY)")
    demand_drop_calendar_years: bool = True

    min_compared_months: int = 12
    max_boundary_overlap: int = 3
    timezone: Optional[str] = None

    workers: int = 5
    retries: int = 1
    storage_state: str = "playwright/.auth/user.json"

    @classmethod
    def from_manager(cls, cm: ConfigManager, environ: Optional[Mapping[str, str]] = None) -> "ParityConfig":
        """
        Build the run configuration from config.json plus environment overrides.

        Environment keys: BRAND_KEY, PROD, TEST_LIMIT, PARITY_WORKERS.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        profile = get_profile(environ)
        brand_key = environ.get("BRAND_KEY") or cm.get("default_brand", default=cls.brand_key)
        brands = cm.get("brands", default={}) or {}
        products_csv = cm.resolve(brands.get(brand_key))
        if products_csv is None:
            logger.warning(f"No product list configured for brand {brand_key}")

        test_limit = environ.get("TEST_LIMIT")
        workers = environ.get("PARITY_WORKERS") or cm.get("run.workers", default=cls.workers)

        return cls(
            brand_key=brand_key,
            domain=cm.get("domains", profile.DOMAIN_KEY, default=cls.domain),
            products_csv=products_csv,
            test_limit=int(test_limit) if test_limit else None,
            headless=profile.HEADLESS,
            selector_timeout_ms=int(cm.get("timeouts.selector_ms", default=cls.selector_timeout_ms)),
            lost_sales_timeout_ms=int(cm.get("timeouts.lost_sales_selector_ms", default=cls.lost_sales_timeout_ms)),
            navigation_timeout_ms=int(cm.get("timeouts.navigation_ms", default=cls.navigation_timeout_ms)),
            settle_ms=int(cm.get("timeouts.settle_ms", default=cls.settle_ms)),
            render_wait_ms=int(cm.get("timeouts.render_ms", default=cls.render_wait_ms)),
            supply_label=cm.get("rows.supply_label", default=cls.supply_label),
            demand_label=cm.get("rows.demand_label", default=cls.demand_label),
            demand_exclude=tuple(cm.get("rows.demand_exclude", default=list(cls.demand_exclude))),
            demand_drop_calendar_years=bool(
                cm.get("rows.demand_drop_calendar_years", default=cls.demand_drop_calendar_years)
            ),
            min_compared_months=int(cm.get("comparison.min_compared_months", default=cls.min_compared_months)),
            max_boundary_overlap=int(cm.get("comparison.max_boundary_overlap", default=cls.max_boundary_overlap)),
            timezone=cm.get("comparison.timezone", default=cls.timezone),
            workers=int(workers),
            retries=int(cm.get("run.retries", default=cls.retries)),
            storage_state=cm.resolve(cm.get("run.storage_state", default=cls.storage_state)),
        )
