import pytest

from parity.config_service import ParityConfig
from parity.dom import PageSnapshot
from parity.results import ComparisonUnit
from parity.text_ops import MONTH_CODES


def month_run(start, count):
    """Consecutive month codes, wrapping past DEC."""
    i = MONTH_CODES.index(start)
    return [MONTH_CODES[(i + n) % 12] for n in range(count)]


def value_cell(value, as_input):
    if as_input:
        return f'<td><input type="number" value="{value}"></td>'
    return f"<td>{value}</td>"


def build_supply_html(headers, values, label="Demand forecast", as_input=True):
    head = "".join(f"<th>{h} 2025</th>" for h in headers)
    cells = "".join(value_cell(v, as_input) for v in values)
    other = "".join("<td>0</td>" for _ in values)
    return f"""
    <html><body>
      <h2>Supply Planning</h2>
      <table>
        <thead><tr><th>Metric</th>{head}</tr></thead>
        <tbody>
          <tr><td>{label}</td>{cells}</tr>
          <tr><td>Receipts</td>{other}</tr>
        </tbody>
      </table>
    </body></html>
    """


def build_demand_html(headers, year_rows, locked=True, label="Gross sales"):
    """
    year_rows: list of (start_year, values) for "<label> [start-end]" rows.
    A last-year row is always added and must be ignored.
    """
    icons = '<svg class="lucide lucide-lock"></svg><svg class="lucide lucide-check"></svg>' if locked else ""
    head = "".join(f"<th>{h}</th>" for h in headers)
    body = ""
    for year, values in year_rows:
        cells = "".join(value_cell(v, as_input=True) for v in values)
        body += f"<tr><td>{label} [{year}–{year + 1}]</td>{cells}</tr>"
    body += f"<tr><td>{label} (LY) [2024-2025]</td>" + "".join("<td>9</td>" for _ in headers) + "</tr>"
    return f"""
    <html><body>
      <div><span>Forecast Predictions</span>{icons}</div>
      <h3>Stats by Year</h3>
      <table>
        <tr><th>Metric</th>{head}</tr>
        {body}
      </table>
    </body></html>
    """


class FakeDriver:
    """Stands in for the Playwright page driver: pages are canned HTML keyed by URL or link name."""

    def __init__(self, pages, buttons=()):
        self.pages = dict(pages)
        self.buttons = set(buttons)
        self.current = ""
        self.visited = []
        self.clicked = []
        self.closed = False

    async def goto(self, url):
        self.visited.append(url)
        self.current = self.pages.get(url, "<html><body></body></html>")

    async def settle(self, ms):
        return None

    async def snapshot(self):
        return PageSnapshot.from_html(self.current)

    async def wait_for_text(self, text, timeout_ms):
        return text in PageSnapshot.from_html(self.current).root.get_text()

    async def click_link(self, name, timeout_ms=None):
        self.clicked.append(name)
        self.visited.append(name)
        self.current = self.pages[name]

    async def click_text(self, text, timeout_ms=None):
        self.clicked.append(text)

    async def click_button_if_present(self, name):
        if name not in self.buttons:
            return False
        self.clicked.append(name)
        self.current = self.pages.get(name, self.current)
        return True

    async def reveal_year_rows(self, row_label, settle_ms=500):
        self.clicked.append("Show year 2")

    async def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, driver_factory):
        self.driver_factory = driver_factory
        self.drivers = []

    async def new_driver(self):
        driver = self.driver_factory()
        self.drivers.append(driver)
        return driver


@pytest.fixture
def config():
    """Run configuration with every wait set to zero."""
    return ParityConfig(
        brand_key="uat-bocop",
        domain="staging.example.com",
        settle_ms=0,
        render_wait_ms=0,
        selector_timeout_ms=10,
        lost_sales_timeout_ms=10,
        workers=2,
        retries=1,
    )


@pytest.fixture
def unit():
    return ComparisonUnit(
        brand_key="uat-bocop",
        department="Mens",
        category="Tops",
        class_name="Shirts",
        style="Base",
        color="Dark Green",
    )


@pytest.fixture
def months():
    return month_run


@pytest.fixture
def supply_html():
    return build_supply_html


@pytest.fixture
def demand_html():
    return build_demand_html


@pytest.fixture
def snapshot_of():
    return PageSnapshot.from_html


@pytest.fixture
def fake_driver():
    return FakeDriver


@pytest.fixture
def fake_session():
    return FakeSession
