# tests/unit/test_locator.py
from parity.locator import (
    YEAR_RANGE_RE,
    find_first_row,
    find_header_labels,
    find_rows,
    year_range_pattern,
)
from parity.dom import rows, text_of


def test_header_needs_six_month_cells(snapshot_of):
    snap = snapshot_of("""
        <table>
          <tr><th>JAN</th><th>FEB</th><th>MAR</th></tr>
          <tr><th>Metric</th><th>OCT</th><th>NOV</th><th>DEC</th><th>JAN</th><th>FEB</th><th>MAR</th></tr>
        </table>
    """)
    table = snap.tables()[0]
    assert find_header_labels(rows(table)) == ["OCT", "NOV", "DEC", "JAN", "FEB", "MAR"]


def test_header_missing_returns_empty(snapshot_of):
    snap = snapshot_of("<table><tr><td>a</td><td>b</td></tr></table>")
    assert find_header_labels(rows(snap.tables()[0])) == []


def test_first_row_with_label_wins(snapshot_of, supply_html, months):
    snap = snapshot_of(supply_html(months("DEC", 6), [1, 2, 3, 4, 5, 6]))
    located = find_first_row(snap, "Demand forecast")
    assert located is not None
    assert "Demand forecast" in text_of(located.row)
    assert located.header_labels == ("DEC", "JAN", "FEB", "MAR", "APR", "MAY")


def test_not_found_is_none_not_exception(snapshot_of, supply_html, months):
    snap = snapshot_of(supply_html(months("DEC", 6), [1, 2, 3, 4, 5, 6], label="Something else"))
    assert find_first_row(snap, "Demand forecast") is None
    assert find_rows(snap, "Demand forecast") == []


def test_exclusions_and_year_pattern(snapshot_of, demand_html, months):
    snap = snapshot_of(demand_html(months("OCT", 12), [(2026, [1] * 12), (2027, [2] * 3)]))
    located = find_rows(snap, "Gross sales", exclude=("(LY)", "(LLY)"), pattern=year_range_pattern("Gross sales"))
    assert [int(r.match.group(1)) for r in located] == [2026, 2027]


def test_rows_collected_across_tables_with_nearest_header(snapshot_of):
    head = "".join(f"<th>{m}</th>" for m in ["JAN", "FEB", "MAR", "APR", "MAY", "JUN"])
    snap = snapshot_of(f"""
        <table><tr><th></th>{head}</tr><tr><td>Gross sales [2025-2026]</td><td>1</td></tr></table>
        <table><tr><td>Gross sales [2026-2027]</td><td>2</td></tr></table>
    """)
    located = find_rows(snap, "Gross sales", pattern=year_range_pattern("Gross sales"))
    assert len(located) == 2
    assert located[1].header_labels == ("JAN", "FEB", "MAR", "APR", "MAY", "JUN")


def test_year_range_accepts_hyphen_and_en_dash():
    assert YEAR_RANGE_RE.search("[2026-2027]").groups() == ("2026", "2027")
    assert YEAR_RANGE_RE.search("[2026–2027]").groups() == ("2026", "2027")
    assert YEAR_RANGE_RE.search("2026-2027") is None
