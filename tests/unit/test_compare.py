# tests/unit/test_compare.py
import pytest

from parity.compare import align_and_compare, compare_by_label, find_pivot
from parity.exceptions import PivotNotFound
from parity.model import LabeledSeries


def test_pivot_is_first_occurrence():
    labels = ["OCT", "NOV", "DEC", "JAN", "FEB", "MAR", "APR", "MAY",
              "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]
    assert find_pivot("DEC", labels) == 2
    assert find_pivot("OCT", labels) == 0


def test_pivot_missing_raises():
    with pytest.raises(PivotNotFound) as excinfo:
        find_pivot("JUL", ["OCT", "NOV", "DEC"])
    assert excinfo.value.pivot_label == "JUL"
    assert "JUL" in excinfo.value.message
    assert "OCT, NOV, DEC" in excinfo.value.message


def test_aligned_from_pivot_and_compared_to_shorter_side():
    right_labels = ["OCT", "NOV", "DEC", "JAN", "FEB"]
    right_values = [1, 2, 30, 40, 50]
    result = align_and_compare("DEC", [30, 40, 50, 60, 70], right_labels, right_values)
    assert result.compared_count == 3
    assert result.mismatches == []
    assert result.labels == ("DEC", "JAN", "FEB")


def test_mismatch_records_position_and_label():
    result = align_and_compare("DEC", [30, 41, 50], ["NOV", "DEC", "JAN", "FEB"], [2, 30, 40, 50])
    assert result.compared_count == 3
    assert len(result.mismatches) == 1
    record = result.mismatches[0]
    assert (record.index, record.label, record.left_value, record.right_value) == (1, "JAN", 41, 40)
    assert str(record) == "JAN: 41 != 40"


def test_short_left_limits_comparison():
    result = align_and_compare("JAN", [5], ["JAN", "FEB"], [5, 6])
    assert result.compared_count == 1
    assert not result.mismatches


def test_align_raises_when_pivot_absent():
    with pytest.raises(PivotNotFound):
        align_and_compare("MAR", [1, 2], ["JAN", "FEB"], [1, 2])


def test_compare_by_label_uses_first_occurrence():
    left = LabeledSeries(["JAN", "FEB"], [10, 20])
    right = LabeledSeries(["DEC", "JAN", "FEB", "JAN"], [0, 10, 21, 99])
    result = compare_by_label(left, right, name="Base / Dark Green")
    assert result.compared_count == 2
    assert [(m.label, m.left_value, m.right_value) for m in result.mismatches] == [("FEB", 20, 21)]


def test_compare_by_label_skips_missing_months():
    left = LabeledSeries(["JAN", "MAR"], [10, 30])
    right = LabeledSeries(["JAN", "FEB"], [10, 20])
    result = compare_by_label(left, right)
    assert result.compared_count == 1
    assert result.mismatches == []
