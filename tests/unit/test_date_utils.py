"""Unit tests for month key helpers"""

import pytest
from datetime import date
from spendio_gateway.utils.date_utils import month_bounds, month_key, parse_month, previous_month, shift_month


def test_month_bounds_leap_february():
    assert month_bounds("2028-02") == (date(2028, 2, 1), date(2028, 2, 29))


def test_month_bounds_december():
    assert month_bounds("2026-12") == (date(2026, 12, 1), date(2026, 12, 31))


def test_month_key():
    assert month_key(date(2026, 3, 9)) == "2026-03"


def test_previous_month_wraps_year():
    assert previous_month("2026-01") == "2025-12"
    assert previous_month("2026-07") == "2026-06"


def test_shift_month_across_years():
    assert shift_month("2026-02", -5) == "2025-09"
    assert shift_month("2026-11", 3) == "2027-02"
    assert shift_month("2026-06", 0) == "2026-06"


@pytest.mark.parametrize("value", ["2026-13", "2026-3", "202603", "march", "2026-00"])
def test_parse_month_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_month(value)
