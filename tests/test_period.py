from datetime import date

from fuel_ledger.utils.period import (
    ALL_TIME,
    resolve_period,
    period_label,
    parse_month,
    previous_day,
)


def test_month_resolution_handles_leap_february():
    p = resolve_period("month", month="2024-02")
    assert (p.start_date, p.end_date) == ("2024-02-01", "2024-02-29")


def test_december_does_not_leak_into_january():
    p = resolve_period("month", month="2023-12")
    assert (p.start_date, p.end_date) == ("2023-12-01", "2023-12-31")


def test_non_leap_february():
    p = resolve_period("month", month="2023-02")
    assert p.end_date == "2023-02-28"


def test_range_accepts_dates_and_open_bounds():
    p = resolve_period("range", start_date=date(2024, 1, 10), end_date=None)
    assert p.start_date == "2024-01-10"
    assert p.end_date is None
    assert period_label(p) == "Period: 2024-01-10 to —"


def test_all_mode_is_unbounded():
    p = resolve_period("all")
    assert p.is_unbounded
    assert p == ALL_TIME
    assert period_label(p) == "Period: All Time"


def test_malformed_month_degrades_to_all_time():
    p = resolve_period("month", month="2024-13")
    assert p.is_unbounded
    assert period_label(p) == "Period: All Time"
    assert parse_month("garbage") is None


def test_month_label():
    assert period_label(resolve_period("month", month="2024-01")) == "Period: 2024-01"


def test_contains_is_inclusive():
    p = resolve_period("range", start_date="2024-01-10", end_date="2024-01-31")
    assert p.contains("2024-01-10")
    assert p.contains("2024-01-31")
    assert not p.contains("2024-02-01")


def test_previous_day_crosses_year():
    assert previous_day("2024-01-01") == "2023-12-31"


def test_months_past_the_calendar_limit_are_unbounded():
    for month in ("9999-12", "9999-01", "10000-01", "0000-05"):
        p = resolve_period("month", month=month)
        assert p.is_unbounded, month
        assert period_label(p) == "Period: All Time"
