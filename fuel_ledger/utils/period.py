"""
Report period resolution.

A report request is one of three shapes:

  all    -> unbounded on both sides
  month  -> first..last day of a YYYY-MM month
  range  -> start/end passed through (either may be open)

Dates travel as zero-padded ISO strings (YYYY-MM-DD) so the store can compare
them lexicographically; both bounds are inclusive.
"""
from dataclasses import dataclass
from datetime import date, timedelta, MAXYEAR
from typing import Optional

ALL = "all"
MONTH = "month"
RANGE = "range"

MISSING_BOUND = "—"


@dataclass(frozen=True)
class ResolvedPeriod:
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    mode: str = ALL
    month: Optional[str] = None

    @property
    def is_unbounded(self) -> bool:
        return self.start_date is None and self.end_date is None

    def contains(self, day: str) -> bool:
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True


ALL_TIME = ResolvedPeriod()


def month_bounds(year: int, month: int) -> tuple[str, str]:
    """First and last day of a month: last = first of next month minus one day."""
    first = date(year, month, 1)
    if month == 12:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 1, 1)
    last = next_first - timedelta(days=1)
    return first.isoformat(), last.isoformat()


def parse_month(value) -> Optional[tuple[int, int]]:
    """'2024-02' -> (2024, 2). Anything malformed -> None."""
    if not value:
        return None
    parts = str(value).strip().split("-")
    if len(parts) != 2:
        return None
    try:
        year, month = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    # the last representable month has no "first of next month"
    if not 1 <= year < MAXYEAR or not 1 <= month <= 12:
        return None
    return year, month


def _iso_or_none(value) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def resolve_period(
        mode: Optional[str] = ALL,
        month: Optional[str] = None,
        start_date=None,
        end_date=None,
) -> ResolvedPeriod:
    mode = (mode or ALL).lower()

    if mode == MONTH:
        parsed = parse_month(month)
        if parsed is None:
            # malformed month degrades to all-time instead of failing the report
            return ResolvedPeriod(mode=MONTH, month=month)
        start, end = month_bounds(*parsed)
        return ResolvedPeriod(start_date=start, end_date=end, mode=MONTH, month=month)

    if mode == RANGE:
        return ResolvedPeriod(
            start_date=_iso_or_none(start_date),
            end_date=_iso_or_none(end_date),
            mode=RANGE,
        )

    return ResolvedPeriod()


def period_label(period: ResolvedPeriod) -> str:
    if period.mode == MONTH and period.month and not period.is_unbounded:
        return f"Period: {period.month}"
    if period.start_date or period.end_date:
        return (
            f"Period: {period.start_date or MISSING_BOUND} "
            f"to {period.end_date or MISSING_BOUND}"
        )
    return "Period: All Time"


def previous_day(day: str) -> str:
    return (date.fromisoformat(day) - timedelta(days=1)).isoformat()
