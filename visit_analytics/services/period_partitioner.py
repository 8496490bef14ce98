"""
Period partitioning for trend queries.

Splits a lookback window ending on a reference date into contiguous,
non-overlapping time buckets whose unit depends on the window length:

| RangeKind       | Lookback  | Bucket            | Label          |
|-----------------|-----------|-------------------|----------------|
| last-7-days     | 7 days    | day               | 'Mon'          |
| last-month      | 1 month   | 7-day week        | 'Week 1'       |
| last-3-months   | 3 months  | calendar month    | 'Jan'          |
| last-6-months   | 6 months  | calendar month    | 'Jan'          |
| last-year       | 12 months | calendar month    | 'Jan'          |
| last-3-years    | 3 years   | calendar quarter  | 'Q1 2026'      |

RANGE_POLICIES is the only place this table exists; everything else looks
the policy up by RangeKind.

Window boundaries:
- day: the reference day and the six days before it
- week: the reference day shifted back one calendar month (day clamped)
- month: first day of the month N months before the reference month
- quarter: first day of the quarter three years before the reference quarter

Bucket bounds are inclusive calendar dates. Month and quarter buckets end on
the true last day of their unit, clipped to the reference date; the final
week is truncated the same way. Generation stops once the cursor passes the
reference day, so every valid window yields at least one bucket and the
buckets cover [window start, reference end] exactly.

Usage:
    from visit_analytics.services.period_partitioner import partition

    buckets = partition("last-6-months", date(2026, 6, 30))
    [b.label for b in buckets]
    # ['Dec', 'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun']
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Union

from visit_analytics.models.enums import Granularity, RangeKind
from visit_analytics.services.errors import InvalidArgument


# =============================================================================
# Value Objects
# =============================================================================


@dataclass(frozen=True)
class TimeBucket:
    """
    One aggregation unit of a trend series.

    Attributes:
        start: First day of the bucket (inclusive).
        end: Last day of the bucket (inclusive).
        label: Display label, e.g. 'Tue', 'Week 2', 'Mar', 'Q3 2025'.
    """
    start: date
    end: date
    label: str

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class RangePolicy:
    """Granularity and lookback for one RangeKind."""
    granularity: Granularity
    lookback_days: int = 0
    lookback_months: int = 0


RANGE_POLICIES: Dict[RangeKind, RangePolicy] = {
    RangeKind.LAST_7_DAYS: RangePolicy(Granularity.DAY, lookback_days=7),
    RangeKind.LAST_MONTH: RangePolicy(Granularity.WEEK, lookback_months=1),
    RangeKind.LAST_3_MONTHS: RangePolicy(Granularity.MONTH, lookback_months=3),
    RangeKind.LAST_6_MONTHS: RangePolicy(Granularity.MONTH, lookback_months=6),
    RangeKind.LAST_YEAR: RangePolicy(Granularity.MONTH, lookback_months=12),
    RangeKind.LAST_3_YEARS: RangePolicy(Granularity.QUARTER, lookback_months=36),
}

# camelCase names sent by older dashboard clients
LEGACY_RANGE_ALIASES: Dict[str, RangeKind] = {
    "lastSevenDays": RangeKind.LAST_7_DAYS,
    "lastMonth": RangeKind.LAST_MONTH,
    "lastThreeMonths": RangeKind.LAST_3_MONTHS,
    "lastSixMonths": RangeKind.LAST_6_MONTHS,
    "lastYear": RangeKind.LAST_YEAR,
    "lastThreeYears": RangeKind.LAST_3_YEARS,
}

WEEK_LENGTH_DAYS: int = 7


# =============================================================================
# Argument Parsing
# =============================================================================


def parse_range_kind(value: Union[str, RangeKind]) -> RangeKind:
    """
    Resolve a range kind from its canonical or legacy name.

    Raises:
        InvalidArgument: If the value names no supported window.
    """
    if isinstance(value, RangeKind):
        return value
    if isinstance(value, str):
        name = value.strip()
        if name in LEGACY_RANGE_ALIASES:
            return LEGACY_RANGE_ALIASES[name]
        try:
            return RangeKind(name.lower())
        except ValueError:
            pass
    supported = ", ".join(kind.value for kind in RangeKind)
    raise InvalidArgument(f"Unknown range kind {value!r}; expected one of: {supported}")


def parse_date(value: Union[str, date]) -> date:
    """
    Accept a date, a datetime (its date part is used) or an ISO 'YYYY-MM-DD' string.

    Raises:
        InvalidArgument: If the value cannot be read as a calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise InvalidArgument(f"Malformed date {value!r}; expected YYYY-MM-DD")


# =============================================================================
# Calendar Helpers
# =============================================================================


def shift_months(day: date, months: int) -> date:
    """
    Move a date by whole calendar months, clamping the day of month.

    >>> shift_months(date(2026, 3, 31), -1)
    datetime.date(2026, 2, 28)
    """
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def quarter_start(day: date) -> date:
    first_month = ((day.month - 1) // 3) * 3 + 1
    return date(day.year, first_month, 1)


def quarter_of(day: date) -> int:
    return (day.month - 1) // 3 + 1


def window_start(range_kind: Union[str, RangeKind], reference_end: Union[str, date]) -> date:
    """First day covered by the window of `range_kind` ending on `reference_end`."""
    kind = parse_range_kind(range_kind)
    end = parse_date(reference_end)
    policy = RANGE_POLICIES[kind]

    if policy.granularity is Granularity.DAY:
        return end - timedelta(days=policy.lookback_days - 1)
    if policy.granularity is Granularity.WEEK:
        return shift_months(end, -policy.lookback_months)
    if policy.granularity is Granularity.MONTH:
        return shift_months(end, -policy.lookback_months).replace(day=1)
    return quarter_start(shift_months(end, -policy.lookback_months))


# =============================================================================
# Bucket Generators
# =============================================================================


def _daily_buckets(start: date, end: date) -> List[TimeBucket]:
    buckets = []
    cursor = start
    while cursor <= end:
        buckets.append(TimeBucket(cursor, cursor, cursor.strftime("%a")))
        cursor += timedelta(days=1)
    return buckets


def _weekly_buckets(start: date, end: date) -> List[TimeBucket]:
    buckets = []
    cursor = start
    while cursor <= end:
        week_end = min(cursor + timedelta(days=WEEK_LENGTH_DAYS - 1), end)
        buckets.append(TimeBucket(cursor, week_end, f"Week {len(buckets) + 1}"))
        cursor += timedelta(days=WEEK_LENGTH_DAYS)
    return buckets


def _monthly_buckets(start: date, end: date) -> List[TimeBucket]:
    buckets = []
    cursor = start
    while cursor <= end:
        bucket_end = min(month_end(cursor), end)
        buckets.append(TimeBucket(cursor, bucket_end, cursor.strftime("%b")))
        cursor = shift_months(cursor.replace(day=1), 1)
    return buckets


def _quarterly_buckets(start: date, end: date) -> List[TimeBucket]:
    buckets = []
    cursor = start
    while cursor <= end:
        bucket_end = min(month_end(shift_months(cursor, 2)), end)
        label = f"Q{quarter_of(cursor)} {cursor.year}"
        buckets.append(TimeBucket(cursor, bucket_end, label))
        cursor = shift_months(cursor, 3)
    return buckets


_GENERATORS: Dict[Granularity, Callable[[date, date], List[TimeBucket]]] = {
    Granularity.DAY: _daily_buckets,
    Granularity.WEEK: _weekly_buckets,
    Granularity.MONTH: _monthly_buckets,
    Granularity.QUARTER: _quarterly_buckets,
}


# =============================================================================
# Public API
# =============================================================================


def granularity_for(range_kind: Union[str, RangeKind]) -> Granularity:
    return RANGE_POLICIES[parse_range_kind(range_kind)].granularity


def partition(
    range_kind: Union[str, RangeKind],
    reference_end: Union[str, date],
) -> List[TimeBucket]:
    """
    Split the window of `range_kind` ending on `reference_end` into buckets.

    Args:
        range_kind: A RangeKind or its string name (canonical or legacy alias).
        reference_end: Last day of the window, inclusive.

    Returns:
        Ordered, contiguous buckets; the first starts on the window start and
        the last ends on `reference_end`.

    Raises:
        InvalidArgument: For an unknown range kind or a malformed date.

    Example:
        >>> [b.label for b in partition("last-month", date(2026, 10, 17))]
        ['Week 1', 'Week 2', 'Week 3', 'Week 4', 'Week 5']
    """
    kind = parse_range_kind(range_kind)
    end = parse_date(reference_end)
    start = window_start(kind, end)
    return _GENERATORS[RANGE_POLICIES[kind].granularity](start, end)
