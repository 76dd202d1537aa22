"""Date bucketing for chart series and period-filtered entry lists."""

from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import TypeVar

from getfit.domain.errors import ValidationError
from getfit.domain.stats import Bucket, Granularity, Period
from getfit.services.entries import Entry

T = TypeVar("T", bound=Entry)

DECEMBER = 12
DAILY_WINDOW_DAYS = 30


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Return the calendar date of a timestamp in the given timezone."""
    return moment.astimezone(tz).date()


def sunday_week_start(day: date) -> date:
    """Return the Sunday on or before ``day``.

    Weeks start on Sunday, not on the ISO Monday.
    """
    return day - timedelta(days=(day.weekday() + 1) % 7)


def bucket_start(day: date, granularity: Granularity) -> date:
    """Return the first day of the bucket containing ``day``."""
    if granularity == Granularity.WEEK:
        return sunday_week_start(day)
    if granularity == Granularity.MONTH:
        return day.replace(day=1)
    return day


def _next_bucket(start: date, granularity: Granularity) -> date:
    if granularity == Granularity.WEEK:
        return start + timedelta(days=7)
    if granularity == Granularity.MONTH:
        if start.month == DECEMBER:
            return start.replace(year=start.year + 1, month=1)
        return start.replace(month=start.month + 1)
    return start + timedelta(days=1)


def bucket_starts(start: date, end: date, granularity: Granularity) -> list[date]:
    """Return the start date of every bucket covering ``[start, end]``."""
    if end < start:
        raise ValidationError(f"Range end {end} is before start {start}")
    starts = []
    current = bucket_start(start, granularity)
    while current <= end:
        starts.append(current)
        current = _next_bucket(current, granularity)
    return starts


def bucket_label(start: date, granularity: Granularity) -> str:
    if granularity == Granularity.MONTH:
        return start.strftime("%Y-%m")
    return start.isoformat()


def aggregate(  # noqa: PLR0913
    entries: Iterable[T],
    value: Callable[[T], float],
    start: date,
    end: date,
    granularity: Granularity = Granularity.DAY,
    tz: tzinfo = UTC,
) -> list[Bucket]:
    """Sum ``value(entry)`` per bucket over the inclusive range.

    Every bucket in the range is present, zero when nothing falls in it.
    Entries whose local date lies outside ``[start, end]`` are skipped.
    """
    starts = bucket_starts(start, end, granularity)
    totals = dict.fromkeys(starts, 0.0)
    for entry in entries:
        day = local_date(entry.logged_at, tz)
        if day < start or day > end:
            continue
        totals[bucket_start(day, granularity)] += value(entry)
    return [
        Bucket(start=key, label=bucket_label(key, granularity), value=totals[key])
        for key in starts
    ]


def _one_year_before(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        # Feb 29
        return moment.replace(year=moment.year - 1, day=28)


def filter_by_period(entries: Iterable[T], period: Period, now: datetime) -> list[T]:
    """Return entries inside the look-back window, newest first.

    Daily keeps the last 30 days, monthly the last 12 months, annual all.
    """
    if period == Period.DAILY:
        cutoff: datetime | None = now - timedelta(days=DAILY_WINDOW_DAYS)
    elif period == Period.MONTHLY:
        cutoff = _one_year_before(now)
    else:
        cutoff = None
    selected = [
        entry for entry in entries if cutoff is None or entry.logged_at >= cutoff
    ]
    return sorted(selected, key=lambda entry: entry.logged_at, reverse=True)
