# ==============================================================================
# Time-Series Rebucketer
# ==============================================================================
"""
Regroups a daily (or already coarser) time series into day, week or month
buckets for charting.

Bucket keys:
- day: the point's own date key, unchanged
- week: ISO date of the Monday on or before the point's date
- month: ISO date of the first day of the point's month

Values are summed, so the total of a series is preserved at every
granularity. Re-bucketing weekly output to months is valid.
"""

from datetime import date, timedelta
from typing import Iterable

from funnelcore.core.models import Granularity, TimeSeriesPoint
from funnelcore.exceptions import InputError


def parse_granularity(value: "Granularity | str") -> Granularity:
    """
    Coerce a granularity name.

    Raises:
        InputError: If the value is not day, week or month
    """
    if isinstance(value, Granularity):
        return value
    try:
        return Granularity(str(value).lower())
    except ValueError as e:
        raise InputError(f"Invalid granularity: {value!r} (expected day, week or month)") from e


def _parse_date_key(date_key: str) -> date:
    try:
        return date.fromisoformat(date_key)
    except ValueError as e:
        raise InputError(f"Invalid date key: {date_key!r}") from e


def bucket_key(date_key: str, granularity: Granularity) -> str:
    """Return the bucket a date key falls into at *granularity*."""
    if granularity == Granularity.DAY:
        _parse_date_key(date_key)
        return date_key
    day = _parse_date_key(date_key)
    if granularity == Granularity.WEEK:
        return (day - timedelta(days=day.weekday())).isoformat()
    return day.replace(day=1).isoformat()


def rebucket_time_series(
    points: Iterable[TimeSeriesPoint], granularity: "Granularity | str"
) -> list[TimeSeriesPoint]:
    """
    Sum points into buckets of the target granularity.

    Args:
        points: Series points, any order
        granularity: day, week or month

    Returns:
        One point per bucket, sorted ascending by bucket date

    Raises:
        InputError: On an unknown granularity or a malformed date key
    """
    target = parse_granularity(granularity)
    grouped: dict[str, int] = {}
    for point in points:
        key = bucket_key(point.date_key, target)
        grouped[key] = grouped.get(key, 0) + point.value
    return [TimeSeriesPoint(date_key=key, value=grouped[key]) for key in sorted(grouped)]
