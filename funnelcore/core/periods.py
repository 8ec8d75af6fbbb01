# ==============================================================================
# Report and Chart Periods
# ==============================================================================
"""
Named periods used by dashboards.

Report periods (today, week, month, all) end at the last microsecond of the
reference day. Chart periods also pick the granularity the chart is drawn
at: daily for up to a month, weekly for quarters and half-years, monthly for
whole years.
"""

from datetime import datetime, time, timedelta, timezone

from funnelcore.core.models import Granularity, ReportWindow
from funnelcore.exceptions import InputError

REPORT_PERIODS = ("today", "week", "month", "all")
CHART_PERIODS = (
    "last_7_days",
    "last_30_days",
    "last_3_months",
    "last_6_months",
    "this_year",
    "last_year",
)


def _end_of_day(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.max, tzinfo=now.tzinfo)


def _start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def _months_back(now: datetime, months: int) -> datetime:
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    return now.replace(
        year=year, month=month + 1, day=1, hour=0, minute=0, second=0, microsecond=0
    )


def report_window(period: str, now: datetime) -> ReportWindow:
    """
    Resolve a report period name to a window.

    Args:
        period: today, week, month or all
        now: Reference time

    Raises:
        InputError: If the period is unknown
    """
    end = _end_of_day(now)
    if period == "today":
        start = _start_of_day(now)
    elif period == "week":
        start = _start_of_day(now - timedelta(days=7))
    elif period == "month":
        start = _months_back(now, 0)
    elif period == "all":
        start = datetime(1970, 1, 1, tzinfo=now.tzinfo)
    else:
        raise InputError(f"Invalid period: {period!r} (expected one of {', '.join(REPORT_PERIODS)})")
    return ReportWindow(start=start, end=end)


def chart_window(period: str, now: datetime) -> tuple[ReportWindow, Granularity]:
    """
    Resolve a chart period name to a window and its default granularity.

    Unknown names fall back to last_30_days, as the chart selector does.
    """
    if period == "last_7_days":
        return ReportWindow(start=now - timedelta(days=7), end=now), Granularity.DAY
    if period == "last_3_months":
        return ReportWindow(start=_months_back(now, 3), end=now), Granularity.WEEK
    if period == "last_6_months":
        return ReportWindow(start=_months_back(now, 6), end=now), Granularity.WEEK
    if period == "this_year":
        start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        return ReportWindow(start=start, end=now), Granularity.MONTH
    if period == "last_year":
        start = now.replace(
            year=now.year - 1, month=1, day=1, hour=0, minute=0, second=0, microsecond=0
        )
        return ReportWindow(start=start, end=now), Granularity.MONTH
    return ReportWindow(start=now - timedelta(days=30), end=now), Granularity.DAY


def ensure_aware(moment: datetime) -> datetime:
    """Treat a naive timestamp as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
