"""
Performance Core — Period Engine

Selects the trades belonging to a reporting view relative to an anchor date.

Windows (boundaries computed in the configured timezone):
    daily    [start_of_day, end_of_day]                 inclusive
    weekly   [start_of_week, start_of_week + 7 days)    week start configurable
    monthly  [start_of_month, start_of_next_month)

A missing anchor date returns the full trade set. That is the documented
"all time" fallback, not an error.
"""

import calendar
from datetime import date as date_type, datetime, time, timedelta
from typing import Iterable, Optional, Union

from .models import AnalyticsConfig, PeriodWindow, Trade, ViewMode

DateLike = Union[datetime, date_type, str]

_ORDINAL_SUFFIX = {1: "st", 2: "nd", 3: "rd"}


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    return f"{day}{_ORDINAL_SUFFIX.get(day % 10, 'th')}"


def add_months(value, months: int):
    """Shift a date/datetime by whole months, clamping the day to the target month."""
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def coerce_view_mode(view_mode: Union[ViewMode, str]) -> ViewMode:
    if isinstance(view_mode, ViewMode):
        return view_mode
    try:
        return ViewMode(str(view_mode).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in ViewMode)
        raise ValueError(f"view_mode must be one of [{allowed}], got {view_mode!r}")


class PeriodEngine:
    """
    View-mode period filtering, labels and navigation.

    Trade dates are stored in UTC; boundaries are built in
    config.timezone and compared as aware datetimes.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or AnalyticsConfig()

    def _local_date(self, value: DateLike) -> date_type:
        """Calendar date of the anchor as seen in the reporting timezone."""
        if isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            value = datetime.fromisoformat(text)
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(self.config.tz)
            return value.date()
        return value

    def _localize(self, day: date_type) -> datetime:
        return self.config.tz.localize(datetime.combine(day, time.min))

    def period_bounds(
        self,
        view_mode: Union[ViewMode, str],
        selected_date: DateLike,
    ) -> Optional[PeriodWindow]:
        """Window for the view, or None for ViewMode.ALL."""
        mode = coerce_view_mode(view_mode)
        if mode is ViewMode.ALL:
            return None

        day = self._local_date(selected_date)

        if mode is ViewMode.DAILY:
            start = self._localize(day)
            end = self.config.tz.localize(datetime.combine(day, time.max))
            return PeriodWindow(mode, start, end, end_inclusive=True)

        if mode is ViewMode.WEEKLY:
            offset = (day.weekday() - self.config.week_starts_on) % 7
            first = day - timedelta(days=offset)
            return PeriodWindow(
                mode,
                self._localize(first),
                self._localize(first + timedelta(days=7)),
                end_inclusive=False,
            )

        first = day.replace(day=1)
        return PeriodWindow(
            mode,
            self._localize(first),
            self._localize(add_months(first, 1)),
            end_inclusive=False,
        )

    def filter_trades(
        self,
        trades: Iterable[Trade],
        view_mode: Union[ViewMode, str],
        selected_date: Optional[DateLike],
    ) -> list[Trade]:
        """
        Trades inside the view's window, in input order.

        Returns an unfiltered copy when selected_date is None or the
        view is ViewMode.ALL. The input is never mutated.
        """
        if selected_date is None:
            return list(trades)
        window = self.period_bounds(view_mode, selected_date)
        if window is None:
            return list(trades)
        return [t for t in trades if window.contains(t.date)]

    def period_label(
        self,
        view_mode: Union[ViewMode, str],
        selected_date: Optional[DateLike],
    ) -> str:
        """'March 1st, 2024', 'Week of March 1st, 2024', 'March 2024' or 'All time'."""
        mode = coerce_view_mode(view_mode)
        if selected_date is None or mode is ViewMode.ALL:
            return "All time"
        day = self._local_date(selected_date)
        month_name = calendar.month_name[day.month]
        if mode is ViewMode.MONTHLY:
            return f"{month_name} {day.year}"
        long_date = f"{month_name} {_ordinal(day.day)}, {day.year}"
        if mode is ViewMode.WEEKLY:
            return f"Week of {long_date}"
        return long_date

    def navigate(
        self,
        view_mode: Union[ViewMode, str],
        selected_date: Union[datetime, date_type],
        step: int = 1,
    ):
        """Move the anchor by `step` days, weeks or months. ALL views do not move."""
        mode = coerce_view_mode(view_mode)
        if mode is ViewMode.DAILY:
            return selected_date + timedelta(days=step)
        if mode is ViewMode.WEEKLY:
            return selected_date + timedelta(weeks=step)
        if mode is ViewMode.MONTHLY:
            return add_months(selected_date, step)
        return selected_date
