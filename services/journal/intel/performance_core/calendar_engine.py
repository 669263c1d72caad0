"""
Performance Core — Calendar Engine

Buckets trades into a 7-wide month grid using UTC day boundaries.

Grid:
    leading filler  : previous-month days padding the first row (Sunday start)
    real days       : 1..days_in_month, one cell each
    trailing filler : next-month days padding the last row to Saturday

Rules:
    - Filler days carry no trades and never enter monthly statistics.
    - cumulative_pnl runs across the whole month (never reset weekly).
    - A week closes on Saturday or on the month's last day, whichever
      comes first, and emits exactly one WeeklySummary.
    - Monthly max_drawdown / max_profit are single-day extremes.
    - avg_daily_pnl divides by calendar days in the month.
"""

import calendar
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Iterable

from .models import (
    CalendarDay,
    CalendarResult,
    MonthlySummary,
    SessionType,
    Trade,
    WeeklySummary,
    to_utc,
)

SATURDAY = 6


def sunday_weekday(day: date) -> int:
    """Day of week with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def _is_weekend(day_of_week: int) -> bool:
    return day_of_week in (0, SATURDAY)


def _filler(day: date, cumulative_pnl: float, leading: bool) -> CalendarDay:
    dow = sunday_weekday(day)
    return CalendarDay(
        date=day,
        net_pnl=0.0,
        trade_count=0,
        trades=(),
        cumulative_pnl=cumulative_pnl,
        day_of_week=dow,
        is_weekend=_is_weekend(dow),
        is_market_holiday=leading,
        is_market_open=False,
        session_type=SessionType.HOLIDAY,
        is_filler=True,
    )


class CalendarEngine:
    """Stateless month-grid aggregation. generate() is a pure function."""

    @staticmethod
    def _group_by_day(trades: Iterable[Trade]) -> dict[date, list[Trade]]:
        grouped: dict[date, list[Trade]] = defaultdict(list)
        for trade in trades:
            grouped[trade.date.date()].append(trade)
        return grouped

    def generate(self, trades: Iterable[Trade], month_anchor: Any) -> CalendarResult:
        """
        Build the calendar grid and rollups for the month containing month_anchor.

        month_anchor is interpreted in UTC. None raises ValueError.
        """
        if month_anchor is None:
            raise ValueError("month_anchor is required")

        anchor = to_utc(month_anchor)
        year, month = anchor.year, anchor.month
        days_in_month = calendar.monthrange(year, month)[1]
        first = date(year, month, 1)
        last = date(year, month, days_in_month)
        by_day = self._group_by_day(trades)

        cells: list[CalendarDay] = []
        weeks: list[WeeklySummary] = []

        # Leading filler up to the first weekday
        lead = sunday_weekday(first)
        for offset in range(lead, 0, -1):
            cells.append(_filler(first - timedelta(days=offset), 0.0, leading=True))

        cumulative = 0.0
        total_trades = 0
        total_wins = 0
        max_drawdown = 0.0
        max_profit = 0.0

        week_pnl = 0.0
        week_trades = 0
        week_wins = 0
        week_worst = 0.0
        week_best = 0.0

        for day_num in range(1, days_in_month + 1):
            day = date(year, month, day_num)
            day_trades = tuple(by_day.get(day, ()))
            net = sum(t.pnl_or_zero for t in day_trades)
            wins = sum(1 for t in day_trades if t.pnl_or_zero > 0)

            cumulative += net
            total_trades += len(day_trades)
            total_wins += wins
            max_drawdown = min(max_drawdown, net)
            max_profit = max(max_profit, net)

            week_pnl += net
            week_trades += len(day_trades)
            week_wins += wins
            week_worst = min(week_worst, net)
            week_best = max(week_best, net)

            dow = sunday_weekday(day)
            weekend = _is_weekend(dow)
            cells.append(CalendarDay(
                date=day,
                net_pnl=net,
                trade_count=len(day_trades),
                trades=day_trades,
                cumulative_pnl=cumulative,
                day_of_week=dow,
                is_weekend=weekend,
                is_market_holiday=False,
                is_market_open=not weekend,
                session_type=SessionType.HOLIDAY if weekend else SessionType.REGULAR,
            ))

            if dow == SATURDAY or day_num == days_in_month:
                weeks.append(WeeklySummary(
                    week=(day_num - 1) // 7 + 1,
                    pnl=week_pnl,
                    cumulative_pnl=cumulative,
                    trades=week_trades,
                    winning_trades=week_wins,
                    win_rate=(week_wins / week_trades * 100) if week_trades else 0.0,
                    max_drawdown=week_worst,
                    max_profit=week_best,
                ))
                week_pnl = 0.0
                week_trades = week_wins = 0
                week_worst = week_best = 0.0

        # Trailing filler through Saturday
        trail = SATURDAY - sunday_weekday(last)
        for offset in range(1, trail + 1):
            cells.append(_filler(last + timedelta(days=offset), cumulative, leading=False))

        monthly = MonthlySummary(
            pnl=cumulative,
            trades=total_trades,
            winning_trades=total_wins,
            cumulative_pnl=cumulative,
            max_drawdown=max_drawdown,
            max_profit=max_profit,
            win_rate=(total_wins / total_trades * 100) if total_trades else 0.0,
            avg_daily_pnl=cumulative / days_in_month,
            avg_trade_pnl=(cumulative / total_trades) if total_trades else 0.0,
        )

        return CalendarResult(
            calendar_data=tuple(cells),
            weekly_summaries=tuple(weeks),
            monthly_summary=monthly,
        )
