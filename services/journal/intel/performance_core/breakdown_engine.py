"""
Performance Core — Breakdown Engine

Time-of-day / day-of-week performance buckets and the symbol PnL
correlation matrix.

Bucket keys come from the trade date converted to the configured
reporting timezone (UTC by default), the same zone the period filter uses.

Correlation note: each symbol's per-trade PnL sequence is correlated
as-is, without aligning by date. Means and variances use each full
series; the covariance walks the first series' indices. When the second
series is shorter the pairing is undefined and the cell is 0. Sequences
of different lengths give a number with no statistical meaning; it is
kept because the dashboard has always shown it.
"""

import math
from collections import defaultdict
from typing import Iterable, Optional

import numpy as np

from .calendar_engine import sunday_weekday
from .metric_engine import realized_trades, safe_div
from .models import AnalyticsConfig, CorrelationCell, TimeBucket, Trade

DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def pearson(series1, series2) -> float:
    """Population Pearson correlation over series1's indices. Undefined → 0."""
    a = np.asarray(series1, dtype=np.float64)
    b = np.asarray(series2, dtype=np.float64)
    if a.size == 0 or b.size < a.size:
        return 0.0

    mean1 = float(np.mean(a))
    mean2 = float(np.mean(b))
    var1 = float(np.mean((a - mean1) ** 2))
    var2 = float(np.mean((b - mean2) ** 2))
    covariance = float(np.sum((a - mean1) * (b[: a.size] - mean2)) / a.size)
    return safe_div(covariance, math.sqrt(var1) * math.sqrt(var2))


class BreakdownEngine:
    """Partitions realized trades into time buckets. All methods are pure."""

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or AnalyticsConfig()

    @staticmethod
    def _bucket(key: int, label: str, pnls: list[float]) -> TimeBucket:
        wins = sum(1 for p in pnls if p > 0)
        total = float(sum(pnls))
        return TimeBucket(
            key=key,
            label=label,
            trades=len(pnls),
            winning_trades=wins,
            win_rate=safe_div(wins, len(pnls)) * 100,
            avg_pnl=safe_div(total, len(pnls)),
            total_pnl=total,
        )

    def hourly_performance(self, trades: Iterable[Trade]) -> list[TimeBucket]:
        """24 buckets, hour 0..23 in the reporting timezone."""
        by_hour: dict[int, list[float]] = defaultdict(list)
        for trade in realized_trades(trades):
            by_hour[trade.date.astimezone(self.config.tz).hour].append(trade.pnl_or_zero)
        return [self._bucket(h, f"{h:02d}:00", by_hour.get(h, [])) for h in range(24)]

    def daily_performance(self, trades: Iterable[Trade]) -> list[TimeBucket]:
        """7 buckets, Sunday (0) through Saturday (6)."""
        by_day: dict[int, list[float]] = defaultdict(list)
        for trade in realized_trades(trades):
            local_day = trade.date.astimezone(self.config.tz).date()
            by_day[sunday_weekday(local_day)].append(trade.pnl_or_zero)
        return [self._bucket(d, DAY_LABELS[d], by_day.get(d, [])) for d in range(7)]

    def correlation_matrix(self, trades: Iterable[Trade]) -> list[list[CorrelationCell]]:
        """
        N×N grid over symbols in first-seen order, diagonal included.

        O(n²) in the number of symbols; callers should memoize per trade list.
        """
        series: dict[str, list[float]] = {}
        for trade in realized_trades(trades):
            series.setdefault(trade.symbol, []).append(trade.pnl_or_zero)

        symbols = list(series)
        return [
            [
                CorrelationCell(s1, s2, pearson(series[s1], series[s2]))
                for s2 in symbols
            ]
            for s1 in symbols
        ]
