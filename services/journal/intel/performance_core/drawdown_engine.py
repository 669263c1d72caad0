"""
Performance Core — Drawdown Engine

Equity curve and drawdown metrics over realized trades in date order.

Equity curve: account baseline + cumulative PnL.
Peak tracking: running maximum of equity, seeded at the baseline.
Drawdown ratio at each point: (equity - peak) / peak, 0 while peak <= 0.
max_drawdown is the most negative ratio (<= 0).

A drawdown period starts at the first trade that leaves equity below its
peak and ends at the trade where equity gets back to or above that peak.
A period still underwater at the last trade is reported unrecovered.
"""

from typing import Iterable

import numpy as np

from .metric_engine import realized_trades, safe_div
from .models import DrawdownPeriod, DrawdownProfile, EquityPoint, Trade


class DrawdownEngine:
    """Equity and drawdown computation seeded at the account baseline."""

    def __init__(self, account_balance: float = 0.0):
        self.account_balance = float(account_balance)

    def _series(self, trades: list[Trade]) -> tuple[np.ndarray, np.ndarray]:
        pnl = np.array([t.pnl_or_zero for t in trades], dtype=np.float64)
        equity = self.account_balance + np.cumsum(pnl)
        peaks = np.maximum.accumulate(np.concatenate(([self.account_balance], equity)))[1:]
        return equity, peaks

    def equity_curve(self, trades: Iterable[Trade]) -> list[EquityPoint]:
        """
        Starting point at the baseline, then one point per realized trade.

        Empty input returns an empty curve.
        """
        closed = realized_trades(trades)
        if not closed:
            return []

        points = [EquityPoint(
            time=closed[0].date,
            equity=self.account_balance,
            pnl=0.0,
            cumulative_pnl=0.0,
        )]
        equity = self.account_balance
        for trade in closed:
            equity += trade.pnl_or_zero
            points.append(EquityPoint(
                time=trade.date,
                equity=equity,
                pnl=trade.pnl_or_zero,
                cumulative_pnl=equity - self.account_balance,
                trade_id=trade.id,
            ))
        return points

    def total_return_pct(self, trades: Iterable[Trade]) -> float:
        """(final equity - baseline) / baseline * 100. Zero baseline → 0."""
        closed = realized_trades(trades)
        net = sum(t.pnl_or_zero for t in closed)
        return safe_div(net, self.account_balance) * 100

    def max_drawdown(self, trades: Iterable[Trade]) -> float:
        """Most negative (equity - peak) / peak ratio. 0 for empty input."""
        closed = realized_trades(trades)
        if not closed:
            return 0.0
        equity, peaks = self._series(closed)
        safe_peaks = np.where(peaks > 0, peaks, 1.0)
        ratios = np.where(peaks > 0, (equity - peaks) / safe_peaks, 0.0)
        return float(min(0.0, np.min(ratios)))

    def drawdown_periods(self, trades: Iterable[Trade]) -> list[DrawdownPeriod]:
        closed = realized_trades(trades)
        if not closed:
            return []
        equity, peaks = self._series(closed)
        return self._identify_periods(closed, equity, peaks)

    def compute(self, trades: Iterable[Trade]) -> DrawdownProfile:
        """Full drawdown profile. Empty input returns a zero-filled profile."""
        closed = realized_trades(trades)
        if not closed:
            return DrawdownProfile(max_drawdown=0.0, max_drawdown_amount=0.0, periods=())

        equity, peaks = self._series(closed)
        amounts = equity - peaks
        periods = self._identify_periods(closed, equity, peaks)

        return DrawdownProfile(
            max_drawdown=self.max_drawdown(closed),
            max_drawdown_amount=float(min(0.0, np.min(amounts))),
            periods=tuple(periods),
        )

    @staticmethod
    def _identify_periods(
        trades: list[Trade],
        equity: np.ndarray,
        peaks: np.ndarray,
    ) -> list[DrawdownPeriod]:
        periods: list[DrawdownPeriod] = []
        start = None
        depth = 0.0

        for i, trade in enumerate(trades):
            underwater = equity[i] < peaks[i]
            if underwater:
                if start is None:
                    start = trade.date
                    depth = 0.0
                if peaks[i] > 0:
                    depth = max(depth, float((peaks[i] - equity[i]) / peaks[i]))
            elif start is not None:
                periods.append(DrawdownPeriod(start=start, end=trade.date, depth=depth, recovered=True))
                start = None

        if start is not None:
            periods.append(DrawdownPeriod(start=start, end=trades[-1].date, depth=depth, recovered=False))
        return periods
