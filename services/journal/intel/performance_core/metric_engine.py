"""
Performance Core — Metric Engine

Core trade-performance computations over realized trades
(status CLOSED with a pnl). Uses numpy for the statistical reductions.

Formulas:
    win_rate        = winners / realized * 100
    gross_profit    = sum(pnl > 0)
    gross_loss      = |sum(pnl < 0)|                     (positive magnitude)
    profit_factor   = gross_profit / gross_loss          (gross_loss = 0 → 0)
    average_win     = gross_profit / winners
    average_loss    = -gross_loss / losers                (negative convention)
    expectancy      = win_frac * average_win + loss_frac * average_loss
    net_pnl         = total_pnl - total_commission
    sharpe          = mean(pnl) / std(pnl)                 (population σ, σ = 0 → 0)
    sortino         = mean(pnl) / sqrt(Σ(neg - mean)² / n_neg)   (no negatives → 0)

Every ratio is guarded. Nothing here returns NaN or inf, and nothing raises
on empty or degenerate input.
"""

import math
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence

import numpy as np

from .models import (
    AnalyticsConfig,
    DailyStats,
    MonthlyStats,
    StreakProfile,
    Trade,
    TradeStatus,
    TradeSummary,
)

# σ below this is treated as zero variance
_EPSILON = 1e-9


def safe_div(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when undefined."""
    if denominator == 0:
        return 0.0
    result = numerator / denominator
    return float(result) if math.isfinite(result) else 0.0


def realized_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Closed trades with a pnl, sorted ascending by date (stable)."""
    return sorted((t for t in trades if t.realized), key=lambda t: t.date)


def _max_run(flags: Sequence[int]) -> tuple[int, int]:
    """Longest run of +1 and of -1. A 0 breaks both runs."""
    best_win = best_loss = 0
    run_win = run_loss = 0
    for flag in flags:
        if flag > 0:
            run_win += 1
            run_loss = 0
        elif flag < 0:
            run_loss += 1
            run_win = 0
        else:
            run_win = run_loss = 0
        best_win = max(best_win, run_win)
        best_loss = max(best_loss, run_loss)
    return best_win, best_loss


def _current_run(values: Sequence[float]) -> tuple[int, Optional[bool]]:
    """
    Streak ending at the most recent value.

    Win means > 0; anything else counts as a loss. Returns
    (length, winning) or (0, None) for an empty sequence.
    """
    if not values:
        return 0, None
    winning = values[-1] > 0
    length = 0
    for value in reversed(values):
        if (value > 0) != winning:
            break
        length += 1
    return length, winning


class MetricEngine:
    """Stateless metric computation engine. All methods are pure functions."""

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or AnalyticsConfig()

    @staticmethod
    def _pnl_array(trades: Sequence[Trade]) -> np.ndarray:
        return np.array([t.pnl_or_zero for t in trades], dtype=np.float64)

    def _day_key(self, trade: Trade) -> date:
        return trade.date.astimezone(self.config.tz).date()

    def daily_pnl(self, trades: Iterable[Trade]) -> dict[date, float]:
        """Net realized PnL per local calendar day, ordered by day."""
        days: dict[date, float] = defaultdict(float)
        for trade in realized_trades(trades):
            days[self._day_key(trade)] += trade.pnl_or_zero
        return dict(sorted(days.items()))

    # -------------------------------------------------
    # Summary
    # -------------------------------------------------

    def summarize(self, trades: Iterable[Trade], period: str = "") -> TradeSummary:
        """
        Period summary. With no realized trades every metric is zero and
        the period label is still emitted.
        """
        trades = list(trades)
        open_count = sum(1 for t in trades if t.status is TradeStatus.OPEN)
        closed = realized_trades(trades)
        if not closed:
            return TradeSummary(period=period, open_trades=open_count)

        pnl = self._pnl_array(closed)
        wins = pnl[pnl > 0]
        losses = pnl[pnl < 0]
        n = len(pnl)

        gross_profit = float(np.sum(wins))
        gross_loss = float(abs(np.sum(losses)))
        total_pnl = float(np.sum(pnl))
        total_commission = float(sum(t.commission for t in closed))

        win_frac = len(wins) / n
        loss_frac = len(losses) / n
        average_win = safe_div(gross_profit, len(wins))
        average_loss = -safe_div(gross_loss, len(losses))

        return TradeSummary(
            period=period,
            total_trades=n,
            winning_trades=len(wins),
            losing_trades=len(losses),
            breakeven_trades=n - len(wins) - len(losses),
            open_trades=open_count,
            win_rate=win_frac * 100,
            total_pnl=total_pnl,
            gross_profit=gross_profit,
            gross_loss=gross_loss,
            average_win=average_win,
            average_loss=average_loss,
            average_trade_pnl=safe_div(total_pnl, n),
            profit_factor=safe_div(gross_profit, gross_loss),
            largest_win=float(np.max(wins)) if len(wins) else 0.0,
            largest_loss=float(np.min(losses)) if len(losses) else 0.0,
            total_commission=total_commission,
            total_fees=float(sum(t.fees for t in closed)),
            total_swap=float(sum(t.swap for t in closed)),
            net_pnl=total_pnl - total_commission,
            trade_expectancy=win_frac * average_win + loss_frac * average_loss,
        )

    # -------------------------------------------------
    # Risk ratios (raw per-trade returns, not annualized)
    # -------------------------------------------------

    @staticmethod
    def compute_sharpe(pnls: Sequence[float]) -> float:
        """mean / population σ of per-trade PnL. Zero variance → 0."""
        r = np.asarray(pnls, dtype=np.float64)
        if r.size == 0:
            return 0.0
        sigma = float(np.std(r, ddof=0))
        if sigma <= _EPSILON:
            return 0.0
        return safe_div(float(np.mean(r)), sigma)

    @staticmethod
    def compute_sortino(pnls: Sequence[float]) -> float:
        """
        mean / downside deviation.

        Downside deviation is taken over negative trades only, measured
        from the overall mean. No negative trades → 0.
        """
        r = np.asarray(pnls, dtype=np.float64)
        if r.size == 0:
            return 0.0
        mu = float(np.mean(r))
        negatives = r[r < 0]
        if negatives.size == 0:
            return 0.0
        downside = math.sqrt(float(np.mean((negatives - mu) ** 2)))
        if downside <= _EPSILON:
            return 0.0
        return safe_div(mu, downside)

    # -------------------------------------------------
    # Streaks
    # -------------------------------------------------

    def compute_streaks(self, trades: Iterable[Trade]) -> StreakProfile:
        """
        Current and maximum win/loss streaks, per trade and per trading day.

        Current streaks treat any non-positive result as a loss. Maximum
        streaks count strict wins and strict losses; a breakeven entry
        ends both runs.
        """
        closed = realized_trades(trades)
        if not closed:
            return StreakProfile()

        trade_pnls = [t.pnl_or_zero for t in closed]
        day_pnls = list(self.daily_pnl(closed).values())

        trade_len, trade_winning = _current_run(trade_pnls)
        day_len, day_winning = _current_run(day_pnls)
        max_wins, max_losses = _max_run([int(np.sign(p)) for p in trade_pnls])
        max_win_days, max_loss_days = _max_run([int(np.sign(p)) for p in day_pnls])

        return StreakProfile(
            current_trade_streak=trade_len,
            current_trade_streak_winning=trade_winning,
            current_day_streak=day_len,
            current_day_streak_winning=day_winning,
            max_consecutive_wins=max_wins,
            max_consecutive_losses=max_losses,
            max_consecutive_winning_days=max_win_days,
            max_consecutive_losing_days=max_loss_days,
        )

    # -------------------------------------------------
    # Day / month rollups
    # -------------------------------------------------

    def compute_daily_stats(self, trades: Iterable[Trade]) -> DailyStats:
        days = self.daily_pnl(trades)
        if not days:
            return DailyStats()

        values = np.array(list(days.values()), dtype=np.float64)
        winners = values[values > 0]
        losers = values[values < 0]
        n = len(values)

        return DailyStats(
            trading_days=n,
            winning_days=len(winners),
            losing_days=len(losers),
            breakeven_days=n - len(winners) - len(losers),
            average_daily_pnl=safe_div(float(np.sum(values)), n),
            average_winning_day_pnl=safe_div(float(np.sum(winners)), len(winners)),
            average_losing_day_pnl=safe_div(float(np.sum(losers)), len(losers)),
            largest_profitable_day=float(np.max(winners)) if len(winners) else 0.0,
            largest_losing_day=float(np.min(losers)) if len(losers) else 0.0,
            win_rate_by_days=len(winners) / n * 100,
        )

    def compute_monthly_stats(self, trades: Iterable[Trade]) -> MonthlyStats:
        months: dict[tuple[int, int], float] = defaultdict(float)
        for day, pnl in self.daily_pnl(trades).items():
            months[(day.year, day.month)] += pnl
        if not months:
            return MonthlyStats()

        values = list(months.values())
        return MonthlyStats(
            best_month=max(values),
            worst_month=min(values),
            average_monthly_pnl=safe_div(sum(values), len(values)),
            months=len(values),
        )
