"""
Performance Core — Score Engine

Dashboard-only derived values and the NBS composite score.

NBS score (display blend, not a statistic):
    NBS = 0.30 * win_rate
        + 0.20 * min(risk_reward, 5) / 5 * 100
        + 0.20 * min(profit_factor, 5) / 5 * 100
        + 0.20 * (1 - min(|max_drawdown|, 1)) * 100
        + 0.10 * trade_frequency * 100

    Rounded half-up, then clamped to [0, 100].
"""

import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from .drawdown_engine import DrawdownEngine
from .metric_engine import MetricEngine, realized_trades, safe_div
from .models import AnalyticsConfig, DashboardMetrics, Trade

NBS_WEIGHT_WIN_RATE = 0.30
NBS_WEIGHT_RISK_REWARD = 0.20
NBS_WEIGHT_PROFIT_FACTOR = 0.20
NBS_WEIGHT_DRAWDOWN = 0.20
NBS_WEIGHT_FREQUENCY = 0.10

# Ratios above this cap score full marks
RATIO_CAP = 5.0

SECONDS_PER_DAY = 86400.0


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ScoreEngine:
    """Dashboard score components. Every input is guarded; output is always finite."""

    @staticmethod
    def risk_reward_ratio(average_win: float, average_loss: float) -> float:
        """|average_win| / |average_loss|. No losses → 0."""
        return safe_div(abs(average_win), abs(average_loss))

    @staticmethod
    def trade_frequency(
        trades: Iterable[Trade],
        reference_time: Optional[datetime] = None,
    ) -> float:
        """Trades per day since the earliest trade, with at least one day elapsed."""
        trades = list(trades)
        if not trades:
            return 0.0
        now = reference_time or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        first = min(t.date for t in trades)
        elapsed_days = max(1.0, (now - first).total_seconds() / SECONDS_PER_DAY)
        return len(trades) / elapsed_days

    @staticmethod
    def nbs_score(
        win_rate: float,
        risk_reward: float,
        profit_factor: float,
        max_drawdown: float,
        trade_frequency: float,
    ) -> int:
        raw = (
            NBS_WEIGHT_WIN_RATE * win_rate
            + NBS_WEIGHT_RISK_REWARD * min(risk_reward, RATIO_CAP) / RATIO_CAP * 100
            + NBS_WEIGHT_PROFIT_FACTOR * min(profit_factor, RATIO_CAP) / RATIO_CAP * 100
            + NBS_WEIGHT_DRAWDOWN * (1 - min(abs(max_drawdown), 1.0)) * 100
            + NBS_WEIGHT_FREQUENCY * trade_frequency * 100
        )
        if not math.isfinite(raw):
            return 0
        return int(_clamp(_round_half_up(raw)))

    def compute(
        self,
        trades: Iterable[Trade],
        config: Optional[AnalyticsConfig] = None,
        reference_time: Optional[datetime] = None,
    ) -> DashboardMetrics:
        config = config or AnalyticsConfig()
        trades = list(trades)
        summary = MetricEngine(config).summarize(trades)
        max_dd = DrawdownEngine(config.account_balance).max_drawdown(trades)
        rr = self.risk_reward_ratio(summary.average_win, summary.average_loss)
        freq = self.trade_frequency(realized_trades(trades), reference_time)

        return DashboardMetrics(
            total_pnl=summary.total_pnl,
            total_trades=summary.total_trades,
            winning_trades=summary.winning_trades,
            losing_trades=summary.losing_trades,
            win_rate=summary.win_rate,
            average_win=summary.average_win,
            average_loss=summary.average_loss,
            risk_reward_ratio=rr,
            profit_factor=summary.profit_factor,
            max_drawdown=max_dd,
            trade_frequency=freq,
            expectancy=summary.trade_expectancy,
            nbs_score=self.nbs_score(
                summary.win_rate, rr, summary.profit_factor, max_dd, freq
            ),
        )
