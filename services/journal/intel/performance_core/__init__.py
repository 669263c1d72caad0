"""
Performance Core v1.0.0

Single source for the journal's performance analytics: PnL, calendar
rollups, period summaries, risk ratios, breakdowns and the dashboard score.
Every function here is pure over an in-memory trade list; nothing reads
or writes storage.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from .models import (
    Side,
    TradeStatus,
    ViewMode,
    SessionType,
    Trade,
    ContractSpec,
    AnalyticsConfig,
    CalendarDay,
    WeeklySummary,
    MonthlySummary,
    CalendarResult,
    TradeSummary,
    EquityPoint,
    DrawdownPeriod,
    DrawdownProfile,
    StreakProfile,
    DailyStats,
    MonthlyStats,
    TimeBucket,
    CorrelationCell,
    PerformanceReport,
    DashboardMetrics,
    PeriodWindow,
)
from .contract_specs import CONTRACT_SPECS, get_contract_info, format_price
from .pnl_engine import calculate_pnl, create_trade
from .period_engine import PeriodEngine
from .calendar_engine import CalendarEngine
from .metric_engine import MetricEngine, realized_trades
from .drawdown_engine import DrawdownEngine
from .breakdown_engine import BreakdownEngine
from .score_engine import ScoreEngine
from .trade_adapter import adapt_trade, adapt_trades
from .versioning import ReportVersion

__version__ = ReportVersion.CURRENT

__all__ = [
    "Side",
    "TradeStatus",
    "ViewMode",
    "SessionType",
    "Trade",
    "ContractSpec",
    "AnalyticsConfig",
    "CalendarDay",
    "WeeklySummary",
    "MonthlySummary",
    "CalendarResult",
    "TradeSummary",
    "EquityPoint",
    "DrawdownPeriod",
    "DrawdownProfile",
    "StreakProfile",
    "DailyStats",
    "MonthlyStats",
    "TimeBucket",
    "CorrelationCell",
    "PerformanceReport",
    "DashboardMetrics",
    "PeriodWindow",
    "CONTRACT_SPECS",
    "PeriodEngine",
    "CalendarEngine",
    "MetricEngine",
    "DrawdownEngine",
    "BreakdownEngine",
    "ScoreEngine",
    "ReportVersion",
    "TradeJournal",
    "adapt_trade",
    "adapt_trades",
    "calculate_pnl",
    "create_trade",
    "format_price",
    "get_contract_info",
    "filter_trades",
    "generate_calendar_data",
    "compute_summary",
    "compute_performance_report",
    "compute_dashboard_metrics",
]


def filter_trades(
    trades: Iterable[Trade],
    view_mode=ViewMode.ALL,
    selected_date=None,
    config: Optional[AnalyticsConfig] = None,
) -> list[Trade]:
    """Trades inside the reporting view. No selected date → everything."""
    return PeriodEngine(config).filter_trades(trades, view_mode, selected_date)


def generate_calendar_data(trades: Iterable[Trade], month_anchor) -> CalendarResult:
    """Month grid, weekly and monthly rollups for the month containing month_anchor (UTC)."""
    return CalendarEngine().generate(trades, month_anchor)


def compute_summary(
    trades: Iterable[Trade],
    view_mode=ViewMode.ALL,
    selected_date=None,
    config: Optional[AnalyticsConfig] = None,
) -> TradeSummary:
    """
    Primary entry point for period summaries.

    Filters to the view, then summarizes. Empty input gives an all-zero
    summary that still carries the period label.
    """
    periods = PeriodEngine(config)
    filtered = periods.filter_trades(trades, view_mode, selected_date)
    label = periods.period_label(view_mode, selected_date)
    return MetricEngine(config).summarize(filtered, period=label)


def compute_performance_report(
    trades: Iterable[Trade],
    config: Optional[AnalyticsConfig] = None,
    period: Optional[str] = None,
) -> PerformanceReport:
    """
    Full versioned report bundle over an already filtered trade set.

    The equity curve and drawdown are seeded at config.account_balance.
    """
    config = config or AnalyticsConfig()
    trades = list(trades)

    metric_eng = MetricEngine(config)
    dd_eng = DrawdownEngine(config.account_balance)
    breakdown_eng = BreakdownEngine(config)
    pnls = [t.pnl_or_zero for t in realized_trades(trades)]

    return PerformanceReport(
        version=ReportVersion().current_version(),
        timestamp_generated=datetime.now(timezone.utc),
        summary=metric_eng.summarize(trades, period=period or "All time"),
        equity_curve=tuple(dd_eng.equity_curve(trades)),
        total_return_pct=dd_eng.total_return_pct(trades),
        drawdown=dd_eng.compute(trades),
        streaks=metric_eng.compute_streaks(trades),
        daily=metric_eng.compute_daily_stats(trades),
        monthly=metric_eng.compute_monthly_stats(trades),
        sharpe_ratio=metric_eng.compute_sharpe(pnls),
        sortino_ratio=metric_eng.compute_sortino(pnls),
        hourly_performance=tuple(breakdown_eng.hourly_performance(trades)),
        daily_performance=tuple(breakdown_eng.daily_performance(trades)),
        correlation_matrix=tuple(
            tuple(row) for row in breakdown_eng.correlation_matrix(trades)
        ),
    )


def compute_dashboard_metrics(
    trades: Iterable[Trade],
    config: Optional[AnalyticsConfig] = None,
    reference_time: Optional[datetime] = None,
) -> DashboardMetrics:
    """Dashboard widgets and the NBS score. reference_time defaults to now (UTC)."""
    return ScoreEngine().compute(trades, config, reference_time)


from .journal import TradeJournal  # noqa: E402
