"""
Performance Core — Trade Journal

In-memory trade book with copy-on-write updates plus the analytics facade
the dashboard and reports read from.

Every mutation builds a new tuple and swaps it in; a tuple handed out by
`trades` is never changed afterwards, so derived views computed from it
stay consistent with the snapshot they were built from.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Union

from shared.logutil import LogUtil

from .calendar_engine import CalendarEngine
from .metric_engine import MetricEngine
from .models import (
    AnalyticsConfig,
    CalendarResult,
    DashboardMetrics,
    PerformanceReport,
    Trade,
    TradeStatus,
    TradeSummary,
    ViewMode,
)
from .period_engine import PeriodEngine
from .pnl_engine import create_trade, derive_pnl, is_listed
from .score_engine import ScoreEngine
from .trade_adapter import adapt_trades

# Fields a caller may never set through update_trade
_IMMUTABLE_FIELDS = ("id", "pnl", "created_at", "updated_at")


def _as_config(config: Union[AnalyticsConfig, Dict[str, Any], None]) -> AnalyticsConfig:
    if isinstance(config, AnalyticsConfig):
        return config
    if config is None:
        return AnalyticsConfig()
    return AnalyticsConfig.from_config(config)


class TradeJournal:
    def __init__(
        self,
        config: Union[AnalyticsConfig, Dict[str, Any], None] = None,
        logger=None,
        trades: Iterable[Trade] = (),
    ):
        self.config = _as_config(config)
        self.logger = logger or LogUtil("journal")
        self._trades: tuple[Trade, ...] = tuple(trades)

        self._periods = PeriodEngine(self.config)
        self._metrics = MetricEngine(self.config)

    @classmethod
    def from_records(
        cls,
        records: Iterable[dict],
        config: Union[AnalyticsConfig, Dict[str, Any], None] = None,
        logger=None,
    ) -> "TradeJournal":
        """Load raw records through the trade adapter. Invalid records are skipped."""
        records = list(records)
        journal = cls(config, logger, adapt_trades(records))
        skipped = len(records) - len(journal.trades)
        if skipped:
            journal.logger.warn(f"Skipped {skipped} invalid trade record(s)")
        journal.logger.info(f"Loaded {len(journal.trades)} trades", emoji="📥")
        return journal

    @property
    def trades(self) -> tuple[Trade, ...]:
        return self._trades

    def _check_symbol(self, trade: Trade) -> None:
        if trade.status is TradeStatus.CLOSED and not is_listed(trade.symbol):
            self.logger.warn(
                f"No contract spec for {trade.symbol}; pnl uses price difference × quantity "
                f"(trade_id={trade.id})"
            )

    # -------------------------------------------------
    # CRUD
    # -------------------------------------------------

    def get_trade(self, trade_id: str) -> Trade:
        for trade in self._trades:
            if trade.id == trade_id:
                return trade
        raise KeyError(trade_id)

    def add_trade(self, **fields: Any) -> Trade:
        """Create a trade (see create_trade) and append it."""
        trade = create_trade(**fields)
        self._check_symbol(trade)
        self._trades = self._trades + (trade,)
        self.logger.info(f"Created trade: {trade.side.value} {trade.quantity} {trade.symbol}", emoji="📝")
        return trade

    def update_trade(self, trade_id: str, **updates: Any) -> Trade:
        """
        Replace fields on an existing trade.

        pnl is re-derived from the updated prices and updated_at is bumped.
        Closing a trade without an exit price raises ValueError.
        """
        blocked = [k for k in updates if k in _IMMUTABLE_FIELDS]
        if blocked:
            raise ValueError(f"cannot update {', '.join(blocked)}")

        current = self.get_trade(trade_id)
        updated = current.with_updates(updated_at=datetime.now(timezone.utc), **updates)
        if updated.status is TradeStatus.CLOSED and updated.exit_price is None:
            raise ValueError(f"closed trade requires exit_price (trade_id={trade_id})")
        updated = updated.with_updates(pnl=derive_pnl(updated))

        self._check_symbol(updated)
        self._trades = tuple(updated if t.id == trade_id else t for t in self._trades)
        self.logger.info(f"Updated trade {trade_id}", emoji="📝")
        return updated

    def delete_trade(self, trade_id: str) -> bool:
        remaining = tuple(t for t in self._trades if t.id != trade_id)
        if len(remaining) == len(self._trades):
            return False
        self._trades = remaining
        self.logger.info(f"Deleted trade {trade_id}", emoji="🗑️")
        return True

    # -------------------------------------------------
    # Analytics
    # -------------------------------------------------

    def filtered(self, view_mode=ViewMode.ALL, selected_date=None) -> list[Trade]:
        return self._periods.filter_trades(self._trades, view_mode, selected_date)

    def summary(self, view_mode=ViewMode.ALL, selected_date=None) -> TradeSummary:
        label = self._periods.period_label(view_mode, selected_date)
        return self._metrics.summarize(self.filtered(view_mode, selected_date), period=label)

    def calendar(self, month) -> CalendarResult:
        return CalendarEngine().generate(self._trades, month)

    def report(self, view_mode=ViewMode.ALL, selected_date=None) -> PerformanceReport:
        from . import compute_performance_report

        label = self._periods.period_label(view_mode, selected_date)
        return compute_performance_report(
            self.filtered(view_mode, selected_date), self.config, period=label
        )

    def dashboard(self, reference_time: Optional[datetime] = None) -> DashboardMetrics:
        return ScoreEngine().compute(self._trades, self.config, reference_time)
