"""
Performance Core — Data Models

Frozen data contracts for the journal performance analytics.
Trades are normalized once, at construction. Every derived structure
(calendar days, summaries, reports) is rebuilt on each computation call
and carries no identity of its own.
"""

import math
import uuid
from dataclasses import dataclass, field, asdict, replace
from datetime import date as date_type, datetime, timezone
from enum import Enum
from typing import Any, Optional

import pytz


class Side(Enum):
    """Trade direction."""
    LONG = "long"
    SHORT = "short"


class TradeStatus(Enum):
    """Lifecycle state. PnL is only meaningful once CLOSED."""
    OPEN = "open"
    CLOSED = "closed"


class ViewMode(Enum):
    """Reporting granularity for period filtering."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL = "all"


class SessionType(Enum):
    """
    Calendar session classification.

    Weekend-derived only. There is no exchange holiday calendar.
    """
    REGULAR = "regular"
    HOLIDAY = "holiday"


def _coerce_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{field_name} must be one of [{allowed}], got {value!r}")


def to_utc(value: Any) -> datetime:
    """Normalize a datetime, date or ISO 8601 string to an aware UTC datetime.

    Naive values are interpreted as UTC.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    elif isinstance(value, date_type) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if not isinstance(value, datetime):
        raise ValueError(f"expected a datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be numeric, got {value!r}")
    if not math.isfinite(amount):
        raise ValueError(f"{field_name} must be finite, got {value!r}")
    return amount


def _non_negative(value: Any, field_name: str) -> float:
    amount = _optional_float(value, field_name)
    if amount is None:
        return 0.0
    if amount < 0:
        raise ValueError(f"{field_name} must be >= 0, got {amount}")
    return amount


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Trade:
    """
    A single journal trade.

    Normalized on creation: UTC date, uppercase symbol, enum side/status,
    integer quantity, float money fields with fees defaulting to 0.
    Invalid input raises ValueError.
    """
    id: str
    date: datetime
    symbol: str
    side: Side
    status: TradeStatus
    quantity: int
    entry_price: float
    exit_price: Optional[float] = None
    pnl: Optional[float] = None
    commission: float = 0.0
    fees: float = 0.0
    swap: float = 0.0
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    strategy: Optional[str] = None
    timeframe: Optional[str] = None
    notes: Optional[str] = None
    tags: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        set_ = object.__setattr__

        if not self.id:
            raise ValueError("id must be a non-empty string")

        symbol = str(self.symbol or "").strip().upper()
        if not symbol:
            raise ValueError(f"symbol must be non-empty (trade_id={self.id})")
        set_(self, "symbol", symbol)

        set_(self, "date", to_utc(self.date))
        set_(self, "created_at", to_utc(self.created_at))
        set_(self, "updated_at", to_utc(self.updated_at))
        set_(self, "side", _coerce_enum(Side, self.side, "side"))
        set_(self, "status", _coerce_enum(TradeStatus, self.status, "status"))

        try:
            quantity = float(self.quantity)
        except (TypeError, ValueError):
            raise ValueError(f"quantity must be numeric, got {self.quantity!r}")
        if not math.isfinite(quantity) or quantity <= 0 or quantity != int(quantity):
            raise ValueError(
                f"quantity must be a positive whole number of contracts, "
                f"got {self.quantity} (trade_id={self.id})"
            )
        set_(self, "quantity", int(quantity))

        entry = _optional_float(self.entry_price, "entry_price")
        if entry is None or entry <= 0:
            raise ValueError(
                f"entry_price must be > 0, got {self.entry_price} (trade_id={self.id})"
            )
        set_(self, "entry_price", entry)

        set_(self, "exit_price", _optional_float(self.exit_price, "exit_price"))
        set_(self, "pnl", _optional_float(self.pnl, "pnl"))
        set_(self, "stop_loss", _optional_float(self.stop_loss, "stop_loss"))
        set_(self, "take_profit", _optional_float(self.take_profit, "take_profit"))

        for name in ("commission", "fees", "swap"):
            set_(self, name, _non_negative(getattr(self, name), name))

        set_(self, "tags", tuple(str(t) for t in (self.tags or ())))

    @staticmethod
    def new_id() -> str:
        """Generate a new trade ID."""
        return str(uuid.uuid4())

    @property
    def realized(self) -> bool:
        """Closed with a computed PnL. Only realized trades enter the metrics."""
        return self.status is TradeStatus.CLOSED and self.pnl is not None

    @property
    def pnl_or_zero(self) -> float:
        return self.pnl if self.pnl is not None else 0.0

    def with_updates(self, **changes) -> "Trade":
        """Return a re-validated copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        d = asdict(self)
        d["side"] = self.side.value
        d["status"] = self.status.value
        d["tags"] = list(self.tags)
        for key in ("date", "created_at", "updated_at"):
            d[key] = d[key].isoformat()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Trade":
        """Create from a dictionary produced by to_dict()."""
        return cls(**dict(d))


@dataclass(frozen=True)
class ContractSpec:
    """Static futures contract specification. Loaded once, never mutated."""
    symbol: str
    tick_size: float
    tick_value: float
    point_value: float
    currency: str = "USD"


@dataclass(frozen=True)
class AnalyticsConfig:
    """
    Explicit analytics configuration.

    account_balance : equity curve / drawdown baseline
    week_starts_on  : Python weekday the reporting week starts on (0 = Monday)
    timezone        : zone used for period boundaries and hour/day buckets
    """
    account_balance: float = 0.0
    week_starts_on: int = 0
    timezone: str = "UTC"
    log_level: str = "INFO"

    def __post_init__(self):
        if not 0 <= int(self.week_starts_on) <= 6:
            raise ValueError(f"week_starts_on must be 0..6, got {self.week_starts_on}")
        try:
            pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"unknown timezone: {self.timezone!r}")
        if not math.isfinite(float(self.account_balance)):
            raise ValueError(f"account_balance must be finite, got {self.account_balance!r}")
        object.__setattr__(self, "week_starts_on", int(self.week_starts_on))
        object.__setattr__(self, "account_balance", float(self.account_balance))

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    @classmethod
    def from_config(cls, config: dict) -> "AnalyticsConfig":
        """Build from the flat config dict produced by shared.config."""
        try:
            return cls(
                account_balance=float(config.get("JOURNAL_ACCOUNT_BALANCE", 0) or 0),
                week_starts_on=int(config.get("JOURNAL_WEEK_STARTS_ON", 0) or 0),
                timezone=str(config.get("JOURNAL_TIMEZONE") or "UTC"),
                log_level=str(config.get("LOG_LEVEL") or "INFO").upper(),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid journal config: {e}")


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalendarDay:
    """One cell of the 7-wide month grid. day_of_week: 0 = Sunday .. 6 = Saturday."""
    date: date_type
    net_pnl: float
    trade_count: int
    trades: tuple[Trade, ...]
    cumulative_pnl: float
    day_of_week: int
    is_weekend: bool
    is_market_holiday: bool
    is_market_open: bool
    session_type: SessionType
    is_filler: bool = False


@dataclass(frozen=True)
class WeeklySummary:
    """Week rollup, captured when the week closes (Saturday or month end)."""
    week: int
    pnl: float
    cumulative_pnl: float
    trades: int
    winning_trades: int
    win_rate: float
    max_drawdown: float
    max_profit: float


@dataclass(frozen=True)
class MonthlySummary:
    """
    Month rollup over real (non-filler) days.

    max_drawdown is the worst single-day net PnL, not a peak-to-trough figure.
    avg_daily_pnl divides by calendar days in the month.
    """
    pnl: float
    trades: int
    winning_trades: int
    cumulative_pnl: float
    max_drawdown: float
    max_profit: float
    win_rate: float
    avg_daily_pnl: float
    avg_trade_pnl: float


@dataclass(frozen=True)
class CalendarResult:
    calendar_data: tuple[CalendarDay, ...]
    weekly_summaries: tuple[WeeklySummary, ...]
    monthly_summary: MonthlySummary


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TradeSummary:
    """
    Period summary over realized trades.

    gross_loss is a positive magnitude; average_loss and largest_loss
    are negative (or 0 when there are no losing trades).
    """
    period: str
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    open_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    average_trade_pnl: float = 0.0
    profit_factor: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    total_commission: float = 0.0
    total_fees: float = 0.0
    total_swap: float = 0.0
    net_pnl: float = 0.0
    trade_expectancy: float = 0.0


@dataclass(frozen=True)
class EquityPoint:
    """A single point on the equity curve."""
    time: datetime
    equity: float
    pnl: float
    cumulative_pnl: float
    trade_id: Optional[str] = None


@dataclass(frozen=True)
class DrawdownPeriod:
    """An underwater stretch of the equity curve. depth is a positive ratio of peak."""
    start: datetime
    end: datetime
    depth: float
    recovered: bool


@dataclass(frozen=True)
class DrawdownProfile:
    max_drawdown: float
    max_drawdown_amount: float
    periods: tuple[DrawdownPeriod, ...]


@dataclass(frozen=True)
class StreakProfile:
    """
    Current streaks run backwards from the most recent entry.
    A non-positive result counts as a loss for streak purposes.
    """
    current_trade_streak: int = 0
    current_trade_streak_winning: Optional[bool] = None
    current_day_streak: int = 0
    current_day_streak_winning: Optional[bool] = None
    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0
    max_consecutive_winning_days: int = 0
    max_consecutive_losing_days: int = 0


@dataclass(frozen=True)
class DailyStats:
    trading_days: int = 0
    winning_days: int = 0
    losing_days: int = 0
    breakeven_days: int = 0
    average_daily_pnl: float = 0.0
    average_winning_day_pnl: float = 0.0
    average_losing_day_pnl: float = 0.0
    largest_profitable_day: float = 0.0
    largest_losing_day: float = 0.0
    win_rate_by_days: float = 0.0


@dataclass(frozen=True)
class MonthlyStats:
    best_month: float = 0.0
    worst_month: float = 0.0
    average_monthly_pnl: float = 0.0
    months: int = 0


@dataclass(frozen=True)
class TimeBucket:
    """Hour-of-day or day-of-week performance bucket."""
    key: int
    label: str
    trades: int
    winning_trades: int
    win_rate: float
    avg_pnl: float
    total_pnl: float


@dataclass(frozen=True)
class CorrelationCell:
    symbol1: str
    symbol2: str
    correlation: float


@dataclass(frozen=True)
class PerformanceReport:
    """
    Complete performance bundle.

    Every bundle includes a version tag and generation timestamp.
    """
    version: str
    timestamp_generated: datetime
    summary: TradeSummary
    equity_curve: tuple[EquityPoint, ...]
    total_return_pct: float
    drawdown: DrawdownProfile
    streaks: StreakProfile
    daily: DailyStats
    monthly: MonthlyStats
    sharpe_ratio: float
    sortino_ratio: float
    hourly_performance: tuple[TimeBucket, ...]
    daily_performance: tuple[TimeBucket, ...]
    correlation_matrix: tuple[tuple[CorrelationCell, ...], ...]


@dataclass(frozen=True)
class DashboardMetrics:
    """Dashboard widgets. nbs_score is a display blend, not a statistic."""
    total_pnl: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    average_win: float
    average_loss: float
    risk_reward_ratio: float
    profit_factor: float
    max_drawdown: float
    trade_frequency: float
    expectancy: float
    nbs_score: int


@dataclass(frozen=True)
class PeriodWindow:
    """Reporting window in UTC. end is inclusive only for daily views."""
    view_mode: ViewMode
    start: datetime
    end: datetime
    end_inclusive: bool

    def contains(self, ts: datetime) -> bool:
        if ts < self.start:
            return False
        return ts <= self.end if self.end_inclusive else ts < self.end
