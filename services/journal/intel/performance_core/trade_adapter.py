"""
Performance Core — Trade Adapter

Bridges raw journal records (form posts, JSON exports) → Trade objects.

Handles:
    - camelCase keys from the web form (entryPrice, stopLoss, createdAt, ...)
    - Stringy numerics ("4500.25", "2") and blank strings as missing values
    - Comma-separated tag strings
    - Missing ids (a fresh uuid is assigned)
    - Missing status (closed when an exit price is present, else open)
    - PnL re-derivation: closed trades with an exit price always get
      their pnl from calculate_pnl, whatever the record says

Records that fail validation are skipped (adapt_trade returns None).
"""

from typing import Any, Iterable, Optional

from .models import Trade, TradeStatus
from .pnl_engine import derive_pnl

# camelCase → Trade field name
_KEY_MAP: dict[str, str] = {
    "entryPrice": "entry_price",
    "exitPrice": "exit_price",
    "stopLoss": "stop_loss",
    "takeProfit": "take_profit",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

_TRADE_FIELDS = frozenset(Trade.__dataclass_fields__)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(t.strip() for t in value.split(",") if t.strip())
    return tuple(str(t) for t in value)


def normalize_record(record: dict) -> dict:
    """Map a raw record onto Trade field names. Unknown keys are dropped."""
    fields: dict[str, Any] = {}
    for key, value in record.items():
        name = _KEY_MAP.get(key, key)
        if name in _TRADE_FIELDS:
            fields[name] = _blank_to_none(value)

    fields["tags"] = _parse_tags(fields.get("tags"))
    if not fields.get("id"):
        fields["id"] = Trade.new_id()
    if fields.get("status") is None:
        has_exit = fields.get("exit_price") is not None
        fields["status"] = TradeStatus.CLOSED if has_exit else TradeStatus.OPEN
    for name in ("created_at", "updated_at"):
        if fields.get(name) is None:
            fields.pop(name, None)
    return fields


def adapt_trade(record: dict) -> Optional[Trade]:
    """Convert a single raw record to a Trade, or None if it is invalid."""
    try:
        trade = Trade(**normalize_record(record))
    except (TypeError, ValueError):
        return None

    if trade.status is TradeStatus.OPEN:
        return trade.with_updates(pnl=None) if trade.pnl is not None else trade
    derived = derive_pnl(trade)
    if derived is not None:
        return trade.with_updates(pnl=derived)
    return trade


def adapt_trades(records: Iterable[dict]) -> list[Trade]:
    """Convert raw records to Trades. Invalid records are skipped."""
    trades = []
    for record in records:
        trade = adapt_trade(record)
        if trade is not None:
            trades.append(trade)
    return trades
