"""
Performance Core — PnL Engine

Price movement -> dollar PnL for futures contracts.

    price_diff = exit - entry          (long)
               = entry - exit          (short)
    pnl        = price_diff * point_value * quantity     (listed contract)
               = price_diff * quantity                   (unlisted symbol)

The unlisted-symbol path is a deliberate degraded-precision fallback,
not an error. Callers must not assume accurate dollars for it.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from .contract_specs import get_contract_info
from .models import Side, Trade, TradeStatus


def _price_diff(side: Side, entry_price: float, exit_price: float) -> float:
    if side is Side.LONG:
        return exit_price - entry_price
    return entry_price - exit_price


def calculate_pnl(
    symbol: str,
    side: Union[Side, str],
    quantity: float,
    entry_price: float,
    exit_price: float,
) -> float:
    """Dollar PnL for a round trip. Unknown symbols use the unit fallback."""
    side = side if isinstance(side, Side) else Side(str(side).strip().lower())
    diff = _price_diff(side, float(entry_price), float(exit_price))
    spec = get_contract_info(symbol)
    if spec is None:
        return diff * quantity
    return diff * spec.point_value * quantity


def is_listed(symbol: str) -> bool:
    """True when PnL for this symbol uses a real point value."""
    return get_contract_info(symbol) is not None


def derive_pnl(trade: Trade) -> Optional[float]:
    """
    Standard-path PnL for a trade.

    None while the trade is open or has no exit price.
    """
    if trade.status is not TradeStatus.CLOSED or trade.exit_price is None:
        return None
    return calculate_pnl(
        trade.symbol, trade.side, trade.quantity, trade.entry_price, trade.exit_price
    )


def create_trade(
    date: Any,
    symbol: str,
    side: Union[Side, str],
    quantity: int,
    entry_price: float,
    status: Union[TradeStatus, str] = TradeStatus.CLOSED,
    exit_price: Optional[float] = None,
    trade_id: Optional[str] = None,
    now: Optional[datetime] = None,
    **extra: Any,
) -> Trade:
    """
    Build a new Trade with a fresh id and timestamps.

    Closed trades must carry an exit price; their pnl always comes from
    calculate_pnl. Open trades carry pnl=None.
    """
    if "pnl" in extra:
        raise ValueError("pnl is derived from prices and cannot be supplied")

    stamp = now or datetime.now(timezone.utc)
    trade = Trade(
        id=trade_id or Trade.new_id(),
        date=date,
        symbol=symbol,
        side=side,
        status=status,
        quantity=quantity,
        entry_price=entry_price,
        exit_price=exit_price,
        created_at=stamp,
        updated_at=stamp,
        **extra,
    )
    if trade.status is TradeStatus.CLOSED and trade.exit_price is None:
        raise ValueError(f"closed trade requires exit_price (trade_id={trade.id})")
    return trade.with_updates(pnl=derive_pnl(trade))
