"""
Performance Core — Contract Specification Table

Static futures contract specifications keyed by root symbol.
Loaded once at import; the mapping is read-only.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional

from .models import ContractSpec

# Fallback precision for instruments without a spec
DEFAULT_PRICE_DECIMALS = 2

_SPECS = (
    ContractSpec("ES", tick_size=0.25, tick_value=12.50, point_value=50),        # E-mini S&P 500
    ContractSpec("NQ", tick_size=0.25, tick_value=5.00, point_value=20),         # E-mini NASDAQ-100
    ContractSpec("YM", tick_size=1.0, tick_value=5.00, point_value=5),           # E-mini Dow
    ContractSpec("RTY", tick_size=0.10, tick_value=5.00, point_value=50),        # E-mini Russell 2000
    ContractSpec("CL", tick_size=0.01, tick_value=10.00, point_value=1000),      # Crude oil
    ContractSpec("NG", tick_size=0.001, tick_value=10.00, point_value=10000),    # Natural gas
    ContractSpec("GC", tick_size=0.10, tick_value=10.00, point_value=100),       # Gold
    ContractSpec("SI", tick_size=0.005, tick_value=25.00, point_value=5000),     # Silver
    ContractSpec("EUR", tick_size=0.00005, tick_value=6.25, point_value=125000),  # Euro FX
    ContractSpec("GBP", tick_size=0.0001, tick_value=6.25, point_value=62500),   # British pound
    ContractSpec("JPY", tick_size=0.0000005, tick_value=6.25, point_value=12500000),  # Japanese yen
    ContractSpec("ZN", tick_size=0.015625, tick_value=15.625, point_value=1000),  # 10Y note
    ContractSpec("ZB", tick_size=0.03125, tick_value=31.25, point_value=1000),   # 30Y bond
)

CONTRACT_SPECS: Mapping[str, ContractSpec] = MappingProxyType(
    {spec.symbol: spec for spec in _SPECS}
)


def get_contract_info(symbol: str) -> Optional[ContractSpec]:
    """Case-insensitive lookup. None for unlisted instruments."""
    if not symbol:
        return None
    return CONTRACT_SPECS.get(symbol.strip().upper())


def tick_decimals(tick_size: float) -> int:
    """
    Decimal digits in the tick size's shortest representation.

    0.25 -> 2, 0.015625 -> 6, 1.0 -> 0, 0.0000005 -> 7.
    """
    exponent = Decimal(repr(float(tick_size))).normalize().as_tuple().exponent
    return max(0, -exponent)


def format_price(symbol: str, price: float) -> str:
    """Render a price with the precision implied by the symbol's tick size."""
    spec = get_contract_info(symbol)
    decimals = tick_decimals(spec.tick_size) if spec else DEFAULT_PRICE_DECIMALS
    return f"{price:.{decimals}f}"
