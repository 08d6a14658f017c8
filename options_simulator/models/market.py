"""Market data records normalised from the exchange API."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


def to_float(value: Any, default: float = 0.0) -> float:
    """Lenient float conversion for exchange fields (strings, None, blanks)."""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def first_nonzero(*values: Any) -> float:
    """First value that converts to a non-zero float, else 0.0."""
    for value in values:
        number = to_float(value)
        if number:
            return number
    return 0.0


@dataclass(frozen=True)
class Ticker:
    """Snapshot quote for one product."""

    symbol: str
    price: float
    bid: float = 0.0
    ask: float = 0.0
    volume: float = 0.0
    open_interest: float = 0.0
    change_24h: float = 0.0
    change_24h_percent: float = 0.0
    strike_price: float = 0.0
    contract_type: str = ""
    underlying: str = "BTC"
    product_id: int | str | None = None
    mark_iv: float | None = None

    @property
    def mid(self) -> float:
        """Mid of bid/ask, or the mark price when one side is missing."""
        if self.bid > 0 and self.ask > 0:
            return (self.bid + self.ask) / 2.0
        return self.price

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Ticker":
        """Normalise a ``/v2/tickers`` entry.

        Price prefers ``mark_price`` over ``close``; bid/ask come from the
        nested ``quotes`` block; volume and open interest fall back across
        the alternative field names the API uses.
        """
        quotes = data.get('quotes') or {}
        iv = quotes.get('mark_iv')
        return cls(
            symbol=str(data.get('symbol', "")),
            price=first_nonzero(data.get('mark_price'), data.get('close'), data.get('price')),
            bid=first_nonzero(quotes.get('best_bid'), data.get('bid')),
            ask=first_nonzero(quotes.get('best_ask'), data.get('ask')),
            volume=first_nonzero(data.get('volume'), data.get('volume_24h')),
            open_interest=first_nonzero(data.get('oi'), data.get('oi_contracts'), data.get('open_interest')),
            change_24h=first_nonzero(data.get('price_24h_change'), data.get('change_24h')),
            change_24h_percent=to_float(data.get('change_24h_percent')),
            strike_price=to_float(data.get('strike_price')),
            contract_type=str(data.get('contract_type') or ""),
            underlying=str(data.get('underlying_asset_symbol') or "BTC"),
            product_id=data.get('product_id'),
            mark_iv=to_float(iv) if iv not in (None, "") else None,
        )


@dataclass(frozen=True)
class OrderBook:
    """Level-2 order book; each side is a tuple of (price, size), best first."""

    symbol: str
    buy: Tuple[Tuple[float, float], ...] = field(default_factory=tuple)
    sell: Tuple[Tuple[float, float], ...] = field(default_factory=tuple)

    @property
    def best_bid(self) -> float | None:
        return self.buy[0][0] if self.buy else None

    @property
    def best_ask(self) -> float | None:
        return self.sell[0][0] if self.sell else None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "OrderBook":
        def side(levels: List[Dict[str, Any]]) -> Tuple[Tuple[float, float], ...]:
            return tuple((to_float(level.get('price')), to_float(level.get('size'))) for level in levels)

        return cls(
            symbol=str(data.get('symbol', "")),
            buy=side(data.get('buy') or []),
            sell=side(data.get('sell') or []),
        )


@dataclass(frozen=True)
class Candle:
    """OHLCV bar; ``time`` is a UNIX timestamp in seconds."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Candle":
        return cls(
            time=int(to_float(data.get('time'))),
            open=to_float(data.get('open')),
            high=to_float(data.get('high')),
            low=to_float(data.get('low')),
            close=to_float(data.get('close')),
            volume=to_float(data.get('volume')),
        )


@dataclass(frozen=True)
class SpotQuote:
    """Underlying spot price with 24h statistics."""

    price: float
    change_24h: float = 0.0
    volume_24h: float = 0.0
    market_cap: float = 0.0
    timestamp: float = 0.0
    is_fallback: bool = False
