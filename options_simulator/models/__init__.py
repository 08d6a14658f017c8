"""Core data models for the options simulator."""

from .instrument import Instrument, parse_contract_kind, parse_expiration
from .market import Candle, OrderBook, SpotQuote, Ticker
from .metrics import Greeks, LegMetrics, OptionMetrics, PayoffPoint, StrategyMetrics
from .strategy import Leg, Strategy

__all__ = [
    "Candle",
    "OrderBook",
    "SpotQuote",
    "Ticker",
    "Instrument",
    "Leg",
    "Strategy",
    "Greeks",
    "OptionMetrics",
    "LegMetrics",
    "PayoffPoint",
    "StrategyMetrics",
    "parse_contract_kind",
    "parse_expiration",
]
