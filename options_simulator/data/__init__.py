"""Market data clients, mock fallbacks and strategy loaders."""

from .delta_exchange import DeltaExchangeClient
from .loaders import load_strategy, strategy_from_dict, strategy_to_dict
from .market_data import FetchResult, MarketDataService
from .spot_price import SpotPriceService

__all__ = [
    "DeltaExchangeClient",
    "FetchResult",
    "MarketDataService",
    "SpotPriceService",
    "load_strategy",
    "strategy_from_dict",
    "strategy_to_dict",
]
