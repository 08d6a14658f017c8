"""Market data access with an explicit mock-data fallback.

The exchange is the primary source. When it fails (or returns nothing) and
fallback is enabled, generated mock data is served instead and the result is
flagged ``mock=True`` so callers can tell the user. With fallback disabled
the upstream error propagates.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Generic, List, Optional, TypeVar

import numpy as np

from ..models.instrument import Instrument
from ..models.market import Ticker
from ..utils.config import SimulatorConfig
from ..utils.error_handling import MarketDataError
from .delta_exchange import DeltaExchangeClient
from .mock_data import generate_mock_products, generate_mock_tickers
from .spot_price import SpotPriceService

logger = logging.getLogger("options_simulator.market_data")

T = TypeVar('T')


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Fetched data and whether it came from the mock generator."""

    data: T
    mock: bool = False


class MarketDataService:
    """Products, tickers and spot price from primary sources with fallback."""

    def __init__(
        self,
        client: DeltaExchangeClient,
        spot_service: SpotPriceService,
        underlying: str = "BTC",
        use_fallback: bool = True,
        rng: Optional[np.random.Generator] = None,
        today: Optional[date] = None,
    ):
        self.client = client
        self.spot_service = spot_service
        self.underlying = underlying
        self.use_fallback = use_fallback
        self.rng = rng or np.random.default_rng()
        self.today = today

    @classmethod
    def from_config(cls, config: SimulatorConfig) -> "MarketDataService":
        """Wire the exchange client and spot service from configuration."""
        client = DeltaExchangeClient(base_url=config.delta_api_url, timeout=config.request_timeout)
        spot_service = SpotPriceService(
            base_url=config.coingecko_api_url,
            fallback_price=config.fallback_spot_price,
            ttl_seconds=config.spot_cache_ttl,
            timeout=config.request_timeout,
        )
        return cls(
            client,
            spot_service,
            underlying=config.underlying,
            use_fallback=config.use_mock_fallback,
        )

    def get_spot_price(self) -> float:
        return self.spot_service.get_current_price().price

    def get_products(self) -> FetchResult[List[Instrument]]:
        """Exchange products, or the mock chain on failure."""
        return self._with_fallback(
            "products",
            lambda: self.client.get_products(self.underlying),
            lambda: generate_mock_products(self.get_spot_price(), self.today, self.underlying),
        )

    def get_market_data(self) -> FetchResult[Dict[str, Ticker]]:
        """Exchange tickers keyed by symbol, or mock quotes on failure."""
        return self._with_fallback(
            "market data",
            lambda: self.client.get_tickers(self.underlying),
            lambda: generate_mock_tickers(
                self.get_spot_price(), self.today, self.rng, underlying=self.underlying
            ),
        )

    def _with_fallback(self, what: str, primary: Callable[[], T], fallback: Callable[[], T]) -> FetchResult[T]:
        try:
            data = primary()
            if not data:
                raise MarketDataError(f"No {what} returned for {self.underlying}")
            return FetchResult(data=data, mock=False)
        except MarketDataError as e:
            if not self.use_fallback:
                raise
            logger.warning("Falling back to mock %s: %s", what, e)
            return FetchResult(data=fallback(), mock=True)
