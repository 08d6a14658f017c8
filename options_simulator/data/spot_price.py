"""Bitcoin spot price from CoinGecko with caching and fallback."""

import logging
import time
from typing import Callable, Optional

import requests

from ..models.market import SpotQuote, to_float
from ..utils.error_handling import MarketDataError

logger = logging.getLogger("options_simulator.spot_price")

DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"


class SpotPriceService:
    """Fetches the BTC/USD spot price.

    A fetched quote is reused for ``ttl_seconds``. When CoinGecko fails the
    last good quote is returned; if there has never been one, a fallback
    quote at ``fallback_price`` is returned and flagged ``is_fallback``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        fallback_price: float = 65000.0,
        ttl_seconds: float = 120.0,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.base_url = base_url.rstrip('/')
        self.fallback_price = fallback_price
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self.session = session or requests.Session()
        self._clock = clock
        self._quote: Optional[SpotQuote] = None

    def fetch(self) -> SpotQuote:
        """Fetch a fresh quote from CoinGecko.

        Raises:
            MarketDataError: If the request fails or the payload is malformed
        """
        try:
            response = self.session.get(
                f"{self.base_url}/simple/price",
                params={
                    'ids': 'bitcoin',
                    'vs_currencies': 'usd',
                    'include_24hr_change': 'true',
                    'include_24hr_vol': 'true',
                    'include_market_cap': 'true',
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise MarketDataError(f"CoinGecko request failed: {e}") from e

        bitcoin = data.get('bitcoin') if isinstance(data, dict) else None
        if not isinstance(bitcoin, dict) or not to_float(bitcoin.get('usd')) > 0:
            raise MarketDataError("Invalid response format from CoinGecko API")

        quote = SpotQuote(
            price=to_float(bitcoin.get('usd')),
            change_24h=to_float(bitcoin.get('usd_24h_change')),
            volume_24h=to_float(bitcoin.get('usd_24h_vol')),
            market_cap=to_float(bitcoin.get('usd_market_cap')),
            timestamp=self._clock(),
        )
        logger.info("Bitcoin price updated: $%s", f"{quote.price:,.2f}")
        return quote

    def get_current_price(self) -> SpotQuote:
        """Cached quote while fresh, otherwise fetch with fallback."""
        if self._quote is not None and not self._quote.is_fallback:
            age = self._clock() - self._quote.timestamp
            if age <= self.ttl_seconds:
                return self._quote

        try:
            self._quote = self.fetch()
        except MarketDataError as e:
            if self._quote is not None:
                logger.warning("Using cached Bitcoin price after API error: %s", e)
                return self._quote
            logger.warning(
                "Bitcoin price unavailable (%s), falling back to %.2f", e, self.fallback_price
            )
            self._quote = SpotQuote(
                price=self.fallback_price,
                timestamp=self._clock(),
                is_fallback=True,
            )

        return self._quote
