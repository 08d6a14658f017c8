"""Delta Exchange public REST API client.

Only public market data endpoints are used; no signed requests are made.

Endpoints:
    /v2/products            product catalogue (options and futures)
    /v2/tickers             quotes for all products
    /v2/l2orderbook/{id}    level-2 order book
    /v2/history/candles     OHLCV history
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from ..models.instrument import CONTRACT_TYPES, Instrument
from ..models.market import Candle, OrderBook, Ticker
from ..utils.error_handling import MarketDataError, retry_with_backoff

logger = logging.getLogger("options_simulator.delta_exchange")

DEFAULT_BASE_URL = "https://api.delta.exchange"
SUPPORTED_CONTRACT_TYPES = ("call_option", "put_option", "futures")


class DeltaExchangeClient:
    """Client for Delta Exchange public market data."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the client.

        Args:
            base_url: API base URL (without the /v2 prefix)
            timeout: Request timeout in seconds
            max_retries: Attempts for connection errors and timeouts
            session: Optional requests session (shared connection pool)
            sleep: Sleep function used between retries
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {'Accept': 'application/json'}
        self._request = retry_with_backoff(
            max_retries=max_retries,
            exceptions=(requests.ConnectionError, requests.Timeout),
            sleep=sleep,
        )(self._request_once)

    def _request_once(self, endpoint: str, params: Optional[Dict] = None) -> requests.Response:
        url = f"{self.base_url}/v2{endpoint}"
        return self.session.get(url, headers=self.headers, params=params or {}, timeout=self.timeout)

    def _get(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        """GET an endpoint and return its ``result`` payload.

        Raises:
            MarketDataError: On network failure, non-200 status, or a body
                without a ``result`` field
        """
        try:
            response = self._request(endpoint, params)
        except requests.RequestException as e:
            logger.error("Delta Exchange request %s failed: %s", endpoint, e)
            raise MarketDataError(f"Request to {endpoint} failed: {e}") from e

        if response.status_code != 200:
            logger.error("Delta Exchange %s returned HTTP %s", endpoint, response.status_code)
            raise MarketDataError(f"API Error {response.status_code}: {response.text[:200]}")

        try:
            body = response.json()
        except ValueError as e:
            raise MarketDataError(f"Invalid JSON from {endpoint}") from e

        if not isinstance(body, dict) or 'result' not in body:
            raise MarketDataError(f"Invalid response format from {endpoint}")

        return body['result']

    def _get_list(self, endpoint: str, params: Optional[Dict] = None) -> List[Dict[str, Any]]:
        """GET an endpoint whose ``result`` is a list of records.

        Raises:
            MarketDataError: If ``result`` is not a list of mappings
        """
        result = self._get(endpoint, params)
        if not isinstance(result, list) or not all(isinstance(item, dict) for item in result):
            logger.error("Delta Exchange %s returned a malformed result", endpoint)
            raise MarketDataError(f"Expected a list of records from {endpoint}")
        return result

    def get_products(self, underlying: str = "BTC") -> List[Instrument]:
        """Options and futures on ``underlying``.

        Products that fail to parse are skipped with a warning.
        """
        products = self._get_list('/products')
        instruments = []

        for product in products:
            asset = product.get('underlying_asset') or {}
            if asset.get('symbol') != underlying:
                continue
            if product.get('contract_type') not in SUPPORTED_CONTRACT_TYPES:
                continue
            try:
                instruments.append(Instrument.from_product(product))
            except ValueError as e:
                logger.warning("Skipping product %s: %s", product.get('symbol'), e)

        logger.info("Loaded %d %s products from Delta Exchange", len(instruments), underlying)
        return instruments

    def get_tickers(self, underlying: str = "BTC") -> Dict[str, Ticker]:
        """Tickers for options and futures on ``underlying`` keyed by symbol."""
        tickers = {}
        for data in self._get_list('/tickers'):
            symbol = data.get('symbol') or ""
            if underlying not in symbol:
                continue
            contract_type = data.get('contract_type')
            if contract_type and contract_type not in CONTRACT_TYPES:
                continue
            tickers[symbol] = Ticker.from_api(data)

        logger.info("Loaded %d %s tickers from Delta Exchange", len(tickers), underlying)
        return tickers

    def get_ticker(self, product_id: int | str) -> Optional[Ticker]:
        """Ticker for one product id, or None if the product is not quoted."""
        for data in self._get_list('/tickers'):
            if str(data.get('product_id')) == str(product_id):
                return Ticker.from_api(data)
        return None

    def get_orderbook(self, product_id: int | str, depth: int = 20) -> OrderBook:
        result = self._get(f'/l2orderbook/{product_id}', {'depth': depth})
        if not isinstance(result, dict):
            raise MarketDataError(f"Expected an order book for product {product_id}")
        return OrderBook.from_api(result)

    def get_candles(self, product_id: int | str, resolution: str = "1D", limit: int = 100) -> List[Candle]:
        """Historical OHLCV candles, oldest first."""
        result = self._get_list('/history/candles', {
            'product_id': product_id,
            'resolution': resolution,
            'limit': limit,
        })
        candles = [Candle.from_api(item) for item in result]
        return sorted(candles, key=lambda candle: candle.time)
