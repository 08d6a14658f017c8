"""Mock products and tickers served when the exchange is unreachable.

The mock chain mirrors the exchange layout: calls and puts at six strikes
around the spot (rounded to the nearest 1000) for today and the next two
days, plus the BTC perpetual. Option quotes are Black-Scholes prices at a
noisy volatility so the chain stays internally consistent.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

import numpy as np

from ..models.instrument import Instrument, parse_expiration
from ..models.market import Ticker
from ..pricing.black_scholes import black_scholes_price, calculate_time_to_expiry

STRIKE_STEP = 1000
STRIKE_OFFSETS = (-2000, -1000, 0, 1000, 2000, 3000)
EXPIRY_DAYS = (0, 1, 2)
PERPETUAL_SYMBOL = "BTC-PERP"
MOCK_VOLATILITY = 0.5
MOCK_RATE = 0.05


def mock_strikes(spot: float) -> List[float]:
    base = round(spot / STRIKE_STEP) * STRIKE_STEP
    return [float(base + offset) for offset in STRIKE_OFFSETS]


def mock_expiry_codes(today: date) -> List[str]:
    """YYMMDD codes for today and the following two days."""
    return [(today + timedelta(days=days)).strftime('%y%m%d') for days in EXPIRY_DAYS]


def generate_mock_products(spot: float, today: Optional[date] = None, underlying: str = "BTC") -> List[Instrument]:
    """Mock option chain plus the perpetual future."""
    today = today or datetime.now(timezone.utc).date()
    products = []

    for strike in mock_strikes(spot):
        for expiry in mock_expiry_codes(today):
            for kind, prefix in (("call", "C"), ("put", "P")):
                products.append(Instrument(
                    symbol=f"{prefix}-{underlying}-{strike:.0f}-{expiry}",
                    kind=kind,
                    strike=strike,
                    expiration=parse_expiration(expiry),
                    product_id=f"{kind}_{strike:.0f}_{expiry}",
                    underlying=underlying,
                    tick_size=0.1,
                    lot_size=1,
                    min_order_size=0.01,
                    max_order_size=1000,
                ))

    products.append(Instrument(
        symbol=PERPETUAL_SYMBOL if underlying == "BTC" else f"{underlying}-PERP",
        kind="future",
        product_id="futures_1",
        underlying=underlying,
        tick_size=0.1,
        lot_size=1,
        min_order_size=0.01,
        max_order_size=1000,
    ))
    return products


def generate_mock_tickers(
    spot: float,
    today: Optional[date] = None,
    rng: Optional[np.random.Generator] = None,
    now: Optional[datetime] = None,
    underlying: str = "BTC",
) -> Dict[str, Ticker]:
    """Mock quotes for every product of :func:`generate_mock_products`.

    Args:
        spot: Underlying spot price
        today: Chain date (defaults to today, UTC)
        rng: Random generator; pass a seeded one for reproducible output
        now: Valuation time for option prices (defaults to now, UTC)
        underlying: Underlying symbol, matching the mock product chain
    """
    rng = rng or np.random.default_rng()
    now = now or datetime.now(timezone.utc)
    tickers: Dict[str, Ticker] = {}

    for instrument in generate_mock_products(spot, today, underlying):
        if instrument.kind == "future":
            price = spot + (rng.random() - 0.5) * 200
            half_spread = 50 + rng.random() * 100
            change = (rng.random() - 0.5) * 500
            tickers[instrument.symbol] = Ticker(
                symbol=instrument.symbol,
                price=price,
                bid=price - half_spread,
                ask=price + half_spread,
                volume=float(int(rng.random() * 1000)),
                open_interest=float(int(rng.random() * 5000)),
                change_24h=change,
                change_24h_percent=change / spot * 100,
                contract_type="perpetual_futures",
                underlying=instrument.underlying,
                product_id=instrument.product_id,
            )
            continue

        vol = MOCK_VOLATILITY + (rng.random() - 0.5) * 0.1
        time_to_expiry = calculate_time_to_expiry(instrument.expiration, now)
        price = black_scholes_price(spot, instrument.strike, time_to_expiry, MOCK_RATE, vol, instrument.kind)
        half_spread = max(price * 0.02, 5.0) * (1 + rng.random())

        tickers[instrument.symbol] = Ticker(
            symbol=instrument.symbol,
            price=price,
            bid=max(0.0, price - half_spread),
            ask=price + half_spread,
            volume=0.38 + rng.random() * 2,
            open_interest=1.6 + rng.random() * 5,
            strike_price=instrument.strike,
            contract_type=f"{instrument.kind}_options",
            underlying=instrument.underlying,
            product_id=instrument.product_id,
            mark_iv=vol,
        )

    return tickers
