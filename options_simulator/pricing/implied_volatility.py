"""Implied volatility solver (Newton-Raphson on the Black-Scholes price)."""

import logging
import math

from .black_scholes import black_scholes_price, calculate_greeks, intrinsic_value

logger = logging.getLogger("options_simulator.pricing.iv")

INITIAL_VOL = 0.5
MIN_VOL = 0.001
MIN_VEGA = 1e-10


def calculate_implied_volatility(
    spot: float,
    strike: float,
    time_to_expiry: float,
    rate: float,
    market_price: float,
    option_type: str,
    max_iterations: int = 100,
    tolerance: float = 1e-5,
) -> float | None:
    """Solve for the volatility that reproduces ``market_price``.

    Starts at 50% volatility and applies Newton-Raphson steps
    ``vol += (market_price - price) / vega``, clamping volatility at
    ``MIN_VOL`` after each step.

    Args:
        spot: Current underlying price
        strike: Strike price
        time_to_expiry: Time to expiration in years
        rate: Risk-free interest rate (annualized)
        market_price: Observed option price
        option_type: 'call' or 'put'
        max_iterations: Iteration cap
        tolerance: Absolute price tolerance for convergence

    Returns:
        Implied volatility, 0.0 for an expired option priced at intrinsic
        value, or None when no volatility could be found (flat vega,
        iteration cap reached, or an expired option priced off intrinsic).

    Example:
        >>> price = black_scholes_price(100, 100, 0.5, 0.05, 0.3, 'call')
        >>> round(calculate_implied_volatility(100, 100, 0.5, 0.05, price, 'call'), 4)
        0.3
    """
    if time_to_expiry <= 0:
        intrinsic = intrinsic_value(spot, strike, option_type)
        if math.isclose(intrinsic, market_price, rel_tol=0.0, abs_tol=tolerance):
            return 0.0
        logger.debug(
            "Expired option price %.6f differs from intrinsic %.6f, no implied vol",
            market_price, intrinsic
        )
        return None

    vol = INITIAL_VOL
    for iteration in range(max_iterations):
        price = black_scholes_price(spot, strike, time_to_expiry, rate, vol, option_type)
        diff = market_price - price

        if abs(diff) < tolerance:
            logger.debug("Implied vol %.6f converged after %d iterations", vol, iteration)
            return vol

        vega = calculate_greeks(spot, strike, time_to_expiry, rate, vol, option_type).vega
        if abs(vega) < MIN_VEGA:
            logger.debug("Vega %.3e too small at vol %.4f, giving up", vega, vol)
            return None

        vol = max(MIN_VOL, vol + diff / vega)

    logger.debug(
        "Implied vol did not converge in %d iterations (S=%s K=%s T=%s price=%s)",
        max_iterations, spot, strike, time_to_expiry, market_price
    )
    return None
