"""Black-Scholes pricing and Greeks for European options.

All functions are pure: market inputs (spot, rate, volatility, current time)
are explicit parameters and nothing is cached between calls.

Input contract: with time remaining (T > 0) the strike and volatility must be
strictly positive and every input finite. Violations raise
:class:`InvalidStrikeError` / :class:`InvalidVolatilityError` instead of
letting NaN or infinity flow into results. At or after expiry (T <= 0) only
intrinsic value is used, so volatility is not inspected.
"""

import logging
import math
from datetime import date, datetime, timezone

from scipy.stats import norm

from ..models.instrument import parse_expiration
from ..models.metrics import Greeks
from ..utils.error_handling import InvalidStrikeError, InvalidVolatilityError, PricingError

logger = logging.getLogger("options_simulator.pricing")

DAYS_PER_YEAR = 365
SECONDS_PER_DAY = 24 * 60 * 60

OPTION_KINDS = ("call", "put")


def normal_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    return float(norm.cdf(x))


def normal_pdf(x: float) -> float:
    """Standard normal probability density, (1/sqrt(2*pi)) * exp(-x^2/2)."""
    return float(norm.pdf(x))


def calculate_dte(expiration: datetime | date | str, now: datetime | None = None) -> int:
    """Calendar days to expiration, rounded up and floored at zero.

    Args:
        expiration: Expiration as datetime, date, ISO string or YYMMDD code
        now: Current time (defaults to the current UTC time)

    Returns:
        Whole days remaining; 0 for expired contracts

    Raises:
        ValueError: If the expiration is missing or cannot be parsed
    """
    expiry = parse_expiration(expiration)
    if expiry is None:
        raise ValueError("Perpetual instruments have no expiration")

    current = parse_expiration(now) if now is not None else datetime.now(timezone.utc)
    remaining = (expiry - current).total_seconds() / SECONDS_PER_DAY
    return max(0, math.ceil(remaining))


def calculate_time_to_expiry(expiration: datetime | date | str, now: datetime | None = None) -> float:
    """Years remaining until expiration (``dte / 365``), never negative.

    Example:
        >>> calculate_time_to_expiry(datetime(2025, 1, 31, tzinfo=timezone.utc),
        ...                          now=datetime(2025, 1, 1, tzinfo=timezone.utc))
        0.0821917808219178
    """
    return calculate_dte(expiration, now) / DAYS_PER_YEAR


def intrinsic_value(spot: float, strike: float, option_type: str) -> float:
    """Exercise value: max(0, S-K) for calls, max(0, K-S) for puts."""
    _check_kind(option_type)
    if option_type == 'call':
        return max(0.0, spot - strike)
    return max(0.0, strike - spot)


def black_scholes_price(
    spot: float,
    strike: float,
    time_to_expiry: float,
    rate: float,
    vol: float,
    option_type: str,
) -> float:
    """Price a European option with the Black-Scholes formula.

    Args:
        spot: Current underlying price (S > 0)
        strike: Strike price (K > 0 when time remains)
        time_to_expiry: Time to expiration in years
        rate: Risk-free interest rate (annualized)
        vol: Volatility (annualized, > 0 when time remains)
        option_type: 'call' or 'put'

    Returns:
        Theoretical option price; intrinsic value when time_to_expiry <= 0

    Raises:
        InvalidStrikeError: If strike is not positive with time remaining
        InvalidVolatilityError: If vol is not positive with time remaining
        ValueError: If option_type is not 'call' or 'put'
    """
    _check_kind(option_type)
    _validate_inputs(spot, strike, time_to_expiry, rate, vol)

    if time_to_expiry <= 0:
        return intrinsic_value(spot, strike, option_type)

    d1, d2 = _d1_d2(spot, strike, time_to_expiry, rate, vol)
    discount = math.exp(-rate * time_to_expiry)

    if option_type == 'call':
        return spot * normal_cdf(d1) - strike * discount * normal_cdf(d2)
    return strike * discount * normal_cdf(-d2) - spot * normal_cdf(-d1)


def calculate_greeks(
    spot: float,
    strike: float,
    time_to_expiry: float,
    rate: float,
    vol: float,
    option_type: str,
) -> Greeks:
    """Calculate delta, gamma, theta, vega and rho.

    At or after expiry the Greeks collapse: delta is 1 for a call strictly in
    the money (S > K), -1 for a put strictly in the money (S < K), 0
    otherwise (including exactly at the strike); all other Greeks are 0.

    Gamma and vega are identical for calls and puts.

    Returns:
        Greeks in raw units (theta per year, vega per 1.00 vol, rho per 1.00 rate)

    Raises:
        InvalidStrikeError, InvalidVolatilityError, ValueError: as for
        :func:`black_scholes_price`
    """
    _check_kind(option_type)
    _validate_inputs(spot, strike, time_to_expiry, rate, vol)

    if time_to_expiry <= 0:
        if option_type == 'call':
            delta = 1.0 if spot > strike else 0.0
        else:
            delta = -1.0 if spot < strike else 0.0
        return Greeks(delta=delta, gamma=0.0, theta=0.0, vega=0.0, rho=0.0)

    sqrt_t = math.sqrt(time_to_expiry)
    d1, d2 = _d1_d2(spot, strike, time_to_expiry, rate, vol)
    pdf_d1 = normal_pdf(d1)
    discount = math.exp(-rate * time_to_expiry)

    gamma = pdf_d1 / (spot * vol * sqrt_t)
    vega = spot * sqrt_t * pdf_d1
    decay = -spot * pdf_d1 * vol / (2 * sqrt_t)

    if option_type == 'call':
        delta = normal_cdf(d1)
        theta = decay - rate * strike * discount * normal_cdf(d2)
        rho = strike * time_to_expiry * discount * normal_cdf(d2)
    else:
        delta = normal_cdf(d1) - 1
        theta = decay + rate * strike * discount * normal_cdf(-d2)
        rho = -strike * time_to_expiry * discount * normal_cdf(-d2)

    return Greeks(delta=delta, gamma=gamma, theta=theta, vega=vega, rho=rho)


def _d1_d2(spot: float, strike: float, time_to_expiry: float, rate: float, vol: float) -> tuple[float, float]:
    """d1 and d2 terms of the Black-Scholes formula."""
    vol_sqrt_t = vol * math.sqrt(time_to_expiry)
    d1 = (math.log(spot / strike) + (rate + 0.5 * vol ** 2) * time_to_expiry) / vol_sqrt_t
    return d1, d1 - vol_sqrt_t


def _check_kind(option_type: str) -> None:
    if option_type not in OPTION_KINDS:
        raise ValueError(f"Invalid option_type: {option_type}")


def _validate_inputs(spot: float, strike: float, time_to_expiry: float, rate: float, vol: float) -> None:
    for name, value in (('spot', spot), ('time_to_expiry', time_to_expiry), ('rate', rate)):
        if not math.isfinite(value):
            raise PricingError(f"{name} must be finite, got {value}")
    if not spot > 0:
        raise PricingError(f"Spot price must be positive, got {spot}")
    if not math.isfinite(strike) or strike < 0:
        raise InvalidStrikeError(f"Strike must be a non-negative number, got {strike}")

    if time_to_expiry <= 0:
        return

    if strike == 0:
        raise InvalidStrikeError("Strike must be positive when time remains to expiry")
    if not math.isfinite(vol) or vol <= 0:
        raise InvalidVolatilityError(f"Volatility must be positive when time remains to expiry, got {vol}")
