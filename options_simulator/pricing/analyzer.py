"""Option and strategy analytics.

Combines pricing, Greeks and payoff sampling into the reports consumed by the
console, the CLI and the dashboard.
"""

import logging
from datetime import datetime

from ..models.instrument import Instrument
from ..models.metrics import Greeks, LegMetrics, OptionMetrics, StrategyMetrics
from ..models.strategy import Strategy
from ..utils.error_handling import DataValidationError, EmptyStrategyError
from .black_scholes import (
    black_scholes_price,
    calculate_dte,
    calculate_greeks,
    calculate_time_to_expiry,
    intrinsic_value,
)
from .payoff import build_payoff_curve, calculate_payoff_range, find_break_even_points

logger = logging.getLogger("options_simulator.analyzer")

DEFAULT_RISK_FREE_RATE = 0.05
DEFAULT_VOLATILITY = 0.5
MARGIN_RATE = 0.1

FUTURE_GREEKS = Greeks(delta=1.0, gamma=0.0, theta=0.0, vega=0.0, rho=0.0)


def calculate_option_metrics(
    instrument: Instrument,
    spot: float,
    implied_vol: float | None = None,
    market_price: float | None = None,
    rate: float = DEFAULT_RISK_FREE_RATE,
    now: datetime | None = None,
    default_vol: float = DEFAULT_VOLATILITY,
) -> OptionMetrics:
    """Price one instrument and decompose its value.

    The observed ``market_price`` is reported when given, otherwise the
    Black-Scholes price at ``implied_vol`` (or ``default_vol`` when the
    instrument has no usable volatility). Greeks always use that volatility.

    Futures are reported at market price (or spot) with unit delta and no
    time value.

    Args:
        instrument: Option or future to price
        spot: Current underlying price
        implied_vol: Volatility for this instrument, if known
        market_price: Observed price, if known
        rate: Risk-free interest rate
        now: Valuation time (defaults to now, UTC)
        default_vol: Fallback volatility

    Returns:
        OptionMetrics for the instrument

    Raises:
        DataValidationError: If an option has no expiration
        PricingError: If pricing inputs are invalid
    """
    if instrument.kind == 'future':
        dte = calculate_dte(instrument.expiration, now) if instrument.expiration else None
        return OptionMetrics(
            price=market_price or spot,
            intrinsic=0.0,
            extrinsic=0.0,
            greeks=FUTURE_GREEKS,
            dte=dte,
            time_to_expiry=dte / 365 if dte is not None else None,
        )

    if instrument.expiration is None:
        raise DataValidationError(f"Option {instrument.symbol} has no expiration")

    strike = instrument.strike
    time_to_expiry = calculate_time_to_expiry(instrument.expiration, now)
    vol = implied_vol or default_vol

    price = market_price or black_scholes_price(
        spot, strike, time_to_expiry, rate, vol, instrument.kind
    )
    greeks = calculate_greeks(spot, strike, time_to_expiry, rate, vol, instrument.kind)
    intrinsic = intrinsic_value(spot, strike, instrument.kind)

    return OptionMetrics(
        price=price,
        intrinsic=intrinsic,
        extrinsic=price - intrinsic,
        greeks=greeks,
        dte=calculate_dte(instrument.expiration, now),
        time_to_expiry=time_to_expiry,
    )


def calculate_strategy_metrics(
    strategy: Strategy,
    current_price: float,
    rate: float = DEFAULT_RISK_FREE_RATE,
    now: datetime | None = None,
    default_vol: float = DEFAULT_VOLATILITY,
) -> StrategyMetrics:
    """Compute position Greeks, cost, payoff curve and break-evens.

    Per-leg Greeks and cost are scaled by the signed quantity and summed.
    The payoff curve is the expiry payoff net of the total premium, sampled
    over :func:`calculate_payoff_range`; max profit and max loss are the
    extremes of that sample.

    Args:
        strategy: Strategy with at least one leg
        current_price: Current underlying price
        rate: Risk-free interest rate
        now: Valuation time (defaults to now, UTC)
        default_vol: Volatility for legs without one

    Returns:
        StrategyMetrics report

    Raises:
        EmptyStrategyError: If the strategy has no legs
        PricingError: If any leg has invalid pricing inputs
    """
    if strategy.is_empty:
        raise EmptyStrategyError("Cannot compute metrics for a strategy with no legs")

    leg_metrics = []
    total_greeks = Greeks(delta=0.0, gamma=0.0, theta=0.0, vega=0.0, rho=0.0)
    total_cost = 0.0

    for leg in strategy.legs:
        vol = leg.implied_vol or default_vol
        metrics = calculate_option_metrics(
            leg.instrument,
            current_price,
            implied_vol=vol,
            market_price=leg.last_price,
            rate=rate,
            now=now,
            default_vol=default_vol,
        )
        position_greeks = metrics.greeks.scaled(leg.signed_quantity)
        # Futures are margined, not paid for up front
        position_cost = 0.0 if leg.instrument.kind == 'future' else metrics.price * leg.signed_quantity

        leg_metrics.append(LegMetrics(
            symbol=leg.instrument.symbol,
            action=leg.action,
            quantity=leg.quantity,
            volatility=vol if leg.instrument.is_option else None,
            metrics=metrics,
            position_greeks=position_greeks,
            position_cost=position_cost,
        ))

        total_greeks = Greeks(
            delta=total_greeks.delta + position_greeks.delta,
            gamma=total_greeks.gamma + position_greeks.gamma,
            theta=total_greeks.theta + position_greeks.theta,
            vega=total_greeks.vega + position_greeks.vega,
            rho=total_greeks.rho + position_greeks.rho,
        )
        total_cost += position_cost

    prices = calculate_payoff_range(strategy, current_price)
    payoff_data = build_payoff_curve(strategy, prices, net_premium=total_cost)
    break_even_points = find_break_even_points(payoff_data)
    payoffs = [point.payoff for point in payoff_data]

    result = StrategyMetrics(
        legs=tuple(leg_metrics),
        total_greeks=total_greeks,
        total_cost=total_cost,
        max_profit=max(payoffs),
        max_loss=min(payoffs),
        break_even_points=break_even_points,
        payoff_data=payoff_data,
        current_price=current_price,
        margin_requirement=calculate_margin_requirement(strategy),
    )

    logger.debug(
        "Strategy %s: %d legs, cost=%.2f, break-evens=%s",
        strategy.name or "<unnamed>", len(strategy.legs), total_cost, break_even_points
    )
    return result


def calculate_margin_requirement(strategy: Strategy, margin_rate: float = MARGIN_RATE) -> float:
    """Simplified margin: ``margin_rate`` of the strike for every sold unit.

    Long legs need no margin. Sold futures use their entry price; a sold
    future with neither entry price nor strike is skipped.

    Example:
        >>> from options_simulator.models.strategy import Leg
        >>> call = Instrument(symbol="C-BTC-110000-250822", kind='call', strike=110000.0)
        >>> calculate_margin_requirement(Strategy(legs=[Leg(instrument=call, quantity=2, action='sell')]))
        22000.0
    """
    total_margin = 0.0

    for leg in strategy.legs:
        if leg.action != 'sell':
            continue
        reference = leg.reference_price
        if reference is None:
            logger.warning("No reference price for sold leg %s, margin skipped", leg.instrument.symbol)
            continue
        total_margin += reference * leg.quantity * margin_rate

    return total_margin
