"""Expiry payoff curves and break-even detection for multi-leg strategies."""

import logging
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..models.metrics import PayoffPoint
from ..models.strategy import Leg, Strategy
from ..utils.error_handling import EmptyStrategyError, InvalidStrikeError

logger = logging.getLogger("options_simulator.pricing.payoff")

PAYOFF_STEPS = 100
RANGE_PADDING = 0.3
MIN_RANGE_FRACTION = 0.5
BREAK_EVEN_EPSILON = 1e-6
BREAK_EVEN_DEDUP_DISTANCE = 0.5


def evaluate_leg(leg: Leg, price: float) -> float:
    """Expiry payoff of one leg at an underlying price.

    Call: max(0, S-K). Put: max(0, K-S). Future: S-K with K the entry
    reference price. The result is multiplied by quantity and direction.

    Raises:
        InvalidStrikeError: If the leg has no strike / reference price
    """
    reference = _reference_price(leg)
    kind = leg.instrument.kind

    if kind == 'call':
        unit_payoff = max(0.0, price - reference)
    elif kind == 'put':
        unit_payoff = max(0.0, reference - price)
    else:
        unit_payoff = price - reference

    return unit_payoff * leg.quantity * leg.direction


def strategy_payoff(strategy: Strategy, price: float, net_premium: float = 0.0) -> float:
    """Total expiry payoff at ``price`` less the net premium paid.

    ``net_premium`` is positive for a net debit and negative for a net credit.
    """
    return sum(evaluate_leg(leg, price) for leg in strategy.legs) - net_premium


def calculate_payoff_range(strategy: Strategy, current_price: float, steps: int = PAYOFF_STEPS) -> List[float]:
    """Price samples spanning the strikes and the current price.

    range = max(max_strike - min_strike, 0.5 * S); the window runs from
    max(0, min(min_strike, S) - 0.3 * range) to max(max_strike, S) + 0.3 * range
    in ``steps`` equal steps, each sample rounded to cents.

    Raises:
        EmptyStrategyError: If the strategy has no legs
    """
    if strategy.is_empty:
        raise EmptyStrategyError("Cannot build a payoff range for a strategy with no legs")

    strikes = [_reference_price(leg) for leg in strategy.legs]
    min_strike = min(strikes)
    max_strike = max(strikes)

    price_range = max(max_strike - min_strike, current_price * MIN_RANGE_FRACTION)
    start = max(0.0, min(min_strike, current_price) - price_range * RANGE_PADDING)
    end = max(max_strike, current_price) + price_range * RANGE_PADDING

    samples = np.linspace(start, end, steps + 1)
    return [round(float(price), 2) for price in samples]


def build_payoff_curve(
    strategy: Strategy,
    prices: Iterable[float],
    net_premium: float = 0.0,
) -> Tuple[PayoffPoint, ...]:
    """Evaluate the strategy payoff at every price sample."""
    return tuple(
        PayoffPoint(price=price, payoff=strategy_payoff(strategy, price, net_premium))
        for price in prices
    )


def find_break_even_points(payoff_data: Sequence[PayoffPoint]) -> Tuple[float, ...]:
    """Locate zero crossings of a sampled payoff curve.

    Adjacent samples whose payoffs change sign (or touch zero) are linearly
    interpolated; the crossing lands nearer the sample with the smaller
    absolute payoff. Pairs that are both (near) zero are skipped, and a
    crossing within 0.5 of an earlier one is dropped.

    Returns:
        Break-even prices rounded to cents, ascending
    """
    points: List[float] = []

    for prev, curr in zip(payoff_data, payoff_data[1:]):
        crosses = (
            (prev.payoff <= 0 and curr.payoff >= 0)
            or (prev.payoff >= 0 and curr.payoff <= 0)
        )
        if not crosses:
            continue

        denom = abs(prev.payoff) + abs(curr.payoff)
        if denom < BREAK_EVEN_EPSILON:
            continue

        ratio = abs(prev.payoff) / denom
        price = round(prev.price + ratio * (curr.price - prev.price), 2)
        if not np.isfinite(price):
            continue

        if any(abs(existing - price) < BREAK_EVEN_DEDUP_DISTANCE for existing in points):
            continue
        points.append(price)

    return tuple(points)


def _reference_price(leg: Leg) -> float:
    reference = leg.reference_price
    if reference is None:
        raise InvalidStrikeError(
            f"Leg on {leg.instrument.symbol} has no strike or entry price to evaluate"
        )
    return reference
