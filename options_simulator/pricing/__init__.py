"""Stateless options pricing and strategy analytics."""

from .analyzer import (
    DEFAULT_RISK_FREE_RATE,
    DEFAULT_VOLATILITY,
    calculate_margin_requirement,
    calculate_option_metrics,
    calculate_strategy_metrics,
)
from .black_scholes import (
    black_scholes_price,
    calculate_dte,
    calculate_greeks,
    calculate_time_to_expiry,
    intrinsic_value,
)
from .implied_volatility import calculate_implied_volatility
from .payoff import (
    build_payoff_curve,
    calculate_payoff_range,
    evaluate_leg,
    find_break_even_points,
    strategy_payoff,
)

__all__ = [
    "DEFAULT_RISK_FREE_RATE",
    "DEFAULT_VOLATILITY",
    "black_scholes_price",
    "build_payoff_curve",
    "calculate_dte",
    "calculate_greeks",
    "calculate_implied_volatility",
    "calculate_margin_requirement",
    "calculate_option_metrics",
    "calculate_payoff_range",
    "calculate_strategy_metrics",
    "calculate_time_to_expiry",
    "evaluate_leg",
    "find_break_even_points",
    "intrinsic_value",
    "strategy_payoff",
]
