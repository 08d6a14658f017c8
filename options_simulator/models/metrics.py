"""Result records produced by the pricing engine."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Greeks:
    """Black-Scholes sensitivities in raw model units.

    theta is per year, vega per 1.00 of volatility, rho per 1.00 of rate.
    """

    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float

    def scaled(self, factor: float) -> "Greeks":
        """Greeks of a position holding ``factor`` units."""
        return Greeks(
            delta=self.delta * factor,
            gamma=self.gamma * factor,
            theta=self.theta * factor,
            vega=self.vega * factor,
            rho=self.rho * factor,
        )


@dataclass(frozen=True)
class OptionMetrics:
    """Price decomposition and Greeks for one instrument at a spot price."""

    price: float
    intrinsic: float
    extrinsic: float
    greeks: Greeks
    dte: int | None
    time_to_expiry: float | None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LegMetrics:
    """Position-level metrics for one leg (per-unit metrics times signed quantity)."""

    symbol: str
    action: str
    quantity: float
    volatility: float | None
    metrics: OptionMetrics
    position_greeks: Greeks
    position_cost: float

    @property
    def position_delta(self) -> float:
        return self.position_greeks.delta

    @property
    def position_gamma(self) -> float:
        return self.position_greeks.gamma

    @property
    def position_theta(self) -> float:
        return self.position_greeks.theta

    @property
    def position_vega(self) -> float:
        return self.position_greeks.vega

    @property
    def position_rho(self) -> float:
        return self.position_greeks.rho


@dataclass(frozen=True)
class PayoffPoint:
    """Strategy payoff at expiry for one underlying price sample."""

    price: float
    payoff: float


@dataclass(frozen=True)
class StrategyMetrics:
    """Aggregate report for a multi-leg strategy.

    ``max_profit``/``max_loss`` are the extremes of the sampled payoff curve,
    so unbounded strategies are reported at the edge of the sampling window.
    """

    legs: Tuple[LegMetrics, ...]
    total_greeks: Greeks
    total_cost: float
    max_profit: float
    max_loss: float
    break_even_points: Tuple[float, ...]
    payoff_data: Tuple[PayoffPoint, ...]
    current_price: float
    margin_requirement: float = 0.0

    @property
    def total_delta(self) -> float:
        return self.total_greeks.delta

    @property
    def total_gamma(self) -> float:
        return self.total_greeks.gamma

    @property
    def total_theta(self) -> float:
        return self.total_greeks.theta

    @property
    def total_vega(self) -> float:
        return self.total_greeks.vega

    @property
    def total_rho(self) -> float:
        return self.total_greeks.rho

    @property
    def is_net_debit(self) -> bool:
        return self.total_cost > 0

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested dictionaries and lists, ready for JSON."""
        data = asdict(self)
        data['legs'] = list(data['legs'])
        data['break_even_points'] = list(data['break_even_points'])
        data['payoff_data'] = list(data['payoff_data'])
        return data

    def __repr__(self) -> str:
        be = ", ".join(f"{p:.2f}" for p in self.break_even_points) or "none"
        return (f"StrategyMetrics(legs={len(self.legs)} cost={self.total_cost:.2f} "
                f"maxP={self.max_profit:.2f} maxL={self.max_loss:.2f} BE=[{be}])")
