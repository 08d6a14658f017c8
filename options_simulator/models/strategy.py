"""Leg and Strategy data models."""

from dataclasses import dataclass, field
from typing import Literal, Tuple

from .instrument import Instrument

Action = Literal["buy", "sell"]


@dataclass(frozen=True)
class Leg:
    """One instrument position inside a strategy.

    ``quantity`` is the unsigned size; ``action`` gives the direction.
    ``implied_vol`` and ``last_price`` are optional market observations used
    when pricing the leg. ``entry_price`` is the reference price of a futures
    leg (defaults to the instrument strike when that is set).
    """

    instrument: Instrument
    quantity: float = 1.0
    action: Action = "buy"
    implied_vol: float | None = None
    last_price: float | None = None
    entry_price: float | None = None

    def __post_init__(self) -> None:
        if self.action not in ("buy", "sell"):
            raise ValueError(f"Invalid action: {self.action}")
        if not self.quantity > 0:
            raise ValueError(f"Quantity must be positive, got {self.quantity}")
        if self.implied_vol is not None and self.implied_vol < 0:
            raise ValueError(f"Implied volatility must be non-negative, got {self.implied_vol}")

    @property
    def direction(self) -> int:
        """+1 for buy, -1 for sell."""
        return 1 if self.action == "buy" else -1

    @property
    def signed_quantity(self) -> float:
        return self.quantity * self.direction

    @property
    def reference_price(self) -> float | None:
        """Strike for options, entry price (or strike) for futures."""
        if self.instrument.kind == "future" and self.entry_price is not None:
            return self.entry_price
        return self.instrument.strike

    def __repr__(self) -> str:
        return f"Leg({self.action} {self.quantity:g} x {self.instrument.symbol})"


@dataclass(frozen=True)
class Strategy:
    """Ordered collection of legs. Leg order does not affect any metric."""

    legs: Tuple[Leg, ...] = field(default_factory=tuple)
    name: str = ""
    template: str | None = None

    def __post_init__(self) -> None:
        # Accept lists from callers; store an immutable tuple
        object.__setattr__(self, 'legs', tuple(self.legs))

    @property
    def is_empty(self) -> bool:
        return len(self.legs) == 0

    def __len__(self) -> int:
        return len(self.legs)

    def __repr__(self) -> str:
        name = self.name or "Strategy"
        return f"{name}({len(self.legs)} legs)"
