"""BTC options simulator: Black-Scholes pricing, Greeks and strategy payoffs."""

__version__ = "0.1.0"
