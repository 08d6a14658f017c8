"""Console output for option chains and strategy reports."""

from datetime import datetime
from typing import Dict, List, Optional

from ..builders.strategy_templates import detect_strategy_type
from ..models.instrument import Instrument
from ..models.market import Ticker
from ..models.metrics import StrategyMetrics
from ..models.strategy import Strategy
from ..pricing.analyzer import DEFAULT_RISK_FREE_RATE, DEFAULT_VOLATILITY, calculate_option_metrics


def print_header(title: str, spot_price: float, mock: bool = False):
    """Print session header.

    Args:
        title: Header title
        spot_price: Current underlying price
        mock: Whether market data is generated mock data
    """
    print("\n" + "=" * 80)
    print(f"  {title}")
    print(f"  Spot Price: ${spot_price:,.2f}" + ("  [MOCK DATA]" if mock else ""))
    print("=" * 80)


def print_option_chain(
    instruments: List[Instrument],
    spot: float,
    tickers: Optional[Dict[str, Ticker]] = None,
    rate: float = DEFAULT_RISK_FREE_RATE,
    now: Optional[datetime] = None,
    default_vol: float = DEFAULT_VOLATILITY,
):
    """Print options grouped by expiry with theoretical value and Greeks."""
    tickers = tickers or {}
    options = sorted(
        (i for i in instruments if i.is_option and i.expiration is not None),
        key=lambda i: (i.expiration, i.strike, i.kind),
    )
    if not options:
        print("No options available.")
        return

    header = (
        f"{'Symbol':<24} {'Type':<5} {'Strike':>9} {'DTE':>4} {'Mark':>10} "
        f"{'IV':>6} {'Delta':>7} {'Gamma':>9} {'Theta':>10} {'Vega':>9}"
    )

    current_expiry = None
    for instrument in options:
        if instrument.expiration != current_expiry:
            current_expiry = instrument.expiration
            print(f"\nExpiry {current_expiry:%Y-%m-%d %H:%M} UTC")
            print("-" * len(header))
            print(header)
            print("-" * len(header))

        ticker = tickers.get(instrument.symbol)
        iv = ticker.mark_iv if ticker and ticker.mark_iv else None
        metrics = calculate_option_metrics(
            instrument,
            spot,
            implied_vol=iv,
            market_price=ticker.price if ticker else None,
            rate=rate,
            now=now,
            default_vol=default_vol,
        )
        greeks = metrics.greeks
        iv_str = f"{iv:.0%}" if iv else "N/A"
        print(
            f"{instrument.symbol:<24} {instrument.kind.upper():<5} {instrument.strike:>9.0f} "
            f"{metrics.dte:>4} {metrics.price:>10.2f} {iv_str:>6} {greeks.delta:>7.3f} "
            f"{greeks.gamma:>9.2e} {greeks.theta:>10.2f} {greeks.vega:>9.2f}"
        )


def print_strategy_report(strategy: Strategy, metrics: StrategyMetrics):
    """Print per-leg positions, totals, risk profile and break-evens."""
    print(f"\nStrategy: {strategy.name or detect_strategy_type(strategy)}")
    print("-" * 96)
    print(
        f"{'Action':<6} {'Qty':>5} {'Symbol':<24} {'Price':>10} {'Vol':>6} "
        f"{'Delta':>8} {'Gamma':>10} {'Theta':>10} {'Cost':>10}"
    )
    print("-" * 96)

    for leg in metrics.legs:
        vol = f"{leg.volatility:.0%}" if leg.volatility is not None else "-"
        print(
            f"{leg.action.upper():<6} {leg.quantity:>5g} {leg.symbol:<24} {leg.metrics.price:>10.2f} "
            f"{vol:>6} {leg.position_delta:>8.3f} {leg.position_gamma:>10.2e} "
            f"{leg.position_theta:>10.2f} {leg.position_cost:>10.2f}"
        )

    print("-" * 96)
    print(f"\nPosition Greeks:")
    print(f"  Delta: {metrics.total_delta:.4f}")
    print(f"  Gamma: {metrics.total_gamma:.6f}")
    print(f"  Theta: {metrics.total_theta:.2f} /yr ({metrics.total_theta / 365:.2f} /day)")
    print(f"  Vega:  {metrics.total_vega:.2f}")
    print(f"  Rho:   {metrics.total_rho:.2f}")

    cost_label = "Net Debit" if metrics.is_net_debit else "Net Credit"
    print(f"\nRisk Profile (spot ${metrics.current_price:,.2f}):")
    print(f"  {cost_label}: ${abs(metrics.total_cost):,.2f}")
    print(f"  Max Profit: ${metrics.max_profit:,.2f}")
    print(f"  Max Loss:   ${metrics.max_loss:,.2f}")
    print(f"  Margin:     ${metrics.margin_requirement:,.2f}")

    if metrics.break_even_points:
        points = ", ".join(f"${p:,.2f}" for p in metrics.break_even_points)
        print(f"  Break-even: {points}")
    else:
        print("  Break-even: none in sampled range")

    first, last = metrics.payoff_data[0], metrics.payoff_data[-1]
    print(f"  (Payoff sampled from ${first.price:,.2f} to ${last.price:,.2f})")
