"""Tables and charts for the Streamlit dashboard."""

from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd
import plotly.graph_objects as go

from ..models.instrument import Instrument
from ..models.market import Ticker
from ..models.metrics import StrategyMetrics
from ..models.strategy import Strategy
from ..pricing.analyzer import DEFAULT_RISK_FREE_RATE, DEFAULT_VOLATILITY, calculate_option_metrics

CHAIN_COLUMNS = [
    'symbol', 'type', 'strike', 'expiration', 'dte', 'bid', 'ask', 'mark',
    'theo', 'iv', 'delta', 'gamma', 'theta', 'vega', 'rho',
]


def option_chain_frame(
    instruments: List[Instrument],
    spot: float,
    tickers: Optional[Dict[str, Ticker]] = None,
    rate: float = DEFAULT_RISK_FREE_RATE,
    now: Optional[datetime] = None,
    default_vol: float = DEFAULT_VOLATILITY,
) -> pd.DataFrame:
    """One row per option with quotes, theoretical value and Greeks.

    ``theo`` is always the Black-Scholes value at the row's volatility;
    ``mark`` is the exchange quote (NaN when unquoted).
    """
    tickers = tickers or {}
    rows = []

    for instrument in instruments:
        if not instrument.is_option or instrument.expiration is None:
            continue
        ticker = tickers.get(instrument.symbol)
        iv = ticker.mark_iv if ticker and ticker.mark_iv else default_vol
        metrics = calculate_option_metrics(instrument, spot, implied_vol=iv, rate=rate, now=now)
        greeks = metrics.greeks
        rows.append({
            'symbol': instrument.symbol,
            'type': instrument.kind,
            'strike': instrument.strike,
            'expiration': instrument.expiration,
            'dte': metrics.dte,
            'bid': ticker.bid if ticker else float('nan'),
            'ask': ticker.ask if ticker else float('nan'),
            'mark': ticker.price if ticker else float('nan'),
            'theo': metrics.price,
            'iv': iv,
            'delta': greeks.delta,
            'gamma': greeks.gamma,
            'theta': greeks.theta,
            'vega': greeks.vega,
            'rho': greeks.rho,
        })

    frame = pd.DataFrame(rows, columns=CHAIN_COLUMNS)
    if not frame.empty:
        frame = frame.sort_values(['expiration', 'strike', 'type']).reset_index(drop=True)
    return frame


def payoff_figure(strategy: Strategy, metrics: StrategyMetrics) -> go.Figure:
    """Expiry P&L curve with spot, strikes and break-evens marked."""
    prices = [point.price for point in metrics.payoff_data]
    payoffs = [point.payoff for point in metrics.payoff_data]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=prices,
        y=payoffs,
        mode='lines',
        name='P&L at expiry',
        line=dict(color='blue', width=3),
        fill='tozeroy',
        fillcolor='rgba(0, 100, 255, 0.1)',
    ))

    fig.add_hline(y=0, line_dash="dash", line_color="gray", opacity=0.5)

    fig.add_vline(
        x=metrics.current_price,
        line_dash="solid",
        line_color="green",
        annotation_text=f"Spot: ${metrics.current_price:,.0f}",
        annotation_position="top",
    )

    for point in metrics.break_even_points:
        fig.add_vline(
            x=point,
            line_dash="dot",
            line_color="red",
            annotation_text=f"BE: ${point:,.0f}",
            annotation_position="bottom right",
        )

    for leg in strategy.legs:
        reference = leg.reference_price
        if reference is None:
            continue
        label = f"{'+' if leg.action == 'buy' else '-'}{leg.quantity:g}{leg.instrument.kind[0].upper()}"
        fig.add_vline(
            x=reference,
            line_dash="dash",
            line_color="purple",
            opacity=0.3,
            annotation_text=label,
            annotation_position="top left",
        )

    fig.update_layout(
        title=f"{strategy.name or 'Strategy'} P&L",
        xaxis_title="BTC Price at Expiration",
        yaxis_title="Profit/Loss ($)",
        hovermode='x unified',
        height=500,
        showlegend=True,
    )
    return fig


def legs_frame(metrics: StrategyMetrics) -> pd.DataFrame:
    """Per-leg position table for display."""
    return pd.DataFrame([
        {
            'action': leg.action,
            'quantity': leg.quantity,
            'symbol': leg.symbol,
            'price': leg.metrics.price,
            'volatility': leg.volatility,
            'delta': leg.position_delta,
            'gamma': leg.position_gamma,
            'theta': leg.position_theta,
            'vega': leg.position_vega,
            'rho': leg.position_rho,
            'cost': leg.position_cost,
        }
        for leg in metrics.legs
    ])
