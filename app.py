"""Streamlit dashboard for the BTC options simulator.

Run with: streamlit run app.py
"""

import streamlit as st
import pandas as pd

from options_simulator.builders.strategy_templates import (
    STRATEGY_TEMPLATES,
    build_from_template,
    detect_strategy_type,
)
from options_simulator.data.market_data import MarketDataService
from options_simulator.models.strategy import Leg, Strategy
from options_simulator.output.dashboard import legs_frame, option_chain_frame, payoff_figure
from options_simulator.pricing.analyzer import calculate_strategy_metrics
from options_simulator.pricing.black_scholes import calculate_time_to_expiry
from options_simulator.pricing.implied_volatility import calculate_implied_volatility
from options_simulator.utils.config import load_config
from options_simulator.utils.error_handling import SimulatorError
from options_simulator.utils.logging_config import setup_logging

st.set_page_config(
    page_title="BTC Options Simulator",
    page_icon="₿",
    layout="wide",
    initial_sidebar_state="expanded"
)

config = load_config()
setup_logging(log_level=config.log_level)

st.title("₿ BTC Options Simulator")
st.markdown("*Price options, build strategies and inspect payoffs*")

# Sidebar - Configuration
st.sidebar.header("⚙️ Configuration")

risk_free_rate = st.sidebar.number_input(
    "Risk-free rate",
    min_value=0.0,
    max_value=0.5,
    value=float(config.risk_free_rate),
    step=0.005,
    format="%.3f",
)
default_vol = st.sidebar.slider(
    "Default volatility",
    min_value=0.05,
    max_value=3.0,
    value=float(config.default_volatility),
    step=0.05,
    help="Used for options without a quoted implied volatility"
)

st.sidebar.subheader("📈 Spot Price")
spot_source = st.sidebar.radio("Source:", ["Live (CoinGecko)", "Manual"])


@st.cache_resource
def get_service() -> MarketDataService:
    return MarketDataService.from_config(config)


@st.cache_data(ttl=120)
def fetch_market():
    service = get_service()
    products = service.get_products()
    tickers = service.get_market_data()
    return products.data, tickers.data, products.mock or tickers.mock


service = get_service()
if spot_source == "Manual":
    spot = st.sidebar.number_input("Spot", min_value=1.0, value=float(config.fallback_spot_price), step=100.0)
else:
    spot = service.get_spot_price()
    st.sidebar.metric("BTC/USD", f"${spot:,.2f}")

if st.sidebar.button("🔄 Refresh market data"):
    fetch_market.clear()

with st.spinner("Loading market data..."):
    products, tickers, mock = fetch_market()

if mock:
    st.warning("⚠️ Exchange unavailable - showing generated mock data")

tab_dashboard, tab_chain, tab_builder, tab_iv = st.tabs(
    ["📊 Dashboard", "🔗 Option Chain", "🧱 Strategy Builder", "🧮 IV Calculator"]
)

with tab_dashboard:
    col1, col2, col3 = st.columns(3)
    col1.metric("Spot", f"${spot:,.2f}")
    col2.metric("Products", len(products))
    col3.metric("Quoted", len(tickers))

    futures = [t for t in tickers.values() if 'PERP' in t.symbol]
    if futures:
        st.subheader("Perpetual Futures")
        st.dataframe(pd.DataFrame([{
            'symbol': t.symbol,
            'mark': t.price,
            'bid': t.bid,
            'ask': t.ask,
            'volume': t.volume,
            'open interest': t.open_interest,
            '24h change %': t.change_24h_percent,
        } for t in futures]), use_container_width=True)

with tab_chain:
    chain = option_chain_frame(products, spot, tickers, rate=risk_free_rate, default_vol=default_vol)
    if chain.empty:
        st.info("No options available")
    else:
        expiries = sorted(chain['expiration'].unique())
        selected_expiry = st.selectbox(
            "Expiration", expiries, format_func=lambda e: pd.Timestamp(e).strftime('%Y-%m-%d %H:%M')
        )
        view = chain[chain['expiration'] == selected_expiry]
        calls = view[view['type'] == 'call'].set_index('strike')
        puts = view[view['type'] == 'put'].set_index('strike')
        columns = ['mark', 'theo', 'iv', 'delta', 'gamma', 'theta', 'vega']
        left, right = st.columns(2)
        with left:
            st.markdown("**Calls**")
            st.dataframe(calls[columns], use_container_width=True)
        with right:
            st.markdown("**Puts**")
            st.dataframe(puts[columns], use_container_width=True)

with tab_builder:
    mode = st.radio("Build from:", ["Template", "Custom legs"], horizontal=True)
    strategy = None

    options = [p for p in products if p.is_option and p.expiration is not None]
    expirations = sorted({o.expiration for o in options})

    if mode == "Template":
        template_key = st.selectbox(
            "Template",
            list(STRATEGY_TEMPLATES),
            format_func=lambda k: f"{STRATEGY_TEMPLATES[k].name} - {STRATEGY_TEMPLATES[k].description}"
        )
        expiry = st.selectbox("Expiration", expirations, format_func=lambda e: e.strftime('%Y-%m-%d %H:%M'))
        width = st.slider("Strike width (chain steps)", 1, 3, 1)
        quantity = st.number_input("Quantity", min_value=0.01, value=1.0, step=0.01)
        try:
            strategy = build_from_template(
                template_key, products, spot, expiration=expiry, width=width,
                tickers=tickers, quantity=quantity
            )
        except SimulatorError as e:
            st.error(f"❌ {e}")
    else:
        by_symbol = {p.symbol: p for p in products}
        symbols = st.multiselect("Instruments", sorted(by_symbol))
        legs = []
        for symbol in symbols:
            instrument = by_symbol[symbol]
            c1, c2, c3 = st.columns(3)
            action = c1.selectbox("Action", ["buy", "sell"], key=f"action_{symbol}")
            qty = c2.number_input("Qty", min_value=0.01, value=1.0, step=0.01, key=f"qty_{symbol}")
            ticker = tickers.get(symbol)
            entry = None
            if instrument.kind == 'future':
                entry = c3.number_input("Entry", min_value=1.0, value=float(spot), key=f"entry_{symbol}")
            legs.append(Leg(
                instrument=instrument,
                quantity=qty,
                action=action,
                implied_vol=ticker.mark_iv if ticker else None,
                last_price=ticker.price if ticker and ticker.price > 0 else None,
                entry_price=entry,
            ))
        if legs:
            strategy = Strategy(legs=tuple(legs), name="Custom Strategy")

    if strategy is not None and not strategy.is_empty:
        st.subheader(f"🎯 {detect_strategy_type(strategy)}")
        try:
            metrics = calculate_strategy_metrics(strategy, spot, rate=risk_free_rate, default_vol=default_vol)
        except SimulatorError as e:
            st.error(f"❌ Could not price strategy: {e}")
        else:
            st.plotly_chart(payoff_figure(strategy, metrics), use_container_width=True)

            col1, col2, col3, col4 = st.columns(4)
            with col1:
                st.metric("Net Debit" if metrics.is_net_debit else "Net Credit", f"${abs(metrics.total_cost):,.2f}")
                st.metric("Margin", f"${metrics.margin_requirement:,.2f}")
            with col2:
                st.metric("Max Profit", f"${metrics.max_profit:,.2f}")
                st.metric("Max Loss", f"${metrics.max_loss:,.2f}")
            with col3:
                st.metric("Delta", f"{metrics.total_delta:.4f}")
                st.metric("Gamma", f"{metrics.total_gamma:.6f}")
            with col4:
                st.metric("Theta /day", f"{metrics.total_theta / 365:.2f}")
                st.metric("Vega", f"{metrics.total_vega:.2f}")

            if metrics.break_even_points:
                st.markdown("**Break-even:** " + ", ".join(f"${p:,.2f}" for p in metrics.break_even_points))
            st.dataframe(legs_frame(metrics), use_container_width=True)
    else:
        st.info("👈 Pick a template or add legs to see the payoff")

with tab_iv:
    options_by_symbol = {o.symbol: o for o in products if o.is_option and o.expiration is not None}
    if not options_by_symbol:
        st.info("No options available")
    else:
        symbol = st.selectbox("Option", sorted(options_by_symbol))
        option = options_by_symbol[symbol]
        ticker = tickers.get(symbol)
        market_price = st.number_input(
            "Market price",
            min_value=0.0,
            value=float(ticker.price) if ticker else 0.0,
            step=1.0,
        )
        time_to_expiry = calculate_time_to_expiry(option.expiration)
        iv = calculate_implied_volatility(
            spot, option.strike, time_to_expiry, risk_free_rate, market_price, option.kind
        )
        st.metric("Implied Volatility", f"{iv:.2%}" if iv is not None else "N/A")
        st.caption(f"T = {time_to_expiry:.4f} years, strike ${option.strike:,.0f}")
