#!/usr/bin/env python3
"""Price a multi-leg options strategy and print its risk profile.

Usage:
    python3 analyze_strategy.py strategies/bull_call_spread.yaml --spot 112000
    python3 analyze_strategy.py my_strategy.json --live
    python3 analyze_strategy.py --template iron-condor --chain
"""

import argparse
import sys

from options_simulator.builders.strategy_templates import STRATEGY_TEMPLATES, build_from_template
from options_simulator.data.loaders import load_strategy
from options_simulator.data.market_data import MarketDataService
from options_simulator.output.console import print_header, print_option_chain, print_strategy_report
from options_simulator.pricing.analyzer import calculate_strategy_metrics
from options_simulator.utils.config import load_config
from options_simulator.utils.error_handling import SimulatorError
from options_simulator.utils.logging_config import setup_logging


def main():
    parser = argparse.ArgumentParser(
        description='Analyze a BTC options strategy',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Strategy file priced at a fixed spot
  python3 analyze_strategy.py strategies/bull_call_spread.yaml --spot 112000

  # Spot from CoinGecko (falls back to the configured price)
  python3 analyze_strategy.py my_strategy.json --live

  # Build a template against the exchange chain (mock chain if offline)
  python3 analyze_strategy.py --template straddle --chain
        """
    )

    parser.add_argument('strategy_file', nargs='?', help='Strategy JSON/YAML file')
    parser.add_argument('--template', choices=sorted(STRATEGY_TEMPLATES),
                        help='Build a template strategy from the market chain')
    parser.add_argument('--spot', type=float, help='Underlying spot price')
    parser.add_argument('--live', action='store_true', help='Fetch spot price from CoinGecko')
    parser.add_argument('--chain', action='store_true', help='Print the option chain')
    parser.add_argument('--rate', type=float, help='Risk-free rate (default from config)')
    parser.add_argument('--config', help='Path to YAML config (default: config/default_params.yaml)')
    parser.add_argument('--log-level', help='Logging level (default from config)')
    parser.add_argument('--log-file', help='Optional log file')

    args = parser.parse_args()

    if not args.strategy_file and not args.template:
        parser.error("provide a strategy file or --template")

    try:
        config = load_config(args.config)
    except SimulatorError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(log_level=args.log_level or config.log_level, log_file=args.log_file)
    rate = args.rate if args.rate is not None else config.risk_free_rate

    service = MarketDataService.from_config(config)

    if args.spot is not None:
        spot = args.spot
    elif args.live or args.template or args.chain:
        spot = service.get_spot_price()
    else:
        spot = config.fallback_spot_price

    try:
        products = tickers = None
        mock = False
        if args.template or args.chain:
            products_result = service.get_products()
            tickers_result = service.get_market_data()
            products, tickers = products_result.data, tickers_result.data
            mock = products_result.mock or tickers_result.mock

        print_header("BTC OPTIONS SIMULATOR", spot, mock=mock)

        if args.chain:
            print_option_chain(products, spot, tickers, rate=rate, default_vol=config.default_volatility)

        if args.template:
            strategy = build_from_template(args.template, products, spot, tickers=tickers)
        else:
            strategy = load_strategy(args.strategy_file)

        metrics = calculate_strategy_metrics(
            strategy, spot, rate=rate, default_vol=config.default_volatility
        )
    except (SimulatorError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print_strategy_report(strategy, metrics)
    print("\n" + "=" * 80)


if __name__ == '__main__':
    main()
