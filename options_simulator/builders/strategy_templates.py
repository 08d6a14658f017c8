"""Predefined multi-leg strategy templates.

Templates describe legs as strike offsets (in chain steps) from the
at-the-money strike, so the same template applies at any spot level.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ..models.instrument import Instrument
from ..models.market import Ticker
from ..models.strategy import Leg, Strategy
from ..utils.error_handling import DataValidationError

logger = logging.getLogger("options_simulator.templates")


@dataclass(frozen=True)
class TemplateLeg:
    action: str
    kind: str
    offset: int
    quantity: float = 1.0


@dataclass(frozen=True)
class StrategyTemplate:
    name: str
    description: str
    legs: Tuple[TemplateLeg, ...]


STRATEGY_TEMPLATES: Dict[str, StrategyTemplate] = {
    'bull-call-spread': StrategyTemplate(
        name="Bull Call Spread",
        description="Limited risk bullish strategy",
        legs=(
            TemplateLeg("buy", "call", 0),
            TemplateLeg("sell", "call", 1),
        ),
    ),
    'bear-put-spread': StrategyTemplate(
        name="Bear Put Spread",
        description="Limited risk bearish strategy",
        legs=(
            TemplateLeg("buy", "put", 0),
            TemplateLeg("sell", "put", -1),
        ),
    ),
    'iron-condor': StrategyTemplate(
        name="Iron Condor",
        description="Neutral strategy with defined risk",
        legs=(
            TemplateLeg("sell", "put", -1),
            TemplateLeg("buy", "put", -2),
            TemplateLeg("sell", "call", 1),
            TemplateLeg("buy", "call", 2),
        ),
    ),
    'butterfly-spread': StrategyTemplate(
        name="Butterfly Spread",
        description="Limited risk, limited reward",
        legs=(
            TemplateLeg("buy", "call", -1),
            TemplateLeg("sell", "call", 0, quantity=2.0),
            TemplateLeg("buy", "call", 1),
        ),
    ),
    'straddle': StrategyTemplate(
        name="Long Straddle",
        description="Volatility play",
        legs=(
            TemplateLeg("buy", "call", 0),
            TemplateLeg("buy", "put", 0),
        ),
    ),
    'strangle': StrategyTemplate(
        name="Long Strangle",
        description="Volatility play with wider strikes",
        legs=(
            TemplateLeg("buy", "call", 1),
            TemplateLeg("buy", "put", -1),
        ),
    ),
}


def build_from_template(
    template_key: str,
    instruments: List[Instrument],
    spot: float,
    expiration: Optional[datetime] = None,
    width: int = 1,
    tickers: Optional[Dict[str, Ticker]] = None,
    quantity: float = 1.0,
) -> Strategy:
    """Instantiate a template against an option chain.

    Args:
        template_key: Key into :data:`STRATEGY_TEMPLATES`
        instruments: Available products (futures are ignored)
        spot: Current underlying price, used to find the ATM strike
        expiration: Expiry to trade; defaults to the earliest in the chain
        width: Chain steps per template offset (2 = every other strike)
        tickers: Optional quotes keyed by symbol, used to attach last
            price and mark IV to each leg
        quantity: Multiplier applied to every leg's template quantity

    Returns:
        Strategy named after the template

    Raises:
        DataValidationError: If the template is unknown or the chain lacks
            the strikes the template needs
    """
    template = STRATEGY_TEMPLATES.get(template_key)
    if template is None:
        raise DataValidationError(f"Unknown strategy template: {template_key}")
    if width < 1:
        raise DataValidationError(f"Template width must be >= 1, got {width}")

    options = [i for i in instruments if i.is_option and i.expiration is not None]
    if not options:
        raise DataValidationError("No options available to build a strategy")

    if expiration is None:
        expiration = min(i.expiration for i in options)

    by_key: Dict[Tuple[str, float], Instrument] = {}
    strikes_by_kind: Dict[str, set] = defaultdict(set)
    for instrument in options:
        if instrument.expiration != expiration:
            continue
        by_key[(instrument.kind, instrument.strike)] = instrument
        strikes_by_kind[instrument.kind].add(instrument.strike)

    strikes = sorted(set().union(*strikes_by_kind.values())) if strikes_by_kind else []
    if not strikes:
        raise DataValidationError(f"No options expiring {expiration:%Y-%m-%d %H:%M}")

    atm_index = min(range(len(strikes)), key=lambda i: abs(strikes[i] - spot))
    tickers = tickers or {}
    legs = []

    for template_leg in template.legs:
        index = atm_index + template_leg.offset * width
        if not 0 <= index < len(strikes):
            raise DataValidationError(
                f"{template.name} needs a strike {template_leg.offset * width:+d} steps from ATM "
                f"but the chain only has {len(strikes)} strikes"
            )
        instrument = by_key.get((template_leg.kind, strikes[index]))
        if instrument is None:
            raise DataValidationError(f"No {template_leg.kind} at strike {strikes[index]:.0f}")

        ticker = tickers.get(instrument.symbol)
        legs.append(Leg(
            instrument=instrument,
            quantity=template_leg.quantity * quantity,
            action=template_leg.action,
            implied_vol=ticker.mark_iv if ticker else None,
            last_price=ticker.price if ticker and ticker.price > 0 else None,
        ))

    logger.debug("Built %s with strikes %s", template.name, [leg.instrument.strike for leg in legs])
    return Strategy(legs=tuple(legs), name=template.name, template=template_key)


def detect_strategy_type(strategy: Strategy) -> str:
    """Name a strategy by its template or by counting its leg types."""
    if strategy.template in STRATEGY_TEMPLATES:
        return STRATEGY_TEMPLATES[strategy.template].name

    if strategy.is_empty:
        return "Custom Strategy"

    kinds = [leg.instrument.kind for leg in strategy.legs]
    calls = kinds.count("call")
    puts = kinds.count("put")
    futures = kinds.count("future")
    buys = sum(1 for leg in strategy.legs if leg.action == "buy")
    sells = len(strategy.legs) - buys

    if futures > 0 and calls + puts == 0:
        return "Futures Position"
    if calls == 2 and puts == 0 and buys == 1 and sells == 1:
        return "Bull Call Spread"
    if calls == 0 and puts == 2 and buys == 1 and sells == 1:
        return "Bear Put Spread"
    if calls == 2 and puts == 2 and buys == 2 and sells == 2:
        return "Iron Condor"
    if calls == 3 and puts == 0 and buys == 2 and sells == 1:
        return "Butterfly Spread"
    if calls == 1 and puts == 1 and buys == 2 and sells == 0:
        return "Long Straddle/Strangle"

    return "Custom Strategy"
