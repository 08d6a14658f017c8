"""Loaders for strategy documents (JSON or YAML).

Strategy document format (camelCase keys, as exported by the strategy
builder, and snake_case keys are both accepted):

    name: Bull Call Spread
    template: bull-call-spread
    legs:
      - action: buy
        quantity: 1
        option:
          symbol: C-BTC-110000-250822
          contractType: call_option
          strikePrice: 110000
          expirationDate: "2025-08-22T12:00:00Z"
          impliedVolatility: 0.5
          lastPrice: 3100
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from ..models.instrument import Instrument
from ..models.strategy import Leg, Strategy
from ..utils.error_handling import DataValidationError

logger = logging.getLogger("options_simulator.loaders")


def _pick(*sources: Dict[str, Any], keys: tuple) -> Any:
    """First non-empty value for any of ``keys`` across ``sources``."""
    for source in sources:
        for key in keys:
            value = source.get(key)
            if value is not None and value != "":
                return value
    return None


def instrument_from_dict(data: Dict[str, Any]) -> Instrument:
    """Parse an instrument/product mapping.

    Raises:
        DataValidationError: If the mapping is not a valid option or future
    """
    if not isinstance(data, dict):
        raise DataValidationError(f"Instrument must be a mapping, got {type(data).__name__}")
    try:
        return Instrument.from_product(data)
    except (TypeError, ValueError) as e:
        raise DataValidationError(f"Invalid instrument {data.get('symbol')!r}: {e}") from e


def leg_from_dict(data: Dict[str, Any]) -> Leg:
    """Parse one strategy leg.

    Volatility and last price may sit on the leg or on its option.

    Raises:
        DataValidationError: If the leg is malformed
    """
    if not isinstance(data, dict):
        raise DataValidationError(f"Leg must be a mapping, got {type(data).__name__}")

    option = data.get('option', data.get('instrument'))
    if option is None:
        raise DataValidationError("Leg has no option selected")
    instrument = instrument_from_dict(option)

    implied_vol = _pick(data, option, keys=('impliedVolatility', 'implied_vol'))
    last_price = _pick(data, option, keys=('lastPrice', 'last_price'))
    entry_price = _pick(data, keys=('entryPrice', 'entry_price'))

    try:
        return Leg(
            instrument=instrument,
            quantity=float(data.get('quantity', 1)),
            action=str(data.get('action', 'buy')).lower(),
            implied_vol=float(implied_vol) if implied_vol is not None else None,
            last_price=float(last_price) if last_price is not None else None,
            entry_price=float(entry_price) if entry_price is not None else None,
        )
    except (TypeError, ValueError) as e:
        raise DataValidationError(f"Invalid leg on {instrument.symbol}: {e}") from e


def strategy_from_dict(data: Dict[str, Any]) -> Strategy:
    """Parse a strategy mapping with a ``legs`` list.

    Raises:
        DataValidationError: If the strategy or any leg is malformed
    """
    if not isinstance(data, dict):
        raise DataValidationError("Strategy document must be a mapping")

    legs_data = data.get('legs')
    if not isinstance(legs_data, list):
        raise DataValidationError("Strategy must contain a 'legs' list")

    legs = []
    for index, leg_data in enumerate(legs_data, start=1):
        try:
            legs.append(leg_from_dict(leg_data))
        except DataValidationError as e:
            raise DataValidationError(f"Leg {index}: {e}") from e

    return Strategy(
        legs=tuple(legs),
        name=str(data.get('name') or ""),
        template=data.get('template'),
    )


def load_strategy(path: str | Path) -> Strategy:
    """Load a strategy from a ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        DataValidationError: If the file cannot be parsed or is invalid
    """
    path = Path(path)
    if not path.exists():
        logger.error("Strategy file not found: %s", path)
        raise FileNotFoundError(f"Strategy file not found: {path}")

    text = path.read_text()
    try:
        if path.suffix.lower() == '.json':
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DataValidationError(f"Could not parse strategy file {path}: {e}") from e

    # Exported files wrap the strategy together with its computed metrics
    if isinstance(data, dict) and 'strategy' in data and 'legs' not in data:
        data = data['strategy']

    strategy = strategy_from_dict(data)
    logger.info("Loaded strategy %r with %d legs from %s", strategy.name, len(strategy), path.name)
    return strategy


def strategy_to_dict(strategy: Strategy) -> Dict[str, Any]:
    """Serialise a strategy to the document format read by :func:`strategy_from_dict`."""
    legs = []
    for leg in strategy.legs:
        instrument = leg.instrument
        option = {
            'symbol': instrument.symbol,
            'contract_type': instrument.kind,
            'strike_price': instrument.strike,
            'expirationDate': instrument.expiration.isoformat() if instrument.expiration else 'PERP',
        }
        entry = {'action': leg.action, 'quantity': leg.quantity, 'option': option}
        if leg.implied_vol is not None:
            entry['implied_vol'] = leg.implied_vol
        if leg.last_price is not None:
            entry['last_price'] = leg.last_price
        if leg.entry_price is not None:
            entry['entry_price'] = leg.entry_price
        legs.append(entry)

    return {'name': strategy.name, 'template': strategy.template, 'legs': legs}
