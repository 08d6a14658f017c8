"""Tests for strategy document loading."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from options_simulator.data.loaders import (
    leg_from_dict,
    load_strategy,
    strategy_from_dict,
    strategy_to_dict,
)
from options_simulator.models.instrument import Instrument
from options_simulator.models.strategy import Leg, Strategy
from options_simulator.utils.error_handling import DataValidationError

EXAMPLE_STRATEGY = Path(__file__).resolve().parents[2] / "strategies" / "bull_call_spread.yaml"


@pytest.fixture
def spread_document():
    """Bull call spread in the exported camelCase format."""
    return {
        'name': "Bull Call Spread",
        'template': "bull-call-spread",
        'legs': [
            {
                'action': "buy",
                'quantity': 1,
                'option': {
                    'symbol': "C-BTC-110000-250822",
                    'contractType': "call_option",
                    'strikePrice': 110000,
                    'expirationDate': "2025-08-22T12:00:00Z",
                    'impliedVolatility': 0.5,
                    'lastPrice': 3100,
                },
            },
            {
                'action': "SELL",
                'quantity': "1",
                'implied_vol': 0.45,
                'option': {
                    'symbol': "C-BTC-113000-250822",
                    'contractType': "call_option",
                    'strikePrice': 113000,
                    'expirationDate': "2025-08-22T12:00:00Z",
                    'impliedVolatility': 0.5,
                },
            },
        ],
    }


class TestLegFromDict:
    """Test suite for leg parsing."""

    def test_option_fields_fall_through(self, spread_document):
        """Test vol and price on the option are used when the leg has none."""
        leg = leg_from_dict(spread_document['legs'][0])

        assert leg.action == 'buy'
        assert leg.implied_vol == 0.5
        assert leg.last_price == 3100.0
        assert leg.instrument.strike == 110000.0

    def test_leg_fields_take_precedence(self, spread_document):
        leg = leg_from_dict(spread_document['legs'][1])

        assert leg.action == 'sell'
        assert leg.quantity == 1.0
        assert leg.implied_vol == 0.45
        assert leg.last_price is None

    def test_future_entry_price(self):
        leg = leg_from_dict({
            'action': "sell",
            'entryPrice': "105000",
            'instrument': {'symbol': "BTC-PERP", 'contract_type': "perpetual_futures"},
        })

        assert leg.instrument.is_perpetual
        assert leg.entry_price == 105000.0

    def test_missing_option(self):
        with pytest.raises(DataValidationError, match="no option selected"):
            leg_from_dict({'action': "buy"})

    def test_bad_quantity(self, spread_document):
        data = dict(spread_document['legs'][0], quantity=0)

        with pytest.raises(DataValidationError):
            leg_from_dict(data)


class TestStrategyFromDict:
    """Test suite for whole-document parsing."""

    def test_parses_all_legs(self, spread_document):
        strategy = strategy_from_dict(spread_document)

        assert strategy.name == "Bull Call Spread"
        assert strategy.template == "bull-call-spread"
        assert len(strategy) == 2

    def test_leg_errors_are_numbered(self, spread_document):
        """Test errors name the offending leg."""
        spread_document['legs'][1]['option']['contractType'] = "move_options"

        with pytest.raises(DataValidationError, match="Leg 2"):
            strategy_from_dict(spread_document)

    def test_requires_leg_list(self):
        with pytest.raises(DataValidationError, match="'legs' list"):
            strategy_from_dict({'name': "Nothing"})

    def test_serialise_and_parse_back(self):
        """Test strategy_to_dict output is accepted by strategy_from_dict."""
        expiry = datetime(2025, 8, 22, 12, 0, tzinfo=timezone.utc)
        strategy = Strategy(
            legs=(
                Leg(
                    instrument=Instrument(symbol="P-BTC-108000-250822", kind='put', strike=108000.0, expiration=expiry),
                    quantity=0.5,
                    action='sell',
                    implied_vol=0.55,
                ),
                Leg(instrument=Instrument(symbol="BTC-PERP", kind='future'), entry_price=111000.0),
            ),
            name="Hedged Put",
        )

        assert strategy_from_dict(strategy_to_dict(strategy)) == strategy


class TestLoadStrategy:
    """Test suite for file loading."""

    def test_load_json(self, tmp_path, spread_document):
        path = tmp_path / "spread.json"
        path.write_text(json.dumps(spread_document))

        assert len(load_strategy(path)) == 2

    def test_load_wrapped_export(self, tmp_path, spread_document):
        """Test exported {'strategy': ..., 'metrics': ...} files unwrap."""
        path = tmp_path / "export.json"
        path.write_text(json.dumps({'strategy': spread_document, 'metrics': {}}))

        assert load_strategy(path).name == "Bull Call Spread"

    def test_load_bundled_yaml(self):
        """Test the example strategy shipped with the project."""
        strategy = load_strategy(EXAMPLE_STRATEGY)

        assert [leg.action for leg in strategy.legs] == ['buy', 'sell']
        assert [leg.instrument.strike for leg in strategy.legs] == [110000.0, 113000.0]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_strategy(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("legs: [unclosed\n")

        with pytest.raises(DataValidationError, match="Could not parse"):
            load_strategy(path)
