"""Tests for the Newton-Raphson implied volatility solver."""

from options_simulator.pricing.black_scholes import black_scholes_price
from options_simulator.pricing.implied_volatility import calculate_implied_volatility


class TestImpliedVolatilityRoundTrip:
    """Test suite recovering the volatility used to price an option."""

    def test_recovers_volatility(self):
        """Test IV(BS(vol)) = vol within 1e-4 across strikes and kinds."""
        for option_type in ('call', 'put'):
            for strike in (95.0, 100.0, 105.0):
                for vol in (0.1, 0.25, 0.5, 1.0, 2.0):
                    price = black_scholes_price(100.0, strike, 0.5, 0.05, vol, option_type)
                    iv = calculate_implied_volatility(100.0, strike, 0.5, 0.05, price, option_type)

                    assert iv is not None, (option_type, strike, vol)
                    assert abs(iv - vol) < 1e-4, (option_type, strike, vol, iv)

    def test_btc_sized_inputs(self):
        """Test recovery on BTC-scale prices."""
        price = black_scholes_price(112271.90, 112000.0, 30 / 365, 0.05, 0.65, 'call')
        iv = calculate_implied_volatility(112271.90, 112000.0, 30 / 365, 0.05, price, 'call')

        assert abs(iv - 0.65) < 1e-4

    def test_starting_point_returns_immediately(self):
        """Test a price generated at 50% vol returns the initial guess."""
        price = black_scholes_price(100.0, 100.0, 0.5, 0.05, 0.5, 'call')

        assert calculate_implied_volatility(100.0, 100.0, 0.5, 0.05, price, 'call') == 0.5


class TestImpliedVolatilityFailures:
    """Test suite for the None result."""

    def test_price_below_arbitrage_bound(self):
        """Test a zero-priced ITM-forward call cannot be matched."""
        assert calculate_implied_volatility(100.0, 100.0, 0.5, 0.05, 0.0, 'call') is None

    def test_price_above_spot(self):
        """Test a call priced above spot cannot be matched."""
        assert calculate_implied_volatility(100.0, 100.0, 0.5, 0.05, 150.0, 'call') is None

    def test_iteration_cap(self):
        """Test hitting max_iterations returns None."""
        price = black_scholes_price(100.0, 100.0, 0.5, 0.05, 0.3, 'call')

        assert calculate_implied_volatility(
            100.0, 100.0, 0.5, 0.05, price, 'call', max_iterations=1
        ) is None


class TestImpliedVolatilityExpired:
    """Test suite for T <= 0."""

    def test_intrinsic_price_returns_zero(self):
        """Test an expired option at intrinsic value has zero IV."""
        assert calculate_implied_volatility(110.0, 100.0, 0.0, 0.05, 10.0, 'call') == 0.0
        assert calculate_implied_volatility(90.0, 100.0, 0.0, 0.05, 10.0, 'put') == 0.0

    def test_intrinsic_match_uses_tolerance(self):
        """Test float noise around intrinsic still matches."""
        assert calculate_implied_volatility(110.0, 100.0, 0.0, 0.05, 10.000001, 'call') == 0.0

    def test_off_intrinsic_returns_none(self):
        """Test an expired option priced above intrinsic has no IV."""
        assert calculate_implied_volatility(110.0, 100.0, 0.0, 0.05, 12.0, 'call') is None
        assert calculate_implied_volatility(110.0, 100.0, -1.0, 0.05, 1.0, 'put') is None
