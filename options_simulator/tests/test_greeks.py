"""Tests for Black-Scholes Greeks."""

import math

import pytest

from options_simulator.models.metrics import Greeks
from options_simulator.pricing.black_scholes import black_scholes_price, calculate_greeks
from options_simulator.utils.error_handling import InvalidVolatilityError


class TestGreeksSigns:
    """Test suite for sign and range sanity with time remaining."""

    CASES = [
        (100.0, 100.0, 0.25, 0.02, 0.25),
        (100.0, 80.0, 0.5, 0.05, 0.6),
        (100.0, 130.0, 1.0, 0.05, 1.2),
        (112271.90, 112000.0, 30 / 365, 0.05, 0.5),
    ]

    def test_call_delta_between_zero_and_one(self):
        """Test call delta lies strictly in (0, 1)."""
        for spot, strike, tte, rate, vol in self.CASES:
            delta = calculate_greeks(spot, strike, tte, rate, vol, 'call').delta
            assert 0 < delta < 1

    def test_put_delta_between_minus_one_and_zero(self):
        """Test put delta lies strictly in (-1, 0)."""
        for spot, strike, tte, rate, vol in self.CASES:
            delta = calculate_greeks(spot, strike, tte, rate, vol, 'put').delta
            assert -1 < delta < 0

    def test_gamma_and_vega_identical_for_call_and_put(self):
        """Test gamma and vega are non-negative and equal for calls and puts."""
        for spot, strike, tte, rate, vol in self.CASES:
            call = calculate_greeks(spot, strike, tte, rate, vol, 'call')
            put = calculate_greeks(spot, strike, tte, rate, vol, 'put')

            assert call.gamma >= 0
            assert call.vega >= 0
            assert call.gamma == put.gamma
            assert call.vega == put.vega

    def test_put_delta_is_call_delta_minus_one(self):
        """Test put delta = call delta - 1."""
        call = calculate_greeks(100.0, 105.0, 0.25, 0.02, 0.25, 'call')
        put = calculate_greeks(100.0, 105.0, 0.25, 0.02, 0.25, 'put')

        assert abs((call.delta - 1.0) - put.delta) < 1e-12

    def test_rho_signs(self):
        """Test call rho positive, put rho negative."""
        call = calculate_greeks(100.0, 100.0, 0.5, 0.05, 0.3, 'call')
        put = calculate_greeks(100.0, 100.0, 0.5, 0.05, 0.3, 'put')

        assert call.rho > 0
        assert put.rho < 0

    def test_atm_theta_negative(self):
        """Test ATM long options decay."""
        call = calculate_greeks(100.0, 100.0, 0.25, 0.02, 0.25, 'call')
        put = calculate_greeks(100.0, 100.0, 0.25, 0.02, 0.25, 'put')

        assert call.theta < 0
        assert put.theta < 0

    def test_gamma_highest_at_the_money(self):
        """Test ATM gamma exceeds OTM gamma."""
        atm = calculate_greeks(100.0, 100.0, 0.25, 0.02, 0.25, 'call')
        otm = calculate_greeks(100.0, 120.0, 0.25, 0.02, 0.25, 'call')

        assert atm.gamma > otm.gamma


class TestGreeksAgainstFiniteDifferences:
    """Test suite comparing analytic Greeks with bumped prices."""

    def test_delta_matches_bump(self):
        """Test delta approximates dPrice/dS."""
        h = 0.01
        up = black_scholes_price(100.0 + h, 100.0, 0.5, 0.05, 0.3, 'call')
        down = black_scholes_price(100.0 - h, 100.0, 0.5, 0.05, 0.3, 'call')
        delta = calculate_greeks(100.0, 100.0, 0.5, 0.05, 0.3, 'call').delta

        assert abs((up - down) / (2 * h) - delta) < 1e-5

    def test_vega_matches_bump(self):
        """Test vega is per 1.00 of volatility."""
        h = 1e-4
        up = black_scholes_price(100.0, 100.0, 0.5, 0.05, 0.3 + h, 'put')
        down = black_scholes_price(100.0, 100.0, 0.5, 0.05, 0.3 - h, 'put')
        vega = calculate_greeks(100.0, 100.0, 0.5, 0.05, 0.3, 'put').vega

        assert abs((up - down) / (2 * h) - vega) < 1e-4

    def test_theta_is_per_year(self):
        """Test theta approximates -dPrice/dT (annualized)."""
        h = 1e-5
        longer = black_scholes_price(100.0, 100.0, 0.5 + h, 0.05, 0.3, 'call')
        shorter = black_scholes_price(100.0, 100.0, 0.5 - h, 0.05, 0.3, 'call')
        theta = calculate_greeks(100.0, 100.0, 0.5, 0.05, 0.3, 'call').theta

        assert abs(-(longer - shorter) / (2 * h) - theta) < 1e-3


class TestGreeksAtExpiry:
    """Test suite for the T <= 0 collapse."""

    def test_call_in_the_money(self):
        """Test expired ITM call has delta 1 and no other Greeks."""
        greeks = calculate_greeks(110.0, 100.0, 0.0, 0.05, 0.5, 'call')

        assert greeks == Greeks(delta=1.0, gamma=0.0, theta=0.0, vega=0.0, rho=0.0)

    def test_call_out_of_the_money(self):
        """Test expired OTM call has delta 0."""
        assert calculate_greeks(90.0, 100.0, 0.0, 0.05, 0.5, 'call').delta == 0.0

    def test_put_in_the_money(self):
        """Test expired ITM put has delta -1."""
        greeks = calculate_greeks(90.0, 100.0, 0.0, 0.05, 0.5, 'put')

        assert greeks.delta == -1.0
        assert greeks.gamma == 0.0

    def test_at_strike_delta_zero(self):
        """Test exactly at the strike both kinds report delta 0."""
        assert calculate_greeks(100.0, 100.0, 0.0, 0.05, 0.5, 'call').delta == 0.0
        assert calculate_greeks(100.0, 100.0, 0.0, 0.05, 0.5, 'put').delta == 0.0


class TestGreeksExample:
    """Test suite for the BTC example scenario."""

    def test_btc_call_greeks_finite(self):
        """Test S=112271.90, K=112000, T=30/365 call Greeks."""
        greeks = calculate_greeks(112271.90, 112000.0, 30 / 365, 0.05, 0.5, 'call')

        for value in (greeks.delta, greeks.gamma, greeks.theta, greeks.vega, greeks.rho):
            assert math.isfinite(value)
        assert 0 < greeks.delta < 1
        assert greeks.delta > 0.5  # slightly ITM

    def test_idempotent(self):
        """Test repeated calls return identical records."""
        first = calculate_greeks(112271.90, 112000.0, 30 / 365, 0.05, 0.5, 'put')
        second = calculate_greeks(112271.90, 112000.0, 30 / 365, 0.05, 0.5, 'put')

        assert first == second

    def test_invalid_volatility(self):
        """Test Greeks share the pricing input contract."""
        with pytest.raises(InvalidVolatilityError):
            calculate_greeks(100.0, 100.0, 0.5, 0.05, 0.0, 'call')

    def test_scaled_position(self):
        """Test scaling Greeks by a signed quantity."""
        greeks = Greeks(delta=0.5, gamma=0.01, theta=-10.0, vega=20.0, rho=5.0)

        assert greeks.scaled(-2) == Greeks(delta=-1.0, gamma=-0.02, theta=20.0, vega=-40.0, rho=-10.0)
