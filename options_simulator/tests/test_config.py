"""Tests for configuration loading, retries and logging setup."""

import logging

import pytest

from options_simulator.utils.config import DEFAULT_CONFIG_PATH, SimulatorConfig, load_config
from options_simulator.utils.error_handling import (
    ConfigurationError,
    DataValidationError,
    EmptyStrategyError,
    InvalidStrikeError,
    InvalidVolatilityError,
    MarketDataError,
    PricingError,
    SimulatorError,
    retry_with_backoff,
)
from options_simulator.utils.logging_config import ROOT_LOGGER_NAME, get_logger, setup_logging


class TestSimulatorConfig:
    """Test suite for SimulatorConfig."""

    def test_defaults(self):
        config = SimulatorConfig()

        assert config.risk_free_rate == 0.05
        assert config.default_volatility == 0.5
        assert config.use_mock_fallback is True

    def test_from_sectioned_dict(self):
        config = SimulatorConfig.from_dict({
            'pricing': {'risk_free_rate': 0.03},
            'market_data': {'fallback_spot_price': 100000, 'delta_api_url': "https://x.test/"},
            'logging': {'log_level': "debug"},
        })

        assert config.risk_free_rate == 0.03
        assert config.fallback_spot_price == 100000.0
        assert config.delta_api_url == "https://x.test"
        assert config.log_level == "DEBUG"

    def test_from_flat_dict(self):
        config = SimulatorConfig.from_dict({'default_volatility': 0.8, 'underlying': "ETH"})

        assert config.default_volatility == 0.8
        assert config.underlying == "ETH"

    def test_to_dict_round_trip(self):
        config = SimulatorConfig(risk_free_rate=0.02, spot_cache_ttl=30)

        assert SimulatorConfig.from_dict(config.to_dict()).to_dict() == config.to_dict()

    def test_validation(self):
        with pytest.raises(ConfigurationError, match="default_volatility"):
            SimulatorConfig(default_volatility=0)
        with pytest.raises(ConfigurationError, match="request_timeout"):
            SimulatorConfig(request_timeout=-1)
        with pytest.raises(ConfigurationError, match="log_level"):
            SimulatorConfig(log_level="chatty")

    def test_bad_value_type(self):
        with pytest.raises(ConfigurationError, match="Invalid configuration value"):
            SimulatorConfig.from_dict({'risk_free_rate': "five percent"})


class TestLoadConfig:
    """Test suite for YAML loading and environment overrides."""

    def test_bundled_defaults(self):
        """Test the shipped default_params.yaml loads."""
        assert DEFAULT_CONFIG_PATH.exists()

        config = load_config(environ={})

        assert config.risk_free_rate == 0.05
        assert config.delta_api_url == "https://api.delta.exchange"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text("pricing:\n  risk_free_rate: 0.04\nmarket_data:\n  use_mock_fallback: false\n")

        config = load_config(path, environ={})

        assert config.risk_free_rate == 0.04
        assert config.use_mock_fallback is False

    def test_environment_overrides(self, tmp_path):
        """Test env vars win over the file."""
        path = tmp_path / "params.yaml"
        path.write_text("pricing:\n  risk_free_rate: 0.04\n")

        config = load_config(path, environ={
            'RISK_FREE_RATE': "0.01",
            'DELTA_API_URL': "https://testnet.test",
            'LOG_LEVEL': "warning",
        })

        assert config.risk_free_rate == 0.01
        assert config.delta_api_url == "https://testnet.test"
        assert config.log_level == "WARNING"

    def test_invalid_environment_value(self):
        with pytest.raises(ConfigurationError, match="RISK_FREE_RATE"):
            load_config(environ={'RISK_FREE_RATE': "lots"})

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config(path, environ={})

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path, environ={}).default_volatility == 0.5


class TestErrorHierarchy:
    """Test suite for exception relationships."""

    def test_pricing_errors(self):
        for error in (InvalidVolatilityError, InvalidStrikeError, EmptyStrategyError):
            assert issubclass(error, PricingError)
            assert issubclass(error, ValueError)
            assert issubclass(error, SimulatorError)

    def test_other_errors(self):
        assert issubclass(DataValidationError, ValueError)
        assert issubclass(MarketDataError, SimulatorError)
        assert issubclass(ConfigurationError, SimulatorError)


class TestRetryWithBackoff:
    """Test suite for retry_with_backoff."""

    def test_succeeds_after_failures(self):
        """Test waits grow as backoff_factor ** attempt."""
        waits = []
        calls = []

        @retry_with_backoff(max_retries=3, exceptions=(ConnectionError,), sleep=waits.append)
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("reset")
            return "ok"

        assert flaky() == "ok"
        assert len(calls) == 3
        assert waits == [1.0, 2.0]

    def test_reraises_last_error(self):
        @retry_with_backoff(max_retries=2, exceptions=(ConnectionError,), sleep=lambda s: None)
        def broken():
            raise ConnectionError("down")

        with pytest.raises(ConnectionError, match="down"):
            broken()

    def test_other_exceptions_not_retried(self):
        calls = []

        @retry_with_backoff(max_retries=3, exceptions=(ConnectionError,), sleep=lambda s: None)
        def bad_input():
            calls.append(1)
            raise KeyError("symbol")

        with pytest.raises(KeyError):
            bad_input()
        assert len(calls) == 1

    def test_custom_logger(self):
        messages = []

        @retry_with_backoff(max_retries=2, logger_func=messages.append, sleep=lambda s: None)
        def once_flaky(state={'calls': 0}):
            state['calls'] += 1
            if state['calls'] == 1:
                raise RuntimeError("first")
            return state['calls']

        assert once_flaky() == 2
        assert len(messages) == 1
        assert "Attempt 1/2 failed" in messages[0]

    def test_invalid_retry_count(self):
        with pytest.raises(ValueError):
            retry_with_backoff(max_retries=0)


class TestLogging:
    """Test suite for logging setup."""

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
        yield
        for handler in logger.handlers:
            handler.close()
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate

    def test_setup_does_not_stack_handlers(self):
        setup_logging("INFO")
        logger = setup_logging("DEBUG")

        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "simulator.log"

        setup_logging("INFO", log_file=str(log_file), log_format="%(name)s %(message)s")
        get_logger("pricing").info("priced %d legs", 2)

        assert "options_simulator.pricing priced 2 legs" in log_file.read_text()

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging("CHATTY")

    def test_get_logger_namespace(self):
        assert get_logger().name == ROOT_LOGGER_NAME
        assert get_logger("data").name == "options_simulator.data"
