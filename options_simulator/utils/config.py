"""Simulator configuration loaded from YAML with environment overrides."""

import logging
import math
import os
from pathlib import Path
from typing import Dict, Optional

import yaml

from .error_handling import ConfigurationError

logger = logging.getLogger("options_simulator.config")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "default_params.yaml"

ENV_OVERRIDES = {
    'DELTA_API_URL': ('delta_api_url', str),
    'COINGECKO_API_URL': ('coingecko_api_url', str),
    'RISK_FREE_RATE': ('risk_free_rate', float),
    'LOG_LEVEL': ('log_level', str),
}


class SimulatorConfig:
    """Configuration for pricing defaults and market data sources."""

    def __init__(
        self,
        risk_free_rate: float = 0.05,
        default_volatility: float = 0.5,
        underlying: str = "BTC",
        delta_api_url: str = "https://api.delta.exchange",
        coingecko_api_url: str = "https://api.coingecko.com/api/v3",
        request_timeout: float = 10.0,
        fallback_spot_price: float = 65000.0,
        spot_cache_ttl: float = 120.0,
        use_mock_fallback: bool = True,
        log_level: str = "INFO",
    ):
        """Initialize simulator configuration.

        Args:
            risk_free_rate: Annual risk-free rate used for all pricing
            default_volatility: Volatility for legs that carry none
            underlying: Underlying asset symbol to filter products on
            delta_api_url: Delta Exchange REST base URL
            coingecko_api_url: CoinGecko REST base URL
            request_timeout: HTTP timeout in seconds
            fallback_spot_price: Spot used when no quote was ever fetched
            spot_cache_ttl: Seconds a fetched spot quote stays fresh
            use_mock_fallback: Serve generated mock data when upstream fails
            log_level: Logging level name

        Raises:
            ConfigurationError: If any value is out of range
        """
        self.risk_free_rate = risk_free_rate
        self.default_volatility = default_volatility
        self.underlying = underlying
        self.delta_api_url = delta_api_url.rstrip('/')
        self.coingecko_api_url = coingecko_api_url.rstrip('/')
        self.request_timeout = request_timeout
        self.fallback_spot_price = fallback_spot_price
        self.spot_cache_ttl = spot_cache_ttl
        self.use_mock_fallback = use_mock_fallback
        self.log_level = log_level.upper()

        self._validate()

    def _validate(self) -> None:
        if not math.isfinite(self.risk_free_rate):
            raise ConfigurationError(f"risk_free_rate must be finite, got {self.risk_free_rate}")
        if not self.default_volatility > 0:
            raise ConfigurationError(
                f"default_volatility must be positive, got {self.default_volatility}"
            )
        if not self.fallback_spot_price > 0:
            raise ConfigurationError(
                f"fallback_spot_price must be positive, got {self.fallback_spot_price}"
            )
        if self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.spot_cache_ttl < 0:
            raise ConfigurationError(f"spot_cache_ttl must be >= 0, got {self.spot_cache_ttl}")
        if self.log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ConfigurationError(f"Unknown log_level: {self.log_level}")

    @classmethod
    def from_dict(cls, config: Dict) -> "SimulatorConfig":
        """Create SimulatorConfig from a dictionary (e.g., from YAML).

        Accepts either a flat mapping or the sectioned layout of
        ``default_params.yaml`` (``pricing``, ``market_data``, ``logging``).

        Args:
            config: Dictionary with configuration parameters

        Returns:
            SimulatorConfig instance
        """
        pricing = config.get('pricing', config)
        market = config.get('market_data', config)
        logging_section = config.get('logging', config)

        try:
            return cls(
                risk_free_rate=float(pricing.get('risk_free_rate', 0.05)),
                default_volatility=float(pricing.get('default_volatility', 0.5)),
                underlying=str(market.get('underlying', "BTC")),
                delta_api_url=str(market.get('delta_api_url', "https://api.delta.exchange")),
                coingecko_api_url=str(market.get('coingecko_api_url', "https://api.coingecko.com/api/v3")),
                request_timeout=float(market.get('request_timeout', 10.0)),
                fallback_spot_price=float(market.get('fallback_spot_price', 65000.0)),
                spot_cache_ttl=float(market.get('spot_cache_ttl', 120.0)),
                use_mock_fallback=bool(market.get('use_mock_fallback', True)),
                log_level=str(logging_section.get('log_level', "INFO")),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

    def to_dict(self) -> Dict:
        """Sectioned dictionary matching the YAML layout."""
        return {
            'pricing': {
                'risk_free_rate': self.risk_free_rate,
                'default_volatility': self.default_volatility,
            },
            'market_data': {
                'underlying': self.underlying,
                'delta_api_url': self.delta_api_url,
                'coingecko_api_url': self.coingecko_api_url,
                'request_timeout': self.request_timeout,
                'fallback_spot_price': self.fallback_spot_price,
                'spot_cache_ttl': self.spot_cache_ttl,
                'use_mock_fallback': self.use_mock_fallback,
            },
            'logging': {
                'log_level': self.log_level,
            },
        }

    def __repr__(self) -> str:
        return (f"SimulatorConfig(r={self.risk_free_rate}, vol={self.default_volatility}, "
                f"underlying={self.underlying}, api={self.delta_api_url})")


def load_config(
    config_path: Optional[str | Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> SimulatorConfig:
    """Load configuration from YAML and apply environment overrides.

    Args:
        config_path: Path to YAML file. Defaults to ``config/default_params.yaml``;
            if that default is missing, built-in defaults are used.
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        SimulatorConfig instance

    Raises:
        ConfigurationError: If an explicit file is missing, unparsable or invalid
    """
    environ = os.environ if environ is None else environ
    explicit = config_path is not None
    path = Path(config_path) if explicit else DEFAULT_CONFIG_PATH

    raw: Dict = {}
    if path.exists():
        try:
            with open(path, 'r') as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse config file {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        logger.info("Loaded configuration from %s", path)
    elif explicit:
        raise ConfigurationError(f"Config file not found: {path}")
    else:
        logger.debug("No config file at %s, using defaults", path)

    config = SimulatorConfig.from_dict(raw).to_dict()
    flat = {**config['pricing'], **config['market_data'], **config['logging']}

    for env_name, (key, cast) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        try:
            flat[key] = cast(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {env_name}: {value!r}") from e
        logger.debug("Config override from %s", env_name)

    return SimulatorConfig.from_dict(flat)
