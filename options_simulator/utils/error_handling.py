"""Error types and retry helpers.

Pricing failures are ``ValueError`` subclasses so callers that already guard
numeric input with ``except ValueError`` keep working.
"""

import time
from typing import TypeVar, Callable, Type, Tuple
from functools import wraps
import logging

logger = logging.getLogger("options_simulator.error_handling")

T = TypeVar('T')


def retry_with_backoff(
    max_retries: int = 3,
    backoff_factor: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    logger_func: Callable[[str], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """Decorator to retry a function with exponential backoff.

    Args:
        max_retries: Maximum number of attempts
        backoff_factor: Wait time multiplier (wait = backoff_factor ** attempt)
        exceptions: Exception types that trigger a retry
        logger_func: Optional logging function (defaults to logger.warning)
        sleep: Sleep function, replaceable in tests

    Returns:
        Decorated function with retry logic

    Example:
        >>> @retry_with_backoff(max_retries=3, exceptions=(requests.ConnectionError,))
        >>> def fetch_tickers():
        >>>     return client.get_tickers()

    Raises:
        The last exception once all attempts are exhausted
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be >= 1, got {max_retries}")

    log_func = logger_func or logger.warning

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries - 1:
                        logger.error(
                            "Function %s failed after %d attempts: %s",
                            func.__name__, max_retries, e
                        )
                        raise

                    wait_time = backoff_factor ** attempt
                    log_func(
                        f"Attempt {attempt + 1}/{max_retries} failed for {func.__name__}: {e}. "
                        f"Retrying in {wait_time:.1f}s..."
                    )
                    sleep(wait_time)

            raise RuntimeError(f"Unexpected state in retry logic for {func.__name__}")

        return wrapper
    return decorator


class SimulatorError(Exception):
    """Base exception for the options simulator."""
    pass


class PricingError(ValueError, SimulatorError):
    """Raised when pricing inputs violate the model's contract."""
    pass


class InvalidVolatilityError(PricingError):
    """Raised when volatility is non-positive or non-finite with time remaining."""
    pass


class InvalidStrikeError(PricingError):
    """Raised when a strike (or futures reference price) is unusable."""
    pass


class EmptyStrategyError(PricingError):
    """Raised when strategy metrics are requested for a strategy with no legs."""
    pass


class DataValidationError(ValueError, SimulatorError):
    """Raised when product, leg or strategy data fails validation."""
    pass


class MarketDataError(SimulatorError):
    """Raised when the upstream market data API returns an unusable response."""
    pass


class ConfigurationError(SimulatorError):
    """Raised when configuration is invalid."""
    pass
