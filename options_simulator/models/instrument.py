"""Instrument data model for exchange products."""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Literal

ContractKind = Literal["call", "put", "future"]

# Delta Exchange contract_type values mapped onto pricing kinds
CONTRACT_TYPES: Dict[str, ContractKind] = {
    "call_option": "call",
    "call_options": "call",
    "put_option": "put",
    "put_options": "put",
    "futures": "future",
    "perpetual_futures": "future",
    "call": "call",
    "put": "put",
    "future": "future",
}

PERPETUAL_SENTINEL = "PERP"

# Delta Exchange options settle at 12:00 UTC on the expiry date
SETTLEMENT_TIME = time(12, 0, tzinfo=timezone.utc)


def parse_contract_kind(value: str) -> ContractKind:
    """Map an exchange contract type onto ``call``/``put``/``future``.

    Raises:
        ValueError: If the contract type is not an option or future
    """
    try:
        return CONTRACT_TYPES[str(value).strip().lower()]
    except KeyError:
        raise ValueError(f"Unsupported contract type: {value!r}") from None


def parse_expiration(value: Any) -> datetime | None:
    """Parse an expiration into an aware UTC datetime.

    Accepts ``datetime``, ``date``, ISO-8601 strings (a trailing ``Z`` is
    allowed), ``YYMMDD`` codes and ``None``/``"PERP"`` for perpetuals.
    Date-only values settle at :data:`SETTLEMENT_TIME`.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, SETTLEMENT_TIME)

    text = str(value).strip()
    if not text or text.upper() == PERPETUAL_SENTINEL:
        return None

    if len(text) == 6 and text.isdigit():
        return datetime.combine(datetime.strptime(text, "%y%m%d").date(), SETTLEMENT_TIME)

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Unrecognised expiration: {value!r}") from None

    if len(text) == 10:
        return datetime.combine(parsed.date(), SETTLEMENT_TIME)
    return parse_expiration(parsed)


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


@dataclass(frozen=True)
class Instrument:
    """A tradable option or future from the exchange product feed.

    Immutable: instruments are created once from the product feed and shared
    between legs. Strikes are absent for futures, expirations are absent for
    perpetual futures.
    """

    symbol: str
    kind: ContractKind
    strike: float | None = None
    expiration: datetime | None = None

    # Product metadata
    product_id: str | int | None = None
    underlying: str = "BTC"
    tick_size: float | None = None
    lot_size: float | None = None
    min_order_size: float | None = None
    max_order_size: float | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.kind not in ("call", "put", "future"):
            raise ValueError(f"Invalid instrument kind: {self.kind}")
        if self.kind != "future" and self.strike is None:
            raise ValueError(f"Option {self.symbol} requires a strike")
        if self.strike is not None and self.strike < 0:
            raise ValueError(f"Strike must be non-negative, got {self.strike}")

    @property
    def is_option(self) -> bool:
        return self.kind in ("call", "put")

    @property
    def is_perpetual(self) -> bool:
        """True for futures without an expiration."""
        return self.kind == "future" and self.expiration is None

    @classmethod
    def from_product(cls, product: Dict[str, Any]) -> "Instrument":
        """Build an Instrument from a product dictionary.

        Accepts both the raw Delta Exchange ``/v2/products`` shape
        (``contract_type``, ``strike_price``, ``settlement_time``,
        ``underlying_asset: {symbol}``) and the camelCase shape served to
        the dashboard (``contractType``, ``strikePrice``, ``expirationDate``).

        Raises:
            ValueError: If required fields are missing or malformed
        """
        contract_type = product.get('contract_type', product.get('contractType'))
        if contract_type is None:
            raise ValueError(f"Product {product.get('symbol')!r} has no contract type")

        underlying = product.get('underlying_asset', product.get('underlyingAsset', "BTC"))
        if isinstance(underlying, dict):
            underlying = underlying.get('symbol', "BTC")

        if 'settlement_time' in product:
            expiration = product.get('settlement_time')
        else:
            expiration = product.get('expirationDate')

        return cls(
            symbol=str(product.get('symbol', "")),
            kind=parse_contract_kind(contract_type),
            strike=_optional_float(product.get('strike_price', product.get('strikePrice'))),
            expiration=parse_expiration(expiration),
            product_id=product.get('id'),
            underlying=str(underlying),
            tick_size=_optional_float(product.get('tick_size', product.get('tickSize'))),
            lot_size=_optional_float(product.get('lot_size', product.get('lotSize'))),
            min_order_size=_optional_float(product.get('min_order_size', product.get('minOrderSize'))),
            max_order_size=_optional_float(product.get('max_order_size', product.get('maxOrderSize'))),
            is_active=bool(product.get('is_active', product.get('isActive', True))),
        )

    def __repr__(self) -> str:
        strike = f" {self.strike:.0f}" if self.strike is not None else ""
        expiry = self.expiration.strftime('%Y-%m-%d') if self.expiration else "PERP"
        return f"Instrument({self.symbol} {self.kind}{strike} {expiry})"
