"""Data models for multi-leg option orders and strategies."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from .errors import (
    InvalidLegError,
    InvalidOrderTypeError,
    InvalidSpreadConfigurationError,
    InvalidStrikeOrderingError,
    MissingPriceError,
    OrderConstructionError,
    UnsupportedStrategyVariantError,
)


class OptionType(Enum):
    CALL = "call"
    PUT = "put"


class Side(Enum):
    BUY = "buy"
    SELL = "sell"


class PositionEffect(Enum):
    OPENING = "opening"
    CLOSING = "closing"


class PriceType(Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class OrderType(Enum):
    LIMIT = "limit"
    MARKET = "market"
    NET_DEBIT = "net_debit"
    NET_CREDIT = "net_credit"

    @property
    def requires_price(self) -> bool:
        return self is not OrderType.MARKET


class Duration(Enum):
    DAY = "day"
    GOOD_TILL_CANCEL = "good_till_cancel"


class Session(Enum):
    NORMAL = "normal"
    AM = "am"
    PM = "pm"
    SEAMLESS = "seamless"


# Regular plus extended hours is SEAMLESS on the wire.
SESSION_ALIASES = {"extended": Session.SEAMLESS}


class OrderStrategyType(Enum):
    SINGLE = "single"
    OCO = "oco"
    TRIGGER = "trigger"


class ComplexOrderStrategyType(Enum):
    NONE = "none"
    VERTICAL = "vertical"
    IRON_CONDOR = "iron_condor"


class Instruction(Enum):
    BUY_TO_OPEN = "BUY_TO_OPEN"
    SELL_TO_OPEN = "SELL_TO_OPEN"
    BUY_TO_CLOSE = "BUY_TO_CLOSE"
    SELL_TO_CLOSE = "SELL_TO_CLOSE"


_INSTRUCTIONS = {
    (Side.BUY, PositionEffect.OPENING): Instruction.BUY_TO_OPEN,
    (Side.SELL, PositionEffect.OPENING): Instruction.SELL_TO_OPEN,
    (Side.BUY, PositionEffect.CLOSING): Instruction.BUY_TO_CLOSE,
    (Side.SELL, PositionEffect.CLOSING): Instruction.SELL_TO_CLOSE,
}

# Root field of an OCC option symbol.
OCC_ROOT_WIDTH = 6

# Legs per complex strategy; NONE places no constraint.
_LEG_COUNTS = {
    ComplexOrderStrategyType.VERTICAL: 2,
    ComplexOrderStrategyType.IRON_CONDOR: 4,
}


def coerce_enum(enum_cls, value, error_cls=OrderConstructionError, label=None, aliases=None):
    """Return ``value`` as a member of ``enum_cls``.

    Accepts a member, its value or its name (case-insensitive, with ``-``
    read as ``_`` so ``good-till-cancel`` works), or a key of ``aliases``.
    Anything else raises ``error_cls`` naming the allowed tokens.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        token = value.strip().lower().replace("-", "_")
        if aliases and token in aliases:
            return aliases[token]
        for member in enum_cls:
            if token == str(member.value).lower() or token.upper() == member.name:
                return member
    allowed = ", ".join([str(m.value) for m in enum_cls] + sorted(aliases or ()))
    raise error_cls(
        f"Unknown {label or enum_cls.__name__}: {value!r} (expected one of: {allowed})"
    )


@dataclass(frozen=True)
class OptionInstrument:
    """A listed option contract."""

    underlying: str
    expiration: date
    strike: float
    option_type: OptionType

    @property
    def symbol(self) -> str:
        """OCC option symbol, e.g. ``XYZ   250620C00100000``."""
        root = self.underlying.upper()
        if len(root) > OCC_ROOT_WIDTH:
            raise InvalidLegError(f"Option root {root!r} does not fit the OCC symbol")
        root = root.ljust(OCC_ROOT_WIDTH)
        cp = "C" if self.option_type == OptionType.CALL else "P"
        strike = int(round(self.strike * 1000))
        return f"{root}{self.expiration:%y%m%d}{cp}{strike:08d}"

    def intrinsic(self, spot: float) -> float:
        if self.option_type == OptionType.CALL:
            return max(spot - self.strike, 0.0)
        return max(self.strike - spot, 0.0)


@dataclass(frozen=True)
class Leg:
    """A single option leg within an order."""

    instrument: OptionInstrument
    side: Side
    position_effect: PositionEffect
    quantity: int = 1

    @property
    def underlying(self) -> str:
        return self.instrument.underlying

    @property
    def expiration(self) -> date:
        return self.instrument.expiration

    @property
    def strike(self) -> float:
        return self.instrument.strike

    @property
    def option_type(self) -> OptionType:
        return self.instrument.option_type

    @property
    def symbol(self) -> str:
        return self.instrument.symbol

    @property
    def direction(self) -> int:
        """Return +1 for buy, -1 for sell."""
        return 1 if self.side == Side.BUY else -1

    @property
    def instruction(self) -> Instruction:
        return _INSTRUCTIONS[(self.side, self.position_effect)]

    def payoff(self, spot: float) -> float:
        """Payoff at expiration for the whole leg quantity."""
        return self.direction * self.quantity * self.instrument.intrinsic(spot)


@dataclass(frozen=True)
class VerticalSpread:
    """Two legs, one option type and expiration, one long and one short.

    ``low_leg`` always carries the lower strike. The price type is supplied
    by the builder (see ``classifier.classify``); the structural checks
    live here so a spread can never exist in an inconsistent shape.
    """

    low_leg: Leg
    high_leg: Leg
    price_type: PriceType

    complex_order_strategy_type: ClassVar[ComplexOrderStrategyType] = (
        ComplexOrderStrategyType.VERTICAL
    )

    def __post_init__(self) -> None:
        low, high = self.low_leg, self.high_leg
        if low.strike >= high.strike:
            raise InvalidSpreadConfigurationError(
                f"Lower strike {low.strike:g} must be below higher strike {high.strike:g}"
            )
        if low.side == high.side:
            raise InvalidSpreadConfigurationError(
                f"Vertical spread needs one buy and one sell leg, got two {low.side.value} legs"
            )
        if low.option_type != high.option_type:
            raise InvalidSpreadConfigurationError("Vertical spread legs must share option type")
        if low.expiration != high.expiration or low.underlying != high.underlying:
            raise InvalidSpreadConfigurationError(
                "Vertical spread legs must share underlying and expiration"
            )
        if low.quantity != high.quantity:
            raise InvalidSpreadConfigurationError(
                f"Vertical spread legs must share quantity ({low.quantity} != {high.quantity})"
            )
        if low.position_effect != high.position_effect:
            raise InvalidSpreadConfigurationError(
                "Vertical spread legs must both open or both close"
            )

    @property
    def legs(self) -> tuple[Leg, Leg]:
        return (self.low_leg, self.high_leg)

    @property
    def quantity(self) -> int:
        return self.low_leg.quantity

    @property
    def underlying(self) -> str:
        return self.low_leg.underlying

    @property
    def expiration(self) -> date:
        return self.low_leg.expiration

    @property
    def option_type(self) -> OptionType:
        return self.low_leg.option_type

    @property
    def position_effect(self) -> PositionEffect:
        return self.low_leg.position_effect

    @property
    def short_leg(self) -> Leg:
        return self.low_leg if self.low_leg.side == Side.SELL else self.high_leg

    @property
    def long_leg(self) -> Leg:
        return self.low_leg if self.low_leg.side == Side.BUY else self.high_leg

    @property
    def width(self) -> float:
        return self.high_leg.strike - self.low_leg.strike

    def unit_payoff(self, spot: float) -> float:
        """Expiry payoff of one spread, before premium."""
        return sum(leg.direction * leg.instrument.intrinsic(spot) for leg in self.legs)


@dataclass(frozen=True)
class IronCondor:
    """A put vertical below a call vertical, same expiration and size.

    Only the short-inner/long-outer side pattern is modeled: SELL on the
    inner strikes when opening, BUY on them when closing.
    """

    put_spread: VerticalSpread
    call_spread: VerticalSpread

    complex_order_strategy_type: ClassVar[ComplexOrderStrategyType] = (
        ComplexOrderStrategyType.IRON_CONDOR
    )

    def __post_init__(self) -> None:
        puts, calls = self.put_spread, self.call_spread
        if puts.option_type != OptionType.PUT or calls.option_type != OptionType.CALL:
            raise InvalidSpreadConfigurationError(
                "Iron condor needs a put spread and a call spread"
            )
        if puts.high_leg.strike >= calls.low_leg.strike:
            raise InvalidStrikeOrderingError(
                f"Put spread strikes ({puts.low_leg.strike:g}/{puts.high_leg.strike:g}) "
                f"overlap call spread strikes ({calls.low_leg.strike:g}/{calls.high_leg.strike:g})"
            )
        if puts.expiration != calls.expiration or puts.underlying != calls.underlying:
            raise InvalidStrikeOrderingError(
                "Put and call spreads must share underlying and expiration"
            )
        if puts.quantity != calls.quantity:
            raise InvalidStrikeOrderingError(
                f"Put and call spreads must share quantity ({puts.quantity} != {calls.quantity})"
            )
        if puts.position_effect != calls.position_effect:
            raise InvalidSpreadConfigurationError(
                "Put and call spreads must both open or both close"
            )
        inner_side = Side.SELL if puts.position_effect == PositionEffect.OPENING else Side.BUY
        if puts.high_leg.side != inner_side or calls.low_leg.side != inner_side:
            raise UnsupportedStrategyVariantError(
                "Only short-inner iron condors are supported (reverse iron condor is not modeled)"
            )

    @property
    def legs(self) -> tuple[Leg, Leg, Leg, Leg]:
        return self.put_spread.legs + self.call_spread.legs

    @property
    def quantity(self) -> int:
        return self.put_spread.quantity

    @property
    def underlying(self) -> str:
        return self.put_spread.underlying

    @property
    def expiration(self) -> date:
        return self.put_spread.expiration

    @property
    def position_effect(self) -> PositionEffect:
        return self.put_spread.position_effect

    @property
    def price_type(self) -> PriceType:
        return self.put_spread.price_type

    def unit_payoff(self, spot: float) -> float:
        return self.put_spread.unit_payoff(spot) + self.call_spread.unit_payoff(spot)


Strategy = VerticalSpread | IronCondor


@dataclass(frozen=True)
class OrderDocument:
    """A fully assembled order, ready to hand to the submitter."""

    legs: tuple[Leg, ...]
    order_type: OrderType
    duration: Duration
    session: Session
    quantity: int
    limit_price: Decimal | None = None
    order_strategy_type: OrderStrategyType = OrderStrategyType.SINGLE
    complex_order_strategy_type: ComplexOrderStrategyType = ComplexOrderStrategyType.NONE
    price_type: PriceType | None = None

    def __post_init__(self) -> None:
        expected = _LEG_COUNTS.get(self.complex_order_strategy_type)
        if expected is not None and len(self.legs) != expected:
            raise InvalidSpreadConfigurationError(
                f"{self.complex_order_strategy_type.value} order needs {expected} legs, "
                f"got {len(self.legs)}"
            )
        if self.order_type.requires_price and self.limit_price is None:
            raise MissingPriceError(f"{self.order_type.value} order requires a limit price")
        if not self.order_type.requires_price and self.limit_price is not None:
            raise InvalidOrderTypeError(f"{self.order_type.value} order must not carry a price")

    @property
    def strikes(self) -> list[float]:
        return [leg.strike for leg in self.legs]
