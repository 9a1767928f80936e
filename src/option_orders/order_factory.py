"""Build an order document from a strategy keyword and short/long strikes.

Keywords: ``callspread``, ``putspread``, ``ironcondor``.
Instructions: ``open`` (new position) or ``exit`` (close it).

Verticals are described the way traders name them, by the short and
long strike; the factory works out which one is the lower strike.
"""

import logging
from datetime import date
from enum import Enum

from . import settings
from .envelope import assemble
from .errors import (
    InvalidLegError,
    InvalidSpreadConfigurationError,
    UnsupportedStrategyVariantError,
)
from .legs import parse_strike
from .models import OptionType, OrderDocument, Side, coerce_enum
from .strategies import (
    build_closing_iron_condor,
    build_closing_vertical_spread,
    build_iron_condor,
    build_vertical_spread,
)

logger = logging.getLogger(__name__)


class OrderInstruction(Enum):
    OPEN = "open"
    EXIT = "exit"


_VERTICAL_TYPES = {
    "callspread": OptionType.CALL,
    "putspread": OptionType.PUT,
}


def build_order(
    strategy_type: str,
    symbol: str,
    expiration: date | str,
    *,
    price=None,
    quantity: int = settings.DEFAULT_QUANTITY,
    order_instruction: OrderInstruction | str = OrderInstruction.OPEN,
    short_strike: float | None = None,
    long_strike: float | None = None,
    put_short_strike: float | None = None,
    put_long_strike: float | None = None,
    call_short_strike: float | None = None,
    call_long_strike: float | None = None,
    duration=settings.DEFAULT_DURATION,
    session=settings.DEFAULT_SESSION,
) -> OrderDocument:
    """Build and assemble a strategy order.

    Raises:
        UnsupportedStrategyVariantError: Unknown ``strategy_type``.
        InvalidLegError: Unknown ``order_instruction``.
        Any construction error from the strategy builders or the assembler.
    """
    key = (strategy_type or "").strip().lower()
    instruction = coerce_enum(
        OrderInstruction, order_instruction, InvalidLegError, "order instruction"
    )
    logger.debug("Building %s order (%s) for %s", key or "none", instruction.value, symbol)

    if key in _VERTICAL_TYPES:
        strategy = _vertical(
            key, symbol, expiration, short_strike, long_strike, quantity, instruction,
        )
    elif key == "ironcondor":
        _require(key, put_short_strike=put_short_strike, put_long_strike=put_long_strike,
                 call_short_strike=call_short_strike, call_long_strike=call_long_strike)
        build = build_iron_condor if instruction == OrderInstruction.OPEN else build_closing_iron_condor
        strategy = build(
            symbol, expiration,
            put_low_strike=put_long_strike,
            put_high_strike=put_short_strike,
            call_low_strike=call_short_strike,
            call_high_strike=call_long_strike,
            quantity=quantity,
        )
    else:
        raise UnsupportedStrategyVariantError(
            f"Unsupported trade strategy: {strategy_type or 'none'} "
            f"(expected one of: callspread, putspread, ironcondor)"
        )

    return assemble(strategy, duration=duration, session=session, limit_price=price)


def _vertical(key, symbol, expiration, short_strike, long_strike, quantity, instruction):
    _require(key, short_strike=short_strike, long_strike=long_strike)
    short, long_ = parse_strike(short_strike), parse_strike(long_strike)
    if short == long_:
        raise InvalidSpreadConfigurationError(
            f"Short and long strikes must differ, both are {short:g}"
        )
    low, high = sorted((short, long_))
    # Side the lower strike has while the position is open.
    low_side = Side.SELL if short < long_ else Side.BUY
    if instruction == OrderInstruction.OPEN:
        return build_vertical_spread(
            symbol, expiration, low, high, _VERTICAL_TYPES[key], low_side, quantity,
        )
    return build_closing_vertical_spread(
        symbol, expiration, low, high, _VERTICAL_TYPES[key], low_side, quantity,
    )


def _require(key: str, **strikes) -> None:
    missing = [name for name, value in strikes.items() if value is None]
    if missing:
        raise InvalidSpreadConfigurationError(f"{key} requires {', '.join(missing)}")
