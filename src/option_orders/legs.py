"""Build single option legs from primitive inputs.

Tokens may be passed as enum members or as their string values:
    build_leg("XYZ", "2025-06-20", 100, "call", "buy", "opening", 1)
"""

import logging
import math
import re
from datetime import date, datetime
from numbers import Integral, Real

from .errors import InvalidLegError
from .models import (
    OCC_ROOT_WIDTH,
    Leg,
    OptionInstrument,
    OptionType,
    PositionEffect,
    Side,
    coerce_enum,
)

logger = logging.getLogger(__name__)

# Root, YYMMDD, C/P, strike * 1000. The root may or may not be space padded.
_OCC_SYMBOL = re.compile(r"^([A-Z0-9.]{1,6})\s*(\d{6})([CP])(\d{8})$")


def build_leg(
    symbol: str,
    expiration: date | str,
    strike: float,
    option_type: OptionType | str,
    side: Side | str,
    position_effect: PositionEffect | str,
    quantity: int,
) -> Leg:
    """Build one order leg.

    Raises:
        InvalidLegError: On a non-positive quantity, an unknown token, an
            empty symbol, a non-positive strike or an unreadable expiry.
    """
    instrument = OptionInstrument(
        underlying=parse_underlying(symbol),
        expiration=parse_expiration(expiration),
        strike=parse_strike(strike),
        option_type=coerce_enum(OptionType, option_type, InvalidLegError, "option type"),
    )
    leg = Leg(
        instrument=instrument,
        side=coerce_enum(Side, side, InvalidLegError, "side"),
        position_effect=coerce_enum(
            PositionEffect, position_effect, InvalidLegError, "position effect"
        ),
        quantity=parse_quantity(quantity),
    )
    logger.debug("Built leg %s %s x%d (%s)", leg.instruction.value, leg.symbol,
                 leg.quantity, leg.position_effect.value)
    return leg


def parse_underlying(symbol: str) -> str:
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidLegError(f"Underlying symbol must be a non-empty string, got {symbol!r}")
    root = symbol.strip().upper()
    if len(root) > OCC_ROOT_WIDTH:
        raise InvalidLegError(
            f"Underlying symbol {root!r} is longer than {OCC_ROOT_WIDTH} characters"
        )
    return root


def parse_expiration(expiration: date | str) -> date:
    """Accept a date, a datetime or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(expiration, datetime):
        return expiration.date()
    if isinstance(expiration, date):
        return expiration
    if isinstance(expiration, str):
        try:
            return datetime.strptime(expiration.strip(), "%Y-%m-%d").date()
        except ValueError:
            pass
    raise InvalidLegError(f"Expiration must be a date or YYYY-MM-DD string, got {expiration!r}")


def parse_strike(strike: float) -> float:
    if isinstance(strike, bool) or not isinstance(strike, Real):
        raise InvalidLegError(f"Strike must be a number, got {strike!r}")
    value = float(strike)
    if not math.isfinite(value) or value <= 0:
        raise InvalidLegError(f"Strike must be positive, got {strike!r}")
    return value


def parse_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, Integral):
        raise InvalidLegError(f"Quantity must be a whole number of contracts, got {quantity!r}")
    if quantity <= 0:
        raise InvalidLegError(f"Quantity must be positive, got {quantity}")
    return int(quantity)


def parse_option_symbol(text: str) -> OptionInstrument:
    """Parse an OCC option symbol such as ``XYZ   250620C00100000``.

    The padding between root and date is optional, so the compact form
    ``AAPL240315C00180000`` is accepted too.
    """
    m = _OCC_SYMBOL.match(text.strip().upper()) if isinstance(text, str) else None
    if not m:
        raise InvalidLegError(f"Not an option symbol: {text!r}")
    root, yymmdd, cp, strike = m.groups()
    try:
        expiration = datetime.strptime(yymmdd, "%y%m%d").date()
    except ValueError:
        raise InvalidLegError(f"Bad expiration in option symbol: {text!r}") from None
    return OptionInstrument(
        underlying=root,
        expiration=expiration,
        strike=parse_strike(int(strike) / 1000.0),
        option_type=OptionType.CALL if cp == "C" else OptionType.PUT,
    )
