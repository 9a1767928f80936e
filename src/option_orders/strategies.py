"""Build vertical spreads and iron condors from strikes and sides.

Opening and closing are separate entry points. A closing order keeps the
strike ordering of the position it closes and mirrors every leg's side:

    opened  buy 100C / sell 105C   (debit)
    closed  sell 100C / buy 105C   (credit)
"""

import logging
from datetime import date

from .classifier import classify
from .errors import (
    InvalidLegError,
    InvalidSpreadConfigurationError,
    InvalidStrikeOrderingError,
    UnsupportedStrategyVariantError,
)
from .legs import build_leg, parse_strike
from .models import (
    IronCondor,
    OptionType,
    PositionEffect,
    Side,
    VerticalSpread,
    coerce_enum,
)

logger = logging.getLogger(__name__)

_OPPOSITE_SIDE = {
    Side.BUY: Side.SELL,
    Side.SELL: Side.BUY,
}


def opposite_side(side: Side | str) -> Side:
    return _OPPOSITE_SIDE[coerce_enum(Side, side, InvalidLegError, "side")]


def build_vertical_spread(
    symbol: str,
    expiration: date | str,
    low_strike: float,
    high_strike: float,
    option_type: OptionType | str,
    low_side: Side | str,
    quantity: int = 1,
) -> VerticalSpread:
    """Build an opening vertical spread.

    Args:
        symbol: Underlying symbol.
        expiration: Shared expiration (date or YYYY-MM-DD).
        low_strike: Lower strike; must be strictly below ``high_strike``.
        high_strike: Higher strike.
        option_type: CALL or PUT for both legs.
        low_side: Side of the lower strike leg; the higher strike leg
            takes the opposite side.
        quantity: Contracts per leg.

    Raises:
        InvalidSpreadConfigurationError: If ``low_strike >= high_strike``.
        InvalidLegError: On a bad quantity, token, strike or expiry.
    """
    return _build_vertical(
        symbol, expiration, low_strike, high_strike, option_type,
        low_side, quantity, PositionEffect.OPENING,
    )


def build_closing_vertical_spread(
    symbol: str,
    expiration: date | str,
    low_strike: float,
    high_strike: float,
    option_type: OptionType | str,
    opened_low_side: Side | str,
    quantity: int = 1,
) -> VerticalSpread:
    """Build the order that closes a vertical spread.

    ``opened_low_side`` is the side the lower strike leg had when the
    position was opened; both legs are mirrored from there.
    """
    return _build_vertical(
        symbol, expiration, low_strike, high_strike, option_type,
        opposite_side(opened_low_side), quantity, PositionEffect.CLOSING,
    )


def build_iron_condor(
    symbol: str,
    expiration: date | str,
    put_low_strike: float,
    put_high_strike: float,
    call_low_strike: float,
    call_high_strike: float,
    quantity: int = 1,
    credit_variant: bool = True,
) -> IronCondor:
    """Build an opening (credit) iron condor.

    Sells the inner strikes and buys the wings:
        buy put_low, sell put_high, sell call_low, buy call_high

    Raises:
        InvalidStrikeOrderingError: Unless
            ``put_low < put_high < call_low < call_high``.
        UnsupportedStrategyVariantError: If ``credit_variant`` is false.
    """
    return _build_condor(
        symbol, expiration,
        (put_low_strike, put_high_strike, call_low_strike, call_high_strike),
        quantity, credit_variant, PositionEffect.OPENING,
    )


def build_closing_iron_condor(
    symbol: str,
    expiration: date | str,
    put_low_strike: float,
    put_high_strike: float,
    call_low_strike: float,
    call_high_strike: float,
    quantity: int = 1,
    credit_variant: bool = True,
) -> IronCondor:
    """Build the order that closes a credit iron condor (buys back the inner strikes)."""
    return _build_condor(
        symbol, expiration,
        (put_low_strike, put_high_strike, call_low_strike, call_high_strike),
        quantity, credit_variant, PositionEffect.CLOSING,
    )


def _build_vertical(
    symbol: str,
    expiration: date | str,
    low_strike: float,
    high_strike: float,
    option_type: OptionType | str,
    low_side: Side | str,
    quantity: int,
    position_effect: PositionEffect,
) -> VerticalSpread:
    option_type = coerce_enum(OptionType, option_type, InvalidLegError, "option type")
    low_side = coerce_enum(Side, low_side, InvalidLegError, "side")
    high_side = _OPPOSITE_SIDE[low_side]

    low = parse_strike(low_strike)
    high = parse_strike(high_strike)
    if low >= high:
        raise InvalidSpreadConfigurationError(
            f"Lower strike {low:g} must be strictly below higher strike {high:g}"
        )

    low_leg = build_leg(symbol, expiration, low, option_type, low_side, position_effect, quantity)
    high_leg = build_leg(symbol, expiration, high, option_type, high_side, position_effect, quantity)
    price_type = classify(option_type, low_side, high_side)

    logger.debug(
        "Built %s %s vertical %s %s %g/%g x%d",
        position_effect.value, price_type.value, low_leg.underlying,
        option_type.value, low, high, low_leg.quantity,
    )
    return VerticalSpread(low_leg=low_leg, high_leg=high_leg, price_type=price_type)


def _build_condor(
    symbol: str,
    expiration: date | str,
    strikes: tuple[float, float, float, float],
    quantity: int,
    credit_variant: bool,
    position_effect: PositionEffect,
) -> IronCondor:
    if not credit_variant:
        raise UnsupportedStrategyVariantError(
            "Debit (reverse) iron condor is not supported; only the credit variant is modeled"
        )

    put_low, put_high, call_low, call_high = (parse_strike(s) for s in strikes)
    if not put_low < put_high < call_low < call_high:
        raise InvalidStrikeOrderingError(
            "Iron condor strikes must satisfy put_low < put_high < call_low < call_high, "
            f"got {put_low:g}/{put_high:g}/{call_low:g}/{call_high:g}"
        )

    # Opening: long put wing below a short put; short call below a long call wing.
    put_low_side = Side.BUY if position_effect == PositionEffect.OPENING else Side.SELL
    call_low_side = _OPPOSITE_SIDE[put_low_side]

    put_spread = _build_vertical(
        symbol, expiration, put_low, put_high, OptionType.PUT,
        put_low_side, quantity, position_effect,
    )
    call_spread = _build_vertical(
        symbol, expiration, call_low, call_high, OptionType.CALL,
        call_low_side, quantity, position_effect,
    )
    condor = IronCondor(put_spread=put_spread, call_spread=call_spread)
    logger.debug(
        "Built %s iron condor %s %g/%g/%g/%g x%d",
        position_effect.value, condor.underlying,
        put_low, put_high, call_low, call_high, condor.quantity,
    )
    return condor
