"""Classify a vertical spread as net debit or net credit.

The lower strike call is worth more than the higher strike call; the
higher strike put is worth more than the lower strike put. A spread is
a credit when the leg sold is the more valuable one:

    call  buy low / sell high   -> debit  (bull call)
    call  sell low / buy high   -> credit (bear call)
    put   buy low / sell high   -> credit (bull put)
    put   sell low / buy high   -> debit  (bear put)

The rule looks only at the actual sides, so it also gives the right
cash flow for closing orders (buying back a credit spread is a debit).
"""

from .errors import InvalidLegError, InvalidSpreadConfigurationError
from .models import OptionType, PriceType, Side, coerce_enum

_RULES = {
    (OptionType.CALL, Side.BUY, Side.SELL): PriceType.DEBIT,
    (OptionType.CALL, Side.SELL, Side.BUY): PriceType.CREDIT,
    (OptionType.PUT, Side.BUY, Side.SELL): PriceType.CREDIT,
    (OptionType.PUT, Side.SELL, Side.BUY): PriceType.DEBIT,
}


def classify(
    option_type: OptionType | str,
    low_strike_side: Side | str,
    high_strike_side: Side | str,
) -> PriceType:
    """Return DEBIT or CREDIT for a vertical spread.

    Raises:
        InvalidSpreadConfigurationError: If both legs are on the same side.
    """
    option_type = coerce_enum(OptionType, option_type, InvalidLegError, "option type")
    low = coerce_enum(Side, low_strike_side, InvalidLegError, "side")
    high = coerce_enum(Side, high_strike_side, InvalidLegError, "side")
    if low == high:
        raise InvalidSpreadConfigurationError(
            f"Vertical spread needs one buy and one sell leg, got {low.value}/{high.value}"
        )
    return _RULES[(option_type, low, high)]
