"""Wrap a strategy's legs with order-level attributes."""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from . import settings
from .errors import (
    InvalidDurationError,
    InvalidOrderTypeError,
    InvalidSessionError,
    MissingPriceError,
    UnsupportedStrategyVariantError,
)
from .models import (
    Duration,
    IronCondor,
    OrderDocument,
    OrderStrategyType,
    OrderType,
    PriceType,
    SESSION_ALIASES,
    Session,
    Strategy,
    VerticalSpread,
    coerce_enum,
)

logger = logging.getLogger(__name__)

_NET_ORDER_TYPES = {
    PriceType.CREDIT: OrderType.NET_CREDIT,
    PriceType.DEBIT: OrderType.NET_DEBIT,
}


def assemble(
    strategy: Strategy,
    order_type: OrderType | str | None = None,
    duration: Duration | str = settings.DEFAULT_DURATION,
    session: Session | str = settings.DEFAULT_SESSION,
    limit_price: Decimal | float | str | None = None,
    order_strategy_type: OrderStrategyType | str = settings.DEFAULT_ORDER_STRATEGY_TYPE,
) -> OrderDocument:
    """Assemble a submittable order document for a vertical spread or iron condor.

    When ``order_type`` is omitted the strategy's own net type is used
    (NET_CREDIT for a credit structure, NET_DEBIT for a debit one).

    Raises:
        MissingPriceError: The order type needs a positive limit price.
        InvalidOrderTypeError: Unknown order type, a price on a MARKET
            order, or a net type that contradicts the strategy.
        InvalidDurationError / InvalidSessionError: Unknown enum value.
            Durations are day and good_till_cancel; the session
            "extended" is accepted and sent as SEAMLESS.
        UnsupportedStrategyVariantError: Order strategy type other than SINGLE.
    """
    if not isinstance(strategy, (VerticalSpread, IronCondor)):
        raise TypeError(
            f"Expected a VerticalSpread or IronCondor, got {type(strategy).__name__}"
        )

    if order_type is None:
        order_type = _NET_ORDER_TYPES[strategy.price_type]
    order_type = coerce_enum(OrderType, order_type, InvalidOrderTypeError, "order type")
    duration = coerce_enum(Duration, duration, InvalidDurationError, "duration")
    session = coerce_enum(Session, session, InvalidSessionError, "session", SESSION_ALIASES)
    order_strategy_type = coerce_enum(
        OrderStrategyType, order_strategy_type,
        UnsupportedStrategyVariantError, "order strategy type",
    )
    if order_strategy_type != OrderStrategyType.SINGLE:
        raise UnsupportedStrategyVariantError(
            f"{order_strategy_type.value} orders are not supported for "
            f"{strategy.complex_order_strategy_type.value} strategies"
        )

    natural = _NET_ORDER_TYPES[strategy.price_type]
    if order_type in _NET_ORDER_TYPES.values() and order_type != natural:
        logger.warning("Rejecting %s order for a %s %s", order_type.value,
                       strategy.price_type.value, strategy.complex_order_strategy_type.value)
        raise InvalidOrderTypeError(
            f"{order_type.value} does not match a {strategy.price_type.value} strategy; "
            f"use {natural.value}"
        )

    price = None
    if order_type.requires_price:
        price = normalize_price(limit_price, order_type)
    elif limit_price is not None:
        raise InvalidOrderTypeError(f"{order_type.value} order must not carry a limit price")

    document = OrderDocument(
        legs=tuple(strategy.legs),
        order_type=order_type,
        duration=duration,
        session=session,
        quantity=strategy.quantity,
        limit_price=price,
        order_strategy_type=order_strategy_type,
        complex_order_strategy_type=strategy.complex_order_strategy_type,
        price_type=strategy.price_type,
    )
    logger.debug("Assembled %s %s order, %d legs, price %s", order_type.value,
                 document.complex_order_strategy_type.value, len(document.legs), price)
    return document


def normalize_price(limit_price, order_type: OrderType) -> Decimal:
    """Round a limit price to the configured increment; reject missing or non-positive."""
    if limit_price is None:
        raise MissingPriceError(f"{order_type.value} order requires a limit price")
    try:
        price = Decimal(str(limit_price))
    except InvalidOperation:
        raise MissingPriceError(f"Limit price is not a number: {limit_price!r}") from None
    if price.is_finite():
        price = price.quantize(Decimal(settings.PRICE_INCREMENT), rounding=ROUND_HALF_UP)
    if not price.is_finite() or price <= 0:
        raise MissingPriceError(f"Limit price must be positive, got {limit_price!r}")
    return price
