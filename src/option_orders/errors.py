"""Typed validation errors raised while constructing option orders.

Every error is a local validation failure raised before a document is
returned. None of them are transient, so nothing here is worth retrying.
All derive from ValueError so callers that already catch ValueError from
the structure builders keep working.
"""


class OrderConstructionError(ValueError):
    """Base class for all order construction failures."""


class InvalidLegError(OrderConstructionError):
    """A single leg could not be built (bad quantity, token, strike or expiry)."""


class InvalidSpreadConfigurationError(OrderConstructionError):
    """A vertical spread's legs are inconsistent (same side, bad strike order)."""


class InvalidStrikeOrderingError(OrderConstructionError):
    """Iron condor strikes are not strictly ascending put/put/call/call."""


class UnsupportedStrategyVariantError(OrderConstructionError):
    """The requested strategy shape is not modeled (e.g. a debit condor)."""


class MissingPriceError(OrderConstructionError):
    """The order type needs a limit price and none (or a non-positive one) was given."""


class InvalidOrderTypeError(OrderConstructionError):
    """Unknown order type, or a price that contradicts the order type."""


class InvalidDurationError(OrderConstructionError):
    pass


class InvalidSessionError(OrderConstructionError):
    pass
