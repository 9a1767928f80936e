"""Screen an option chain for credit vertical spreads and iron condors.

Chain rows are ``ChainOption`` instances or plain dicts. Dict keys may be
snake_case (``strike``, ``open_interest``) or the brokerage's chain names
(``strikePrice``, ``openInterest``, ``putCall``, ``expirationDate``).

Marks and credits are per share. ``min_credit`` is quoted the way a trader
quotes it, in dollars per spread (credit x contract multiplier).

    criteria = ChainFilter(underlying_price=100.0, max_delta=0.2, max_spread=5)
    best = find_iron_condor(rows, "XYZ", "2025-06-20", criteria)
    if best:
        document = assemble(best.condor, limit_price=best.total_credit)
"""

import logging
from dataclasses import dataclass, replace
from datetime import date

from . import settings
from .errors import InvalidLegError, InvalidSpreadConfigurationError
from .legs import parse_expiration, parse_strike
from .models import IronCondor, OptionType, Side, VerticalSpread, coerce_enum
from .strategies import build_iron_condor, build_vertical_spread

logger = logging.getLogger(__name__)

# Row field -> accepted dict keys, first match wins.
_ROW_KEYS = {
    "strike": ("strike", "strikePrice"),
    "option_type": ("option_type", "putCall"),
    "mark": ("mark",),
    "delta": ("delta",),
    "open_interest": ("open_interest", "openInterest"),
    "symbol": ("symbol",),
    "expiration": ("expiration", "expirationDate"),
    "expiration_type": ("expiration_type", "expirationType"),
    "settlement_type": ("settlement_type", "settlementType"),
    "option_root": ("option_root", "optionRoot"),
}


@dataclass(frozen=True)
class ChainOption:
    """One quoted contract from an option chain."""

    strike: float
    option_type: OptionType
    mark: float
    delta: float = 0.0
    open_interest: int = 0
    symbol: str = ""
    expiration: date | None = None
    expiration_type: str | None = None
    settlement_type: str | None = None
    option_root: str | None = None


@dataclass(frozen=True)
class ChainFilter:
    """Screening criteria. Unset optional fields do not filter."""

    underlying_price: float | None = None
    min_delta: float = 0.0
    max_delta: float = settings.FINDER_MAX_DELTA
    max_spread: float = settings.FINDER_MAX_SPREAD
    min_credit: float = 0.0
    min_open_interest: int = 0
    dist_from_strike: float = 0.0
    expiration_type: str | None = None
    settlement_type: str | None = None
    option_root: str | None = None
    min_strike: float | None = None
    max_strike: float | None = None

    def passes_short(self, option: ChainOption) -> bool:
        return (
            self.passes_delta(option)
            and self.passes_open_interest(option)
            and self.passes_distance(option)
            and self.passes_strike_range(option)
            and self.matches(option)
        )

    def passes_long(self, short: ChainOption, long: ChainOption) -> bool:
        return (
            long.mark > 0
            and self.valid_structure(short, long)
            and self.passes_min_credit(short, long)
            and self.matches(long)
            and self.passes_open_interest(long)
        )

    def passes_delta(self, option: ChainOption) -> bool:
        return self.min_delta <= abs(option.delta) <= self.max_delta

    def passes_open_interest(self, option: ChainOption) -> bool:
        return option.open_interest >= self.min_open_interest

    def passes_distance(self, option: ChainOption) -> bool:
        """Short strike at least ``dist_from_strike`` (a fraction) away from spot."""
        if self.dist_from_strike <= 0:
            return True
        if not self.underlying_price:
            raise InvalidSpreadConfigurationError(
                "underlying_price must be set to filter by distance from strike"
            )
        distance = abs((self.underlying_price - option.strike) / self.underlying_price)
        return distance >= self.dist_from_strike

    def passes_strike_range(self, option: ChainOption) -> bool:
        if self.min_strike is not None and option.strike < self.min_strike:
            return False
        if self.max_strike is not None and option.strike > self.max_strike:
            return False
        return True

    def matches(self, option: ChainOption) -> bool:
        if self.expiration_type and option.expiration_type != self.expiration_type:
            return False
        if self.settlement_type and option.settlement_type != self.settlement_type:
            return False
        if self.option_root and option.option_root != self.option_root:
            return False
        return True

    def valid_structure(self, short: ChainOption, long: ChainOption) -> bool:
        """The long leg sits further out of the money, within ``max_spread``."""
        if short.option_type == OptionType.CALL:
            width = long.strike - short.strike
        else:
            width = short.strike - long.strike
        return 0 < width <= self.max_spread

    def passes_min_credit(self, short: ChainOption, long: ChainOption) -> bool:
        if self.min_credit <= 0:
            return True
        credit = short.mark - long.mark
        return credit * settings.CONTRACT_MULTIPLIER >= self.min_credit


@dataclass(frozen=True)
class SpreadCandidate:
    """A credit vertical found in the chain with the quotes it came from."""

    spread: VerticalSpread
    short_option: ChainOption
    long_option: ChainOption

    @property
    def credit(self) -> float:
        return self.short_option.mark - self.long_option.mark

    @property
    def delta(self) -> float:
        return self.short_option.delta

    @property
    def width(self) -> float:
        return abs(self.short_option.strike - self.long_option.strike)


@dataclass(frozen=True)
class CondorCandidate:
    condor: IronCondor
    put_side: SpreadCandidate
    call_side: SpreadCandidate

    @property
    def total_credit(self) -> float:
        return self.put_side.credit + self.call_side.credit

    @property
    def total_delta(self) -> float:
        return abs(self.put_side.delta) + abs(self.call_side.delta)

    @property
    def credit_to_delta(self) -> float:
        return self.total_credit / self.total_delta if self.total_delta > 0 else 0.0


def chain_option(row, option_type: OptionType | str | None = None) -> ChainOption:
    """Read one chain row (``ChainOption`` or dict).

    ``option_type`` fills in rows that do not say whether they are calls or
    puts, e.g. rows taken from a call-only map.

    Raises:
        InvalidLegError: Missing strike or mark, or an unknown option type.
    """
    if isinstance(row, ChainOption):
        return row
    if not isinstance(row, dict):
        raise InvalidLegError(f"Chain row must be a ChainOption or dict, got {type(row).__name__}")

    fields = {}
    for name, keys in _ROW_KEYS.items():
        for key in keys:
            if row.get(key) is not None:
                fields[name] = row[key]
                break

    kind = fields.get("option_type", option_type)
    if kind is None:
        raise InvalidLegError(f"Chain row has no option type: {row!r}")
    if "strike" not in fields or "mark" not in fields:
        raise InvalidLegError(f"Chain row needs a strike and a mark: {row!r}")

    expiration = fields.get("expiration")
    if isinstance(expiration, str):
        # Chain timestamps carry a time part after the date.
        expiration = expiration[:10]

    return ChainOption(
        strike=parse_strike(fields["strike"]),
        option_type=coerce_enum(OptionType, kind, InvalidLegError, "option type"),
        mark=float(fields["mark"]),
        delta=float(fields.get("delta", 0.0)),
        open_interest=int(fields.get("open_interest", 0)),
        symbol=fields.get("symbol", ""),
        expiration=parse_expiration(expiration) if expiration is not None else None,
        expiration_type=fields.get("expiration_type"),
        settlement_type=fields.get("settlement_type"),
        option_root=fields.get("option_root"),
    )


def find_spreads(
    chain,
    option_type: OptionType | str,
    symbol: str,
    expiration: date | str,
    criteria: ChainFilter | None = None,
    quantity: int = settings.DEFAULT_QUANTITY,
) -> list[SpreadCandidate]:
    """Every credit vertical of ``option_type`` the chain allows, best credit first.

    Short candidates pass the delta, open interest, distance, strike range
    and root/settlement/expiration-type filters. Each is paired with every
    long option further out of the money within ``max_spread`` that keeps
    the credit at or above ``min_credit``. Rows for another expiration or
    option type are ignored.
    """
    criteria = criteria or ChainFilter()
    option_type = coerce_enum(OptionType, option_type, InvalidLegError, "option type")
    expiration = parse_expiration(expiration)

    options = [
        o for o in (chain_option(row, option_type) for row in chain)
        if o.option_type == option_type and o.expiration in (None, expiration)
    ]
    shorts = [o for o in options if criteria.passes_short(o)]

    # Calls are sold at the low strike, puts at the high strike.
    low_side = Side.SELL if option_type == OptionType.CALL else Side.BUY

    candidates = []
    for short in shorts:
        for long in options:
            if not criteria.passes_long(short, long):
                continue
            low, high = sorted((short.strike, long.strike))
            spread = build_vertical_spread(
                symbol, expiration, low, high, option_type, low_side, quantity,
            )
            candidates.append(SpreadCandidate(spread, short, long))

    logger.debug("Found %d %s spreads from %d short options",
                 len(candidates), option_type.value, len(shorts))
    candidates.sort(key=lambda c: c.credit, reverse=True)
    return candidates


def find_best_spread(
    chain,
    option_type: OptionType | str,
    symbol: str,
    expiration: date | str,
    criteria: ChainFilter | None = None,
    quantity: int = settings.DEFAULT_QUANTITY,
) -> SpreadCandidate | None:
    """The highest credit vertical, or None when nothing passes."""
    candidates = find_spreads(chain, option_type, symbol, expiration, criteria, quantity)
    return candidates[0] if candidates else None


def find_iron_condor(
    chain,
    symbol: str,
    expiration: date | str,
    criteria: ChainFilter | None = None,
    quantity: int = settings.DEFAULT_QUANTITY,
) -> CondorCandidate | None:
    """The put/call spread pair with the best credit per unit of short delta.

    Each side is screened with half of ``min_credit``; the pair must reach
    the full ``min_credit`` together and the put side must sit entirely
    below the call side. Returns None when either side has no candidates.
    """
    criteria = criteria or ChainFilter()
    rows = list(chain)
    side_criteria = replace(criteria, min_credit=criteria.min_credit / 2.0)
    puts = find_spreads(rows, OptionType.PUT, symbol, expiration, side_criteria, quantity)
    calls = find_spreads(rows, OptionType.CALL, symbol, expiration, side_criteria, quantity)
    if not puts or not calls:
        logger.info("No iron condor for %s %s: %d put and %d call spreads",
                    symbol, expiration, len(puts), len(calls))
        return None

    best = None
    best_ratio = 0.0
    for put in puts:
        for call in calls:
            if put.short_option.strike >= call.short_option.strike:
                continue
            total_credit = put.credit + call.credit
            if total_credit * settings.CONTRACT_MULTIPLIER < criteria.min_credit:
                continue
            total_delta = abs(put.delta) + abs(call.delta)
            if total_delta <= 0:
                continue
            ratio = total_credit / total_delta
            if ratio > best_ratio:
                best, best_ratio = (put, call), ratio

    if best is None:
        return None
    put, call = best
    condor = build_iron_condor(
        symbol, expiration,
        put.long_option.strike, put.short_option.strike,
        call.short_option.strike, call.long_option.strike,
        quantity,
    )
    found = CondorCandidate(condor, put, call)
    logger.info("Best iron condor for %s: strikes %s, credit %.2f, ratio %.2f", symbol,
                [leg.strike for leg in condor.legs], found.total_credit, best_ratio)
    return found
