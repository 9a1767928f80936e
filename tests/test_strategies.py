"""Tests for vertical spread and iron condor construction."""

from datetime import date

import pytest

from option_orders.errors import (
    InvalidLegError,
    InvalidSpreadConfigurationError,
    InvalidStrikeOrderingError,
    UnsupportedStrategyVariantError,
)
from option_orders.legs import build_leg
from option_orders.models import (
    IronCondor,
    OptionType,
    PositionEffect,
    PriceType,
    Side,
    VerticalSpread,
)
from option_orders.strategies import (
    build_closing_iron_condor,
    build_closing_vertical_spread,
    build_iron_condor,
    build_vertical_spread,
    opposite_side,
)

EXPIRY = "2025-06-20"


def _condor(put_low=90, put_high=95, call_low=105, call_high=110, quantity=2):
    return build_iron_condor("XYZ", EXPIRY, put_low, put_high, call_low, call_high, quantity)


class TestVerticalSpread:
    def test_bull_call_scenario(self):
        spread = build_vertical_spread("XYZ", EXPIRY, 100, 105, OptionType.CALL, Side.BUY, 1)

        assert len(spread.legs) == 2
        low, high = spread.legs
        assert (low.strike, low.option_type, low.side, low.position_effect) == (
            100.0, OptionType.CALL, Side.BUY, PositionEffect.OPENING)
        assert (high.strike, high.option_type, high.side, high.position_effect) == (
            105.0, OptionType.CALL, Side.SELL, PositionEffect.OPENING)
        assert spread.price_type == PriceType.DEBIT

    @pytest.mark.parametrize("low,high", [(1, 2), (99.5, 100), (100, 150), (0.5, 1000)])
    @pytest.mark.parametrize("option_type", ["call", "put"])
    @pytest.mark.parametrize("low_side", ["buy", "sell"])
    def test_two_legs_opposite_sides(self, low, high, option_type, low_side):
        spread = build_vertical_spread("XYZ", EXPIRY, low, high, option_type, low_side, 3)
        assert len(spread.legs) == 2
        assert {leg.side for leg in spread.legs} == {Side.BUY, Side.SELL}
        for leg in spread.legs:
            assert leg.expiration == date(2025, 6, 20)
            assert leg.option_type.value == option_type
            assert leg.quantity == 3
        assert spread.legs[0].strike < spread.legs[1].strike

    @pytest.mark.parametrize("low,high", [(105, 100), (100, 100)])
    def test_bad_strike_order(self, low, high):
        for _ in range(2):
            with pytest.raises(InvalidSpreadConfigurationError, match="strictly below"):
                build_vertical_spread("XYZ", EXPIRY, low, high, "call", "buy", 1)

    def test_bull_put_is_credit(self):
        spread = build_vertical_spread("XYZ", EXPIRY, 90, 95, "put", "buy", 1)
        assert spread.price_type == PriceType.CREDIT
        assert spread.short_leg.strike == 95.0
        assert spread.long_leg.strike == 90.0

    def test_bear_call_is_credit(self):
        spread = build_vertical_spread("XYZ", EXPIRY, 105, 110, "call", "sell", 1)
        assert spread.price_type == PriceType.CREDIT

    def test_width(self):
        spread = build_vertical_spread("XYZ", EXPIRY, 100, 107.5, "call", "buy", 1)
        assert spread.width == pytest.approx(7.5)

    def test_bad_quantity(self):
        with pytest.raises(InvalidLegError):
            build_vertical_spread("XYZ", EXPIRY, 100, 105, "call", "buy", 0)

    def test_unit_payoff(self):
        spread = build_vertical_spread("XYZ", EXPIRY, 100, 105, "call", "buy", 4)
        assert spread.unit_payoff(90) == 0.0
        assert spread.unit_payoff(103) == pytest.approx(3.0)
        assert spread.unit_payoff(200) == pytest.approx(5.0)


class TestVerticalSpreadInvariants:
    def _leg(self, strike, side, **overrides):
        params = dict(symbol="XYZ", expiration=EXPIRY, strike=strike, option_type="call",
                      side=side, position_effect="opening", quantity=1)
        params.update(overrides)
        return build_leg(**params)

    def test_same_side_rejected(self):
        with pytest.raises(InvalidSpreadConfigurationError):
            VerticalSpread(self._leg(100, "buy"), self._leg(105, "buy"), PriceType.DEBIT)

    def test_mixed_option_types_rejected(self):
        with pytest.raises(InvalidSpreadConfigurationError, match="option type"):
            VerticalSpread(self._leg(100, "buy"), self._leg(105, "sell", option_type="put"),
                           PriceType.DEBIT)

    def test_mixed_expirations_rejected(self):
        with pytest.raises(InvalidSpreadConfigurationError, match="expiration"):
            VerticalSpread(self._leg(100, "buy"), self._leg(105, "sell", expiration="2025-07-18"),
                           PriceType.DEBIT)

    def test_mixed_quantities_rejected(self):
        with pytest.raises(InvalidSpreadConfigurationError, match="quantity"):
            VerticalSpread(self._leg(100, "buy"), self._leg(105, "sell", quantity=2),
                           PriceType.DEBIT)

    def test_mixed_position_effects_rejected(self):
        with pytest.raises(InvalidSpreadConfigurationError, match="open or both close"):
            VerticalSpread(self._leg(100, "buy"),
                           self._leg(105, "sell", position_effect="closing"),
                           PriceType.DEBIT)


class TestClosingVertical:
    def test_mirrors_sides_keeps_strike_order(self):
        spread = build_closing_vertical_spread("XYZ", EXPIRY, 100, 105, "call", "buy", 1)
        low, high = spread.legs
        assert (low.strike, low.side) == (100.0, Side.SELL)
        assert (high.strike, high.side) == (105.0, Side.BUY)
        assert all(leg.position_effect == PositionEffect.CLOSING for leg in spread.legs)

    def test_closing_debit_spread_is_credit(self):
        spread = build_closing_vertical_spread("XYZ", EXPIRY, 100, 105, "call", "buy", 1)
        assert spread.price_type == PriceType.CREDIT

    def test_closing_credit_put_spread_is_debit(self):
        spread = build_closing_vertical_spread("XYZ", EXPIRY, 90, 95, "put", "buy", 1)
        assert spread.price_type == PriceType.DEBIT

    def test_bad_strike_order(self):
        with pytest.raises(InvalidSpreadConfigurationError):
            build_closing_vertical_spread("XYZ", EXPIRY, 105, 100, "call", "buy", 1)


class TestOppositeSide:
    def test_lookup(self):
        assert opposite_side(Side.BUY) == Side.SELL
        assert opposite_side("sell") == Side.BUY

    def test_unknown(self):
        with pytest.raises(InvalidLegError):
            opposite_side("flat")


class TestIronCondor:
    def test_scenario(self):
        condor = _condor()

        assert isinstance(condor, IronCondor)
        assert len(condor.legs) == 4
        assert [leg.strike for leg in condor.legs] == [90.0, 95.0, 105.0, 110.0]
        assert [leg.option_type for leg in condor.legs] == [
            OptionType.PUT, OptionType.PUT, OptionType.CALL, OptionType.CALL]
        assert [leg.side for leg in condor.legs] == [
            Side.BUY, Side.SELL, Side.SELL, Side.BUY]
        assert all(leg.quantity == 2 for leg in condor.legs)
        assert condor.put_spread.price_type == PriceType.CREDIT
        assert condor.call_spread.price_type == PriceType.CREDIT
        assert condor.price_type == PriceType.CREDIT
        assert condor.quantity == 2

    @pytest.mark.parametrize("strikes", [
        (10, 20, 30, 40),
        (99, 99.5, 100, 100.5),
        (50, 90, 91, 400),
    ])
    def test_ascending_legs(self, strikes):
        condor = build_iron_condor("XYZ", EXPIRY, *strikes, quantity=1)
        got = [leg.strike for leg in condor.legs]
        assert got == sorted(got)
        assert got == [float(s) for s in strikes]

    def test_overlap_rejected(self):
        with pytest.raises(InvalidStrikeOrderingError):
            _condor(put_low=90, put_high=95, call_low=93, call_high=110)

    @pytest.mark.parametrize("strikes", [
        (95, 90, 105, 110),   # put strikes reversed
        (90, 95, 110, 105),   # call strikes reversed
        (90, 95, 95, 110),    # touching inner strikes
        (90, 90, 105, 110),   # zero-width put spread
        (105, 110, 90, 95),   # calls below puts
    ])
    def test_ordering_violations(self, strikes):
        with pytest.raises(InvalidStrikeOrderingError, match="put_low < put_high"):
            build_iron_condor("XYZ", EXPIRY, *strikes, quantity=1)

    def test_debit_variant_rejected(self):
        with pytest.raises(UnsupportedStrategyVariantError, match="reverse"):
            build_iron_condor("XYZ", EXPIRY, 90, 95, 105, 110, quantity=1, credit_variant=False)

    def test_unit_payoff(self):
        condor = _condor()
        assert condor.unit_payoff(100) == 0.0
        assert condor.unit_payoff(80) == pytest.approx(-5.0)
        assert condor.unit_payoff(120) == pytest.approx(-5.0)


class TestIronCondorInvariants:
    def test_mismatched_quantity(self):
        puts = build_vertical_spread("XYZ", EXPIRY, 90, 95, "put", "buy", 1)
        calls = build_vertical_spread("XYZ", EXPIRY, 105, 110, "call", "sell", 2)
        with pytest.raises(InvalidStrikeOrderingError, match="quantity"):
            IronCondor(put_spread=puts, call_spread=calls)

    def test_mismatched_expiration(self):
        puts = build_vertical_spread("XYZ", EXPIRY, 90, 95, "put", "buy", 1)
        calls = build_vertical_spread("XYZ", "2025-07-18", 105, 110, "call", "sell", 1)
        with pytest.raises(InvalidStrikeOrderingError, match="expiration"):
            IronCondor(put_spread=puts, call_spread=calls)

    def test_reverse_condor_rejected(self):
        puts = build_vertical_spread("XYZ", EXPIRY, 90, 95, "put", "sell", 1)
        calls = build_vertical_spread("XYZ", EXPIRY, 105, 110, "call", "buy", 1)
        with pytest.raises(UnsupportedStrategyVariantError):
            IronCondor(put_spread=puts, call_spread=calls)

    def test_swapped_spreads_rejected(self):
        puts = build_vertical_spread("XYZ", EXPIRY, 90, 95, "put", "buy", 1)
        calls = build_vertical_spread("XYZ", EXPIRY, 105, 110, "call", "sell", 1)
        with pytest.raises(InvalidSpreadConfigurationError):
            IronCondor(put_spread=calls, call_spread=puts)


class TestClosingIronCondor:
    def test_mirrors_every_leg(self):
        condor = build_closing_iron_condor("XYZ", EXPIRY, 90, 95, 105, 110, quantity=2)
        assert [leg.strike for leg in condor.legs] == [90.0, 95.0, 105.0, 110.0]
        assert [leg.side for leg in condor.legs] == [
            Side.SELL, Side.BUY, Side.BUY, Side.SELL]
        assert all(leg.position_effect == PositionEffect.CLOSING for leg in condor.legs)
        assert condor.price_type == PriceType.DEBIT

    def test_ordering_enforced(self):
        with pytest.raises(InvalidStrikeOrderingError):
            build_closing_iron_condor("XYZ", EXPIRY, 90, 95, 93, 110)
