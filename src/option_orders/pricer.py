"""Black-Scholes valuation and expiry payoff for vertical spreads and condors.

Used to sanity-check a limit price before an order is assembled. Inputs
(spot, vol, rate) are supplied by the caller; nothing here fetches data.

Sign convention: a positive net price is a credit received per spread,
a negative one a debit paid.
"""

import math
from dataclasses import dataclass, field

import numpy as np
from scipy.stats import norm

from . import settings
from .models import OptionType, Strategy


@dataclass
class OptionPrice:
    """Pricing result for a single option."""

    price: float
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float


@dataclass
class StrategyPrice:
    """Per-unit valuation of a strategy from the holder's point of view."""

    net_price: float
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float
    leg_prices: list[OptionPrice] = field(default_factory=list)


@dataclass
class PayoffProfile:
    """Expiry P&L of one unit of a strategy, including the net premium."""

    max_profit: float
    max_loss: float
    breakevens: list[float]
    curve: list[tuple[float, float]]


def black_scholes_price(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: OptionType,
    q: float = 0.0,
) -> float:
    """Calculate Black-Scholes option price.

    Args:
        S: Current spot price of the underlying.
        K: Strike price.
        T: Time to expiration in years.
        r: Risk-free interest rate (annualized).
        sigma: Implied volatility (annualized).
        option_type: CALL or PUT.
        q: Continuous dividend yield.
    """
    if T <= 0:
        if option_type == OptionType.CALL:
            return max(S - K, 0.0)
        return max(K - S, 0.0)

    d1, d2 = _d1_d2(S, K, T, r, sigma, q)

    if option_type == OptionType.CALL:
        return S * math.exp(-q * T) * norm.cdf(d1) - K * math.exp(-r * T) * norm.cdf(d2)
    return K * math.exp(-r * T) * norm.cdf(-d2) - S * math.exp(-q * T) * norm.cdf(-d1)


def greeks(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: OptionType,
    q: float = 0.0,
) -> OptionPrice:
    """Calculate option price and Greeks (vega/rho per 1%, theta per calendar day)."""
    price = black_scholes_price(S, K, T, r, sigma, option_type, q)

    if T <= 0:
        in_the_money = (option_type == OptionType.CALL and S > K) or (
            option_type == OptionType.PUT and S < K
        )
        delta = (1.0 if option_type == OptionType.CALL else -1.0) if in_the_money else 0.0
        return OptionPrice(price=price, delta=delta, gamma=0.0, theta=0.0, vega=0.0, rho=0.0)

    d1, d2 = _d1_d2(S, K, T, r, sigma, q)
    exp_qt = math.exp(-q * T)
    exp_rt = math.exp(-r * T)

    gamma = exp_qt * norm.pdf(d1) / (S * sigma * math.sqrt(T))
    vega = S * exp_qt * norm.pdf(d1) * math.sqrt(T) / 100.0

    if option_type == OptionType.CALL:
        delta = exp_qt * norm.cdf(d1)
        theta = (
            -S * exp_qt * norm.pdf(d1) * sigma / (2 * math.sqrt(T))
            + q * S * exp_qt * norm.cdf(d1)
            - r * K * exp_rt * norm.cdf(d2)
        ) / 365.0
        rho = K * T * exp_rt * norm.cdf(d2) / 100.0
    else:
        delta = exp_qt * (norm.cdf(d1) - 1)
        theta = (
            -S * exp_qt * norm.pdf(d1) * sigma / (2 * math.sqrt(T))
            - q * S * exp_qt * norm.cdf(-d1)
            + r * K * exp_rt * norm.cdf(-d2)
        ) / 365.0
        rho = -K * T * exp_rt * norm.cdf(-d2) / 100.0

    return OptionPrice(price=price, delta=delta, gamma=gamma, theta=theta, vega=vega, rho=rho)


def price_strategy(
    strategy: Strategy,
    spot: float,
    sigma: float | dict[float, float],
    T: float,
    r: float = settings.DEFAULT_RISK_FREE_RATE,
    q: float = settings.DEFAULT_DIVIDEND_YIELD,
) -> StrategyPrice:
    """Value one unit of a strategy.

    Args:
        strategy: Vertical spread or iron condor.
        spot: Current spot price of the underlying.
        sigma: Implied vol, either one float or a dict mapping strike -> vol.
        T: Time to expiration in years.
        r: Risk-free rate.
        q: Continuous dividend yield.

    Greeks are for the position held after the order fills; the net
    price is what the order itself receives (+) or pays (-).
    """
    leg_prices: list[OptionPrice] = []
    paid = delta = gamma = theta = vega = rho = 0.0

    for leg in strategy.legs:
        if isinstance(sigma, dict):
            vol = sigma.get(leg.strike)
            if vol is None:
                raise ValueError(
                    f"No vol provided for strike {leg.strike}. "
                    f"Available strikes: {sorted(sigma.keys())}"
                )
        else:
            vol = sigma
        result = greeks(spot, leg.strike, T, r, vol, leg.option_type, q)
        leg_prices.append(result)

        d = leg.direction
        paid += d * result.price
        delta += d * result.delta
        gamma += d * result.gamma
        theta += d * result.theta
        vega += d * result.vega
        rho += d * result.rho

    return StrategyPrice(
        net_price=-paid,
        delta=delta,
        gamma=gamma,
        theta=theta,
        vega=vega,
        rho=rho,
        leg_prices=leg_prices,
    )


def theoretical_net_price(
    strategy: Strategy,
    spot: float,
    sigma: float | dict[float, float],
    T: float,
    r: float = settings.DEFAULT_RISK_FREE_RATE,
    q: float = settings.DEFAULT_DIVIDEND_YIELD,
) -> float:
    """Signed per-unit premium: positive for a credit, negative for a debit."""
    return price_strategy(strategy, spot, sigma, T, r, q).net_price


def payoff_profile(
    strategy: Strategy,
    net_price: float = 0.0,
    steps: int = settings.PAYOFF_STEPS,
) -> PayoffProfile:
    """Expiry P&L of one unit given the signed net premium.

    Verticals and condors are piecewise linear with flat wings, so the
    extremes are found exactly at the strikes.
    """
    strikes = sorted({leg.strike for leg in strategy.legs})
    width = strikes[-1] - strikes[0]
    kinks = np.array([0.0, *strikes, strikes[-1] + width])
    kink_pnl = _unit_pnl(strategy, kinks, net_price)

    spots = np.linspace(max(strikes[0] - width, 0.0), strikes[-1] + width, steps + 1)
    curve_pnl = _unit_pnl(strategy, spots, net_price)

    return PayoffProfile(
        max_profit=float(kink_pnl.max()),
        max_loss=float(kink_pnl.min()),
        breakevens=breakevens(strategy, net_price),
        curve=list(zip(spots.tolist(), curve_pnl.tolist())),
    )


def breakevens(strategy: Strategy, net_price: float) -> list[float]:
    """Spots at expiry where one unit neither makes nor loses money."""
    strikes = sorted({leg.strike for leg in strategy.legs})
    xs = np.array([0.0, *strikes, 2 * strikes[-1]])
    ys = _unit_pnl(strategy, xs, net_price)

    points: list[float] = []
    for x0, x1, y0, y1 in zip(xs[:-1], xs[1:], ys[:-1], ys[1:]):
        if y0 * y1 < 0:
            points.append(float(x0 + (x1 - x0) * (-y0) / (y1 - y0)))
        elif y0 == 0.0 and y1 != 0.0:
            points.append(float(x0))
        elif y1 == 0.0 and y0 != 0.0:
            points.append(float(x1))
    return sorted({round(p, 10) for p in points})


def _unit_pnl(strategy: Strategy, spots: np.ndarray, net_price: float) -> np.ndarray:
    total = np.full_like(spots, net_price, dtype=float)
    for leg in strategy.legs:
        if leg.option_type == OptionType.CALL:
            intrinsic = np.maximum(spots - leg.strike, 0.0)
        else:
            intrinsic = np.maximum(leg.strike - spots, 0.0)
        total += leg.direction * intrinsic
    return total


def _d1_d2(
    S: float, K: float, T: float, r: float, sigma: float, q: float
) -> tuple[float, float]:
    """Calculate d1 and d2 for Black-Scholes formula."""
    d1 = (math.log(S / K) + (r - q + 0.5 * sigma**2) * T) / (sigma * math.sqrt(T))
    d2 = d1 - sigma * math.sqrt(T)
    return d1, d2
