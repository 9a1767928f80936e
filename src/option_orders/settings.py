"""Configuration settings for order construction."""

# Order envelope defaults
DEFAULT_DURATION = "day"
DEFAULT_SESSION = "normal"
DEFAULT_ORDER_STRATEGY_TYPE = "single"
DEFAULT_QUANTITY = 1

# Limit prices are rounded to this increment (cents)
PRICE_INCREMENT = "0.01"

# Risk-free rate default (annualized)
DEFAULT_RISK_FREE_RATE = 0.05

# Default dividend yield
DEFAULT_DIVIDEND_YIELD = 0.0

# Points on the expiry payoff curve
PAYOFF_STEPS = 200

# Chain screening defaults: short leg |delta| ceiling, widest spread in points
FINDER_MAX_DELTA = 0.15
FINDER_MAX_SPREAD = 20.0

# Contract multiplier; min credit is quoted in dollars per spread
CONTRACT_MULTIPLIER = 100
