"""Command line preview: build an order and print the brokerage JSON body.

    option-orders vertical XYZ 2025-06-20 100 105 --type call --low-side buy --price 1.25
    option-orders condor XYZ 2025-06-20 90 95 105 110 --quantity 2 --price 1.50
    option-orders condor XYZ 2025-06-20 90 95 105 110 --close --price 0.40

    option-orders condor XYZ 2025-06-20 90 95 105 110 --price 1.50 --spot 100 --vol 0.2 --years 0.25

Nothing is submitted; the payload goes to stdout for the caller to send.
With --spot, --vol and --years a theoretical net price, the expiry
breakevens and max profit/loss are printed to stderr beside it.
"""

import argparse
import logging
import sys

from . import settings
from .envelope import assemble
from .errors import OrderConstructionError
from .payload import to_order_json
from .pricer import payoff_profile, theoretical_net_price
from .strategies import (
    build_closing_iron_condor,
    build_closing_vertical_spread,
    build_iron_condor,
    build_vertical_spread,
)

logger = logging.getLogger(__name__)

EXIT_INVALID_ORDER = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="option-orders",
        description="Build a multi-leg option order and print its JSON payload",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="strategy", required=True)

    vertical = sub.add_parser("vertical", help="Two-leg vertical spread")
    _add_common(vertical)
    vertical.add_argument("low_strike", type=float)
    vertical.add_argument("high_strike", type=float)
    vertical.add_argument("--type", dest="option_type", default="call",
                          help="call or put (default: call)")
    vertical.add_argument("--low-side", default="buy",
                          help="Side of the lower strike leg when opening (default: buy)")

    condor = sub.add_parser("condor", help="Four-leg credit iron condor")
    _add_common(condor)
    condor.add_argument("put_low_strike", type=float)
    condor.add_argument("put_high_strike", type=float)
    condor.add_argument("call_low_strike", type=float)
    condor.add_argument("call_high_strike", type=float)

    for p in (vertical, condor):
        _add_envelope(p)
    return parser


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("symbol")
    parser.add_argument("expiration", help="YYYY-MM-DD")


def _add_envelope(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--quantity", type=int, default=1)
    parser.add_argument("--price", default=None, help="Net limit price")
    parser.add_argument("--order-type", default=None,
                        help="limit, market, net_debit or net_credit (default: from strategy)")
    parser.add_argument("--duration", default="day", help="day or good-till-cancel")
    parser.add_argument("--session", default="normal",
                        help="normal, am, pm, seamless or extended")
    parser.add_argument("--close", action="store_true",
                        help="Build the order that closes the position")
    parser.add_argument("--spot", type=float, default=None,
                        help="Underlying price for a theoretical valuation")
    parser.add_argument("--vol", type=float, default=None,
                        help="Implied volatility, e.g. 0.2")
    parser.add_argument("--years", type=float, default=None,
                        help="Time to expiration in years")
    parser.add_argument("--rate", type=float, default=settings.DEFAULT_RISK_FREE_RATE)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    valuation = (args.spot, args.vol, args.years)
    if any(v is not None for v in valuation):
        if any(v is None for v in valuation):
            parser.error("--spot, --vol and --years must be given together")
        if args.spot <= 0 or args.vol <= 0 or args.years < 0:
            parser.error("--spot and --vol must be positive, --years not negative")

    try:
        strategy = _build_strategy(args)
        document = assemble(
            strategy,
            order_type=args.order_type,
            duration=args.duration,
            session=args.session,
            limit_price=args.price,
        )
    except OrderConstructionError as exc:
        logger.info("Order construction failed: %s", exc)
        print(f"Error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return EXIT_INVALID_ORDER

    print(to_order_json(document, indent=2))
    if args.spot is not None:
        _print_valuation(strategy, args)
    return 0


def _print_valuation(strategy, args: argparse.Namespace) -> None:
    net = theoretical_net_price(strategy, args.spot, args.vol, args.years, args.rate)
    profile = payoff_profile(strategy, net)
    kind = "credit" if net >= 0 else "debit"
    points = ", ".join(f"{p:.2f}" for p in profile.breakevens) or "none"
    print(f"Theoretical net price: {abs(net):.4f} {kind}", file=sys.stderr)
    print(f"Breakevens: {points}", file=sys.stderr)
    print(f"Max profit: {profile.max_profit:.4f}  Max loss: {profile.max_loss:.4f}",
          file=sys.stderr)


def _build_strategy(args: argparse.Namespace):
    if args.strategy == "vertical":
        build = build_closing_vertical_spread if args.close else build_vertical_spread
        return build(
            args.symbol, args.expiration, args.low_strike, args.high_strike,
            args.option_type, args.low_side, args.quantity,
        )
    build = build_closing_iron_condor if args.close else build_iron_condor
    return build(
        args.symbol, args.expiration,
        args.put_low_strike, args.put_high_strike,
        args.call_low_strike, args.call_high_strike,
        args.quantity,
    )


if __name__ == "__main__":
    sys.exit(main())
