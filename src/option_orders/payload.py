"""Render an OrderDocument as the brokerage order-entry JSON body.

Shape follows the brokerage's order schema:
    {"orderType": "NET_CREDIT", "session": "NORMAL", "duration": "DAY",
     "orderStrategyType": "SINGLE", "complexOrderStrategyType": "IRON_CONDOR",
     "quantity": 1, "price": "1.50",
     "orderLegCollection": [{"instruction": "BUY_TO_OPEN", "quantity": 1,
                             "instrument": {"symbol": "...", "assetType": "OPTION"}}]}
"""

import json

from .models import Leg, OrderDocument


def to_order_payload(document: OrderDocument) -> dict:
    payload = {
        "orderType": document.order_type.name,
        "session": document.session.name,
        "duration": document.duration.name,
        "orderStrategyType": document.order_strategy_type.name,
        "complexOrderStrategyType": document.complex_order_strategy_type.name,
        "quantity": document.quantity,
    }
    if document.limit_price is not None:
        payload["price"] = f"{document.limit_price:.2f}"
    payload["orderLegCollection"] = [_leg_payload(leg) for leg in document.legs]
    return payload


def to_order_json(document: OrderDocument, indent: int | None = None) -> str:
    return json.dumps(to_order_payload(document), indent=indent)


def _leg_payload(leg: Leg) -> dict:
    return {
        "instruction": leg.instruction.value,
        "quantity": leg.quantity,
        "instrument": {
            "symbol": leg.symbol,
            "assetType": "OPTION",
        },
    }
