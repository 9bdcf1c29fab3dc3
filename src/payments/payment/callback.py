"""Gateway callback processing.

A verified, successful callback places the order. The order code is derived
from the gateway's transaction reference, so a replayed or duplicated
callback finds the order the first one created instead of placing another.
"""

import hashlib
from dataclasses import dataclass

import structlog

from ordering.cart.snapshot import RequestedLine
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order
from ordering.order.workflow import OrderWorkflow
from payments.gateway import get_gateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PaymentAccepted:
    order: Order
    created: bool


@dataclass(frozen=True)
class PaymentDeclined:
    txn_ref: str
    response_code: str


def order_code_for(txn_ref: str) -> str:
    return hashlib.sha256(txn_ref.encode("utf-8")).hexdigest()[:10].upper()


class PaymentCallbackHandler:
    def __init__(self, workflow: OrderWorkflow) -> None:
        self._workflow = workflow

    def handle(self, params: dict[str, str]) -> PaymentAccepted | PaymentDeclined:
        """Raises SignatureError for forged callbacks and ConflictError when
        the order can no longer be fulfilled as paid."""
        result = get_gateway().verify_callback(params)
        if not result.success:
            logger.info("Payment declined", txn_ref=result.txn_ref, response_code=result.response_code)
            return PaymentDeclined(txn_ref=result.txn_ref, response_code=result.response_code)

        intent = result.intent
        placement = self._workflow.place_order(
            PlaceOrder(
                user_id=intent.user_id,
                payment_method=intent.payment_method,
                delivery_address=intent.delivery_address,
                voucher_code=intent.voucher_code,
                items=[
                    RequestedLine(product_id=line.product_id, variant_id=line.variant_id, quantity=line.quantity)
                    for line in intent.items
                ],
                order_code=order_code_for(result.txn_ref),
                expected_amount=intent.amount_payable,
            )
        )
        logger.info(
            "Payment callback processed",
            txn_ref=result.txn_ref,
            order_code=placement.order.order_code,
            created=placement.created,
            gateway_transaction_id=result.gateway_transaction_id,
        )
        return PaymentAccepted(order=placement.order, created=placement.created)
