"""Payment initiation — command and handler.

Prices the order server-side and asks the gateway for a signed redirect.
Nothing is written: the order only comes into existence when the gateway
calls back with a successful payment.
"""

from dataclasses import dataclass, field

import structlog

from ordering.cart.snapshot import CartSnapshotBuilder, RequestedLine
from payments.gateway import get_gateway
from payments.gateway.port import IntentLine, OrderIntent, PaymentRequest
from shared.db import utcnow
from shared.errors import ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InitiatePayment:
    user_id: int
    delivery_address: str
    items: list[RequestedLine] = field(default_factory=list)
    voucher_code: str | None = None
    payment_method: str = "VNPay"
    client_ip: str = "127.0.0.1"


class InitiatePaymentHandler:
    def __init__(self, snapshots: CartSnapshotBuilder) -> None:
        self._snapshots = snapshots

    def handle(self, command: InitiatePayment) -> PaymentRequest:
        if not command.delivery_address or not command.delivery_address.strip():
            raise ValidationError({"delivery_address": ["Delivery address is required"]})

        snapshot = self._snapshots.build(command.items, command.voucher_code)
        intent = OrderIntent(
            user_id=command.user_id,
            payment_method=command.payment_method,
            delivery_address=command.delivery_address.strip(),
            voucher_code=command.voucher_code,
            amount_payable=snapshot.amount_payable,
            items=[
                IntentLine(product_id=line.product_id, variant_id=line.variant_id, quantity=line.quantity)
                for line in snapshot.lines
            ],
        )
        request = get_gateway().build_payment_url(intent, command.client_ip, utcnow())
        logger.info(
            "Payment initiated",
            user_id=command.user_id,
            txn_ref=request.txn_ref,
            amount=str(request.amount),
        )
        return request
