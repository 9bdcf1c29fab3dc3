"""Payment gateway port (abstract interface).

The gateway round-trip happens before any order exists. The outbound
redirect carries the whole order intent, signed, and the inbound callback
hands it back, so no server-side pending-order record is kept.
"""

import base64
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation

from shared.errors import SignatureError


@dataclass(frozen=True)
class IntentLine:
    product_id: int
    variant_id: int
    quantity: int


@dataclass(frozen=True)
class OrderIntent:
    """Everything needed to place the order once payment succeeds."""

    user_id: int
    payment_method: str
    delivery_address: str
    amount_payable: Decimal
    items: list[IntentLine] = field(default_factory=list)
    voucher_code: str | None = None

    def encode(self) -> str:
        """Base64 of the JSON form, as carried in the gateway's order-info field."""
        payload = {
            "user_id": self.user_id,
            "payment_method": self.payment_method,
            "delivery_address": self.delivery_address,
            "voucher_code": self.voucher_code,
            "amount_payable": str(self.amount_payable),
            "items": [
                {"product_id": line.product_id, "variant_id": line.variant_id, "quantity": line.quantity}
                for line in self.items
            ],
        }
        raw = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")

    @classmethod
    def decode(cls, encoded: str) -> "OrderIntent":
        try:
            payload = json.loads(base64.b64decode(encoded, validate=True).decode("utf-8"))
            return cls(
                user_id=int(payload["user_id"]),
                payment_method=str(payload["payment_method"]),
                delivery_address=str(payload["delivery_address"]),
                voucher_code=payload.get("voucher_code"),
                amount_payable=Decimal(payload["amount_payable"]),
                items=[
                    IntentLine(
                        product_id=int(line["product_id"]),
                        variant_id=int(line["variant_id"]),
                        quantity=int(line["quantity"]),
                    )
                    for line in payload["items"]
                ],
            )
        except (ValueError, KeyError, TypeError, InvalidOperation) as exc:
            raise SignatureError("Order intent is unreadable") from exc


@dataclass(frozen=True)
class PaymentRequest:
    """A signed redirect to the gateway's payment page."""

    url: str
    txn_ref: str
    amount: Decimal


@dataclass(frozen=True)
class CallbackResult:
    """A verified gateway callback."""

    txn_ref: str
    intent: OrderIntent
    amount: Decimal
    success: bool
    response_code: str
    gateway_transaction_id: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def build_payment_url(self, intent: OrderIntent, client_ip: str, now: datetime) -> PaymentRequest:
        """Sign a redirect that asks the customer to pay ``intent.amount_payable``."""
        ...

    @abstractmethod
    def verify_callback(self, params: dict[str, str]) -> CallbackResult:
        """Authenticate the gateway's return parameters.

        Raises SignatureError when the signature does not match or the paid
        amount differs from the amount in the signed intent.
        """
        ...
