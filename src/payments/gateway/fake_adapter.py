"""Configurable fake payment gateway for development and testing.

Simulates the redirect round-trip without a merchant account. Callbacks
are accepted only for transaction references this instance issued, and
carry the issued intent back unchanged. ``configure`` decides whether the
customer "pays".
"""

from datetime import datetime
from uuid import uuid4

from payments.gateway.port import CallbackResult, OrderIntent, PaymentGateway, PaymentRequest
from shared.errors import SignatureError


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, base_url: str = "https://fake-gateway.test/pay") -> None:
        self.base_url = base_url
        self.should_succeed: bool = True
        self.response_code: str = "24"
        self.issued: dict[str, OrderIntent] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, response_code: str = "24") -> None:
        """Configure the outcome of subsequent callbacks."""
        self.should_succeed = should_succeed
        self.response_code = response_code

    def build_payment_url(self, intent: OrderIntent, client_ip: str, now: datetime) -> PaymentRequest:
        txn_ref = f"fake{uuid4().hex[:12]}"
        self.issued[txn_ref] = intent
        self.calls.append({"method": "build_payment_url", "txn_ref": txn_ref, "client_ip": client_ip})
        return PaymentRequest(url=f"{self.base_url}?txn_ref={txn_ref}", txn_ref=txn_ref, amount=intent.amount_payable)

    def callback_params(self, txn_ref: str) -> dict[str, str]:
        """Parameters the fake 'gateway' would send back for ``txn_ref``."""
        return {"txn_ref": txn_ref}

    def verify_callback(self, params: dict[str, str]) -> CallbackResult:
        txn_ref = params.get("txn_ref", "")
        self.calls.append({"method": "verify_callback", "txn_ref": txn_ref})
        intent = self.issued.get(txn_ref)
        if intent is None:
            raise SignatureError("Unknown transaction reference")

        return CallbackResult(
            txn_ref=txn_ref,
            intent=intent,
            amount=intent.amount_payable,
            success=self.should_succeed,
            response_code="00" if self.should_succeed else self.response_code,
            gateway_transaction_id=f"fake_txn_{uuid4().hex[:12]}" if self.should_succeed else None,
        )
