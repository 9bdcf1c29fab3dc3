"""VNPay adapter — HMAC-SHA512 signed redirects and callbacks.

Signing: every ``vnp_*`` parameter except the hash fields is sorted by key
and joined as ``key=value&...`` with values form-encoded (spaces as ``+``).
The hex HMAC-SHA512 of that string under the merchant secret is appended as
``vnp_SecureHash``. Amounts travel as integers: amount x 100.
"""

import hashlib
import hmac
from datetime import datetime
from decimal import Decimal, InvalidOperation
from urllib.parse import quote_plus
from uuid import uuid4
from zoneinfo import ZoneInfo

import structlog

from payments.gateway.port import CallbackResult, OrderIntent, PaymentGateway, PaymentRequest
from shared.errors import SignatureError

logger = structlog.get_logger(__name__)

VERSION = "2.1.0"
SUCCESS_CODE = "00"
_HASH_FIELDS = ("vnp_SecureHash", "vnp_SecureHashType")


def canonical_query(params: dict[str, str]) -> str:
    return "&".join(f"{key}={quote_plus(str(params[key]))}" for key in sorted(params))


def sign(params: dict[str, str], secret: str) -> str:
    data = canonical_query(params).encode("utf-8")
    return hmac.new(secret.encode("utf-8"), data, hashlib.sha512).hexdigest()


def to_gateway_amount(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value())


class VnpayGateway(PaymentGateway):
    def __init__(
        self,
        tmn_code: str,
        hash_secret: str,
        payment_url: str,
        return_url: str,
        locale: str = "vn",
        currency: str = "VND",
        timezone: str = "Asia/Ho_Chi_Minh",
    ) -> None:
        if not hash_secret:
            raise ValueError("VNPay hash secret is not configured")
        self.tmn_code = tmn_code
        self._secret = hash_secret
        self.payment_url = payment_url
        self.return_url = return_url
        self.locale = locale
        self.currency = currency
        self.timezone = ZoneInfo(timezone)

    def build_payment_url(self, intent: OrderIntent, client_ip: str, now: datetime) -> PaymentRequest:
        local_now = now.astimezone(self.timezone)
        txn_ref = f"{local_now:%Y%m%d%H%M%S}{uuid4().hex[:6].upper()}"
        params = {
            "vnp_Version": VERSION,
            "vnp_Command": "pay",
            "vnp_TmnCode": self.tmn_code,
            "vnp_Locale": self.locale,
            "vnp_CurrCode": self.currency,
            "vnp_TxnRef": txn_ref,
            "vnp_OrderInfo": intent.encode(),
            "vnp_OrderType": "other",
            "vnp_Amount": str(to_gateway_amount(intent.amount_payable)),
            "vnp_ReturnUrl": self.return_url,
            "vnp_IpAddr": client_ip,
            "vnp_CreateDate": f"{local_now:%Y%m%d%H%M%S}",
        }
        query = canonical_query(params)
        signature = sign(params, self._secret)
        url = f"{self.payment_url}?{query}&vnp_SecureHash={signature}"

        logger.info("Payment URL built", txn_ref=txn_ref, amount=str(intent.amount_payable))
        return PaymentRequest(url=url, txn_ref=txn_ref, amount=intent.amount_payable)

    def verify_callback(self, params: dict[str, str]) -> CallbackResult:
        received = params.get("vnp_SecureHash", "")
        signed_params = {key: value for key, value in params.items() if key not in _HASH_FIELDS}
        expected = sign(signed_params, self._secret)
        # Compared as bytes: compare_digest rejects non-ASCII str
        if not hmac.compare_digest(expected.lower().encode(), str(received).lower().encode("utf-8")):
            logger.warning("Callback signature invalid", txn_ref=params.get("vnp_TxnRef"))
            raise SignatureError("Callback signature does not match")

        if not signed_params.get("vnp_TxnRef"):
            raise SignatureError("Callback has no transaction reference")

        intent = OrderIntent.decode(signed_params.get("vnp_OrderInfo", ""))
        try:
            amount = Decimal(int(signed_params["vnp_Amount"])) / 100
        except (KeyError, ValueError, InvalidOperation) as exc:
            raise SignatureError("Callback amount is missing") from exc
        if amount != intent.amount_payable:
            logger.warning(
                "Callback amount mismatch",
                txn_ref=signed_params.get("vnp_TxnRef"),
                paid=str(amount),
                expected=str(intent.amount_payable),
            )
            raise SignatureError("Paid amount does not match the order")

        response_code = signed_params.get("vnp_ResponseCode", "")
        return CallbackResult(
            txn_ref=signed_params["vnp_TxnRef"],
            intent=intent,
            amount=amount,
            success=response_code == SUCCESS_CODE,
            response_code=response_code,
            gateway_transaction_id=signed_params.get("vnp_TransactionNo"),
        )
