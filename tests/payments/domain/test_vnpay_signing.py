"""Tests for VNPay request signing and callback verification."""

import base64
import json
from datetime import UTC, datetime
from decimal import Decimal
from urllib.parse import parse_qsl, urlsplit

import pytest
from payments.gateway.port import IntentLine, OrderIntent
from payments.gateway.vnpay_adapter import VnpayGateway, canonical_query, sign, to_gateway_amount
from shared.errors import SignatureError

SECRET = "UNITTESTSECRET"
NOW = datetime(2026, 3, 1, 5, 30, 15, tzinfo=UTC)


def _make_gateway(secret=SECRET):
    return VnpayGateway(
        tmn_code="TMN12345",
        hash_secret=secret,
        payment_url="https://sandbox.vnpayment.vn/paymentv2/vpcpay.html",
        return_url="http://shop.test/payments/vnpay/return",
    )


def _make_intent(amount="150000.00"):
    return OrderIntent(
        user_id=7,
        payment_method="VNPay",
        delivery_address="12 Nguyen Hue, District 1",
        amount_payable=Decimal(amount),
        items=[IntentLine(product_id=1, variant_id=10, quantity=2)],
        voucher_code="SAVE10",
    )


def _callback_params(gateway, intent, response_code="00"):
    """Simulate the gateway echoing the request back with its result fields."""
    request = gateway.build_payment_url(intent, "203.0.113.9", NOW)
    params = dict(parse_qsl(urlsplit(request.url).query))
    params.pop("vnp_SecureHash")
    params.update(
        {
            "vnp_ResponseCode": response_code,
            "vnp_TransactionNo": "14012345",
            "vnp_BankCode": "NCB",
            "vnp_PayDate": "20260301123100",
        }
    )
    params["vnp_SecureHash"] = sign(params, SECRET)
    params["vnp_SecureHashType"] = "HmacSHA512"
    return params


class TestPaymentUrl:
    def test_url_carries_required_parameters(self):
        gateway = _make_gateway()
        request = gateway.build_payment_url(_make_intent(), "203.0.113.9", NOW)
        params = dict(parse_qsl(urlsplit(request.url).query))

        assert params["vnp_Version"] == "2.1.0"
        assert params["vnp_Command"] == "pay"
        assert params["vnp_TmnCode"] == "TMN12345"
        assert params["vnp_Locale"] == "vn"
        assert params["vnp_CurrCode"] == "VND"
        assert params["vnp_OrderType"] == "other"
        assert params["vnp_Amount"] == "15000000"
        assert params["vnp_IpAddr"] == "203.0.113.9"
        assert params["vnp_TxnRef"] == request.txn_ref
        assert request.amount == Decimal("150000.00")

    def test_create_date_uses_gateway_timezone(self):
        request = _make_gateway().build_payment_url(_make_intent(), "127.0.0.1", NOW)
        params = dict(parse_qsl(urlsplit(request.url).query))
        assert params["vnp_CreateDate"] == "20260301123015"

    def test_secure_hash_is_last_and_signs_sorted_parameters(self):
        request = _make_gateway().build_payment_url(_make_intent(), "127.0.0.1", NOW)
        query = urlsplit(request.url).query
        assert query.rsplit("&", 1)[1].startswith("vnp_SecureHash=")

        params = dict(parse_qsl(query))
        signature = params.pop("vnp_SecureHash")
        assert signature == sign(params, SECRET)
        assert len(signature) == 128

    def test_intent_round_trips_through_order_info(self):
        intent = _make_intent()
        request = _make_gateway().build_payment_url(intent, "127.0.0.1", NOW)
        params = dict(parse_qsl(urlsplit(request.url).query))
        assert OrderIntent.decode(params["vnp_OrderInfo"]) == intent

    def test_transaction_references_are_unique(self):
        gateway = _make_gateway()
        refs = {gateway.build_payment_url(_make_intent(), "127.0.0.1", NOW).txn_ref for _ in range(20)}
        assert len(refs) == 20

    def test_gateway_requires_a_secret(self):
        with pytest.raises(ValueError):
            _make_gateway(secret="")


class TestCanonicalQuery:
    def test_keys_sorted_and_values_form_encoded(self):
        query = canonical_query({"vnp_b": "a b", "vnp_a": "x/y=z"})
        assert query == "vnp_a=x%2Fy%3Dz&vnp_b=a+b"

    def test_gateway_amount_is_integer_hundredths(self):
        assert to_gateway_amount(Decimal("10.50")) == 1050


class TestVerifyCallback:
    def test_valid_callback(self):
        gateway = _make_gateway()
        intent = _make_intent()
        result = gateway.verify_callback(_callback_params(gateway, intent))

        assert result.success
        assert result.response_code == "00"
        assert result.intent == intent
        assert result.amount == Decimal("150000")
        assert result.gateway_transaction_id == "14012345"

    def test_declined_callback_is_verified_but_not_successful(self):
        gateway = _make_gateway()
        result = gateway.verify_callback(_callback_params(gateway, _make_intent(), response_code="24"))
        assert not result.success
        assert result.response_code == "24"

    def test_every_single_parameter_tamper_fails(self):
        gateway = _make_gateway()
        params = _callback_params(gateway, _make_intent())
        signed_keys = [key for key in params if key not in ("vnp_SecureHash", "vnp_SecureHashType")]

        for key in signed_keys:
            tampered = dict(params)
            tampered[key] = tampered[key] + "0"
            with pytest.raises(SignatureError):
                gateway.verify_callback(tampered)

    def test_added_parameter_fails(self):
        gateway = _make_gateway()
        params = _callback_params(gateway, _make_intent())
        params["vnp_Extra"] = "1"
        with pytest.raises(SignatureError):
            gateway.verify_callback(params)

    def test_missing_signature_fails(self):
        gateway = _make_gateway()
        params = _callback_params(gateway, _make_intent())
        del params["vnp_SecureHash"]
        with pytest.raises(SignatureError):
            gateway.verify_callback(params)

    def test_non_ascii_signature_fails(self):
        gateway = _make_gateway()
        params = _callback_params(gateway, _make_intent())
        params["vnp_SecureHash"] = "\u00e9" * 128
        with pytest.raises(SignatureError):
            gateway.verify_callback(params)

    def test_wrong_secret_fails(self):
        params = _callback_params(_make_gateway(), _make_intent())
        with pytest.raises(SignatureError):
            _make_gateway(secret="ANOTHERSECRET").verify_callback(params)

    def test_signature_is_case_insensitive(self):
        gateway = _make_gateway()
        params = _callback_params(gateway, _make_intent())
        params["vnp_SecureHash"] = params["vnp_SecureHash"].upper()
        assert gateway.verify_callback(params).success

    def test_amount_must_match_signed_intent(self):
        """A correctly signed callback whose amount disagrees with the intent is rejected."""
        gateway = _make_gateway()
        params = _callback_params(gateway, _make_intent())
        params.pop("vnp_SecureHash")
        params.pop("vnp_SecureHashType")
        params["vnp_Amount"] = "100"
        params["vnp_SecureHash"] = sign(params, SECRET)

        with pytest.raises(SignatureError):
            gateway.verify_callback(params)

    def test_unreadable_intent_is_rejected(self):
        gateway = _make_gateway()
        params = _callback_params(gateway, _make_intent())
        params.pop("vnp_SecureHash")
        params.pop("vnp_SecureHashType")
        params["vnp_OrderInfo"] = base64.b64encode(json.dumps({"user_id": 1}).encode()).decode()
        params["vnp_SecureHash"] = sign(params, SECRET)

        with pytest.raises(SignatureError):
            gateway.verify_callback(params)
