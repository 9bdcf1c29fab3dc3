"""Integration tests for the VNPay redirect and return endpoints."""

from urllib.parse import parse_qsl, urlsplit

from payments.gateway import set_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.vnpay_adapter import sign


def _payment_url(client, quantity=2):
    response = client.post(
        "/payments/vnpay/url",
        json={
            "user_id": 7,
            "delivery_address": "12 Nguyen Hue, District 1",
            "items": [{"product_id": 1, "variant_id": 10, "quantity": quantity}],
        },
        headers={"x-forwarded-for": "203.0.113.9, 10.0.0.1"},
    )
    assert response.status_code == 200
    return response.json()


def _return_params(payment_url, secret, response_code="00"):
    params = dict(parse_qsl(urlsplit(payment_url).query))
    params.pop("vnp_SecureHash")
    params["vnp_ResponseCode"] = response_code
    params["vnp_SecureHash"] = sign(params, secret)
    return params


class TestPaymentUrl:
    def test_returns_signed_url(self, client, stock):
        stock(1, 10, 5)
        data = _payment_url(client)

        params = dict(parse_qsl(urlsplit(data["payment_url"]).query))
        assert data["amount"] == "200.00"
        assert params["vnp_Amount"] == "20000"
        assert params["vnp_IpAddr"] == "203.0.113.9"
        assert params["vnp_TxnRef"] == data["txn_ref"]

    def test_insufficient_stock_is_409(self, client, stock):
        stock(1, 10, 1)
        response = client.post(
            "/payments/vnpay/url",
            json={
                "user_id": 7,
                "delivery_address": "x",
                "items": [{"product_id": 1, "variant_id": 10, "quantity": 2}],
            },
        )
        assert response.status_code == 409


class TestPaymentReturn:
    def test_success_redirects_to_order(self, client, settings, stock, stock_of):
        stock(1, 10, 5)
        data = _payment_url(client)
        params = _return_params(data["payment_url"], settings.vnp_hash_secret)

        response = client.get("/payments/vnpay/return", params=params)

        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith("http://shop.test/user/orders/")
        code = location.rsplit("/", 1)[-1]
        assert client.get(f"/orders/{code}").json()["amount_payable"] == "200.00"
        assert stock_of(1, 10).sold_quantity == 2

    def test_replayed_return_redirects_to_same_order(self, client, settings, stock, stock_of):
        stock(1, 10, 5)
        params = _return_params(_payment_url(client)["payment_url"], settings.vnp_hash_secret)

        first = client.get("/payments/vnpay/return", params=params)
        second = client.get("/payments/vnpay/return", params=params)

        assert first.headers["location"] == second.headers["location"]
        assert stock_of(1, 10).sold_quantity == 2

    def test_declined_payment_redirects_to_failure(self, client, settings, stock):
        stock(1, 10, 5)
        params = _return_params(_payment_url(client)["payment_url"], settings.vnp_hash_secret, "24")

        response = client.get("/payments/vnpay/return", params=params)

        assert response.headers["location"] == "http://shop.test/payment-failed"
        assert client.get("/orders").json()["total_items"] == 0

    def test_tampered_return_redirects_to_failure(self, client, settings, stock):
        stock(1, 10, 5)
        params = _return_params(_payment_url(client)["payment_url"], settings.vnp_hash_secret)
        params["vnp_Amount"] = "100"

        response = client.get("/payments/vnpay/return", params=params)

        assert response.headers["location"] == "http://shop.test/payment-failed"
        assert client.get("/orders").json()["total_items"] == 0

    def test_non_ascii_signature_redirects_to_failure(self, client, settings, stock):
        stock(1, 10, 5)
        params = _return_params(_payment_url(client)["payment_url"], settings.vnp_hash_secret)
        params["vnp_SecureHash"] = "\u00e9" * 128

        response = client.get("/payments/vnpay/return", params=params)

        assert response.status_code == 302
        assert response.headers["location"] == "http://shop.test/payment-failed"
        assert client.get("/orders").json()["total_items"] == 0

    def test_stock_gone_after_payment_redirects_to_failure(self, client, settings, stock, services):
        stock(1, 10, 2)
        params = _return_params(_payment_url(client)["payment_url"], settings.vnp_hash_secret)
        with services.database.unit_of_work() as tx:
            services.inventory.reserve(tx, 1, 10, 2)

        response = client.get("/payments/vnpay/return", params=params)

        assert response.headers["location"] == "http://shop.test/payment-failed"


class TestConfigureGateway:
    def test_rejected_for_real_gateway(self, client):
        response = client.post("/payments/gateway/configure", json={"should_succeed": False})
        assert response.status_code == 400

    def test_configures_fake_gateway(self, client):
        set_gateway(FakeGateway())
        response = client.post("/payments/gateway/configure", json={"should_succeed": False, "response_code": "51"})
        assert response.json() == {"gateway": "FakeGateway", "should_succeed": False, "response_code": "51"}
