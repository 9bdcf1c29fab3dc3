"""Integration tests for Cart API endpoints via TestClient."""


class TestCartApi:
    def test_put_view_and_remove(self, client):
        response = client.put("/carts/7/items", json={"product_id": 2, "variant_id": 20, "quantity": 2})
        assert response.status_code == 200
        assert response.json()["estimated_total"] == "107.98"

        cart = client.get("/carts/7").json()
        assert cart["items"] == [{"product_id": 2, "variant_id": 20, "quantity": 2, "price_estimate": "107.98"}]

        assert client.delete("/carts/7/items/2/20").json()["items"] == []

    def test_remove_missing_item_is_404(self, client):
        assert client.delete("/carts/7/items/2/20").status_code == 404

    def test_checkout_from_cart(self, client, stock, stock_of):
        stock(1, 10, 5)
        client.put("/carts/7/items", json={"product_id": 1, "variant_id": 10, "quantity": 3})

        response = client.post(
            "/carts/7/checkout",
            json={"payment_method": "COD", "delivery_address": "1 Le Loi"},
        )

        assert response.status_code == 201
        assert response.json()["total_price"] == "300.00"
        assert stock_of(1, 10).sold_quantity == 3
        assert client.get("/carts/7").json()["items"] == []

    def test_checkout_empty_cart_is_400(self, client):
        response = client.post("/carts/7/checkout", json={"payment_method": "COD", "delivery_address": "x"})
        assert response.status_code == 400


class TestInventoryApi:
    def test_register_restock_and_list(self, client):
        created = client.post("/inventory", json={"product_id": 1, "variant_id": 10, "initial_quantity": 3})
        assert created.status_code == 201

        restocked = client.put("/inventory/1/10/restock", json={"quantity": 2})
        assert restocked.json()["available_quantity"] == 5

        listing = client.get("/inventory/1").json()
        assert listing == [{"product_id": 1, "variant_id": 10, "available_quantity": 5, "sold_quantity": 0}]

    def test_duplicate_registration_is_409(self, client, stock):
        stock(1, 10, 1)
        response = client.post("/inventory", json={"product_id": 1, "variant_id": 10})
        assert response.status_code == 409

    def test_restock_unknown_is_404(self, client):
        assert client.put("/inventory/9/9/restock", json={"quantity": 1}).status_code == 404
