"""Ordering domain load test scenarios.

Stateful SequentialTaskSet journeys covering the order lifecycle through
delivery, cancellation with stock release, and cart-to-checkout
conversion. A 409 on placement means the item sold out, which is a
correct answer under load, not a failure.
"""

import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import checkout_data, load_variants, order_data, user_id
from loadtests.helpers.response import error_code, extract_error_detail
from loadtests.helpers.state import CartState, OrderState

SOLD_OUT = {"insufficient_stock", "voucher_exhausted", "voucher_not_active"}


def place_order(taskset, state: OrderState) -> None:
    variants = load_variants(taskset.client)
    if not variants:
        taskset.interrupt()
    with taskset.client.post(
        "/orders",
        json=order_data(variants, state.user_id),
        catch_response=True,
        name="POST /orders",
    ) as resp:
        if resp.status_code == 201:
            state.order_code = resp.json()["order_code"]
        elif resp.status_code == 409 and error_code(resp) in SOLD_OUT:
            resp.success()
            taskset.interrupt()
        else:
            resp.failure(f"Place order failed: {resp.status_code} — {extract_error_detail(resp)}")
            taskset.interrupt()


class OrderFullLifecycleJourney(SequentialTaskSet):
    """Place Order -> Delivering -> Succeeded -> View."""

    def on_start(self):
        self.state = OrderState(user_id=user_id())

    @task
    def place(self):
        place_order(self, self.state)

    @task
    def start_delivery(self):
        self._advance("Delivering")

    @task
    def mark_delivered(self):
        self._advance("Succeeded")

    @task
    def view_order(self):
        with self.client.get(
            f"/orders/{self.state.order_code}",
            catch_response=True,
            name="GET /orders/{code}",
        ) as resp:
            if resp.status_code != 200 or resp.json()["status"] != self.state.current_status:
                resp.failure(f"Unexpected order view: {resp.status_code} — {resp.text[:200]}")

    @task
    def done(self):
        self.interrupt()

    def _advance(self, expected: str):
        with self.client.put(
            f"/orders/{self.state.order_code}/status",
            catch_response=True,
            name="PUT /orders/{code}/status",
        ) as resp:
            if resp.status_code == 200 and resp.json()["status"] == expected:
                self.state.current_status = expected
            else:
                resp.failure(f"Advance to {expected} failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()


class OrderCancellationJourney(SequentialTaskSet):
    """Place Order -> Cancel -> Cancel again (must be rejected)."""

    def on_start(self):
        self.state = OrderState(user_id=user_id())

    @task
    def place(self):
        place_order(self, self.state)

    @task
    def cancel(self):
        with self.client.put(
            f"/orders/{self.state.order_code}/cancel",
            json={"reason": "Changed my mind", "user_id": self.state.user_id},
            catch_response=True,
            name="PUT /orders/{code}/cancel",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Cancel failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def cancel_again(self):
        with self.client.put(
            f"/orders/{self.state.order_code}/cancel",
            catch_response=True,
            name="PUT /orders/{code}/cancel (repeat)",
        ) as resp:
            if resp.status_code == 409:
                resp.success()
            else:
                resp.failure(f"Repeated cancel was not rejected: {resp.status_code}")

    @task
    def done(self):
        self.interrupt()


class CartToCheckoutJourney(SequentialTaskSet):
    """Fill Cart -> View Cart -> Checkout."""

    def on_start(self):
        self.state = CartState(user_id=user_id())

    @task
    def fill_cart(self):
        variants = load_variants(self.client)
        if not variants:
            self.interrupt()
        for product_id, variant_id in random.sample(variants, k=min(2, len(variants))):
            with self.client.put(
                f"/carts/{self.state.user_id}/items",
                json={"product_id": product_id, "variant_id": variant_id, "quantity": 1},
                catch_response=True,
                name="PUT /carts/{user_id}/items",
            ) as resp:
                if resp.status_code == 200:
                    self.state.lines.append((product_id, variant_id))
                else:
                    resp.failure(f"Set cart item failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        self.client.get(f"/carts/{self.state.user_id}", name="GET /carts/{user_id}")

    @task
    def checkout(self):
        with self.client.post(
            f"/carts/{self.state.user_id}/checkout",
            json=checkout_data(),
            catch_response=True,
            name="POST /carts/{user_id}/checkout",
        ) as resp:
            if resp.status_code == 201 or (resp.status_code == 409 and error_code(resp) in SOLD_OUT):
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderBrowsingJourney(SequentialTaskSet):
    """List Pending -> List Delivering -> Page 2."""

    @task
    def list_pending(self):
        self.client.get("/orders", params={"status": "Pending", "limit": 20}, name="GET /orders?status")

    @task
    def list_delivering(self):
        self.client.get("/orders", params={"status": "Delivering", "limit": 20}, name="GET /orders?status")

    @task
    def second_page(self):
        self.client.get("/orders", params={"limit": 20, "page": 2}, name="GET /orders?page")

    @task
    def done(self):
        self.interrupt()
