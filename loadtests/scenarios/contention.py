"""Contention scenario: many buyers racing for the same few units.

Every user orders one unit of the same variant. Each request must end
either in 201 (got a unit) or 409 ``insufficient_stock`` (sold out);
anything else, including 503, is a failure. After the run, the sold count
on the inventory record must equal the number of 201 responses.
"""

import os

from locust import HttpUser, between, task

from loadtests.data_generators import delivery_address, load_variants, user_id
from loadtests.helpers.response import error_code, extract_error_detail

HOT_PRODUCT = int(os.environ.get("LOADTEST_HOT_PRODUCT", "1"))


class HotItemUser(HttpUser):
    wait_time = between(0.05, 0.2)

    def on_start(self):
        hot = [pair for pair in load_variants(self.client) if pair[0] == HOT_PRODUCT]
        self.variant = hot[0] if hot else None

    @task
    def grab_one(self):
        if self.variant is None:
            return
        product_id, variant_id = self.variant
        with self.client.post(
            "/orders",
            json={
                "user_id": user_id(),
                "payment_method": "COD",
                "delivery_address": delivery_address(),
                "items": [{"product_id": product_id, "variant_id": variant_id, "quantity": 1}],
            },
            catch_response=True,
            name="POST /orders (hot item)",
        ) as resp:
            if resp.status_code == 201 or (resp.status_code == 409 and error_code(resp) == "insufficient_stock"):
                resp.success()
            else:
                resp.failure(f"Hot item order failed: {resp.status_code} — {extract_error_detail(resp)}")
