"""Faker-based data generators for Locust load test scenarios.

Payloads match the exact field names expected by the API's Pydantic
request schemas. Products are looked up once per process from the
inventory API, since only seeded (product, variant) pairs can be bought.
"""

import os
import random

from faker import Faker

fake = Faker("vi_VN")

PRODUCT_COUNT = int(os.environ.get("LOADTEST_PRODUCTS", "20"))

_variants: list[tuple[int, int]] = []


def user_id() -> int:
    return random.randint(1, 100_000)


def delivery_address() -> str:
    return fake.address().replace("\n", ", ")


def load_variants(client) -> list[tuple[int, int]]:
    """Discover purchasable (product, variant) pairs via GET /inventory/{id}."""
    if not _variants:
        for product_id in range(1, PRODUCT_COUNT + 1):
            resp = client.get(f"/inventory/{product_id}", name="GET /inventory/{product_id}")
            if resp.status_code == 200:
                _variants.extend((r["product_id"], r["variant_id"]) for r in resp.json())
    return _variants


def line_items(variants: list[tuple[int, int]], max_lines: int = 3) -> list[dict]:
    chosen = random.sample(variants, k=min(len(variants), random.randint(1, max_lines)))
    return [{"product_id": p, "variant_id": v, "quantity": random.randint(1, 2)} for p, v in chosen]


def order_data(variants: list[tuple[int, int]], buyer: int, voucher_code: str | None = None) -> dict:
    return {
        "user_id": buyer,
        "payment_method": "COD",
        "delivery_address": delivery_address(),
        "voucher_code": voucher_code,
        "items": line_items(variants),
    }


def checkout_data(voucher_code: str | None = None) -> dict:
    return {
        "payment_method": "COD",
        "delivery_address": delivery_address(),
        "voucher_code": voucher_code,
    }


def payment_url_data(variants: list[tuple[int, int]], buyer: int) -> dict:
    return {
        "user_id": buyer,
        "delivery_address": delivery_address(),
        "items": line_items(variants),
    }
