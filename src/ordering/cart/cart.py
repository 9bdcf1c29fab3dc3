"""Shopping cart — the shopper's mutable staging area.

A cart is the source of intent only. Its cached ``price_estimate`` is for
display; checkout re-prices every line from the catalogue and re-checks
stock. Lines that become part of an order are deleted in the order's
transaction.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class CartLineItem:
    id: int
    product_id: int
    variant_id: int
    quantity: int
    # unit price x quantity when the line was last touched
    price_estimate: Decimal
    updated_at: datetime


@dataclass(frozen=True)
class Cart:
    id: int | None
    user_id: int
    items: list[CartLineItem] = field(default_factory=list)

    @property
    def estimated_total(self) -> Decimal:
        return sum((item.price_estimate for item in self.items), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.items
