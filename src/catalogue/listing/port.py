"""Catalogue listing port (abstract interface).

The fulfillment core only ever reads the catalogue: current price,
discount, display name and image for a (product, variant) pair. Product
CRUD lives elsewhere.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CatalogEntry:
    """What the catalogue says about one purchasable variant right now."""

    product_id: int
    variant_id: int
    product_name: str
    variant_name: str
    price: Decimal
    discount: Decimal = Decimal("0")  # percent, 0-100
    image: str = ""

    @property
    def unit_price(self) -> Decimal:
        """Price after the percentage discount, rounded half-up to cents."""
        discounted = self.price * (Decimal("1") - self.discount / Decimal("100"))
        return discounted.quantize(CENT, rounding=ROUND_HALF_UP)


class CatalogPort(ABC):
    """Abstract catalogue lookup."""

    @abstractmethod
    def lookup(self, product_id: int, variant_id: int) -> CatalogEntry | None:
        """Return the entry, or None if the product or variant is gone."""
        ...
