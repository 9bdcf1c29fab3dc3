"""Cart snapshot builder — freezes catalogue prices at checkout time.

Pricing formula:
    unit_price       = round_half_up(price × (1 − discount% / 100), 2)
    total_price      = Σ unit_price × quantity
    voucher_discount = min(voucher.discount_amount, total_price)
    amount_payable   = total_price − voucher_discount

The voucher never alters line prices, so ``total_price`` always equals the
sum of the frozen lines.
"""

from dataclasses import dataclass, field
from decimal import Decimal

import structlog

from catalogue.listing.port import CatalogPort
from inventory.stock.ledger import InventoryLedger
from ordering.cart.repository import CartRepository
from ordering.voucher.redemption import VoucherRepository
from ordering.voucher.voucher import Voucher
from shared.db import Database, utcnow
from shared.errors import (
    CatalogItemUnavailable,
    InsufficientStock,
    ValidationError,
    VoucherExhausted,
    VoucherNotActive,
)

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class RequestedLine:
    product_id: int
    variant_id: int
    quantity: int


@dataclass(frozen=True)
class PricedLine:
    """One line with price and display data frozen from the catalogue."""

    product_id: int
    variant_id: int
    quantity: int
    unit_price: Decimal
    product_name: str
    variant_name: str
    product_image: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartSnapshot:
    lines: list[PricedLine]
    voucher: Voucher | None = None
    total_price: Decimal = field(init=False)
    voucher_discount: Decimal = field(init=False)
    amount_payable: Decimal = field(init=False)

    def __post_init__(self):
        total = sum((line.line_total for line in self.lines), ZERO)
        discount = self.voucher.discount_for(total) if self.voucher else ZERO
        object.__setattr__(self, "total_price", total)
        object.__setattr__(self, "voucher_discount", discount)
        object.__setattr__(self, "amount_payable", total - discount)


def merge_lines(requested: list[RequestedLine]) -> list[RequestedLine]:
    """Validate quantities and fold repeated (product, variant) pairs together."""
    if not requested:
        raise ValidationError({"items": ["At least one item is required"]})

    merged: dict[tuple[int, int], int] = {}
    for line in requested:
        if not isinstance(line.quantity, int) or isinstance(line.quantity, bool) or line.quantity <= 0:
            raise ValidationError({"items": [f"Quantity for product {line.product_id} must be a positive integer"]})
        key = (line.product_id, line.variant_id)
        merged[key] = merged.get(key, 0) + line.quantity
    return [RequestedLine(product_id=p, variant_id=v, quantity=q) for (p, v), q in merged.items()]


class CartSnapshotBuilder:
    """Prices requested lines and checks them against current stock.

    A pure read step: nothing here writes. The stock check only gives an
    early, specific answer; the ledger's conditional update inside the
    order transaction is what actually guards availability.
    """

    def __init__(
        self,
        database: Database,
        catalog: CatalogPort,
        inventory: InventoryLedger,
        vouchers: VoucherRepository,
        carts: CartRepository,
    ) -> None:
        self._db = database
        self._catalog = catalog
        self._inventory = inventory
        self._vouchers = vouchers
        self._carts = carts

    def from_cart(self, user_id: int) -> list[RequestedLine]:
        """Requested lines for everything in the user's stored cart.

        Cached price estimates are dropped; ``build`` re-prices every line.
        """
        with self._db.unit_of_work() as tx:
            cart = self._carts.get(tx, user_id)
        if cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})
        return [
            RequestedLine(product_id=item.product_id, variant_id=item.variant_id, quantity=item.quantity)
            for item in cart.items
        ]

    def build(self, requested: list[RequestedLine], voucher_code: str | None = None) -> CartSnapshot:
        lines = merge_lines(requested)

        priced = []
        for line in lines:
            entry = self._catalog.lookup(line.product_id, line.variant_id)
            if entry is None:
                raise CatalogItemUnavailable(line.product_id, line.variant_id)
            priced.append(
                PricedLine(
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    quantity=line.quantity,
                    unit_price=entry.unit_price,
                    product_name=entry.product_name,
                    variant_name=entry.variant_name,
                    product_image=entry.image,
                )
            )

        voucher = None
        with self._db.unit_of_work() as tx:
            for line in priced:
                record = self._inventory.find(tx, line.product_id, line.variant_id)
                if record is None:
                    raise CatalogItemUnavailable(line.product_id, line.variant_id)
                if record.available_quantity < line.quantity:
                    raise InsufficientStock(line.product_id, line.variant_id, line.quantity, record.available_quantity)

            if voucher_code:
                voucher = self._vouchers.find_by_code(tx, voucher_code)
                now = utcnow()
                if not voucher.in_window(now):
                    raise VoucherNotActive(voucher.code)
                if voucher.quantity <= 0:
                    raise VoucherExhausted(voucher.code)

        snapshot = CartSnapshot(lines=priced, voucher=voucher)
        logger.debug(
            "Cart snapshot built",
            line_count=len(priced),
            total_price=str(snapshot.total_price),
            voucher_code=voucher_code,
        )
        return snapshot
