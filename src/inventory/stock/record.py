"""InventoryRecord — stock counters for one (product, variant) pair.

Stock Level Model:
    available: what can still be sold
    sold:      cumulative quantity committed to orders

Records are never assigned directly. ``available`` only moves through the
ledger's reserve/release/restock statements, each a single conditional
UPDATE, so concurrent checkouts cannot oversell.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class InventoryRecord:
    id: int
    product_id: int
    variant_id: int
    available_quantity: int
    sold_quantity: int

    @classmethod
    def from_row(cls, row) -> "InventoryRecord":
        return cls(
            id=row.id,
            product_id=row.product_id,
            variant_id=row.variant_id,
            available_quantity=row.available_quantity,
            sold_quantity=row.sold_quantity,
        )
