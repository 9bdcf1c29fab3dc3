"""Inventory ledger — atomic reserve/release against ``inventory_records``."""

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from inventory.stock.record import InventoryRecord
from shared.db import Transaction
from shared.errors import ConflictError, InsufficientStock, NotFoundError, ValidationError
from shared.schema import inventory_records

logger = structlog.get_logger(__name__)

_table = inventory_records


def _require_positive(quantity) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError({"quantity": ["Quantity must be a positive integer"]})


def _pair(product_id: int, variant_id: int):
    return (_table.c.product_id == product_id) & (_table.c.variant_id == variant_id)


class InventoryLedger:
    """Repository for InventoryRecord rows.

    Every mutation is one UPDATE whose WHERE clause carries the
    precondition, checked by affected-row count. There is no
    read-then-write in application code.
    """

    # -------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------
    def reserve(self, tx: Transaction, product_id: int, variant_id: int, quantity: int) -> None:
        """Move ``quantity`` from available to sold, or fail with no effect."""
        _require_positive(quantity)
        result = tx.execute(
            update(_table)
            .where(_pair(product_id, variant_id), _table.c.available_quantity >= quantity)
            .values(
                available_quantity=_table.c.available_quantity - quantity,
                sold_quantity=_table.c.sold_quantity + quantity,
            )
        )
        if result.rowcount == 1:
            return

        # Diagnose only; the failed UPDATE changed nothing.
        record = self.get(tx, product_id, variant_id)
        logger.info(
            "Stock reservation rejected",
            product_id=product_id,
            variant_id=variant_id,
            requested=quantity,
            available=record.available_quantity,
        )
        raise InsufficientStock(product_id, variant_id, quantity, record.available_quantity)

    def release(self, tx: Transaction, product_id: int, variant_id: int, quantity: int) -> None:
        """Return ``quantity`` from sold to available."""
        _require_positive(quantity)
        result = tx.execute(
            update(_table)
            .where(_pair(product_id, variant_id), _table.c.sold_quantity >= quantity)
            .values(
                available_quantity=_table.c.available_quantity + quantity,
                sold_quantity=_table.c.sold_quantity - quantity,
            )
        )
        if result.rowcount != 1:
            record = self.get(tx, product_id, variant_id)
            raise ConflictError(
                f"Cannot release {quantity} units of product {product_id} variant {variant_id}: "
                f"only {record.sold_quantity} sold",
                product_id=product_id,
                variant_id=variant_id,
            )

    # -------------------------------------------------------------------
    # Stock administration
    # -------------------------------------------------------------------
    def register(self, tx: Transaction, product_id: int, variant_id: int, quantity: int) -> InventoryRecord:
        """Create the record for a new (product, variant) pair."""
        if not isinstance(quantity, int) or quantity < 0:
            raise ValidationError({"quantity": ["Quantity must be a non-negative integer"]})
        try:
            tx.execute(
                insert(_table).values(
                    product_id=product_id,
                    variant_id=variant_id,
                    available_quantity=quantity,
                    sold_quantity=0,
                )
            )
        except IntegrityError as exc:
            raise ConflictError(
                f"Product {product_id} variant {variant_id} already has an inventory record",
                product_id=product_id,
                variant_id=variant_id,
            ) from exc
        return self.get(tx, product_id, variant_id)

    def restock(self, tx: Transaction, product_id: int, variant_id: int, quantity: int) -> InventoryRecord:
        """Add received goods to available stock."""
        _require_positive(quantity)
        result = tx.execute(
            update(_table)
            .where(_pair(product_id, variant_id))
            .values(available_quantity=_table.c.available_quantity + quantity)
        )
        if result.rowcount != 1:
            raise NotFoundError("inventory_record", f"{product_id}/{variant_id}")
        return self.get(tx, product_id, variant_id)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def find(self, tx: Transaction, product_id: int, variant_id: int) -> InventoryRecord | None:
        row = tx.execute(select(_table).where(_pair(product_id, variant_id))).first()
        return InventoryRecord.from_row(row) if row is not None else None

    def get(self, tx: Transaction, product_id: int, variant_id: int) -> InventoryRecord:
        record = self.find(tx, product_id, variant_id)
        if record is None:
            raise NotFoundError("inventory_record", f"{product_id}/{variant_id}")
        return record

    def list_for_product(self, tx: Transaction, product_id: int) -> list[InventoryRecord]:
        rows = tx.execute(select(_table).where(_table.c.product_id == product_id).order_by(_table.c.variant_id))
        return [InventoryRecord.from_row(row) for row in rows]
