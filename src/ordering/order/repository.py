"""Repository for orders and their line items."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError

from ordering.cart.snapshot import CartSnapshot
from ordering.order.order import Order, OrderLineItem, OrderStatus
from shared.db import Transaction, as_utc
from shared.errors import InvalidTransition, NotFoundError
from shared.schema import order_line_items, orders


class DuplicateOrderCode(Exception):
    """An order with this code already exists (a replayed creation)."""

    def __init__(self, order_code: str) -> None:
        self.order_code = order_code
        super().__init__(order_code)


def _to_line_item(row) -> OrderLineItem:
    return OrderLineItem(
        id=row.id,
        product_id=row.product_id,
        variant_id=row.variant_id,
        quantity=row.quantity,
        unit_price=Decimal(row.unit_price),
        product_name=row.product_name,
        variant_name=row.variant_name,
        product_image=row.product_image or "",
        feedback_submitted=bool(row.feedback_submitted),
    )


def _to_order(row, items=None) -> Order:
    return Order(
        id=row.id,
        order_code=row.order_code,
        user_id=row.user_id,
        voucher_id=row.voucher_id,
        status=OrderStatus(row.status),
        total_price=Decimal(row.total_price),
        voucher_discount=Decimal(row.voucher_discount),
        amount_payable=Decimal(row.amount_payable),
        payment_method=row.payment_method,
        delivery_address=row.delivery_address,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        items=items or [],
    )


class OrderRepository:
    def add(
        self,
        tx: Transaction,
        order_code: str,
        user_id: int,
        snapshot: CartSnapshot,
        payment_method: str,
        delivery_address: str,
        now: datetime,
    ) -> Order:
        """Insert the order header and its frozen line items.

        Raises DuplicateOrderCode when ``order_code`` is taken.
        """
        try:
            order_id = tx.execute(
                insert(orders).values(
                    order_code=order_code,
                    user_id=user_id,
                    voucher_id=snapshot.voucher.id if snapshot.voucher else None,
                    total_price=snapshot.total_price,
                    voucher_discount=snapshot.voucher_discount,
                    amount_payable=snapshot.amount_payable,
                    payment_method=payment_method,
                    delivery_address=delivery_address,
                    status=OrderStatus.PENDING.value,
                    created_at=now,
                    updated_at=now,
                )
            ).inserted_primary_key[0]
        except IntegrityError as exc:
            raise DuplicateOrderCode(order_code) from exc

        tx.execute(
            insert(order_line_items),
            [
                {
                    "order_id": order_id,
                    "product_id": line.product_id,
                    "variant_id": line.variant_id,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                    "product_name": line.product_name,
                    "variant_name": line.variant_name,
                    "product_image": line.product_image,
                    "feedback_submitted": False,
                }
                for line in snapshot.lines
            ],
        )
        return self.get_by_id(tx, order_id)

    def transition(self, tx: Transaction, order: Order, target: OrderStatus, now: datetime) -> Order:
        """Move ``order`` to ``target`` only if nobody moved it first."""
        order.assert_can_transition(target)
        result = tx.execute(
            update(orders)
            .where(orders.c.id == order.id, orders.c.status == order.status.value)
            .values(status=target.value, updated_at=now)
        )
        if result.rowcount != 1:
            current = self.get_by_id(tx, order.id)
            raise InvalidTransition(order.order_code, current.status.value, target.value)
        return self.get_by_id(tx, order.id)

    def mark_feedback_submitted(self, tx: Transaction, order: Order, line_item_id: int) -> None:
        result = tx.execute(
            update(order_line_items)
            .where(order_line_items.c.id == line_item_id, order_line_items.c.order_id == order.id)
            .values(feedback_submitted=True)
        )
        if result.rowcount != 1:
            raise NotFoundError("order_line_item", line_item_id)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def _items(self, tx: Transaction, order_id: int) -> list[OrderLineItem]:
        rows = tx.execute(
            select(order_line_items).where(order_line_items.c.order_id == order_id).order_by(order_line_items.c.id)
        )
        return [_to_line_item(row) for row in rows]

    def find_by_code(self, tx: Transaction, order_code: str) -> Order | None:
        row = tx.execute(select(orders).where(orders.c.order_code == order_code)).first()
        if row is None:
            return None
        return _to_order(row, self._items(tx, row.id))

    def get(self, tx: Transaction, order_code: str) -> Order:
        order = self.find_by_code(tx, order_code)
        if order is None:
            raise NotFoundError("order", order_code)
        return order

    def get_by_id(self, tx: Transaction, order_id: int) -> Order:
        row = tx.execute(select(orders).where(orders.c.id == order_id)).first()
        if row is None:
            raise NotFoundError("order", order_id)
        return _to_order(row, self._items(tx, row.id))

    def list(
        self,
        tx: Transaction,
        status: OrderStatus | None = None,
        user_id: int | None = None,
        limit: int = 10,
        page: int = 1,
    ) -> tuple[int, list[Order]]:
        """Page through order headers, newest first. Line items are not loaded."""
        criteria = []
        if status is not None:
            criteria.append(orders.c.status == status.value)
        if user_id is not None:
            criteria.append(orders.c.user_id == user_id)
            # Soft-deleted orders are hidden from buyers
            criteria.append(orders.c.status != OrderStatus.DELETED.value)

        total = tx.execute(select(func.count()).select_from(orders).where(*criteria)).scalar_one()
        rows = tx.execute(
            select(orders).where(*criteria).order_by(orders.c.id.desc()).limit(limit).offset((page - 1) * limit)
        )
        return total, [_to_order(row) for row in rows]
