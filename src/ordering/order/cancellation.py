"""Order cancellation — command and handler.

Only PENDING orders can be cancelled. The status write is conditional on
the status read, so of two racing cancellations exactly one releases the
stock and the voucher.
"""

from dataclasses import dataclass

import structlog

from inventory.stock.ledger import InventoryLedger
from ordering.order.events import OrderCancelled
from ordering.order.order import Order, OrderStatus
from ordering.order.repository import OrderRepository
from ordering.voucher.redemption import VoucherRepository
from shared.db import Database, utcnow
from shared.errors import NotFoundError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CancelOrder:
    order_code: str
    reason: str = ""
    cancelled_by: str = "customer"
    # When set, the order must belong to this user
    user_id: int | None = None


class CancelOrderHandler:
    def __init__(
        self,
        database: Database,
        orders: OrderRepository,
        inventory: InventoryLedger,
        vouchers: VoucherRepository,
        notifier,
    ) -> None:
        self._db = database
        self._orders = orders
        self._inventory = inventory
        self._vouchers = vouchers
        self._notifier = notifier

    def handle(self, command: CancelOrder) -> Order:
        now = utcnow()
        with self._db.unit_of_work() as tx:
            order = self._orders.get(tx, command.order_code)
            if command.user_id is not None and order.user_id != command.user_id:
                raise NotFoundError("order", command.order_code)

            cancelled = self._orders.transition(tx, order, OrderStatus.CANCELLED, now)
            for item in order.items:
                self._inventory.release(tx, item.product_id, item.variant_id, item.quantity)
            if order.voucher_id is not None:
                self._vouchers.release(tx, order.voucher_id)

        logger.info(
            "Order cancelled",
            order_code=cancelled.order_code,
            cancelled_by=command.cancelled_by,
            released_lines=len(order.items),
            voucher_released=order.voucher_id is not None,
        )
        self._notifier.notify(
            OrderCancelled(
                order_code=cancelled.order_code,
                user_id=cancelled.user_id,
                reason=command.reason,
                cancelled_by=command.cancelled_by,
                cancelled_at=now,
            )
        )
        return cancelled
