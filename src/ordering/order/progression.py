"""Administrative status changes: delivery progression and soft delete.

Neither touches inventory or vouchers. A deleted order keeps its stock
reservation and voucher redemption.
"""

from dataclasses import dataclass

import structlog

from ordering.order.events import OrderStatusChanged
from ordering.order.order import Order, OrderStatus, next_status
from ordering.order.repository import OrderRepository
from shared.db import Database, utcnow
from shared.errors import InvalidTransition

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AdvanceOrderStatus:
    order_code: str


@dataclass(frozen=True)
class DeleteOrder:
    order_code: str


class OrderProgressionHandler:
    def __init__(self, database: Database, orders: OrderRepository, notifier) -> None:
        self._db = database
        self._orders = orders
        self._notifier = notifier

    def advance(self, command: AdvanceOrderStatus) -> Order:
        now = utcnow()
        with self._db.unit_of_work() as tx:
            order = self._orders.get(tx, command.order_code)
            target = next_status(order.status)
            if target is None:
                raise InvalidTransition(order.order_code, order.status.value, "next status")
            updated = self._orders.transition(tx, order, target, now)

        logger.info(
            "Order status advanced",
            order_code=updated.order_code,
            previous_status=order.status.value,
            new_status=updated.status.value,
        )
        self._notifier.notify(
            OrderStatusChanged(
                order_code=updated.order_code,
                user_id=updated.user_id,
                previous_status=order.status.value,
                new_status=updated.status.value,
                changed_at=now,
            )
        )
        return updated

    def delete(self, command: DeleteOrder) -> Order:
        with self._db.unit_of_work() as tx:
            order = self._orders.get(tx, command.order_code)
            deleted = self._orders.transition(tx, order, OrderStatus.DELETED, utcnow())

        logger.info("Order deleted", order_code=deleted.order_code, previous_status=order.status.value)
        return deleted
