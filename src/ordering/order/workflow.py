"""Order workflow — the single entry point for order commands and reads.

Every collaborator is injected. The workflow owns transaction boundaries;
repositories only ever run inside the transaction they are handed.
"""

import math

from inventory.stock.ledger import InventoryLedger
from ordering.cart.repository import CartRepository
from ordering.cart.snapshot import CartSnapshotBuilder
from ordering.order.cancellation import CancelOrder, CancelOrderHandler
from ordering.order.creation import PlaceOrder, PlaceOrderHandler, PlacementResult
from ordering.order.order import Order, OrderStatus
from ordering.order.progression import AdvanceOrderStatus, DeleteOrder, OrderProgressionHandler
from ordering.order.repository import OrderRepository
from ordering.voucher.redemption import VoucherRepository
from shared.db import Database
from shared.errors import InvalidTransition, ValidationError


class OrderWorkflow:
    def __init__(
        self,
        database: Database,
        orders: OrderRepository,
        inventory: InventoryLedger,
        vouchers: VoucherRepository,
        carts: CartRepository,
        snapshots: CartSnapshotBuilder,
        notifier,
    ) -> None:
        self._db = database
        self._orders = orders
        self.snapshots = snapshots
        self._placement = PlaceOrderHandler(database, orders, inventory, vouchers, carts, snapshots, notifier)
        self._cancellation = CancelOrderHandler(database, orders, inventory, vouchers, notifier)
        self._progression = OrderProgressionHandler(database, orders, notifier)
        self._handlers = {
            PlaceOrder: self.place_order,
            CancelOrder: self.cancel_order,
            AdvanceOrderStatus: self.advance_status,
            DeleteOrder: self.delete_order,
        }

    # -------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------
    def process(self, command):
        """Dispatch ``command`` to its handler."""
        handler = self._handlers.get(type(command))
        if handler is None:
            raise ValueError(f"No handler registered for {type(command).__name__}")
        return handler(command)

    def place_order(self, command: PlaceOrder) -> PlacementResult:
        return self._placement.handle(command)

    def cancel_order(self, command: CancelOrder) -> Order:
        return self._cancellation.handle(command)

    def advance_status(self, command: AdvanceOrderStatus) -> Order:
        return self._progression.advance(command)

    def delete_order(self, command: DeleteOrder) -> Order:
        return self._progression.delete(command)

    def mark_feedback_submitted(self, order_code: str, line_item_id: int) -> Order:
        """Record that the buyer reviewed a delivered line item."""
        with self._db.unit_of_work() as tx:
            order = self._orders.get(tx, order_code)
            if order.status != OrderStatus.SUCCEEDED:
                raise InvalidTransition(order.order_code, order.status.value, "feedback")
            self._orders.mark_feedback_submitted(tx, order, line_item_id)
            return self._orders.get(tx, order_code)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_order(self, order_code: str) -> Order:
        with self._db.unit_of_work() as tx:
            return self._orders.get(tx, order_code)

    def get_order_by_id(self, order_id: int) -> Order:
        with self._db.unit_of_work() as tx:
            return self._orders.get_by_id(tx, order_id)

    def list_orders(
        self,
        status: OrderStatus | None = None,
        user_id: int | None = None,
        limit: int = 10,
        page: int = 1,
    ) -> dict:
        errors = {}
        if limit < 1:
            errors["limit"] = ["Limit must be at least 1"]
        if page < 1:
            errors["page"] = ["Page must be at least 1"]
        if errors:
            raise ValidationError(errors)

        with self._db.unit_of_work() as tx:
            total, orders = self._orders.list(tx, status=status, user_id=user_id, limit=limit, page=page)
        return {
            "total_items": total,
            "total_pages": math.ceil(total / limit),
            "current_page": page,
            "orders": orders,
        }
