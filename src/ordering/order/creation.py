"""Order creation — command and handler.

One transaction covers the whole checkout: insert the order and its lines,
reserve stock for every line, redeem the voucher, and delete the converted
cart lines. Any failure rolls every step back.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import uuid4

import structlog

from inventory.stock.ledger import InventoryLedger
from ordering.cart.repository import CartRepository
from ordering.cart.snapshot import CartSnapshotBuilder, RequestedLine
from ordering.order.events import OrderPlaced
from ordering.order.order import Order
from ordering.order.repository import DuplicateOrderCode, OrderRepository
from ordering.voucher.redemption import VoucherRepository
from shared.db import Database, utcnow
from shared.errors import ConflictError, PriceChanged, TransientError, ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PlaceOrder:
    user_id: int
    payment_method: str
    delivery_address: str
    items: list[RequestedLine] = field(default_factory=list)
    voucher_code: str | None = None
    # Set when the caller needs replays to collapse onto one order
    order_code: str | None = None
    # Amount the customer already paid; a re-priced snapshot must match it
    expected_amount: Decimal | None = None


@dataclass(frozen=True)
class PlacementResult:
    order: Order
    created: bool


def new_order_code() -> str:
    return uuid4().hex[-10:].upper()


def _validate(command: PlaceOrder) -> None:
    errors = {}
    if command.user_id is None:
        errors["user_id"] = ["User is required"]
    if not command.payment_method:
        errors["payment_method"] = ["Payment method is required"]
    if not command.delivery_address or not command.delivery_address.strip():
        errors["delivery_address"] = ["Delivery address is required"]
    if errors:
        raise ValidationError(errors)


class PlaceOrderHandler:
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
        self._inventory = inventory
        self._vouchers = vouchers
        self._carts = carts
        self._snapshots = snapshots
        self._notifier = notifier

    def handle(self, command: PlaceOrder) -> PlacementResult:
        _validate(command)

        if command.order_code is not None:
            existing = self._existing(command.order_code)
            if existing is not None:
                logger.info("Order already placed", order_code=existing.order_code)
                return PlacementResult(order=existing, created=False)

        order_code = command.order_code or new_order_code()
        try:
            order = self._place(command, order_code)
        except DuplicateOrderCode:
            if command.order_code is None:
                raise TransientError("Order code collision, please try again") from None
            # A concurrent replay committed first
            existing = self._existing(order_code)
            if existing is None:
                raise TransientError("Order could not be placed, please try again") from None
            logger.info("Order already placed", order_code=order_code)
            return PlacementResult(order=existing, created=False)
        except ConflictError:
            # The replay that won may have taken the last unit or voucher use
            existing = self._existing(order_code) if command.order_code is not None else None
            if existing is None:
                raise
            logger.info("Order already placed", order_code=order_code)
            return PlacementResult(order=existing, created=False)

        logger.info(
            "Order placed",
            order_code=order.order_code,
            user_id=order.user_id,
            total_price=str(order.total_price),
            amount_payable=str(order.amount_payable),
            voucher_id=order.voucher_id,
        )
        self._notifier.notify(
            OrderPlaced(
                order_code=order.order_code,
                user_id=order.user_id,
                total_price=order.total_price,
                amount_payable=order.amount_payable,
                payment_method=order.payment_method,
                item_count=len(order.items),
                placed_at=order.created_at,
            )
        )
        return PlacementResult(order=order, created=True)

    def _place(self, command: PlaceOrder, order_code: str) -> Order:
        snapshot = self._snapshots.build(command.items, command.voucher_code)
        if command.expected_amount is not None and snapshot.amount_payable != command.expected_amount:
            raise PriceChanged(command.expected_amount, snapshot.amount_payable)

        now = utcnow()
        with self._db.unit_of_work() as tx:
            order = self._orders.add(
                tx,
                order_code=order_code,
                user_id=command.user_id,
                snapshot=snapshot,
                payment_method=command.payment_method,
                delivery_address=command.delivery_address.strip(),
                now=now,
            )
            for line in snapshot.lines:
                self._inventory.reserve(tx, line.product_id, line.variant_id, line.quantity)
            if snapshot.voucher is not None:
                self._vouchers.redeem(tx, snapshot.voucher.id, now)
            self._carts.remove_converted(
                tx, command.user_id, [(line.product_id, line.variant_id, line.quantity) for line in snapshot.lines]
            )
        return order

    def _existing(self, order_code: str) -> Order | None:
        with self._db.unit_of_work() as tx:
            return self._orders.find_by_code(tx, order_code)
