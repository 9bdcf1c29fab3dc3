"""Order and its frozen line items — the financial record of a checkout.

State Machine:
    PENDING → DELIVERING → SUCCEEDED
    PENDING → CANCELLED                 (stock and voucher released)
    PENDING, DELIVERING → DELETED       (administrative soft delete)

``total_price`` equals the sum of the line items at creation and is never
recomputed. Orders are never physically deleted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from shared.errors import InvalidTransition


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    DELIVERING = "Delivering"
    SUCCEEDED = "Succeeded"
    CANCELLED = "Cancelled"
    DELETED = "Deleted"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.DELIVERING, OrderStatus.CANCELLED, OrderStatus.DELETED},
    OrderStatus.DELIVERING: {OrderStatus.SUCCEEDED, OrderStatus.DELETED},
    OrderStatus.SUCCEEDED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.DELETED: set(),  # Terminal
}

# Administrative "advance" moves one step along the delivery path
_NEXT_STATUS = {
    OrderStatus.PENDING: OrderStatus.DELIVERING,
    OrderStatus.DELIVERING: OrderStatus.SUCCEEDED,
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS[current]


def next_status(current: OrderStatus) -> OrderStatus | None:
    return _NEXT_STATUS.get(current)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class OrderLineItem:
    """One purchased (product, variant) pair, frozen at order time.

    Name, variant name and image are copied so later catalogue edits or
    deletions never change what the customer bought.
    """

    id: int
    product_id: int
    variant_id: int
    quantity: int
    unit_price: Decimal
    product_name: str
    variant_name: str
    product_image: str = ""
    feedback_submitted: bool = False

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Order:
    id: int
    order_code: str
    user_id: int
    status: OrderStatus
    total_price: Decimal
    voucher_discount: Decimal
    amount_payable: Decimal
    payment_method: str
    delivery_address: str
    created_at: datetime
    updated_at: datetime
    voucher_id: int | None = None
    items: list[OrderLineItem] = field(default_factory=list)

    def assert_can_transition(self, target: OrderStatus) -> None:
        """Reject an illegal move before anything is written."""
        if not can_transition(self.status, target):
            raise InvalidTransition(self.order_code, self.status.value, target.value)

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self.status]
