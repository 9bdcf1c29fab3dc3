"""Order events, emitted after the order's transaction commits.

Consumed by the notifications context. Events describe facts that are
already durable; nothing that handles them can undo the order.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class OrderPlaced:
    order_code: str
    user_id: int
    total_price: Decimal
    amount_payable: Decimal
    payment_method: str
    item_count: int
    placed_at: datetime


@dataclass(frozen=True)
class OrderCancelled:
    order_code: str
    user_id: int
    reason: str
    cancelled_by: str
    cancelled_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order_code: str
    user_id: int
    previous_status: str
    new_status: str
    changed_at: datetime
