"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
"""

from dataclasses import dataclass, field


@dataclass
class OrderState:
    """Tracks state for a single simulated order lifecycle."""

    user_id: int = 0
    order_code: str | None = None
    current_status: str = "Pending"


@dataclass
class CartState:
    """Tracks a shopping cart being filled before checkout."""

    user_id: int = 0
    lines: list[tuple[int, int]] = field(default_factory=list)
