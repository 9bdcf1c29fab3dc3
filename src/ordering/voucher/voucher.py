"""Voucher — a fixed-amount discount with a usage counter and validity window."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from shared.db import as_utc


@dataclass(frozen=True)
class Voucher:
    id: int
    code: str
    discount_amount: Decimal
    quantity: int
    starts_at: datetime
    ends_at: datetime

    def in_window(self, now: datetime) -> bool:
        return self.starts_at <= now <= self.ends_at

    def is_active(self, now: datetime) -> bool:
        """Active iff ``now`` is within the window and uses remain."""
        return self.in_window(now) and self.quantity > 0

    def discount_for(self, total: Decimal) -> Decimal:
        """The discount never exceeds the order total."""
        return min(self.discount_amount, total)

    @classmethod
    def from_row(cls, row) -> "Voucher":
        return cls(
            id=row.id,
            code=row.code,
            discount_amount=Decimal(row.discount_amount),
            quantity=row.quantity,
            starts_at=as_utc(row.starts_at),
            ends_at=as_utc(row.ends_at),
        )
