"""Voucher redemption — atomic redeem/release against ``vouchers``."""

from datetime import datetime
from decimal import Decimal

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from ordering.voucher.voucher import Voucher
from shared.db import Transaction, as_utc
from shared.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    VoucherExhausted,
    VoucherNotActive,
)
from shared.schema import vouchers

logger = structlog.get_logger(__name__)

_table = vouchers


class VoucherRepository:
    """Repository for Voucher rows.

    ``redeem`` is a single conditional decrement: the validity window and
    the remaining quantity are checked in the same statement that writes.
    """

    def redeem(self, tx: Transaction, voucher_id: int, now: datetime) -> None:
        now = as_utc(now)
        result = tx.execute(
            update(_table)
            .where(
                _table.c.id == voucher_id,
                _table.c.quantity > 0,
                _table.c.starts_at <= now,
                _table.c.ends_at >= now,
            )
            .values(quantity=_table.c.quantity - 1)
        )
        if result.rowcount == 1:
            return

        voucher = self.get(tx, voucher_id)
        logger.info("Voucher redemption rejected", voucher_code=voucher.code, quantity=voucher.quantity)
        if not voucher.in_window(now):
            raise VoucherNotActive(voucher.code)
        raise VoucherExhausted(voucher.code)

    def release(self, tx: Transaction, voucher_id: int) -> None:
        result = tx.execute(
            update(_table).where(_table.c.id == voucher_id).values(quantity=_table.c.quantity + 1)
        )
        if result.rowcount != 1:
            raise NotFoundError("voucher", voucher_id)

    def create(
        self,
        tx: Transaction,
        code: str,
        discount_amount: Decimal,
        quantity: int,
        starts_at: datetime,
        ends_at: datetime,
    ) -> Voucher:
        errors = {}
        if not code:
            errors["code"] = ["Voucher code is required"]
        if discount_amount is None or Decimal(discount_amount) <= 0:
            errors["discount_amount"] = ["Discount amount must be positive"]
        if quantity is None or quantity < 0:
            errors["quantity"] = ["Quantity must be a non-negative integer"]
        if starts_at and ends_at and ends_at < starts_at:
            errors["ends_at"] = ["Voucher must end after it starts"]
        if errors:
            raise ValidationError(errors)

        try:
            tx.execute(
                insert(_table).values(
                    code=code,
                    discount_amount=Decimal(discount_amount),
                    quantity=quantity,
                    starts_at=as_utc(starts_at),
                    ends_at=as_utc(ends_at),
                )
            )
        except IntegrityError as exc:
            raise ConflictError(f"A voucher with code {code} already exists", voucher_code=code) from exc
        return self.find_by_code(tx, code)

    def get(self, tx: Transaction, voucher_id: int) -> Voucher:
        row = tx.execute(select(_table).where(_table.c.id == voucher_id)).first()
        if row is None:
            raise NotFoundError("voucher", voucher_id)
        return Voucher.from_row(row)

    def find_by_code(self, tx: Transaction, code: str) -> Voucher:
        row = tx.execute(select(_table).where(_table.c.code == code)).first()
        if row is None:
            raise NotFoundError("voucher", code)
        return Voucher.from_row(row)

    def list_active(self, tx: Transaction, now: datetime) -> list[Voucher]:
        now = as_utc(now)
        rows = tx.execute(
            select(_table)
            .where(_table.c.starts_at <= now, _table.c.ends_at >= now, _table.c.quantity > 0)
            .order_by(_table.c.ends_at)
        )
        return [Voucher.from_row(row) for row in rows]
