from datetime import UTC, datetime, timedelta
from decimal import Decimal

from ordering.voucher.voucher import Voucher

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


def _make_voucher(quantity=3, starts_at=None, ends_at=None):
    return Voucher(
        id=1,
        code="SUMMER",
        discount_amount=Decimal("25.00"),
        quantity=quantity,
        starts_at=starts_at or NOW - timedelta(days=1),
        ends_at=ends_at or NOW + timedelta(days=1),
    )


class TestVoucherActivity:
    def test_active_inside_window_with_uses_left(self):
        assert _make_voucher().is_active(NOW)

    def test_window_bounds_are_inclusive(self):
        voucher = _make_voucher(starts_at=NOW, ends_at=NOW)
        assert voucher.is_active(NOW)

    def test_not_active_before_start(self):
        assert not _make_voucher(starts_at=NOW + timedelta(seconds=1)).is_active(NOW)

    def test_not_active_after_end(self):
        assert not _make_voucher(ends_at=NOW - timedelta(seconds=1)).is_active(NOW)

    def test_not_active_when_exhausted(self):
        voucher = _make_voucher(quantity=0)
        assert voucher.in_window(NOW)
        assert not voucher.is_active(NOW)


class TestVoucherDiscount:
    def test_discount_is_full_amount_below_total(self):
        assert _make_voucher().discount_for(Decimal("100.00")) == Decimal("25.00")

    def test_discount_never_exceeds_total(self):
        assert _make_voucher().discount_for(Decimal("10.00")) == Decimal("10.00")
