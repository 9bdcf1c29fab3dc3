"""Application tests for placing orders."""

from decimal import Decimal

import pytest
from ordering.cart.items import SetCartItem
from ordering.order.order import OrderStatus
from shared.errors import (
    CatalogItemUnavailable,
    InsufficientStock,
    PriceChanged,
    ValidationError,
    VoucherExhausted,
    VoucherNotActive,
)


class TestPlaceOrder:
    def test_order_is_pending_with_frozen_lines(self, place, stock):
        stock(1, 10, 5)
        stock(2, 20, 5)

        result = place((1, 10, 2), (2, 20, 1))

        order = result.order
        assert result.created
        assert order.status == OrderStatus.PENDING
        assert len(order.order_code) == 10
        assert order.order_code == order.order_code.upper()
        assert [(i.product_id, i.unit_price, i.quantity) for i in order.items] == [
            (1, Decimal("100.00"), 2),
            (2, Decimal("53.99"), 1),
        ]
        assert order.items[0].product_name == "Linen Shirt"
        assert order.items[0].variant_name == "M"

    def test_total_equals_sum_of_lines(self, place, stock):
        stock(1, 10, 5)
        stock(2, 20, 5)
        order = place((1, 10, 2), (2, 20, 3)).order
        assert order.total_price == sum(i.unit_price * i.quantity for i in order.items)
        assert order.total_price == Decimal("361.97")
        assert order.amount_payable == order.total_price

    def test_stock_is_reserved(self, place, stock, stock_of):
        stock(1, 10, 5)
        place((1, 10, 2))
        record = stock_of(1, 10)
        assert (record.available_quantity, record.sold_quantity) == (3, 2)

    def test_duplicate_lines_are_merged(self, place, stock, stock_of):
        stock(1, 10, 5)
        order = place((1, 10, 1), (1, 10, 2)).order
        assert [(i.variant_id, i.quantity) for i in order.items] == [(10, 3)]
        assert stock_of(1, 10).sold_quantity == 3

    def test_voucher_is_redeemed(self, place, stock, voucher, voucher_quantity):
        stock(1, 10, 5)
        v = voucher(code="SAVE10", discount_amount="10.00", quantity=2)

        order = place((1, 10, 1), voucher_code="SAVE10").order

        assert order.voucher_id == v.id
        assert order.total_price == Decimal("100.00")
        assert order.voucher_discount == Decimal("10.00")
        assert order.amount_payable == Decimal("90.00")
        assert voucher_quantity(v.id) == 1

    def test_later_catalog_changes_do_not_touch_the_order(self, services, place, stock, catalog):
        stock(1, 10, 5)
        order = place((1, 10, 1)).order
        catalog.add(1, 10, price="500.00", product_name="Renamed")

        reloaded = services.workflow.get_order(order.order_code)
        assert reloaded.items[0].unit_price == Decimal("100.00")
        assert reloaded.items[0].product_name == "Linen Shirt"

    def test_converted_cart_lines_are_removed(self, services, place, stock):
        stock(1, 10, 5)
        stock(2, 20, 5)
        services.cart_items.set_item(SetCartItem(user_id=7, product_id=1, variant_id=10, quantity=1))
        services.cart_items.set_item(SetCartItem(user_id=7, product_id=2, variant_id=20, quantity=1))

        place((1, 10, 1), user_id=7)

        cart = services.cart_items.view(7)
        assert [(i.product_id, i.variant_id) for i in cart.items] == [(2, 20)]

    def test_cart_line_changed_during_checkout_is_kept(self, services, place, stock, monkeypatch):
        stock(1, 10, 5)
        services.cart_items.set_item(SetCartItem(user_id=7, product_id=1, variant_id=10, quantity=1))
        original_build = services.snapshots.build

        def _build_then_edit_cart(requested, voucher_code=None):
            snapshot = original_build(requested, voucher_code)
            services.cart_items.set_item(SetCartItem(user_id=7, product_id=1, variant_id=10, quantity=3))
            return snapshot

        monkeypatch.setattr(services.snapshots, "build", _build_then_edit_cart)

        order = place((1, 10, 1), user_id=7).order

        assert [(i.variant_id, i.quantity) for i in order.items] == [(10, 1)]
        cart = services.cart_items.view(7)
        assert [(i.variant_id, i.quantity) for i in cart.items] == [(10, 3)]


class TestPlaceOrderFailures:
    def test_insufficient_stock_creates_nothing(self, services, place, stock, stock_of):
        stock(1, 10, 1)
        with pytest.raises(InsufficientStock):
            place((1, 10, 2))
        assert stock_of(1, 10).available_quantity == 1
        assert services.workflow.list_orders()["total_items"] == 0

    def test_unknown_catalog_item(self, place):
        with pytest.raises(CatalogItemUnavailable):
            place((9, 90, 1))

    def test_missing_inventory_record(self, place):
        with pytest.raises(CatalogItemUnavailable):
            place((1, 11, 1))

    def test_exhausted_voucher_rolls_back_everything(self, services, place, stock, stock_of, voucher):
        stock(1, 10, 5)
        voucher(code="GONE", quantity=0)

        with pytest.raises(VoucherExhausted):
            place((1, 10, 2), voucher_code="GONE")

        record = stock_of(1, 10)
        assert (record.available_quantity, record.sold_quantity) == (5, 0)
        assert services.workflow.list_orders()["total_items"] == 0

    def test_voucher_exhausted_between_snapshot_and_commit(
        self, services, place, stock, stock_of, voucher, monkeypatch
    ):
        """The conditional redeem is authoritative even if the snapshot saw a use left."""
        stock(1, 10, 5)
        v = voucher(code="LAST", quantity=1)
        original_build = services.snapshots.build

        def _build_then_drain(requested, voucher_code=None):
            snapshot = original_build(requested, voucher_code)
            with services.database.unit_of_work() as tx:
                services.vouchers.redeem(tx, v.id, snapshot.voucher.starts_at)
            return snapshot

        monkeypatch.setattr(services.snapshots, "build", _build_then_drain)

        with pytest.raises((VoucherExhausted, VoucherNotActive)):
            place((1, 10, 1), voucher_code="LAST")
        assert stock_of(1, 10).sold_quantity == 0

    def test_inactive_voucher(self, place, stock, voucher):
        from datetime import timedelta

        from shared.db import utcnow

        stock(1, 10, 5)
        now = utcnow()
        voucher(code="LATER", starts_at=now + timedelta(days=1), ends_at=now + timedelta(days=5))
        with pytest.raises(VoucherNotActive):
            place((1, 10, 1), voucher_code="LATER")

    def test_missing_delivery_address(self, services):
        from ordering.cart.snapshot import RequestedLine
        from ordering.order.creation import PlaceOrder

        with pytest.raises(ValidationError) as exc_info:
            services.workflow.place_order(
                PlaceOrder(
                    user_id=7,
                    payment_method="COD",
                    delivery_address="   ",
                    items=[RequestedLine(1, 10, 1)],
                )
            )
        assert "delivery_address" in exc_info.value.messages

    def test_expected_amount_mismatch(self, services, place, stock, stock_of):
        stock(1, 10, 5)
        with pytest.raises(PriceChanged):
            place((1, 10, 1), expected_amount=Decimal("90.00"))
        assert stock_of(1, 10).sold_quantity == 0


class TestIdempotentPlacement:
    def test_same_order_code_returns_existing_order(self, services, place, stock, stock_of):
        stock(1, 10, 5)

        first = place((1, 10, 2), order_code="TXN0000001")
        second = place((1, 10, 2), order_code="TXN0000001")

        assert first.created
        assert not second.created
        assert second.order.id == first.order.id
        assert stock_of(1, 10).sold_quantity == 2
        assert services.workflow.list_orders()["total_items"] == 1

    def test_replay_succeeds_even_when_stock_ran_out(self, place, stock):
        stock(1, 10, 2)
        place((1, 10, 2), order_code="TXN0000002")
        replay = place((1, 10, 2), order_code="TXN0000002")
        assert not replay.created
