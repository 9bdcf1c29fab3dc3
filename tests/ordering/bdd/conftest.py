"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from pytest_bdd import given, parsers, then
from shared.errors import ConflictError, ValidationError


@pytest.fixture()
def error():
    """Container for the error a When step captured."""
    return {"exc": None}


@pytest.fixture()
def attempt(error):
    """Run an action, storing a domain error instead of raising it."""

    def _attempt(action):
        try:
            return action()
        except (ConflictError, ValidationError) as exc:
            error["exc"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("{quantity:d} units of product {product_id:d} variant {variant_id:d} are in stock"))
def _(stock, quantity, product_id, variant_id):
    stock(product_id, variant_id, quantity)


@given(parsers.cfparse('a voucher "{code}" worth {amount} with {quantity:d} uses left'), target_fixture="voucher_id")
def _(voucher, code, amount, quantity):
    return voucher(code=code, discount_amount=amount, quantity=quantity).id


@given(
    parsers.cfparse("an order for {quantity:d} of product {product_id:d} variant {variant_id:d} was placed"),
    target_fixture="order",
)
def _(place, quantity, product_id, variant_id):
    return place((product_id, variant_id, quantity)).order


@given(
    parsers.cfparse('an order for {quantity:d} of product {product_id:d} variant {variant_id:d} using "{code}" was placed'),
    target_fixture="order",
)
def _(place, quantity, product_id, variant_id, code):
    return place((product_id, variant_id, quantity), voucher_code=code).order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(services, order, status):
    assert services.workflow.get_order(order.order_code).status.value == status


@then(parsers.cfparse("product {product_id:d} variant {variant_id:d} has {available:d} available and {sold:d} sold"))
def _(stock_of, product_id, variant_id, available, sold):
    record = stock_of(product_id, variant_id)
    assert (record.available_quantity, record.sold_quantity) == (available, sold)


@then(parsers.cfparse("the voucher has {quantity:d} uses left"))
def _(voucher_quantity, voucher_id, quantity):
    assert voucher_quantity(voucher_id) == quantity


@then(parsers.cfparse('the action fails with a "{code}" conflict'))
def _(error, code):
    assert isinstance(error["exc"], ConflictError), f"Expected a conflict, got {error['exc']!r}"
    assert error["exc"].code == code


@then("the action fails with a validation error")
def _(error):
    assert isinstance(error["exc"], ValidationError)
