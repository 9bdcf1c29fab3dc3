"""BDD tests for the order lifecycle after placement."""

from ordering.order.cancellation import CancelOrder
from ordering.order.progression import AdvanceOrderStatus, DeleteOrder
from pytest_bdd import parsers, scenarios, when

scenarios("features/order_lifecycle.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order is cancelled with reason "{reason}"'))
def _(services, order, attempt, reason):
    attempt(lambda: services.workflow.process(CancelOrder(order_code=order.order_code, reason=reason)))


@when("the order is advanced")
def _(services, order, attempt):
    attempt(lambda: services.workflow.process(AdvanceOrderStatus(order_code=order.order_code)))


@when("the order is deleted")
def _(services, order, attempt):
    attempt(lambda: services.workflow.process(DeleteOrder(order_code=order.order_code)))
