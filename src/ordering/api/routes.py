"""FastAPI routes for the Ordering domain — orders, carts and vouchers."""

from fastapi import APIRouter, Depends

from bootstrap import Services, get_services
from ordering.api.schemas import (
    CancelOrderRequest,
    CartResponse,
    CheckoutRequest,
    CreateVoucherRequest,
    LineRequest,
    OrderPageResponse,
    OrderResponse,
    PlacedOrderResponse,
    PlaceOrderRequest,
    VoucherResponse,
)
from ordering.cart.items import RemoveFromCart, SetCartItem
from ordering.cart.snapshot import RequestedLine
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder, PlacementResult
from ordering.order.order import OrderStatus
from ordering.order.progression import AdvanceOrderStatus, DeleteOrder
from shared.db import utcnow
from shared.errors import ValidationError


def _placed(result: PlacementResult) -> PlacedOrderResponse:
    order = result.order
    return PlacedOrderResponse(
        order_code=order.order_code,
        total_price=order.total_price,
        voucher_discount=order.voucher_discount,
        amount_payable=order.amount_payable,
        status=order.status.value,
        created=result.created,
    )


def _parse_status(value: str | None) -> OrderStatus | None:
    if value is None:
        return None
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError({"status": [f"Unknown status {value!r}; expected one of {allowed}"]}) from None


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=PlacedOrderResponse)
def place_order(body: PlaceOrderRequest, services: Services = Depends(get_services)) -> PlacedOrderResponse:
    command = PlaceOrder(
        user_id=body.user_id,
        payment_method=body.payment_method,
        delivery_address=body.delivery_address,
        voucher_code=body.voucher_code,
        items=[
            RequestedLine(product_id=line.product_id, variant_id=line.variant_id, quantity=line.quantity)
            for line in body.items
        ],
    )
    return _placed(services.workflow.process(command))


@order_router.get("", response_model=OrderPageResponse)
def list_orders(
    status: str | None = None,
    user_id: int | None = None,
    limit: int = 10,
    page: int = 1,
    services: Services = Depends(get_services),
) -> OrderPageResponse:
    result = services.workflow.list_orders(status=_parse_status(status), user_id=user_id, limit=limit, page=page)
    return OrderPageResponse(
        total_items=result["total_items"],
        total_pages=result["total_pages"],
        current_page=result["current_page"],
        orders=[OrderResponse.from_order(order) for order in result["orders"]],
    )


@order_router.get("/{order_code}", response_model=OrderResponse)
def get_order(order_code: str, services: Services = Depends(get_services)) -> OrderResponse:
    return OrderResponse.from_order(services.workflow.get_order(order_code))


@order_router.put("/{order_code}/cancel", response_model=OrderResponse)
def cancel_order(
    order_code: str,
    body: CancelOrderRequest | None = None,
    services: Services = Depends(get_services),
) -> OrderResponse:
    body = body or CancelOrderRequest()
    command = CancelOrder(
        order_code=order_code,
        reason=body.reason,
        cancelled_by=body.cancelled_by,
        user_id=body.user_id,
    )
    return OrderResponse.from_order(services.workflow.process(command))


@order_router.put("/{order_code}/status", response_model=OrderResponse)
def advance_status(order_code: str, services: Services = Depends(get_services)) -> OrderResponse:
    order = services.workflow.process(AdvanceOrderStatus(order_code=order_code))
    return OrderResponse.from_order(order)


@order_router.delete("/{order_code}", response_model=OrderResponse)
def delete_order(order_code: str, services: Services = Depends(get_services)) -> OrderResponse:
    order = services.workflow.process(DeleteOrder(order_code=order_code))
    return OrderResponse.from_order(order)


@order_router.put("/{order_code}/items/{line_item_id}/feedback", response_model=OrderResponse)
def mark_feedback_submitted(
    order_code: str, line_item_id: int, services: Services = Depends(get_services)
) -> OrderResponse:
    order = services.workflow.mark_feedback_submitted(order_code, line_item_id)
    return OrderResponse.from_order(order)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{user_id}", response_model=CartResponse)
def view_cart(user_id: int, services: Services = Depends(get_services)) -> CartResponse:
    return CartResponse.from_cart(services.cart_items.view(user_id))


@cart_router.put("/{user_id}/items", response_model=CartResponse)
def set_cart_item(user_id: int, body: LineRequest, services: Services = Depends(get_services)) -> CartResponse:
    command = SetCartItem(
        user_id=user_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    return CartResponse.from_cart(services.cart_items.set_item(command))


@cart_router.delete("/{user_id}/items/{product_id}/{variant_id}", response_model=CartResponse)
def remove_cart_item(
    user_id: int, product_id: int, variant_id: int, services: Services = Depends(get_services)
) -> CartResponse:
    command = RemoveFromCart(user_id=user_id, product_id=product_id, variant_id=variant_id)
    return CartResponse.from_cart(services.cart_items.remove_item(command))


@cart_router.post("/{user_id}/checkout", status_code=201, response_model=PlacedOrderResponse)
def checkout(user_id: int, body: CheckoutRequest, services: Services = Depends(get_services)) -> PlacedOrderResponse:
    command = PlaceOrder(
        user_id=user_id,
        payment_method=body.payment_method,
        delivery_address=body.delivery_address,
        voucher_code=body.voucher_code,
        items=services.snapshots.from_cart(user_id),
    )
    return _placed(services.workflow.process(command))


# ---------------------------------------------------------------------------
# Voucher Router
# ---------------------------------------------------------------------------
voucher_router = APIRouter(prefix="/vouchers", tags=["vouchers"])


@voucher_router.get("/active", response_model=list[VoucherResponse])
def list_active_vouchers(services: Services = Depends(get_services)) -> list[VoucherResponse]:
    with services.database.unit_of_work() as tx:
        vouchers = services.vouchers.list_active(tx, utcnow())
    return [VoucherResponse.from_voucher(voucher) for voucher in vouchers]


@voucher_router.post("", status_code=201, response_model=VoucherResponse)
def create_voucher(body: CreateVoucherRequest, services: Services = Depends(get_services)) -> VoucherResponse:
    with services.database.unit_of_work() as tx:
        voucher = services.vouchers.create(
            tx,
            code=body.code,
            discount_amount=body.discount_amount,
            quantity=body.quantity,
            starts_at=body.starts_at,
            ends_at=body.ends_at,
        )
    return VoucherResponse.from_voucher(voucher)
