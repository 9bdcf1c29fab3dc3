"""Pydantic request/response schemas for the Ordering API.

These are external contracts, separate from the internal command
dataclasses. Money leaves the service as strings with two decimals.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer

from ordering.cart.cart import Cart
from ordering.order.order import Order
from ordering.voucher.voucher import Voucher

Money = Annotated[Decimal, PlainSerializer(lambda value: f"{value:.2f}", return_type=str, when_used="json")]


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class LineRequest(BaseModel):
    product_id: int
    variant_id: int
    quantity: int = Field(ge=1)


class OrderLineItemSchema(BaseModel):
    id: int
    product_id: int
    variant_id: int
    quantity: int
    unit_price: Money
    product_name: str
    variant_name: str
    product_image: str
    feedback_submitted: bool


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    user_id: int
    payment_method: str = Field(min_length=1, max_length=50)
    delivery_address: str = Field(min_length=1)
    voucher_code: str | None = None
    items: list[LineRequest] = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": 7,
                    "payment_method": "COD",
                    "delivery_address": "12 Nguyen Hue, District 1, Ho Chi Minh City",
                    "voucher_code": "WELCOME10",
                    "items": [{"product_id": 1, "variant_id": 2, "quantity": 1}],
                }
            ]
        }
    }


class CheckoutRequest(BaseModel):
    payment_method: str = Field(min_length=1, max_length=50)
    delivery_address: str = Field(min_length=1)
    voucher_code: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str = Field(default="", max_length=500)
    cancelled_by: str = Field(default="customer", max_length=50)
    user_id: int | None = None


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class PlacedOrderResponse(BaseModel):
    order_code: str
    total_price: Money
    voucher_discount: Money
    amount_payable: Money
    status: str
    created: bool = True


class OrderResponse(BaseModel):
    order_code: str
    user_id: int
    voucher_id: int | None
    status: str
    total_price: Money
    voucher_discount: Money
    amount_payable: Money
    payment_method: str
    delivery_address: str
    created_at: datetime
    updated_at: datetime
    items: list[OrderLineItemSchema] = []

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            order_code=order.order_code,
            user_id=order.user_id,
            voucher_id=order.voucher_id,
            status=order.status.value,
            total_price=order.total_price,
            voucher_discount=order.voucher_discount,
            amount_payable=order.amount_payable,
            payment_method=order.payment_method,
            delivery_address=order.delivery_address,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderLineItemSchema(**vars(item)) for item in order.items],
        )


class OrderPageResponse(BaseModel):
    total_items: int
    total_pages: int
    current_page: int
    orders: list[OrderResponse]


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class CartItemSchema(BaseModel):
    product_id: int
    variant_id: int
    quantity: int
    price_estimate: Money


class CartResponse(BaseModel):
    user_id: int
    items: list[CartItemSchema]
    estimated_total: Money

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartResponse":
        return cls(
            user_id=cart.user_id,
            items=[
                CartItemSchema(
                    product_id=item.product_id,
                    variant_id=item.variant_id,
                    quantity=item.quantity,
                    price_estimate=item.price_estimate,
                )
                for item in cart.items
            ],
            estimated_total=cart.estimated_total,
        )


# ---------------------------------------------------------------------------
# Voucher Schemas
# ---------------------------------------------------------------------------
class CreateVoucherRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    discount_amount: Decimal = Field(gt=0)
    quantity: int = Field(ge=0)
    starts_at: datetime
    ends_at: datetime


class VoucherResponse(BaseModel):
    id: int
    code: str
    discount_amount: Money
    quantity: int
    starts_at: datetime
    ends_at: datetime

    @classmethod
    def from_voucher(cls, voucher: Voucher) -> "VoucherResponse":
        return cls(**vars(voucher))


class StatusResponse(BaseModel):
    status: str
