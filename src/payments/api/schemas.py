"""Pydantic request/response schemas for the Payments API."""

from pydantic import BaseModel, Field

from ordering.api.schemas import LineRequest, Money


class PaymentUrlRequest(BaseModel):
    user_id: int
    delivery_address: str = Field(min_length=1)
    voucher_code: str | None = None
    payment_method: str = Field(default="VNPay", max_length=50)
    items: list[LineRequest] = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": 7,
                    "delivery_address": "12 Nguyen Hue, District 1, Ho Chi Minh City",
                    "voucher_code": None,
                    "items": [{"product_id": 1, "variant_id": 2, "quantity": 2}],
                }
            ]
        }
    }


class PaymentUrlResponse(BaseModel):
    payment_url: str
    txn_ref: str
    amount: Money


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    response_code: str = "24"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    response_code: str
