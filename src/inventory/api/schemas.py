"""Pydantic request/response schemas for the Inventory API."""

from pydantic import BaseModel, Field

from inventory.stock.record import InventoryRecord


class RegisterStockRequest(BaseModel):
    product_id: int
    variant_id: int
    initial_quantity: int = Field(ge=0, default=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


class InventoryRecordResponse(BaseModel):
    product_id: int
    variant_id: int
    available_quantity: int
    sold_quantity: int

    @classmethod
    def from_record(cls, record: InventoryRecord) -> "InventoryRecordResponse":
        return cls(
            product_id=record.product_id,
            variant_id=record.variant_id,
            available_quantity=record.available_quantity,
            sold_quantity=record.sold_quantity,
        )
