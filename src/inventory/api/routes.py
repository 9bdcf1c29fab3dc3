"""FastAPI routes for the Inventory domain — ledger administration."""

from fastapi import APIRouter, Depends

from bootstrap import Services, get_services
from inventory.api.schemas import InventoryRecordResponse, RegisterStockRequest, RestockRequest

inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


@inventory_router.post("", status_code=201, response_model=InventoryRecordResponse)
def register_stock(body: RegisterStockRequest, services: Services = Depends(get_services)) -> InventoryRecordResponse:
    with services.database.unit_of_work() as tx:
        record = services.inventory.register(tx, body.product_id, body.variant_id, body.initial_quantity)
    return InventoryRecordResponse.from_record(record)


@inventory_router.put("/{product_id}/{variant_id}/restock", response_model=InventoryRecordResponse)
def restock(
    product_id: int, variant_id: int, body: RestockRequest, services: Services = Depends(get_services)
) -> InventoryRecordResponse:
    with services.database.unit_of_work() as tx:
        record = services.inventory.restock(tx, product_id, variant_id, body.quantity)
    return InventoryRecordResponse.from_record(record)


@inventory_router.get("/{product_id}", response_model=list[InventoryRecordResponse])
def list_stock(product_id: int, services: Services = Depends(get_services)) -> list[InventoryRecordResponse]:
    with services.database.unit_of_work() as tx:
        records = services.inventory.list_for_product(tx, product_id)
    return [InventoryRecordResponse.from_record(record) for record in records]
