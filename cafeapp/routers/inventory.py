from typing import Optional

from fastapi import APIRouter, Depends

from cafeapp.core.context import StaffSession
from cafeapp.core.errors import CafeError
from cafeapp.core.schemas import InventoryItemIn, StockAdjustIn
from cafeapp.deps import current_session, get_inventory_service, http_error
from cafeapp.models.records import InventoryItem
from cafeapp.services.inventory import InventoryService

router = APIRouter(prefix="/inventory", tags=["inventory"])


def _serialize(i: InventoryItem) -> dict:
    return {**i.to_doc(), "low_stock": i.low_stock}


@router.get("")
def list_items(
    q: str = "",
    category: Optional[str] = None,
    svc: InventoryService = Depends(get_inventory_service),
):
    items = svc.list(q, category)
    return {"count": len(items), "items": [_serialize(i) for i in items]}


@router.post("")
def create_item(
    payload: InventoryItemIn,
    svc: InventoryService = Depends(get_inventory_service),
    session: StaffSession = Depends(current_session),
):
    try:
        return _serialize(svc.create(**payload.model_dump()))
    except CafeError as e:
        raise http_error(e)


@router.get("/low-stock")
def low_stock(svc: InventoryService = Depends(get_inventory_service)):
    items = svc.low_stock()
    return {"count": len(items), "items": [_serialize(i) for i in items]}


@router.get("/totals")
def totals(svc: InventoryService = Depends(get_inventory_service)):
    return svc.totals()


@router.post("/{item_id}/adjust")
def adjust_stock(
    item_id: str,
    payload: StockAdjustIn,
    svc: InventoryService = Depends(get_inventory_service),
    session: StaffSession = Depends(current_session),
):
    try:
        return _serialize(svc.adjust(item_id, payload.delta, staff=session.display_name))
    except CafeError as e:
        raise http_error(e)
