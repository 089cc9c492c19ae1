from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from cafeapp.core.config import settings
from cafeapp.core.context import StaffSession
from cafeapp.core.errors import CafeError
from cafeapp.core.schemas import ActionIn, OnlineOrderIn, OrderSource, OrderStatus, StaffAction
from cafeapp.deps import (
    current_session,
    get_board,
    get_order_service,
    http_error,
)
from cafeapp.models.records import Order
from cafeapp.services import lifecycle, pricing
from cafeapp.services.board import OrderBoard
from cafeapp.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def _num(v):
    return float(v) if v is not None else None


def serialize_order(o: Order) -> dict:
    return {
        "order_id": o.id,
        "source": o.source.value,
        "status": o.status.value,
        "customer": {"name": o.customer.name, "id": o.customer.id},
        "items": [
            {"name": it.name, "quantity": it.quantity, "price": float(it.price),
             "line_total": float(it.price * it.quantity)}
            for it in o.items
        ],
        "subtotal": float(o.subtotal),
        "discount_type": o.discount_type.value,
        "discount_amount": float(o.discount_amount),
        "tip_percent": float(o.tip_percent),
        "tip_amount": float(o.tip_amount),
        "total": float(o.total),
        "display_total": float(pricing.display_total(o.total)),
        "payment_type": o.payment_type.value,
        "cash_given": _num(o.cash_given),
        "change": _num(o.change),
        "placed_at": o.placed_at.isoformat(),
        "completed_at": o.completed_at.isoformat() if o.completed_at else None,
        "cancelled_at": o.cancelled_at.isoformat() if o.cancelled_at else None,
        "handled_by": o.handled_by,
        "actions": [a.value for a in lifecycle.allowed_actions(o.status)],
    }


@router.post("/online")
def place_online_order(payload: OnlineOrderIn, svc: OrderService = Depends(get_order_service)):
    try:
        o = svc.place_online(
            payload.items,
            payload.customer,
            payment_type=payload.payment_type,
            discount_type=payload.discount_type,
            tip_percent=payload.tip_percent,
            cash_given=payload.cash_given,
        )
    except CafeError as e:
        raise http_error(e)
    return serialize_order(o)


@router.get("")
def list_orders(
    q: str = "",
    source: Optional[OrderSource] = None,
    status: Optional[OrderStatus] = None,
    sort: str = Query(default="placed_at", pattern="^(placed_at|total|customer|status)$"),
    page: int = Query(default=1, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1, le=100),
    svc: OrderService = Depends(get_order_service),
):
    res = svc.search(
        q, source=source, status=status, sort=sort, page=page,
        page_size=page_size or settings.page_size,
    )
    res["orders"] = [serialize_order(o) for o in res["orders"]]
    return res


@router.get("/stats")
def order_stats(svc: OrderService = Depends(get_order_service)):
    return svc.stats()


@router.get("/board")
def order_board(board: OrderBoard = Depends(get_board)):
    orders = board.orders()
    return {"count": len(orders), "orders": [serialize_order(o) for o in orders]}


@router.get("/{order_id}")
def get_order(order_id: str, svc: OrderService = Depends(get_order_service)):
    try:
        return serialize_order(svc.get(order_id))
    except CafeError as e:
        raise http_error(e)


@router.delete("/{order_id}")
def delete_order(
    order_id: str,
    svc: OrderService = Depends(get_order_service),
    session: StaffSession = Depends(current_session),
):
    if session.role != "admin":
        raise HTTPException(status_code=403, detail={"code": "admin_only", "message": "admin only"})
    try:
        svc.delete(order_id)
    except CafeError as e:
        raise http_error(e)
    return {"deleted": True, "order_id": order_id}


@router.post("/{order_id}/{action}")
def order_action(
    order_id: str,
    action: StaffAction,
    payload: Optional[ActionIn] = Body(default=None),
    svc: OrderService = Depends(get_order_service),
    session: StaffSession = Depends(current_session),
):
    cash_given = payload.cash_given if payload else None
    try:
        o = svc.apply_action(order_id, action, staff=session.display_name, cash_given=cash_given)
    except CafeError as e:
        raise http_error(e)
    return serialize_order(o)
