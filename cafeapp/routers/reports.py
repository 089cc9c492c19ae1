from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from cafeapp.deps import get_order_service
from cafeapp.services import analytics, audit_log
from cafeapp.services.orders import OrderService

router = APIRouter(prefix="/reports", tags=["reports"])


def _f(v):
    return round(float(v), 2)


@router.get("/sales/today")
def sales_today(
    day: Optional[str] = Query(default=None, description="YYYY-MM-DD (UTC)"),
    svc: OrderService = Depends(get_order_service),
):
    try:
        d = date.fromisoformat(day) if day else datetime.now(timezone.utc).date()
    except ValueError:
        raise HTTPException(status_code=422, detail="invalid_date")
    rep = analytics.sales_for_day(svc.orders.list(), d)
    return {
        **rep,
        "gross_total": _f(rep["gross_total"]),
        "avg_ticket": _f(rep["avg_ticket"]),
        "by_payment": [{"payment_type": k, "amount": _f(v)} for k, v in rep["by_payment"].items()],
    }


@router.get("/menu-performance")
def menu_performance(
    limit: int = Query(default=5, ge=1, le=50),
    svc: OrderService = Depends(get_order_service),
):
    rep = analytics.menu_performance(svc.orders.list(), limit)
    for key in ("top", "low"):
        rep[key] = [{**r, "revenue": _f(r["revenue"])} for r in rep[key]]
    return rep


@router.get("/customers")
def customers(
    limit: int = Query(default=5, ge=1, le=50),
    svc: OrderService = Depends(get_order_service),
):
    rep = analytics.customer_analytics(svc.orders.list(), limit)
    return {
        "total_customers": rep["total_customers"],
        "returning_share": _f(rep["returning_share"]),
        "avg_orders_per_customer": _f(rep["avg_orders_per_customer"]),
        "top": [{**c, "spent": _f(c["spent"])} for c in rep["top"]],
    }


@router.get("/audit/range")
def audit_range(
    start: str = Query(..., description="YYYY-MM-DD"),
    end: str = Query(..., description="YYYY-MM-DD"),
):
    """
    Eventos de la bitácora en el rango [start, end] (inclusive, fecha UTC) y
    conteos por tipo.
    """
    try:
        start_d = date.fromisoformat(start)
        end_d = date.fromisoformat(end)
    except ValueError:
        raise HTTPException(status_code=422, detail="invalid_date")
    return audit_log.events_in_range(start_d, end_d)
