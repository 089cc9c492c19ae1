"""Agregados de reportes sobre órdenes ya cargadas en memoria (sólo Completed)."""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List

from cafeapp.core.schemas import WALK_IN, OrderStatus
from cafeapp.models.records import Order

ZERO = Decimal("0")


def _completed(orders: Iterable[Order]) -> List[Order]:
    return [o for o in orders if o.status == OrderStatus.COMPLETED]


def sales_for_day(orders: Iterable[Order], day: date) -> dict:
    sold = [o for o in _completed(orders) if (o.completed_at or o.placed_at).date() == day]
    gross = sum((o.total for o in sold), ZERO)
    by_payment: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    by_source: Dict[str, int] = defaultdict(int)
    for o in sold:
        by_payment[o.payment_type.value] += o.total
        by_source[o.source.value] += 1
    return {
        "date": day.isoformat(),
        "sales_count": len(sold),
        "gross_total": gross,
        "avg_ticket": (gross / len(sold)) if sold else ZERO,
        "by_payment": dict(by_payment),
        "by_source": dict(by_source),
    }


def menu_performance(orders: Iterable[Order], limit: int = 5) -> dict:
    sold: Dict[str, int] = defaultdict(int)
    revenue: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for o in _completed(orders):
        for it in o.items:
            sold[it.name] += it.quantity
            revenue[it.name] += it.price * it.quantity

    rows = [{"name": n, "sold": q, "revenue": revenue[n]} for n, q in sold.items()]
    top = sorted(rows, key=lambda r: (-r["sold"], r["name"]))
    low = sorted(rows, key=lambda r: (r["sold"], r["name"]))
    return {"items": len(rows), "top": top[:limit], "low": low[:limit]}


def customer_analytics(orders: Iterable[Order], limit: int = 5) -> dict:
    per_customer: Dict[str, dict] = {}
    for o in _completed(orders):
        if o.customer.id == WALK_IN:
            continue
        c = per_customer.setdefault(
            o.customer.id, {"id": o.customer.id, "name": o.customer.name, "orders": 0, "spent": ZERO}
        )
        c["orders"] += 1
        c["spent"] += o.total

    customers = list(per_customer.values())
    n = len(customers)
    returning = sum(1 for c in customers if c["orders"] > 1)
    total_orders = sum(c["orders"] for c in customers)
    top = sorted(customers, key=lambda c: (-c["spent"], c["name"]))[:limit]
    return {
        "total_customers": n,
        "returning_share": (Decimal(returning) / n) if n else ZERO,
        "avg_orders_per_customer": (Decimal(total_orders) / n) if n else ZERO,
        "top": top,
    }
