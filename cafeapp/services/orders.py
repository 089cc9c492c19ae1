from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from cafeapp.core.errors import (
    BelowMinimumOrder,
    EmptyCart,
    InsufficientCash,
    InvalidTransition,
    OnlineOrderingClosed,
    PaymentMethodDisabled,
)
from cafeapp.core.schemas import (
    CustomerRef,
    DiscountType,
    OrderItem,
    OrderSource,
    OrderStatus,
    PaymentType,
    StaffAction,
)
from cafeapp.models.records import Order
from cafeapp.services import lifecycle, pricing
from cafeapp.services.ids import ONLINE_IDS, POS_IDS
from cafeapp.services.repository import OrderRepository, PreferencesRepository

logger = logging.getLogger("cafeapp.orders")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_items(lines: Iterable) -> list:
    return [OrderItem(name=l.name, quantity=l.quantity, price=l.price) for l in lines]


class OrderService:
    def __init__(self, store, clock=utcnow, pos_ids=POS_IDS, online_ids=ONLINE_IDS):
        self.orders = OrderRepository(store)
        self.preferences = PreferencesRepository(store)
        self.clock = clock
        self.pos_ids = pos_ids
        self.online_ids = online_ids

    # ---------- POS ----------
    def checkout_pos(
        self,
        lines,
        *,
        discount_type: DiscountType = DiscountType.NONE,
        tip_percent=0,
        payment_type: PaymentType = PaymentType.CASH,
        cash_given=None,
        customer_name: Optional[str] = None,
        staff: Optional[str] = None,
    ) -> Order:
        """
        Venta de mostrador: se liquida en el acto, así que la orden nace y
        queda en Completed. Nada se escribe si alguna validación falla; vaciar
        el carrito le toca al caller.
        """
        items = _to_items(lines)
        if not items:
            logger.warning("POS checkout rejected: empty cart (staff=%s)", staff)
            raise EmptyCart("cart is empty")

        self._check_payment_method(payment_type)
        p = pricing.price(items, discount_type, tip_percent)
        if PaymentType(payment_type) == PaymentType.CASH and not pricing.covers(cash_given, p.total):
            logger.warning("POS checkout rejected: cash %s < total %s", cash_given, p.total)
            raise InsufficientCash(f"cash given is less than total ({p.total})")

        order = Order.build(
            order_id=self.pos_ids(),
            source=OrderSource.POS,
            items=items,
            customer=CustomerRef(name=(customer_name or "").strip() or "Walk-in"),
            discount_type=discount_type,
            tip_percent=tip_percent,
            payment_type=payment_type,
            cash_given=cash_given,
            status=OrderStatus.COMPLETED,
            placed_at=self.clock(),
            handled_by=staff,
        )
        saved = self.orders.create(order)
        logger.info("POS order %s completed total=%s by %s", saved.id, saved.total, staff)
        return saved

    # ---------- Online ----------
    def place_online(
        self,
        items,
        customer: CustomerRef,
        *,
        payment_type: PaymentType = PaymentType.GCASH,
        discount_type: DiscountType = DiscountType.NONE,
        tip_percent=0,
        cash_given=None,
    ) -> Order:
        items = list(items)
        if not items:
            raise EmptyCart("order has no items")

        prefs = self.preferences.get()
        if not prefs.online_ordering:
            raise OnlineOrderingClosed("online ordering is currently disabled")
        self._check_payment_method(payment_type, prefs)
        p = pricing.price(items, discount_type, tip_percent)
        if p.subtotal < prefs.min_order:
            raise BelowMinimumOrder(f"minimum order is {prefs.min_order}")

        order = Order.build(
            order_id=self.online_ids(),
            source=OrderSource.ONLINE,
            items=items,
            customer=customer,
            discount_type=discount_type,
            tip_percent=tip_percent,
            payment_type=payment_type,
            cash_given=cash_given,
            status=OrderStatus.PENDING,
            placed_at=self.clock(),
        )
        saved = self.orders.create(order)
        logger.info("online order %s placed for %s total=%s", saved.id, customer.id, saved.total)
        return saved

    def apply_action(
        self,
        order_id: str,
        action: StaffAction,
        *,
        staff: Optional[str] = None,
        cash_given=None,
    ) -> Order:
        order = self.orders.get(order_id)
        try:
            new_status = lifecycle.transition(order.status, action)
        except InvalidTransition:
            logger.warning("order %s: %s rejected in status %s", order_id, action, order.status.value)
            raise

        changes = {"status": new_status, "handled_by": staff or order.handled_by}
        now = self.clock()
        if new_status == OrderStatus.COMPLETED:
            if not order.items:
                raise EmptyCart("order has no items")
            if order.payment_type == PaymentType.CASH:
                cash = cash_given if cash_given is not None else order.cash_given
                if not pricing.covers(cash, order.total):
                    raise InsufficientCash(f"cash given is less than total ({order.total})")
                changes["cash_given"] = pricing.dec(cash)
            changes["completed_at"] = now
        elif new_status == OrderStatus.CANCELLED:
            changes["cancelled_at"] = now

        updated = Order.model_validate({**order.model_dump(), **changes})
        saved = self.orders.replace_status(order, updated)
        logger.info("order %s: %s -> %s", order_id, order.status.value, saved.status.value)
        return saved

    # ---------- Consultas ----------
    def get(self, order_id: str) -> Order:
        return self.orders.get(order_id)

    def delete(self, order_id: str) -> None:
        self.orders.delete(order_id)
        logger.info("order %s deleted", order_id)

    def search(
        self,
        q: str = "",
        *,
        source: Optional[OrderSource] = None,
        status: Optional[OrderStatus] = None,
        sort: str = "placed_at",
        page: int = 1,
        page_size: int = 5,
    ) -> dict:
        orders = self.orders.list()
        if source is not None:
            orders = [o for o in orders if o.source == source]
        if status is not None:
            orders = [o for o in orders if o.status == status]
        q = (q or "").strip().lower()
        if q:
            orders = [o for o in orders if _matches(o, q)]

        if sort == "total":
            orders.sort(key=lambda o: o.total, reverse=True)
        elif sort == "customer":
            orders.sort(key=lambda o: o.customer.name.lower())
        elif sort == "status":
            orders.sort(key=lambda o: o.status.value)
        else:
            orders.sort(key=lambda o: o.placed_at, reverse=True)

        page_size = max(1, page_size)
        pages = max(1, math.ceil(len(orders) / page_size))
        page = min(max(1, page), pages)
        start = (page - 1) * page_size
        return {
            "total": len(orders),
            "page": page,
            "pages": pages,
            "orders": orders[start:start + page_size],
        }

    def stats(self) -> dict:
        orders = self.orders.list()
        completed = sum(1 for o in orders if o.status == OrderStatus.COMPLETED)
        cancelled = sum(1 for o in orders if o.status == OrderStatus.CANCELLED)
        return {
            "total": len(orders),
            "completed": completed,
            "cancelled": cancelled,
            "active": len(orders) - completed - cancelled,
        }

    def _check_payment_method(self, payment_type, prefs=None):
        prefs = prefs or self.preferences.get()
        if not prefs.accepts(payment_type):
            raise PaymentMethodDisabled(f"{PaymentType(payment_type).value} payments are disabled")


def _matches(order: Order, q: str) -> bool:
    fields = [
        order.id.lower(),
        order.customer.name.lower(),
        order.status.value.lower(),
        order.source.value.lower(),
        str(order.total),
    ]
    fields.extend(it.name.lower() for it in order.items)
    return any(q in f for f in fields)
