from __future__ import annotations

import logging
from typing import List, Optional

from cafeapp.core.config import settings
from cafeapp.core.errors import DocumentNotFound, InvalidDocument, OrderNotFound
from cafeapp.core.schemas import OrderStatus
from cafeapp.models.records import InventoryItem, Order, StorePreferences

logger = logging.getLogger("cafeapp.repository")

ORDERS = "orders"
INVENTORY = "inventory"
SETTINGS = "settings"
STORE_PREF_ID = "storePref"


def _valid_records(cls, docs) -> list:
    out = []
    for d in docs:
        try:
            out.append(cls.from_doc(d))
        except InvalidDocument as e:
            logger.warning("skipping invalid %s document %s: %s", cls.__name__, d.get("id"), e)
    return out


class OrderRepository:
    def __init__(self, store):
        self.store = store

    def create(self, order: Order) -> Order:
        doc = self.store.create(ORDERS, order.id, order.to_doc())
        return Order.from_doc(doc)

    def get(self, order_id: str) -> Order:
        doc = self.store.get(ORDERS, order_id)
        if doc is None:
            raise OrderNotFound(f"order {order_id} not found")
        return Order.from_doc(doc)

    def replace_status(self, before: Order, after: Order) -> Order:
        # sólo se escriben los campos que cambia una transición
        fields = ("status", "completed_at", "cancelled_at", "handled_by", "cash_given")
        doc = after.to_doc()
        partial = {k: doc[k] for k in fields}
        saved = self.store.update(ORDERS, after.id, partial, expected={"status": before.status.value})
        return Order.from_doc(saved)

    def list(self) -> List[Order]:
        return _valid_records(Order, self.store.list(ORDERS))

    def delete(self, order_id: str) -> None:
        if not self.store.delete(ORDERS, order_id):
            raise OrderNotFound(f"order {order_id} not found")


def active_orders(docs) -> List[Order]:
    active = {OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY}
    orders = [o for o in _valid_records(Order, docs) if o.status in active]
    return sorted(orders, key=lambda o: o.placed_at)


class InventoryRepository:
    def __init__(self, store):
        self.store = store

    def create(self, item: InventoryItem) -> InventoryItem:
        return InventoryItem.from_doc(self.store.create(INVENTORY, item.id, item.to_doc()))

    def get(self, item_id: str) -> InventoryItem:
        doc = self.store.get(INVENTORY, item_id)
        if doc is None:
            raise DocumentNotFound(f"inventory item {item_id} not found")
        return InventoryItem.from_doc(doc)

    def set_stock(self, item: InventoryItem, stock: int) -> InventoryItem:
        doc = self.store.update(INVENTORY, item.id, {"stock": stock}, expected={"stock": item.stock})
        return InventoryItem.from_doc(doc)

    def list(self) -> List[InventoryItem]:
        return _valid_records(InventoryItem, self.store.list(INVENTORY))


class PreferencesRepository:
    def __init__(self, store):
        self.store = store

    def defaults(self) -> StorePreferences:
        return StorePreferences(store_name=settings.store_name, currency=settings.currency)

    def get(self) -> StorePreferences:
        doc: Optional[dict] = self.store.get(SETTINGS, STORE_PREF_ID)
        if doc is None:
            return self.defaults()
        return StorePreferences.from_doc(doc)

    def save(self, prefs: StorePreferences) -> StorePreferences:
        return StorePreferences.from_doc(self.store.put(SETTINGS, STORE_PREF_ID, prefs.to_doc()))
