import threading
from typing import List

from cafeapp.models.records import Order
from cafeapp.services.repository import ORDERS, active_orders


class OrderBoard:
    """Vista en vivo de órdenes activas (Pending/Preparing/Ready) para el personal."""

    def __init__(self, store):
        self._orders: List[Order] = []
        self._lock = threading.Lock()
        self._unsubscribe = store.subscribe(ORDERS, self._on_snapshot)

    def _on_snapshot(self, docs) -> None:
        orders = active_orders(docs)
        with self._lock:
            self._orders = orders

    def orders(self) -> List[Order]:
        with self._lock:
            return list(self._orders)

    def close(self) -> None:
        self._unsubscribe()
