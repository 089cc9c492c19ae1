import logging
from typing import Optional

from cafeapp.models.records import InventoryItem
from cafeapp.services.ids import INVENTORY_IDS
from cafeapp.services.repository import InventoryRepository

logger = logging.getLogger("cafeapp.inventory")


class InventoryService:
    def __init__(self, store, ids=INVENTORY_IDS):
        self.items = InventoryRepository(store)
        self.ids = ids

    def create(self, item: str, category: str, unit: str, stock: int, reorder_level: int) -> InventoryItem:
        rec = InventoryItem(
            id=self.ids(), item=item, category=category, unit=unit,
            stock=stock, reorder_level=reorder_level,
        )
        saved = self.items.create(rec)
        logger.info("inventory item %s created (%s)", saved.id, saved.item)
        return saved

    def adjust(self, item_id: str, delta: int, staff: Optional[str] = None) -> InventoryItem:
        # el stock nunca baja de cero
        item = self.items.get(item_id)
        saved = self.items.set_stock(item, max(0, item.stock + delta))
        logger.info("inventory %s: stock %s -> %s by %s", item_id, item.stock, saved.stock, staff)
        return saved

    def list(self, q: str = "", category: Optional[str] = None):
        items = self.items.list()
        if category and category != "All":
            items = [i for i in items if i.category == category]
        q = (q or "").strip().lower()
        if q:
            items = [i for i in items if q in i.item.lower() or q in i.category.lower()]
        return items

    def low_stock(self):
        return [i for i in self.items.list() if i.low_stock]

    def totals(self) -> dict:
        items = self.items.list()
        return {
            "items": len(items),
            "units": sum(i.stock for i in items),
            "low_stock": sum(1 for i in items if i.low_stock),
            "categories": sorted({i.category for i in items}),
        }
