from cafeapp.core.errors import StoreWriteFailed
from cafeapp.services.inventory import InventoryService
from cafeapp.services.repository import SETTINGS, STORE_PREF_ID, PreferencesRepository

DEMO_INVENTORY = [
    # item, category, unit, stock, reorder_level
    ("Coffee Beans", "Coffee", "kg", 120, 30),
    ("Milk", "Dairy", "liters", 60, 20),
    ("Butter Croissant", "Pastry", "pcs", 45, 20),
    ("Chocolate Muffin", "Pastry", "pcs", 30, 15),
    ("Green Tea Leaves", "Tea", "kg", 25, 10),
    ("Vanilla Syrup", "Condiments", "bottles", 4, 5),
]


def seed(store) -> dict:
    inv = InventoryService(store)
    existing = {i.item for i in inv.list()}
    created = 0
    for item, category, unit, stock, reorder in DEMO_INVENTORY:
        if item in existing:
            continue
        try:
            inv.create(item, category, unit, stock, reorder)
            created += 1
        except StoreWriteFailed:
            continue

    prefs = PreferencesRepository(store)
    if store.get(SETTINGS, STORE_PREF_ID) is None:
        prefs.save(prefs.defaults())
    return {"inventory_created": created, "inventory_total": len(inv.list())}


def main():
    from cafeapp.db import Base, engine
    from cafeapp.deps import get_store
    from cafeapp.models import document as _document_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    res = seed(get_store())
    print(f"Seed OK | inventory_created={res['inventory_created']} total={res['inventory_total']}")


if __name__ == "__main__":
    main()
