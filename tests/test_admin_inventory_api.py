def test_preferences_defaults(client):
    r = client.get("/admin/preferences")
    assert r.status_code == 200, r.text
    p = r.json()
    assert p["currency"] == "PHP"
    assert p["online_ordering"] is True
    assert p["payment_methods"] == {"Cash": True, "Card": True, "GCash": True}


def test_update_preferences_requires_session(client):
    assert client.put("/admin/preferences", json={"online_ordering": False}).status_code == 401


def test_update_preferences_affects_ordering(client, staff):
    r = client.put(
        "/admin/preferences", headers=staff,
        json={"payment_methods": {"GCash": False}, "min_order": 100, "receipt_footer": "Salamat!"},
    )
    assert r.status_code == 200, r.text
    p = r.json()
    assert p["payment_methods"] == {"Cash": True, "Card": True, "GCash": False}
    assert p["min_order"] == 100
    assert p["receipt_footer"] == "Salamat!"

    item = {"name": "Tea", "quantity": 1, "price": 80}
    customer = {"name": "Maria", "id": "c-1"}
    r = client.post("/orders/online", json={"items": [item], "customer": customer, "payment_type": "Card"})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "below_minimum_order"

    r = client.post("/orders/online", json={"items": [{**item, "quantity": 2}], "customer": customer})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "payment_method_disabled"

    client.put("/admin/preferences", headers=staff, json={"online_ordering": False})
    r = client.post("/orders/online", json={"items": [{**item, "quantity": 2}], "customer": customer,
                                            "payment_type": "Card"})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "online_ordering_closed"


def test_inventory_writes_require_session(client):
    item = {"item": "Milk", "category": "Dairy", "unit": "liters", "stock": 5, "reorder_level": 20}
    r = client.post("/inventory", json=item)
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "session_required"
    assert client.post("/inventory/INV-1/adjust", json={"delta": -5}).status_code == 401
    assert client.get("/inventory").json()["count"] == 0


def test_inventory_crud(client, staff):
    r = client.post("/inventory", headers=staff, json={
        "item": "Milk", "category": "Dairy", "unit": "liters", "stock": 5, "reorder_level": 20,
    })
    assert r.status_code == 200, r.text
    milk = r.json()
    assert milk["id"].startswith("INV-") and milk["low_stock"] is True

    client.post("/inventory", headers=staff, json={
        "item": "Coffee Beans", "category": "Coffee", "unit": "kg", "stock": 120, "reorder_level": 30,
    })
    assert client.get("/inventory").json()["count"] == 2
    assert client.get("/inventory", params={"category": "Dairy"}).json()["count"] == 1
    assert client.get("/inventory/low-stock").json()["count"] == 1

    r = client.post(f"/inventory/{milk['id']}/adjust", headers=staff, json={"delta": 30})
    assert r.json()["stock"] == 35 and r.json()["low_stock"] is False
    r = client.post(f"/inventory/{milk['id']}/adjust", headers=staff, json={"delta": -100})
    assert r.json()["stock"] == 0

    t = client.get("/inventory/totals").json()
    assert t == {"items": 2, "units": 120, "low_stock": 1, "categories": ["Coffee", "Dairy"]}

    assert client.post("/inventory/INV-404/adjust", headers=staff, json={"delta": 1}).status_code == 404
    bad = {"item": "X", "category": "Y", "unit": "u", "stock": -1, "reorder_level": 0}
    assert client.post("/inventory", headers=staff, json=bad).status_code == 422
