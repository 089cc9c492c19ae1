import datetime as dt


def _fill_cart(client, staff):
    r = client.post("/pos/cart/add", headers=staff, json={"product_id": "1", "name": "Latte", "price": 120})
    assert r.status_code == 200, r.text
    r = client.post("/pos/cart/add", headers=staff, json={"product_id": "2", "name": "Croissant", "price": 100})
    assert r.status_code == 200, r.text
    return r.json()


def test_cart_requires_session(client):
    r = client.get("/pos/cart")
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "session_required"


def test_cart_edit(client, staff):
    cart = _fill_cart(client, staff)
    assert cart["count"] == 2

    r = client.post("/pos/cart/qty", headers=staff, json={"product_id": "1", "delta": 2})
    assert r.status_code == 200
    assert r.json()["lines"][0]["quantity"] == 3

    r = client.post("/pos/cart/qty", headers=staff, json={"product_id": "1", "delta": -10})
    assert r.json()["lines"][0]["quantity"] == 1

    r = client.post("/pos/cart/qty", headers=staff, json={"product_id": "nope", "delta": 1})
    assert r.status_code == 404

    r = client.delete("/pos/cart/2", headers=staff)
    assert [l["name"] for l in r.json()["lines"]] == ["Latte"]

    r = client.post("/pos/cart/clear", headers=staff)
    assert r.json() == {"count": 0, "lines": []}


def test_quote_senior_with_tip(client, staff):
    _fill_cart(client, staff)
    r = client.post(
        "/pos/quote", headers=staff,
        json={"discount_type": "Senior", "tip_percent": 10, "cash_given": 200},
    )
    assert r.status_code == 200, r.text
    q = r.json()
    assert q["subtotal"] == 220
    assert q["discount_percent"] == 20
    assert q["discount_amount"] == 44
    assert q["tip_amount"] == 22
    assert q["total"] == 198
    assert q["change"] == 2
    assert q["cash_covers_total"] is True
    assert q["tip_presets"] == [0, 5, 10]


def test_checkout_cash(client, staff):
    _fill_cart(client, staff)
    r = client.post(
        "/pos/checkout", headers=staff,
        json={"discount_type": "Senior", "tip_percent": 10, "payment_type": "Cash", "cash_given": 200},
    )
    assert r.status_code == 200, r.text
    o = r.json()
    assert o["order_id"].startswith("POS-")
    assert o["status"] == "Completed"
    assert o["total"] == 198 and o["change"] == 2
    assert o["customer"] == {"name": "Walk-in", "id": "walk-in"}
    assert o["handled_by"] == "Maria"
    assert o["actions"] == []

    # el carrito queda vacío y la orden es consultable
    assert client.get("/pos/cart", headers=staff).json()["count"] == 0
    r = client.get(f"/orders/{o['order_id']}")
    assert r.status_code == 200
    assert r.json()["total"] == 198


def test_checkout_insufficient_cash_keeps_cart(client, staff):
    _fill_cart(client, staff)
    r = client.post(
        "/pos/checkout", headers=staff,
        json={"discount_type": "Senior", "tip_percent": 10, "payment_type": "Cash", "cash_given": 150},
    )
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "insufficient_cash"
    assert client.get("/pos/cart", headers=staff).json()["count"] == 2
    assert client.get("/orders/stats").json()["total"] == 0


def test_checkout_empty_cart(client, staff):
    r = client.post("/pos/checkout", headers=staff, json={"payment_type": "Card"})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "empty_cart"


def test_checkout_idempotent_replay(client, staff):
    _fill_cart(client, staff)
    headers = {**staff, "Idempotency-Key": "sale-1"}
    body = {"payment_type": "Card", "customer_name": "Jane"}
    r1 = client.post("/pos/checkout", headers=headers, json=body)
    assert r1.status_code == 200, r1.text
    r2 = client.post("/pos/checkout", headers=headers, json=body)
    assert r2.status_code == 200
    assert r2.headers.get("Idempotent-Replay") == "true"
    assert r2.json()["replay"] is True
    assert r2.json()["order_id"] == r1.json()["order_id"]
    assert client.get("/orders/stats").json()["total"] == 1


def test_checkout_is_audited_once(client, staff):
    _fill_cart(client, staff)
    headers = {**staff, "Idempotency-Key": "sale-2"}
    r = client.post("/pos/checkout", headers=headers, json={"payment_type": "GCash"})
    assert r.status_code == 200, r.text
    client.post("/pos/checkout", headers=headers, json={"payment_type": "GCash"})

    today = dt.datetime.now(dt.timezone.utc).date().isoformat()
    rep = client.get(f"/reports/audit/range?start={today}&end={today}").json()
    assert rep["file_exists"] is True
    assert rep["counts"] == {"total": 1, "by_kind": {"created": 1}}
    assert rep["events"][0]["order_id"] == r.json()["order_id"]
    assert rep["events"][0]["status"] == "Completed"


def test_carts_are_per_session(client, staff):
    _fill_cart(client, staff)
    r = client.post("/session/login", json={"user_id": "u-2", "display_name": "Luis"})
    other = {"X-Session-Token": r.json()["token"]}
    assert client.get("/pos/cart", headers=other).json()["count"] == 0


def test_session_me_favorites_logout(client, staff):
    r = client.get("/session/me", headers=staff)
    assert r.status_code == 200
    assert r.json()["display_name"] == "Maria"

    r = client.post("/session/favorites/Latte", headers=staff)
    assert r.json() == {"name": "Latte", "favorite": True, "favorites": ["Latte"]}

    r = client.post("/session/logout", headers=staff)
    assert r.json() == {"closed": True}
    assert client.get("/session/me", headers=staff).status_code == 401
