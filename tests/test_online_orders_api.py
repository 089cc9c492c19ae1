import datetime as dt

ORDER = {
    "items": [{"name": "Latte", "quantity": 2, "price": 120}],
    "customer": {"name": "Maria Santos", "id": "cust-1"},
    "payment_type": "GCash",
}


def _place(client, **overrides):
    r = client.post("/orders/online", json={**ORDER, **overrides})
    assert r.status_code == 200, r.text
    return r.json()


def test_place_online_order(client):
    o = _place(client)
    assert o["order_id"].startswith("O-")
    assert o["source"] == "Online"
    assert o["status"] == "Pending"
    assert o["total"] == 240
    assert o["actions"] == ["accept", "cancel"]


def test_online_order_rejects_empty_items(client):
    r = client.post("/orders/online", json={**ORDER, "items": []})
    assert r.status_code == 422


def test_actions_need_session(client):
    o = _place(client)
    r = client.post(f"/orders/{o['order_id']}/accept")
    assert r.status_code == 401


def test_full_lifecycle_and_board(client, staff):
    o = _place(client)
    oid = o["order_id"]
    board = client.get("/orders/board").json()
    assert [b["order_id"] for b in board["orders"]] == [oid]

    for action, status in (("accept", "Preparing"), ("ready", "Ready"), ("complete", "Completed")):
        r = client.post(f"/orders/{oid}/{action}", headers=staff)
        assert r.status_code == 200, r.text
        assert r.json()["status"] == status
    done = client.get(f"/orders/{oid}").json()
    assert done["completed_at"] is not None
    assert done["handled_by"] == "Maria"

    r = client.post(f"/orders/{oid}/accept", headers=staff)
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "invalid_transition"
    assert client.get("/orders/board").json()["count"] == 0

    today = dt.datetime.now(dt.timezone.utc).date().isoformat()
    rep = client.get(f"/reports/audit/range?start={today}&end={today}").json()
    assert rep["counts"]["by_kind"] == {"created": 1, "accept": 1, "ready": 1, "complete": 1}


def test_skip_is_rejected(client, staff):
    oid = _place(client)["order_id"]
    r = client.post(f"/orders/{oid}/ready", headers=staff)
    assert r.status_code == 409
    assert client.get(f"/orders/{oid}").json()["status"] == "Pending"


def test_unknown_action_and_order(client, staff):
    oid = _place(client)["order_id"]
    assert client.post(f"/orders/{oid}/teleport", headers=staff).status_code == 422
    r = client.post("/orders/O-1/accept", headers=staff)
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "order_not_found"


def test_cancel(client, staff):
    oid = _place(client)["order_id"]
    r = client.post(f"/orders/{oid}/cancel", headers=staff)
    assert r.status_code == 200
    assert r.json()["status"] == "Cancelled"
    assert r.json()["cancelled_at"] is not None
    assert r.json()["actions"] == []


def test_cash_online_completion(client, staff):
    oid = _place(client, payment_type="Cash")["order_id"]
    client.post(f"/orders/{oid}/accept", headers=staff)
    client.post(f"/orders/{oid}/ready", headers=staff)

    r = client.post(f"/orders/{oid}/complete", headers=staff)
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "insufficient_cash"

    r = client.post(f"/orders/{oid}/complete", headers=staff, json={"cash_given": "abc"})
    assert r.status_code == 422

    r = client.post(f"/orders/{oid}/complete", headers=staff, json={"cash_given": 300})
    assert r.status_code == 200, r.text
    assert r.json()["change"] == 60


def test_complete_rejects_non_finite_or_negative_cash(client, staff):
    oid = _place(client, payment_type="Cash")["order_id"]
    client.post(f"/orders/{oid}/accept", headers=staff)
    client.post(f"/orders/{oid}/ready", headers=staff)

    for bad in ("NaN", "Infinity", "-Infinity", -5, "abc"):
        r = client.post(f"/orders/{oid}/complete", headers=staff, json={"cash_given": bad})
        assert r.status_code == 422, (bad, r.text)
    assert client.get(f"/orders/{oid}").json()["status"] == "Ready"


def test_list_search_and_stats(client, staff):
    for i in range(6):
        _place(client, customer={"name": f"Guest {i}", "id": f"g-{i}"})
    _place(client, customer={"name": "Jane Smith", "id": "cust-9"})

    page = client.get("/orders").json()
    assert page["total"] == 7 and page["pages"] == 2 and len(page["orders"]) == 5

    r = client.get("/orders", params={"q": "jane"})
    assert [o["customer"]["name"] for o in r.json()["orders"]] == ["Jane Smith"]

    r = client.get("/orders", params={"source": "POS"})
    assert r.json()["total"] == 0

    assert client.get("/orders", params={"sort": "bogus"}).status_code == 422

    oid = client.get("/orders", params={"q": "jane"}).json()["orders"][0]["order_id"]
    client.post(f"/orders/{oid}/cancel", headers=staff)
    assert client.get("/orders", params={"status": "Cancelled"}).json()["total"] == 1
    assert client.get("/orders/stats").json() == {"total": 7, "completed": 0, "cancelled": 1, "active": 6}


def test_delete_is_admin_only(client, staff, admin):
    oid = _place(client)["order_id"]
    assert client.delete(f"/orders/{oid}", headers=staff).status_code == 403
    r = client.delete(f"/orders/{oid}", headers=admin)
    assert r.status_code == 200
    assert client.get(f"/orders/{oid}").status_code == 404
    assert client.delete(f"/orders/{oid}", headers=admin).status_code == 404


def test_online_idempotency(client):
    headers = {"Idempotency-Key": "web-1"}
    r1 = client.post("/orders/online", headers=headers, json=ORDER)
    r2 = client.post("/orders/online", headers=headers, json=ORDER)
    assert r1.json()["order_id"] == r2.json()["order_id"]
    assert client.get("/orders/stats").json()["total"] == 1


def test_same_key_from_different_customers_is_not_replayed(client):
    headers = {"Idempotency-Key": "checkout"}
    r1 = client.post("/orders/online", headers=headers, json=ORDER)
    other = {**ORDER, "customer": {"name": "Jose Cruz", "id": "cust-2"}}
    r2 = client.post("/orders/online", headers=headers, json=other)
    assert r1.status_code == 200 and r2.status_code == 200
    assert r2.headers.get("Idempotent-Replay") is None
    assert r2.json()["order_id"] != r1.json()["order_id"]
    assert r2.json()["customer"]["id"] == "cust-2"
    assert client.get("/orders/stats").json()["total"] == 2
