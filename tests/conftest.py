import os
import tempfile

# La configuración se lee al importar cafeapp: apuntar DB y bitácora a un tmp antes
_TMP = tempfile.mkdtemp(prefix="cafeapp-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP, "test.db").replace("\\", "/")
os.environ["AUDIT_FILE"] = os.path.join(_TMP, "order_audit.jsonl")
os.environ["STORE_BACKEND"] = "sql"

import pytest
from fastapi.testclient import TestClient

from cafeapp import deps
from cafeapp.main import app
from cafeapp.middleware.idempotency import idem_cache
from cafeapp.services.store import MemoryDocumentStore


def _reset():
    deps.get_store().clear()
    deps.get_store.cache_clear()
    deps.get_board.cache_clear()
    deps.get_sessions.cache_clear()
    idem_cache.clear()
    if os.path.exists(os.environ["AUDIT_FILE"]):
        os.remove(os.environ["AUDIT_FILE"])


@pytest.fixture
def client():
    _reset()
    with TestClient(app) as c:
        yield c
    _reset()


@pytest.fixture
def staff(client):
    r = client.post("/session/login", json={"user_id": "u-1", "display_name": "Maria"})
    assert r.status_code == 200, r.text
    return {"X-Session-Token": r.json()["token"]}


@pytest.fixture
def admin(client):
    r = client.post("/session/login", json={"user_id": "u-0", "display_name": "Boss", "role": "admin"})
    assert r.status_code == 200, r.text
    return {"X-Session-Token": r.json()["token"]}


@pytest.fixture
def store():
    return MemoryDocumentStore()
