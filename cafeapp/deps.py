from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from cafeapp.core.config import settings
from cafeapp.core.context import SessionRegistry, StaffSession
from cafeapp.core.errors import CafeError
from cafeapp.db import SessionLocal
from cafeapp.services.board import OrderBoard
from cafeapp.services.inventory import InventoryService
from cafeapp.services.orders import OrderService
from cafeapp.services.repository import PreferencesRepository
from cafeapp.services.store import DocumentStore, MemoryDocumentStore, SqlDocumentStore


@lru_cache(maxsize=None)
def get_store() -> DocumentStore:
    if settings.store_backend == "memory":
        return MemoryDocumentStore()
    return SqlDocumentStore(SessionLocal)


@lru_cache(maxsize=None)
def get_sessions() -> SessionRegistry:
    return SessionRegistry()


@lru_cache(maxsize=None)
def get_board() -> OrderBoard:
    return OrderBoard(get_store())


def get_order_service(store: DocumentStore = Depends(get_store)) -> OrderService:
    return OrderService(store)


def get_inventory_service(store: DocumentStore = Depends(get_store)) -> InventoryService:
    return InventoryService(store)


def get_preferences(store: DocumentStore = Depends(get_store)) -> PreferencesRepository:
    return PreferencesRepository(store)


def current_session(
    x_session_token: Optional[str] = Header(default=None),
    sessions: SessionRegistry = Depends(get_sessions),
) -> StaffSession:
    try:
        return sessions.get(x_session_token)
    except CafeError as e:
        raise http_error(e)


def http_error(e: CafeError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.as_detail())
