"""
Sesión explícita del personal: se crea en login y se descarta en logout.

Cada StaffSession es dueña de su carrito del POS y sus favoritos; los routers
la reciben como dependencia en lugar de leer estado global.
"""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Set

from cafeapp.core.errors import SessionRequired
from cafeapp.services.cart import Cart

logger = logging.getLogger("cafeapp.session")


@dataclass
class StaffSession:
    token: str
    user_id: str
    display_name: str
    role: str = "staff"
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cart: Cart = field(default_factory=Cart)
    favorites: Set[str] = field(default_factory=set)

    def toggle_favorite(self, name: str) -> bool:
        if name in self.favorites:
            self.favorites.discard(name)
            return False
        self.favorites.add(name)
        return True


class SessionRegistry:
    def __init__(self):
        self._sessions: Dict[str, StaffSession] = {}
        self._lock = threading.Lock()

    def open(self, user_id: str, display_name: str, role: str = "staff") -> StaffSession:
        s = StaffSession(token=uuid.uuid4().hex, user_id=user_id, display_name=display_name, role=role)
        with self._lock:
            self._sessions[s.token] = s
        logger.info("session opened for %s (%s)", user_id, role)
        return s

    def get(self, token: Optional[str]) -> StaffSession:
        with self._lock:
            s = self._sessions.get(token or "")
        if s is None:
            raise SessionRequired("missing or expired session token")
        return s

    def close(self, token: Optional[str]) -> bool:
        with self._lock:
            s = self._sessions.pop(token or "", None)
        if s is not None:
            s.cart.clear()
            logger.info("session closed for %s", s.user_id)
        return s is not None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
