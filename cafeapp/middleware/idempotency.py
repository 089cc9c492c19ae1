"""
Idempotency-Key para los POST que crean órdenes.

La primera respuesta 200 que trae la clave de éxito se guarda; un reintento
con la misma clave (y la misma sesión, o el mismo body cuando no hay sesión)
recibe esa respuesta marcada con `replay: true` en vez de crear otra orden.
"""
import asyncio
import hashlib
import json
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from cafeapp.core.config import settings

# path -> clave que debe venir en el JSON de una respuesta exitosa
ALLOW = {
    "/pos/checkout": "order_id",
    "/orders/online": "order_id",
}


@dataclass
class CachedResponse:
    status: int
    media_type: Optional[str]
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    expires_at: float = 0.0

    def replay(self) -> Response:
        body = self.body
        js = _json_or_none(body)
        if isinstance(js, dict):
            js["replay"] = True
            body = json.dumps(js).encode("utf-8")
        headers = _drop_content_length(self.headers)
        headers["Idempotent-Replay"] = "true"
        return Response(content=body, status_code=self.status, media_type=self.media_type, headers=headers)


class ResponseCache:
    def __init__(self, ttl=3600, max_entries=2048):
        self.ttl = ttl
        self.max_entries = max_entries
        self._entries: Dict[str, CachedResponse] = {}

    def get(self, key) -> Optional[CachedResponse]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at < time.monotonic():
            self._entries.pop(key, None)
            return None
        return entry

    def put(self, key, entry: CachedResponse) -> None:
        if key not in self._entries and len(self._entries) >= self.max_entries:
            # FIFO: se va la entrada más vieja
            self._entries.pop(next(iter(self._entries)))
        entry.expires_at = time.monotonic() + self.ttl
        self._entries[key] = entry

    def clear(self) -> None:
        self._entries.clear()


class KeyLocks:
    """Un asyncio.Lock por clave: dos reintentos simultáneos no corren el handler dos veces."""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def for_key(self, key) -> asyncio.Lock:
        return self._locks.setdefault(key, asyncio.Lock())


def _drop_content_length(headers: dict) -> dict:
    return {k: v for k, v in headers.items() if k.lower() != "content-length"}


def _json_or_none(body: bytes):
    try:
        return json.loads(body.decode("utf-8"))
    except ValueError:
        return None


idem_cache = ResponseCache(ttl=settings.idempotency_ttl)
_locks = KeyLocks()


class OrderIdempotency(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        success_key = ALLOW.get(request.url.path) if request.method == "POST" else None
        idem_key = request.headers.get("Idempotency-Key")
        if not success_key or not idem_key:
            return await call_next(request)

        # la sesión forma parte de la clave: dos cajeros no comparten respuestas.
        # Sin sesión (pedido online) la clave se ata al body del pedido
        scope = request.headers.get("X-Session-Token")
        if not scope:
            scope = "body-" + hashlib.sha256(await request.body()).hexdigest()
        cache_key = f"{request.url.path}:{scope}:{idem_key}"

        async with _locks.for_key(cache_key):
            cached = idem_cache.get(cache_key)
            if cached is not None:
                return cached.replay()

            response = await call_next(request)
            body = b"".join([chunk async for chunk in response.body_iterator])
            entry = CachedResponse(
                status=response.status_code,
                media_type=response.media_type,
                body=body,
                headers=_drop_content_length(dict(response.headers)),
            )

            js = _json_or_none(body) if response.status_code == 200 else None
            if isinstance(js, dict) and success_key in js:
                idem_cache.put(cache_key, entry)

            return Response(
                content=entry.body,
                status_code=entry.status,
                media_type=entry.media_type,
                headers=entry.headers,
            )


def install_idempotency(app):
    app.add_middleware(OrderIdempotency)
