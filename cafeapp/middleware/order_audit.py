from __future__ import annotations

import json
import logging
import re

from starlette.concurrency import iterate_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from cafeapp.services import audit_log

logger = logging.getLogger("cafeapp.audit")

_CREATE_PATHS = ("/pos/checkout", "/orders/online")
_ACTION_PATH = re.compile(r"^/orders/[^/]+/(accept|ready|complete|cancel)$")


def _kind_for(path: str):
    if path in _CREATE_PATHS:
        return "created"
    m = _ACTION_PATH.match(path)
    if m:
        return m.group(1)
    return None


class OrderAuditMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        if request.method != "POST" or response.status_code != 200:
            return response
        path = request.url.path
        kind = _kind_for(path)
        if kind is None:
            return response

        # Captura el body y reinyéctalo para no consumir el stream
        body_chunks = [section async for section in response.body_iterator]
        body_bytes = b"".join(body_chunks)
        response.body_iterator = iterate_in_threadpool(iter([body_bytes]))

        try:
            data = json.loads(body_bytes.decode("utf-8"))
        except ValueError:
            return response
        if not isinstance(data, dict) or data.get("replay"):
            return response

        try:
            audit_log.record(kind, data, path=path)
        except OSError:
            # la venta ya quedó guardada; la bitácora no la revierte
            logger.exception("could not append audit event for %s", data.get("order_id"))
        return response


def install_order_audit(app):
    app.add_middleware(OrderAuditMiddleware)
