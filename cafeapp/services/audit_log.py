"""Bitácora de órdenes en JSONL: escritura de eventos y consultas por rango."""
from __future__ import annotations

import threading
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from cafeapp.core.config import settings
from cafeapp.utils.atomic_file import append_jsonl_atomic, iter_jsonl


def audit_path() -> Path:
    return Path(settings.audit_file)


def _parse_ts(ts: Optional[str]) -> Optional[datetime]:
    if not ts:
        return None
    try:
        if ts.endswith("Z"):
            ts = ts.replace("Z", "+00:00")
        return datetime.fromisoformat(ts)
    except ValueError:
        return None


# (order_id, status) ya escritos, por archivo; se leen del disco una sola vez
_seen: Dict[str, Set[Tuple[Any, Any]]] = {}
_seen_lock = threading.Lock()


def _seen_for(path: Path) -> Set[Tuple[Any, Any]]:
    key = str(path)
    if not path.exists():
        # archivo borrado o rotado: se vuelve a leer cuando exista
        _seen.pop(key, None)
        return set()
    if key not in _seen:
        _seen[key] = {(ev.get("order_id"), ev.get("status")) for ev in iter_jsonl(path)}
    return _seen[key]


def already_logged(order_id: str, status: str) -> bool:
    with _seen_lock:
        return (order_id, status) in _seen_for(audit_path())


def record(kind: str, order: Dict[str, Any], *, path: str = "", staff: Optional[str] = None) -> Optional[dict]:
    """Anexa un evento; (order_id, status) ya registrado no se duplica."""
    order_id = order.get("order_id")
    status = order.get("status")
    if not order_id:
        return None
    ev = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "kind": kind,
        "order_id": order_id,
        "source": order.get("source"),
        "status": status,
        "total": order.get("total"),
        "staff": staff or order.get("handled_by"),
        "path": path,
    }
    target = audit_path()
    with _seen_lock:
        if (order_id, status) in _seen_for(target):
            return None
        append_jsonl_atomic(target, ev)
        _seen_for(target).add((order_id, status))
    return ev


def events_in_range(start_d: date, end_d: date) -> dict:
    # rango inclusivo [start, end] por fecha UTC
    events: List[Dict[str, Any]] = []
    by_kind: Dict[str, int] = {}
    for ev in iter_jsonl(audit_path()):
        dt = _parse_ts(ev.get("ts"))
        if not dt:
            continue
        d = dt.astimezone(timezone.utc).date()
        if d < start_d or d > end_d:
            continue
        events.append(ev)
        k = str(ev.get("kind") or "unknown")
        by_kind[k] = by_kind.get(k, 0) + 1
    return {
        "file_exists": audit_path().exists(),
        "range": {"start": start_d.isoformat(), "end": end_d.isoformat()},
        "counts": {"total": len(events), "by_kind": by_kind},
        "events": events,
    }
