from __future__ import annotations

import json
import os
import threading

__all__ = ["append_jsonl_atomic", "iter_jsonl"]

_LOCK = threading.Lock()


def append_jsonl_atomic(path, obj, ensure_ascii: bool = False) -> None:
    """
    Anexa una línea JSON (JSONL) con flush+fsync. No reescribe el archivo
    completo, así que el append sigue siendo O(1).
    """
    d = os.path.dirname(str(path)) or "."
    os.makedirs(d, exist_ok=True)
    line = json.dumps(obj, ensure_ascii=ensure_ascii, default=str)
    with _LOCK:
        with open(path, "a", encoding="utf-8", newline="\n") as f:
            f.write(line + "\n")
            f.flush()
            os.fsync(f.fileno())


def iter_jsonl(path):
    """Recorre un JSONL saltando líneas vacías o corruptas."""
    if not os.path.exists(path):
        return
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except ValueError:
                continue
