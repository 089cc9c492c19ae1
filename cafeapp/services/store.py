"""
Document store: colecciones clave → documento JSON.

Operaciones: create (sin sobrescribir), update parcial (con compare-and-set
opcional vía `expected`), get, list, delete y subscribe. Los suscriptores
reciben el contenido completo de la colección después de cada escritura
exitosa (y una vez al suscribirse).

Cualquier fallo de escritura sale como StoreWriteFailed; un compare-and-set
perdido sale como ConcurrentUpdate.
"""
from __future__ import annotations

import copy
import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cafeapp.core.errors import ConcurrentUpdate, StoreWriteFailed
from cafeapp.models.document import Document

logger = logging.getLogger("cafeapp.store")

Doc = Dict[str, Any]
Subscriber = Callable[[List[Doc]], None]


class DocumentStore:
    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._sub_lock = threading.Lock()

    # --- interfaz ---
    def create(self, collection: str, doc_id: str, doc: Doc) -> Doc:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, partial: Doc, expected: Optional[Doc] = None) -> Doc:
        raise NotImplementedError

    def put(self, collection: str, doc_id: str, doc: Doc) -> Doc:
        raise NotImplementedError

    def get(self, collection: str, doc_id: str) -> Optional[Doc]:
        raise NotImplementedError

    def list(self, collection: str) -> List[Doc]:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> bool:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    # --- suscripciones ---
    def subscribe(self, collection: str, callback: Subscriber) -> Callable[[], None]:
        with self._sub_lock:
            self._subscribers.setdefault(collection, []).append(callback)
        callback(self.list(collection))

        def unsubscribe():
            with self._sub_lock:
                subs = self._subscribers.get(collection, [])
                if callback in subs:
                    subs.remove(callback)

        return unsubscribe

    def _notify(self, collection: str) -> None:
        with self._sub_lock:
            subs = list(self._subscribers.get(collection, []))
        if not subs:
            return
        snapshot = self.list(collection)
        for cb in subs:
            try:
                cb(snapshot)
            except Exception:
                # un suscriptor roto no deshace la escritura ya confirmada
                logger.exception("subscriber failed for collection %s", collection)

    def _notify_all(self) -> None:
        with self._sub_lock:
            collections = list(self._subscribers)
        for collection in collections:
            self._notify(collection)


def _mismatch(current: Doc, expected: Optional[Doc]) -> bool:
    if not expected:
        return False
    return any(current.get(k) != v for k, v in expected.items())


class MemoryDocumentStore(DocumentStore):
    def __init__(self):
        super().__init__()
        self._data: Dict[str, Dict[str, Doc]] = {}
        self._lock = threading.Lock()

    def create(self, collection, doc_id, doc):
        with self._lock:
            coll = self._data.setdefault(collection, {})
            if doc_id in coll:
                raise StoreWriteFailed(f"{collection}/{doc_id} already exists")
            coll[doc_id] = copy.deepcopy(doc)
            out = copy.deepcopy(coll[doc_id])
        self._notify(collection)
        return out

    def update(self, collection, doc_id, partial, expected=None):
        with self._lock:
            current = self._data.get(collection, {}).get(doc_id)
            if current is None:
                raise StoreWriteFailed(f"{collection}/{doc_id} does not exist")
            if _mismatch(current, expected):
                raise ConcurrentUpdate(f"{collection}/{doc_id} changed since it was read")
            merged = {**current, **copy.deepcopy(partial)}
            self._data[collection][doc_id] = merged
            out = copy.deepcopy(merged)
        self._notify(collection)
        return out

    def put(self, collection, doc_id, doc):
        with self._lock:
            self._data.setdefault(collection, {})[doc_id] = copy.deepcopy(doc)
        self._notify(collection)
        return copy.deepcopy(doc)

    def get(self, collection, doc_id):
        with self._lock:
            doc = self._data.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def list(self, collection):
        with self._lock:
            return [copy.deepcopy(d) for d in self._data.get(collection, {}).values()]

    def delete(self, collection, doc_id):
        with self._lock:
            removed = self._data.get(collection, {}).pop(doc_id, None)
        if removed is not None:
            self._notify(collection)
        return removed is not None

    def clear(self):
        with self._lock:
            self._data.clear()
        self._notify_all()


class SqlDocumentStore(DocumentStore):
    """Documentos JSON en la tabla `document` vía SQLAlchemy."""

    def __init__(self, session_factory):
        super().__init__()
        self._session_factory = session_factory

    def _row(self, db, collection, doc_id) -> Optional[Document]:
        return db.query(Document).filter_by(collection=collection, doc_id=doc_id).first()

    def create(self, collection, doc_id, doc):
        db = self._session_factory()
        try:
            db.add(Document(collection=collection, doc_id=doc_id, body=json.dumps(doc)))
            db.commit()
        except IntegrityError:
            db.rollback()
            raise StoreWriteFailed(f"{collection}/{doc_id} already exists")
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("create %s/%s failed", collection, doc_id)
            raise StoreWriteFailed(str(e))
        finally:
            db.close()
        self._notify(collection)
        return copy.deepcopy(doc)

    def update(self, collection, doc_id, partial, expected=None):
        db = self._session_factory()
        try:
            # compare-and-set: el UPDATE sólo aplica si el body no cambió desde la lectura
            row = self._row(db, collection, doc_id)
            if row is None:
                raise StoreWriteFailed(f"{collection}/{doc_id} does not exist")
            current = json.loads(row.body)
            if _mismatch(current, expected):
                raise ConcurrentUpdate(f"{collection}/{doc_id} changed since it was read")
            merged = {**current, **partial}
            n = (
                db.query(Document)
                .filter_by(id=row.id, body=row.body)
                .update({Document.body: json.dumps(merged)}, synchronize_session=False)
            )
            if n != 1:
                db.rollback()
                raise ConcurrentUpdate(f"{collection}/{doc_id} changed since it was read")
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("update %s/%s failed", collection, doc_id)
            raise StoreWriteFailed(str(e))
        finally:
            db.close()
        self._notify(collection)
        return merged

    def put(self, collection, doc_id, doc):
        db = self._session_factory()
        try:
            row = self._row(db, collection, doc_id)
            if row is None:
                db.add(Document(collection=collection, doc_id=doc_id, body=json.dumps(doc)))
            else:
                row.body = json.dumps(doc)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("put %s/%s failed", collection, doc_id)
            raise StoreWriteFailed(str(e))
        finally:
            db.close()
        self._notify(collection)
        return copy.deepcopy(doc)

    def get(self, collection, doc_id):
        db = self._session_factory()
        try:
            row = self._row(db, collection, doc_id)
            return json.loads(row.body) if row else None
        finally:
            db.close()

    def list(self, collection):
        db = self._session_factory()
        try:
            rows = db.query(Document).filter_by(collection=collection).order_by(Document.id).all()
            return [json.loads(r.body) for r in rows]
        finally:
            db.close()

    def delete(self, collection, doc_id):
        db = self._session_factory()
        try:
            n = db.query(Document).filter_by(collection=collection, doc_id=doc_id).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("delete %s/%s failed", collection, doc_id)
            raise StoreWriteFailed(str(e))
        finally:
            db.close()
        if n:
            self._notify(collection)
        return bool(n)

    def clear(self):
        db = self._session_factory()
        try:
            db.query(Document).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("clear failed")
            raise StoreWriteFailed(str(e))
        finally:
            db.close()
        self._notify_all()
