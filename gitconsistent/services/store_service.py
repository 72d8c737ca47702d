"""Document store backends for habits, logs, journal entries and settings.

Two interchangeable backends expose the same small document API:
- ``JsonDocumentStore``: one JSON file per collection under ``DB_DIR``
  (local development and tests).
- ``FirestoreDocumentStore``: Cloud Firestore through firebase-admin.

Documents come back as plain dicts with their id under ``"id"``.
Filters are ``(field, op, value)`` tuples; ordering is ``(field, "asc"|"desc")``.
"""

from __future__ import annotations

import logging
import operator
import os
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from flask import current_app

from gitconsistent.errors import NotFound
from gitconsistent.utils.ids import new_id
from gitconsistent.utils.io_utils import ensure_dir, read_json, write_json

logger = logging.getLogger(__name__)

HABITS = "habits"
HABIT_LOGS = "habitLogs"
JOURNAL_ENTRIES = "journalEntries"
USER_SETTINGS = "userSettings"

_ID_PREFIXES = {
    HABITS: "habit",
    HABIT_LOGS: "log",
    JOURNAL_ENTRIES: "journal",
}

Filter = Tuple[str, str, Any]
Order = Tuple[str, str]

_OPS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda value, options: value in options,
}

STORE_EXTENSION_KEY = "gitconsistent.store"


class DocumentStore:
    """Interface shared by the store backends."""

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        raise NotImplementedError

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        raise NotImplementedError

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Order] = (),
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def batch(self):
        raise NotImplementedError

    def server_timestamp(self) -> Any:
        raise NotImplementedError


# -------- JSON file backend --------

def _matches(doc: Dict[str, Any], filters: Iterable[Filter]) -> bool:
    for field, op, value in filters:
        if op not in _OPS:
            raise ValueError(f"Unsupported filter operator: {op}")
        # Firestore never matches documents that lack the filtered field
        if field not in doc:
            return False
        try:
            if not _OPS[op](doc[field], value):
                return False
        except TypeError:
            return False
    return True


def _sort_docs(docs: List[Dict[str, Any]], order_by: Sequence[Order]) -> List[Dict[str, Any]]:
    # Stable sorts applied from the last key to the first
    for field, direction in reversed(list(order_by)):
        present = [d for d in docs if d.get(field) is not None]
        missing = [d for d in docs if d.get(field) is None]
        present.sort(key=lambda d: d[field], reverse=(direction == "desc"))
        docs = present + missing
    return docs


class _JsonBatch:
    def __init__(self, store: "JsonDocumentStore"):
        self._store = store
        self._ops: List[Tuple[str, str, str, Dict[str, Any], bool]] = []

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = new_id(_ID_PREFIXES.get(collection, "doc"))
        self._ops.append(("set", collection, doc_id, dict(data), False))
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        self._ops.append(("set", collection, doc_id, dict(data), merge))

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._ops.append(("update", collection, doc_id, dict(data), True))

    def delete(self, collection: str, doc_id: str) -> None:
        self._ops.append(("delete", collection, doc_id, {}, False))

    def commit(self) -> None:
        self._store._apply(self._ops)
        self._ops = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.commit()
        return False


class JsonDocumentStore(DocumentStore):
    """JSON-backed registry: ``{doc_id: data}`` per collection file."""

    def __init__(self, db_dir: str):
        self.db_dir = db_dir
        self._lock = threading.RLock()
        ensure_dir(db_dir)

    def _path(self, collection: str) -> str:
        return os.path.join(self.db_dir, f"{collection}.json")

    def _load_db(self, collection: str) -> Dict[str, Dict[str, Any]]:
        data = read_json(self._path(collection), default=None)
        if not isinstance(data, dict):
            return {}
        return data

    def _save_db(self, collection: str, data: Dict[str, Dict[str, Any]]) -> None:
        write_json(self._path(collection), data)

    def _apply(self, ops) -> None:
        with self._lock:
            loaded: Dict[str, Dict[str, Dict[str, Any]]] = {}
            for kind, collection, doc_id, data, merge in ops:
                if collection not in loaded:
                    loaded[collection] = self._load_db(collection)
                db = loaded[collection]
                if kind == "delete":
                    db.pop(doc_id, None)
                elif kind == "update":
                    if doc_id not in db:
                        raise NotFound(f"No document to update: {collection}/{doc_id}")
                    db[doc_id].update(data)
                elif merge and doc_id in db:
                    db[doc_id].update(data)
                else:
                    db[doc_id] = data
            # Nothing is written until every op applied cleanly
            for collection, db in loaded.items():
                self._save_db(collection, db)

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        batch = _JsonBatch(self)
        doc_id = batch.create(collection, data)
        batch.commit()
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        self._apply([("set", collection, doc_id, dict(data), merge)])

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._apply([("update", collection, doc_id, dict(data), True)])

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            rec = self._load_db(collection).get(doc_id)
        if not isinstance(rec, dict):
            return None
        return {"id": doc_id, **rec}

    def delete(self, collection: str, doc_id: str) -> None:
        self._apply([("delete", collection, doc_id, {}, False)])

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Order] = (),
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            db = self._load_db(collection)
        docs = [{"id": doc_id, **rec} for doc_id, rec in db.items() if _matches(rec, filters)]
        docs = _sort_docs(docs, order_by)
        if limit is not None:
            docs = docs[:limit]
        return docs

    def batch(self) -> _JsonBatch:
        return _JsonBatch(self)

    def server_timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat()


# -------- Firestore backend --------

class _FirestoreBatch:
    def __init__(self, client):
        self._client = client
        self._batch = client.batch()

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        ref = self._client.collection(collection).document()
        self._batch.set(ref, data)
        return ref.id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        self._batch.set(self._client.collection(collection).document(doc_id), data, merge=merge)

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._batch.update(self._client.collection(collection).document(doc_id), data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._batch.delete(self._client.collection(collection).document(doc_id))

    def commit(self) -> None:
        self._batch.commit()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.commit()
        return False


class FirestoreDocumentStore(DocumentStore):
    def __init__(self, client=None):
        from firebase_admin import firestore

        self._firestore = firestore
        self.client = client if client is not None else firestore.client()

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        _, ref = self.client.collection(collection).add(data)
        return ref.id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        self.client.collection(collection).document(doc_id).set(data, merge=merge)

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.client.collection(collection).document(doc_id).update(data)

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        snap = self.client.collection(collection).document(doc_id).get()
        if not snap.exists:
            return None
        return {"id": snap.id, **(snap.to_dict() or {})}

    def delete(self, collection: str, doc_id: str) -> None:
        self.client.collection(collection).document(doc_id).delete()

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Order] = (),
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        from google.cloud.firestore_v1.base_query import FieldFilter

        q = self.client.collection(collection)
        for field, op, value in filters:
            q = q.where(filter=FieldFilter(field, op, value))
        for field, direction in order_by:
            q = q.order_by(
                field,
                direction=self._firestore.Query.DESCENDING if direction == "desc" else self._firestore.Query.ASCENDING,
            )
        if limit is not None:
            q = q.limit(limit)
        return [{"id": snap.id, **(snap.to_dict() or {})} for snap in q.stream()]

    def batch(self) -> _FirestoreBatch:
        return _FirestoreBatch(self.client)

    def server_timestamp(self) -> Any:
        return self._firestore.SERVER_TIMESTAMP


def create_store(cfg) -> DocumentStore:
    """Build the backend selected by ``STORE_BACKEND``."""
    backend = (cfg.get("STORE_BACKEND") or "json").lower()
    if backend == "firestore":
        from gitconsistent.services.firebase_service import initialize_firebase

        initialize_firebase(cfg)
        logger.info("Using Firestore document store")
        return FirestoreDocumentStore()
    if backend != "json":
        raise ValueError(f"Unknown STORE_BACKEND: {backend}")
    logger.info("Using JSON document store at %s", cfg["DB_DIR"])
    return JsonDocumentStore(cfg["DB_DIR"])


def get_store() -> DocumentStore:
    return current_app.extensions[STORE_EXTENSION_KEY]
