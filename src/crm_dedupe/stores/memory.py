from __future__ import annotations

import copy
import threading
import uuid
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from loguru import logger

from crm_dedupe.interfaces import Document


class InMemoryRecordStore:
    """Local reference store.

    Collections keep insertion order, which is the iteration order the
    finders see. Reads hand out deep copies. A single re-entrant lock
    serializes transactions against every other read and write, and a failed
    transaction restores the snapshot taken when it started.

    That snapshot is a deep copy of every collection, so a transaction costs
    time proportional to the whole store rather than to the records it
    touches. Fine for tests and JSON snapshots; a database-backed store
    should use its own transactions instead.
    """

    def __init__(self, collections: Mapping[str, Iterable[Mapping[str, Any]]] | None = None) -> None:
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, Document]] = {}
        for name, documents in (collections or {}).items():
            self._collections.setdefault(name, {})
            for document in documents:
                self.insert(name, document)

    def get(self, collection: str, record_id: str) -> Document | None:
        with self._lock:
            document = self._collections.get(collection, {}).get(record_id)
            return copy.deepcopy(document) if document is not None else None

    def query(self, collection: str, **equals: Any) -> list[Document]:
        with self._lock:
            return [copy.deepcopy(document) for document in self._scan(collection, equals)]

    def count(self, collection: str, **equals: Any) -> int:
        with self._lock:
            return sum(1 for _ in self._scan(collection, equals))

    def patch(self, collection: str, record_id: str, fields: Mapping[str, Any]) -> None:
        with self._lock:
            document = self._collections.get(collection, {}).get(record_id)
            if document is None:
                raise KeyError(f"{collection}/{record_id}")
            updates = copy.deepcopy(dict(fields))
            updates.pop("id", None)
            document.update(updates)

    def delete(self, collection: str, record_id: str) -> None:
        with self._lock:
            documents = self._collections.get(collection, {})
            if record_id not in documents:
                raise KeyError(f"{collection}/{record_id}")
            del documents[record_id]

    def insert(self, collection: str, fields: Mapping[str, Any]) -> str:
        with self._lock:
            documents = self._collections.setdefault(collection, {})
            record_id = str(fields.get("id") or uuid.uuid4().hex)
            if record_id in documents:
                raise KeyError(f"{collection}/{record_id} already exists")
            documents[record_id] = {**copy.deepcopy(dict(fields)), "id": record_id}
            return record_id

    @contextmanager
    def transaction(self) -> Iterator["InMemoryRecordStore"]:
        with self._lock:
            snapshot = copy.deepcopy(self._collections)
            try:
                yield self
            except BaseException:
                self._collections = snapshot
                logger.warning("Transaction rolled back")
                raise

    def collection_names(self) -> list[str]:
        with self._lock:
            return list(self._collections)

    def dump(self) -> dict[str, list[Document]]:
        with self._lock:
            return {name: [copy.deepcopy(doc) for doc in docs.values()] for name, docs in self._collections.items()}

    def _scan(self, collection: str, equals: Mapping[str, Any]) -> Iterator[Document]:
        for document in self._collections.get(collection, {}).values():
            if all(document.get(key) == value for key, value in equals.items()):
                yield document
