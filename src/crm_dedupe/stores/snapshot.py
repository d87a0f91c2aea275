"""JSON snapshots of an in-memory store (``{collection: [documents]}``)."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from crm_dedupe.stores.memory import InMemoryRecordStore

_TIMESTAMP_FIELDS = ("created_at", "updated_at", "timestamp")


def load_store(path: Path) -> InMemoryRecordStore:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{path}: expected an object mapping collection names to documents")

    collections: dict[str, list[dict[str, Any]]] = {}
    for name, documents in payload.items():
        if not isinstance(documents, list):
            raise ValueError(f"{path}: collection {name!r} must be a list of documents")
        if not all(isinstance(document, dict) for document in documents):
            raise ValueError(f"{path}: collection {name!r} holds a non-object document")
        collections[name] = [_decode(document) for document in documents]
    return InMemoryRecordStore(collections)


def save_store(store: InMemoryRecordStore, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(store.dump(), handle, indent=2, default=_encode)


def _decode(document: dict[str, Any]) -> dict[str, Any]:
    decoded = dict(document)
    for field in _TIMESTAMP_FIELDS:
        value = decoded.get(field)
        if isinstance(value, str):
            decoded[field] = datetime.fromisoformat(value)
    return decoded


def _encode(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
