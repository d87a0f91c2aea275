from __future__ import annotations

from collections.abc import Mapping
from contextlib import AbstractContextManager
from typing import Any, Protocol

Document = dict[str, Any]


class RecordStore(Protocol):
    """Generic document store the engine reads from and merges into.

    Documents carry their identifier under ``"id"``. ``query`` and ``count``
    take equality filters, which a real store serves from an index.
    """

    def get(self, collection: str, record_id: str) -> Document | None:
        ...

    def query(self, collection: str, **equals: Any) -> list[Document]:
        ...

    def count(self, collection: str, **equals: Any) -> int:
        ...

    def patch(self, collection: str, record_id: str, fields: Mapping[str, Any]) -> None:
        ...

    def delete(self, collection: str, record_id: str) -> None:
        ...

    def insert(self, collection: str, fields: Mapping[str, Any]) -> str:
        ...

    def transaction(self) -> AbstractContextManager["RecordStore"]:
        """All-or-nothing unit of work, serialized against other writers."""
        ...

