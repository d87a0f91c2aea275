from __future__ import annotations


class DedupeError(Exception):
    """Base class for errors raised by the dedupe engine."""


class NotFoundError(DedupeError):
    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class ValidationError(DedupeError):
    """Caller input is malformed; ``field`` names the offending argument."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class IntegrityError(DedupeError):
    """A merge would leave a dependent record pointing at a deleted entity."""


class ScaleWarning(UserWarning):
    """A full collection scan exceeded the configured size bound."""

    def __init__(self, collection: str, size: int, bound: int) -> None:
        super().__init__(f"scanning {size} {collection} exceeds max_scan_size={bound}")
        self.collection = collection
        self.size = size
        self.bound = bound
