from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from crm_dedupe.errors import IntegrityError, NotFoundError, ValidationError
from crm_dedupe.interfaces import Document, RecordStore
from crm_dedupe.models import AuditEntry
from crm_dedupe.payloads import validate_merge_data
from crm_dedupe.schema import ACTIVITY_LOG, EntityKind, KindSchema, ReferenceRule, schema_for


class MergeExecutor:
    """Folds duplicates into a primary record inside one store transaction.

    The caller decides the final field values (``merged_data``); the executor
    writes them onto the primary, points every dependent record at the
    primary, deletes the duplicates and appends an audit entry. Any failure
    rolls the whole transaction back.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def merge(
        self,
        kind: EntityKind | str,
        primary_id: str,
        duplicate_ids: Sequence[str],
        merged_data: Any,
    ) -> str:
        schema = schema_for(kind)
        duplicate_ids = list(duplicate_ids)
        _check_ids(primary_id, duplicate_ids)
        fields = validate_merge_data(schema.kind, merged_data)
        _reject_duplicate_references(fields, set(duplicate_ids))

        with self._store.transaction() as tx:
            _require(tx, schema, primary_id)
            for duplicate_id in duplicate_ids:
                _require(tx, schema, duplicate_id)

            now = self._clock()
            tx.patch(schema.collection, primary_id, {**fields, "updated_at": now})

            rewritten = 0
            for duplicate_id in duplicate_ids:
                for rule in schema.references:
                    rewritten += _transfer(tx, rule, duplicate_id, primary_id, now)
                tx.delete(schema.collection, duplicate_id)

            _verify_no_references(tx, schema, duplicate_ids)

            entry = AuditEntry(
                action=schema.merge_action,
                entity_type=str(schema.kind),
                entity_id=primary_id,
                metadata={"merged_from_ids": list(duplicate_ids), "merged_data": fields},
                timestamp=now,
            )
            tx.insert(ACTIVITY_LOG, asdict(entry))

        logger.info(
            f"Merged {len(duplicate_ids)} {schema.collection} into {primary_id} "
            f"({rewritten} dependent records rewritten)"
        )
        return primary_id


def _check_ids(primary_id: str, duplicate_ids: list[str]) -> None:
    if not isinstance(primary_id, str) or not primary_id:
        raise ValidationError("primary_id", "must be a non-empty id")
    if not duplicate_ids:
        raise ValidationError("duplicate_ids", "at least one duplicate is required")
    if any(not isinstance(record_id, str) or not record_id for record_id in duplicate_ids):
        raise ValidationError("duplicate_ids", "ids must be non-empty strings")
    if len(set(duplicate_ids)) != len(duplicate_ids):
        raise ValidationError("duplicate_ids", "contains repeated ids")
    if primary_id in duplicate_ids:
        raise ValidationError("duplicate_ids", f"primary {primary_id} cannot also be a duplicate")


def _reject_duplicate_references(fields: dict[str, Any], duplicate_ids: set[str]) -> None:
    for path, value in _leaves(fields, "merged_data"):
        if isinstance(value, str) and value in duplicate_ids:
            raise ValidationError(path, f"references {value}, which is being merged away")


def _leaves(value: Any, path: str) -> Iterable[tuple[str, Any]]:
    if isinstance(value, dict):
        for key, item in value.items():
            yield from _leaves(item, f"{path}.{key}")
    elif isinstance(value, list):
        for index, item in enumerate(value):
            yield from _leaves(item, f"{path}.{index}")
    else:
        yield path, value


def _require(store: RecordStore, schema: KindSchema, record_id: str) -> None:
    if store.get(schema.collection, record_id) is None:
        raise NotFoundError(schema.kind, record_id)


def _dependents(store: RecordStore, rule: ReferenceRule, record_id: str) -> list[Document]:
    if rule.many:
        return [doc for doc in store.query(rule.collection) if rule.references(doc, record_id)]
    return store.query(rule.collection, **rule.filters(record_id))


def _transfer(
    store: RecordStore,
    rule: ReferenceRule,
    duplicate_id: str,
    primary_id: str,
    now: datetime,
) -> int:
    dependents = _dependents(store, rule, duplicate_id)
    for dependent in dependents:
        if rule.many:
            ids = [value for value in dependent.get(rule.field) or () if value != duplicate_id]
            if primary_id not in ids:
                ids.append(primary_id)
            update: dict[str, Any] = {rule.field: ids}
        else:
            update = {rule.field: primary_id}
        if rule.touch:
            update["updated_at"] = now
        store.patch(rule.collection, dependent["id"], update)
    return len(dependents)


def _verify_no_references(store: RecordStore, schema: KindSchema, duplicate_ids: list[str]) -> None:
    for duplicate_id in duplicate_ids:
        for rule in schema.references:
            leftovers = _dependents(store, rule, duplicate_id)
            if leftovers:
                raise IntegrityError(
                    f"{len(leftovers)} {rule.collection} still reference {duplicate_id} via {rule.field}"
                )
