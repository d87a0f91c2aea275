"""Collection scans and read-only enrichment shared by both finders."""

from __future__ import annotations

import warnings
from typing import Any

from loguru import logger

from crm_dedupe.errors import ScaleWarning, ValidationError
from crm_dedupe.interfaces import RecordStore
from crm_dedupe.models import Company, Entity
from crm_dedupe.schema import COMPANIES, CONTACTS, EntityKind, KindSchema


def load_entities(store: RecordStore, schema: KindSchema, max_scan_size: int) -> list[Entity]:
    """Every entity of the kind, in collection order."""
    documents = store.query(schema.collection)
    if len(documents) > max_scan_size:
        logger.warning(
            f"Full scan of {len(documents)} {schema.collection} exceeds max_scan_size={max_scan_size}"
        )
        warnings.warn(ScaleWarning(schema.collection, len(documents), max_scan_size), stacklevel=3)
    return [schema.to_entity(document) for document in documents]


def enrichment(store: RecordStore, kind: EntityKind, entity: Entity) -> dict[str, Any]:
    if kind == EntityKind.COMPANY:
        return {"contact_count": store.count(CONTACTS, company_id=entity.id)}

    company = None
    if entity.company_id:
        document = store.get(COMPANIES, entity.company_id)
        if document is not None:
            company = Company.from_document(document)
    return {"company": company}


def check_bounds(limit: int, min_confidence: float) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError("limit", f"must be a positive integer, got {limit!r}")
    if isinstance(min_confidence, bool) or not isinstance(min_confidence, (int, float)):
        raise ValidationError("min_confidence", f"must be a number, got {min_confidence!r}")
    if not 0.0 <= min_confidence <= 1.0:
        raise ValidationError("min_confidence", f"must be within [0, 1], got {min_confidence!r}")
