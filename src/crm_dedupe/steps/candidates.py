from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger

from crm_dedupe.config import DedupeSettings, get_settings
from crm_dedupe.errors import NotFoundError, ValidationError
from crm_dedupe.interfaces import RecordStore
from crm_dedupe.models import DuplicateMatch, Entity
from crm_dedupe.schema import EntityKind, KindSchema, schema_for
from crm_dedupe.steps.collection import check_bounds, enrichment, load_entities
from crm_dedupe.steps.signals import MatchProfile, match_entities, signals_for


class CandidateFinder:
    """Ranks entities that look like duplicates of one source entity.

    The source is an existing record (``source_id``), raw field values
    (``overrides``), or both; explicit values win over the stored ones.
    Every call is a full scan of the kind's collection.
    """

    def __init__(self, store: RecordStore, settings: DedupeSettings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    def find(
        self,
        kind: EntityKind | str,
        source_id: str | None = None,
        overrides: Mapping[str, Any] | None = None,
        limit: int | None = None,
        min_confidence: float | None = None,
    ) -> list[DuplicateMatch]:
        schema = schema_for(kind)
        limit = self._settings.candidate_limit if limit is None else limit
        if min_confidence is None:
            min_confidence = self._settings.candidate_min_confidence
        check_bounds(limit, min_confidence)

        source = self._resolve_source(schema, source_id, overrides or {})
        signals = signals_for(schema.kind, MatchProfile.CANDIDATE)
        entities = load_entities(self._store, schema, self._settings.max_scan_size)

        matches: list[DuplicateMatch] = []
        for candidate in entities:
            if source_id is not None and candidate.id == source_id:
                continue
            result = match_entities(source, candidate, signals)
            if result.matched and result.confidence >= min_confidence:
                matches.append(
                    DuplicateMatch(
                        entity=candidate,
                        match_reasons=result.reasons,
                        confidence=result.confidence,
                    )
                )

        matches.sort(key=lambda match: match.confidence, reverse=True)
        matches = matches[:limit]
        for match in matches:
            match.metadata.update(enrichment(self._store, schema.kind, match.entity))

        logger.debug(
            f"Scanned {len(entities)} {schema.collection} for {source_id or 'field probe'}: "
            f"{len(matches)} candidates >= {min_confidence}"
        )
        return matches

    def _resolve_source(
        self,
        schema: KindSchema,
        source_id: str | None,
        overrides: Mapping[str, Any],
    ) -> Entity:
        for field, value in overrides.items():
            if field not in schema.match_fields:
                raise ValidationError(field, f"not a matchable {schema.kind} field")
            if value is not None and not isinstance(value, str):
                raise ValidationError(field, f"expected a string, got {type(value).__name__}")

        fields: dict[str, Any] = {}
        if source_id is not None:
            document = self._store.get(schema.collection, source_id)
            if document is None:
                raise NotFoundError(schema.kind, source_id)
            fields.update(document)
        fields.update({field: value for field, value in overrides.items() if value is not None})
        fields["id"] = source_id

        source = schema.to_entity(fields)
        if not any(getattr(source, field) for field in schema.match_fields):
            raise ValidationError(
                "source",
                f"none of {', '.join(schema.match_fields)} supplied for {schema.kind}",
            )
        return source
