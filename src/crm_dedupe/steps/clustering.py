from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from crm_dedupe.config import DedupeSettings, get_settings
from crm_dedupe.interfaces import RecordStore
from crm_dedupe.models import DuplicateGroup, DuplicateMatch, Entity
from crm_dedupe.schema import EntityKind, schema_for
from crm_dedupe.steps.collection import check_bounds, enrichment, load_entities
from crm_dedupe.steps.signals import MatchProfile, MatchSignal, match_entities, signals_for


class ClusterFinder:
    """Partitions a whole collection into duplicate groups in one greedy pass.

    Grouping is not transitive and depends on collection order: whichever
    entity is visited first becomes the primary, and anything it claims is
    never compared again. A chain A~B~C with A !~ C can therefore end up as
    {A: [B]} with C left ungrouped.
    """

    def __init__(self, store: RecordStore, settings: DedupeSettings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    def find_all(
        self,
        kind: EntityKind | str,
        limit: int | None = None,
        min_confidence: float | None = None,
    ) -> list[DuplicateGroup]:
        schema = schema_for(kind)
        limit = self._settings.cluster_limit if limit is None else limit
        if min_confidence is None:
            min_confidence = self._settings.cluster_min_confidence
        check_bounds(limit, min_confidence)

        entities = load_entities(self._store, schema, self._settings.max_scan_size)
        signals = signals_for(schema.kind, MatchProfile.CLUSTER)
        groups = cluster_entities(entities, signals, min_confidence=min_confidence, limit=limit)

        for group in groups:
            group.metadata.update(enrichment(self._store, schema.kind, group.primary))
            for match in group.duplicates:
                match.metadata.update(enrichment(self._store, schema.kind, match.entity))

        logger.debug(f"Clustered {len(entities)} {schema.collection} into {len(groups)} groups")
        return groups


def cluster_entities(
    entities: Sequence[Entity],
    signals: Sequence[MatchSignal],
    *,
    min_confidence: float,
    limit: int,
) -> list[DuplicateGroup]:
    """Greedy forward pass; stops once ``limit`` groups have been formed."""
    groups: list[DuplicateGroup] = []
    visited: frozenset[str] = frozenset()

    for primary in entities:
        if len(groups) >= limit:
            break
        if primary.id in visited:
            continue
        matches = _matches_for(primary, entities, visited, signals, min_confidence)
        if not matches:
            continue
        groups.append(DuplicateGroup(primary=primary, duplicates=matches))
        visited = visited | {primary.id, *(match.entity.id for match in matches)}

    return groups


def _matches_for(
    primary: Entity,
    entities: Sequence[Entity],
    visited: frozenset[str],
    signals: Sequence[MatchSignal],
    min_confidence: float,
) -> list[DuplicateMatch]:
    # Comparisons against a fixed primary are independent of each other.
    matches: list[DuplicateMatch] = []
    for other in entities:
        if other.id == primary.id or other.id in visited:
            continue
        result = match_entities(primary, other, signals)
        if result.matched and result.confidence >= min_confidence:
            matches.append(
                DuplicateMatch(entity=other, match_reasons=result.reasons, confidence=result.confidence)
            )
    matches.sort(key=lambda match: match.confidence, reverse=True)
    return matches
