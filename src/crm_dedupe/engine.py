from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from crm_dedupe.config import DedupeSettings, get_settings
from crm_dedupe.interfaces import RecordStore
from crm_dedupe.models import DuplicateGroup, DuplicateMatch, MergeRequest
from crm_dedupe.schema import EntityKind
from crm_dedupe.steps.candidates import CandidateFinder
from crm_dedupe.steps.clustering import ClusterFinder
from crm_dedupe.steps.merge import MergeExecutor


class DedupeEngine:
    """Request/response surface over one record store.

    Matching calls are read-only and safe to run concurrently; merges go
    through the store's transaction.
    """

    def __init__(
        self,
        store: RecordStore,
        settings: DedupeSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._candidates = CandidateFinder(store, settings)
        self._clusters = ClusterFinder(store, settings)
        self._merger = MergeExecutor(store, clock=clock)

    def find_duplicates(
        self,
        kind: EntityKind | str,
        source_id: str | None = None,
        limit: int | None = None,
        min_confidence: float | None = None,
        **overrides: Any,
    ) -> list[DuplicateMatch]:
        return self._candidates.find(
            kind,
            source_id=source_id,
            overrides=overrides,
            limit=limit,
            min_confidence=min_confidence,
        )

    def find_all_duplicates(
        self,
        kind: EntityKind | str,
        limit: int | None = None,
        min_confidence: float | None = None,
    ) -> list[DuplicateGroup]:
        return self._clusters.find_all(kind, limit=limit, min_confidence=min_confidence)

    def merge(
        self,
        kind: EntityKind | str,
        primary_id: str,
        duplicate_ids: Sequence[str],
        merged_data: Mapping[str, Any],
    ) -> str:
        return self._merger.merge(kind, primary_id, duplicate_ids, merged_data)

    def merge_request(self, request: MergeRequest) -> str:
        return self.merge(request.kind, request.primary_id, request.duplicate_ids, request.merged_data)
