"""Duplicate detection and relationship-preserving merge for CRM contacts and companies."""

from crm_dedupe.engine import DedupeEngine
from crm_dedupe.errors import DedupeError, IntegrityError, NotFoundError, ScaleWarning, ValidationError
from crm_dedupe.models import Company, Contact, DuplicateGroup, DuplicateMatch, MatchResult, MergeRequest
from crm_dedupe.schema import EntityKind

__all__ = [
    "DedupeEngine",
    "DedupeError",
    "IntegrityError",
    "NotFoundError",
    "ScaleWarning",
    "ValidationError",
    "Company",
    "Contact",
    "DuplicateGroup",
    "DuplicateMatch",
    "MatchResult",
    "MergeRequest",
    "EntityKind",
]
