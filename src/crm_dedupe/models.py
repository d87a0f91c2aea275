from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union


@dataclass(slots=True)
class Contact:
    """Contact fields that take part in duplicate matching."""

    id: str | None
    last_name: str | None = None
    first_name: str | None = None
    email: str | None = None
    phone: str | None = None
    company_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Contact":
        return cls(
            id=document.get("id"),
            last_name=document.get("last_name"),
            first_name=document.get("first_name"),
            email=document.get("email"),
            phone=document.get("phone"),
            company_id=document.get("company_id"),
            created_at=document.get("created_at"),
            updated_at=document.get("updated_at"),
        )


@dataclass(slots=True)
class Company:
    """Company fields that take part in duplicate matching."""

    id: str | None
    name: str | None = None
    domain: str | None = None
    website: str | None = None
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Company":
        return cls(
            id=document.get("id"),
            name=document.get("name"),
            domain=document.get("domain"),
            website=document.get("website"),
            phone=document.get("phone"),
            created_at=document.get("created_at"),
            updated_at=document.get("updated_at"),
        )


Entity = Union[Contact, Company]


@dataclass(slots=True)
class MatchResult:
    """Triggered signal reasons plus the averaged confidence."""

    reasons: list[str]
    confidence: float

    @property
    def matched(self) -> bool:
        return bool(self.reasons)


@dataclass(slots=True)
class DuplicateMatch:
    """A candidate entity with the reasons it looks like a duplicate."""

    entity: Entity
    match_reasons: list[str]
    confidence: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class DuplicateGroup:
    """A primary entity and the entities clustered under it in one pass."""

    primary: Entity
    duplicates: list[DuplicateMatch]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def entity_ids(self) -> list[str]:
        return [self.primary.id, *(match.entity.id for match in self.duplicates)]


@dataclass(slots=True)
class MergeRequest:
    kind: str
    primary_id: str
    duplicate_ids: list[str]
    merged_data: dict[str, Any]


@dataclass(slots=True)
class AuditEntry:
    """Append-only activity log record written once per merge."""

    action: str
    entity_type: str
    entity_id: str
    metadata: dict[str, Any]
    timestamp: datetime
    system: bool = True
