from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from crm_dedupe.errors import ValidationError
from crm_dedupe.models import Company, Contact, Entity

CONTACTS = "contacts"
COMPANIES = "companies"
ACTIVITIES = "activities"
CONVERSATIONS = "conversations"
DEALS = "deals"
ACTIVITY_LOG = "activity_log"


class EntityKind(StrEnum):
    CONTACT = "contact"
    COMPANY = "company"


@dataclass(frozen=True)
class ReferenceRule:
    """A foreign key held by a dependent collection that points at an entity.

    ``scope`` narrows polymorphic references (activities point at contacts or
    companies through ``related_to_type``). ``many`` marks list-valued keys.
    """

    collection: str
    field: str
    scope: tuple[tuple[str, str], ...] = ()
    many: bool = False
    touch: bool = True

    def filters(self, record_id: str) -> dict[str, Any]:
        return {**dict(self.scope), self.field: record_id}

    def references(self, document: Mapping[str, Any], record_id: str) -> bool:
        if any(document.get(key) != value for key, value in self.scope):
            return False
        value = document.get(self.field)
        if self.many:
            return record_id in (value or ())
        return value == record_id


@dataclass(frozen=True)
class KindSchema:
    """Everything the engine needs to know about one entity kind."""

    kind: EntityKind
    collection: str
    entity_type: type
    match_fields: tuple[str, ...]
    references: tuple[ReferenceRule, ...]
    merge_action: str

    def to_entity(self, document: Mapping[str, Any]) -> Entity:
        return self.entity_type.from_document(document)


SCHEMAS: Mapping[EntityKind, KindSchema] = {
    EntityKind.CONTACT: KindSchema(
        kind=EntityKind.CONTACT,
        collection=CONTACTS,
        entity_type=Contact,
        match_fields=("email", "phone", "first_name", "last_name"),
        references=(
            ReferenceRule(ACTIVITIES, "related_to_id", scope=(("related_to_type", "contact"),)),
            ReferenceRule(CONVERSATIONS, "contact_id", touch=False),
            ReferenceRule(DEALS, "contact_ids", many=True),
        ),
        merge_action="contacts_merged",
    ),
    EntityKind.COMPANY: KindSchema(
        kind=EntityKind.COMPANY,
        collection=COMPANIES,
        entity_type=Company,
        match_fields=("name", "domain", "website", "phone"),
        references=(
            ReferenceRule(CONTACTS, "company_id"),
            ReferenceRule(DEALS, "company_id"),
            ReferenceRule(ACTIVITIES, "related_to_id", scope=(("related_to_type", "company"),)),
        ),
        merge_action="companies_merged",
    ),
}


def schema_for(kind: EntityKind | str) -> KindSchema:
    try:
        return SCHEMAS[EntityKind(kind)]
    except ValueError:
        raise ValidationError("kind", f"unknown entity kind {kind!r}") from None
