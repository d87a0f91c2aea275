"""Shared fixtures: a small CRM with one known duplicate contact and company."""

from datetime import datetime, timezone

import pytest

from crm_dedupe.config import DedupeSettings
from crm_dedupe.stores import InMemoryRecordStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> DedupeSettings:
    return DedupeSettings(_env_file=None)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def crm_store() -> InMemoryRecordStore:
    return InMemoryRecordStore(
        {
            "companies": [
                {
                    "id": "co_acme",
                    "name": "Acme Inc",
                    "domain": "acme.com",
                    "website": "https://www.acme.com/",
                    "phone": "+1 (555) 010-2000",
                },
                {
                    "id": "co_acme_dup",
                    "name": "The Acme Company",
                    "domain": "www.ACME.com",
                    "website": "http://acme.com",
                    "phone": "555.010.2000",
                },
                {"id": "co_globex", "name": "Globex Corporation", "domain": "globex.com"},
            ],
            "contacts": [
                {
                    "id": "ct_jane",
                    "first_name": "Jane",
                    "last_name": "Smith",
                    "email": "Jane@Example.com",
                    "phone": "+1 (555) 123-4567",
                    "company_id": "co_acme",
                },
                {
                    "id": "ct_jane_dup",
                    "first_name": "Jane",
                    "last_name": "Smyth",
                    "email": "jane@example.com",
                    "phone": "5551234567",
                    "company_id": "co_acme_dup",
                },
                {
                    "id": "ct_bob",
                    "first_name": "Bob",
                    "last_name": "Jones",
                    "email": "bob@globex.com",
                    "company_id": "co_globex",
                },
            ],
            "deals": [
                {"id": "deal_1", "title": "Renewal", "company_id": "co_acme_dup", "contact_ids": ["ct_jane_dup"]},
                {
                    "id": "deal_2",
                    "title": "Expansion",
                    "company_id": "co_acme",
                    "contact_ids": ["ct_jane", "ct_jane_dup", "ct_bob"],
                },
            ],
            "activities": [
                {"id": "act_1", "subject": "Call", "related_to_type": "contact", "related_to_id": "ct_jane_dup"},
                {"id": "act_2", "subject": "Review", "related_to_type": "company", "related_to_id": "co_acme_dup"},
                {"id": "act_3", "subject": "Email", "related_to_type": "contact", "related_to_id": "ct_bob"},
            ],
            "conversations": [
                {"id": "conv_1", "channel": "sms", "contact_id": "ct_jane_dup"},
            ],
        }
    )


def references_to(store: InMemoryRecordStore, record_id: str) -> list[tuple[str, str]]:
    """(collection, document id) of every dependent still pointing at ``record_id``.

    The activity log is excluded: merge entries name the merged-away ids.
    """
    hits: list[tuple[str, str]] = []
    for collection, documents in store.dump().items():
        if collection == "activity_log":
            continue
        for document in documents:
            for key, value in document.items():
                if key == "id":
                    continue
                if value == record_id or (isinstance(value, list) and record_id in value):
                    hits.append((collection, document["id"]))
    return hits
