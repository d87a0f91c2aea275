from __future__ import annotations

import random
from typing import Any

from crm_dedupe.schema import ACTIVITIES, COMPANIES, CONTACTS, CONVERSATIONS, DEALS

_FIRST_NAMES = [
    "Dominique",
    "Luke",
    "Alex",
    "Sofia",
    "Maya",
    "Daniel",
    "Emma",
    "Chris",
    "Olivia",
    "Noah",
]
_LAST_NAMES = [
    "Smith",
    "Johnson",
    "Brown",
    "Taylor",
    "Wilson",
    "Davies",
    "Martin",
    "Thomas",
]
_COMPANY_STEMS = [
    "Acme",
    "Globex",
    "Initech",
    "Umbrella",
    "Hooli",
    "Vandelay",
    "Stark",
    "Wayne",
    "Tyrell",
    "Cyberdyne",
]
_COMPANY_SUFFIXES = ["Inc", "LLC", "Ltd", "Corp", ""]
_FREE_DOMAINS = ["gmail.com", "outlook.com", "yahoo.com"]

Collections = dict[str, list[dict[str, Any]]]


class ReferenceDatasetGenerator:
    """Generate a synthetic CRM (with intentional dupes) for tests and demos.

    Duplicates get their own dependents (deals, activities, conversations) so
    a merge has references to move.
    """

    def __init__(self, seed: int = 7) -> None:
        self._rng = random.Random(seed)

    def generate(
        self,
        contacts: int,
        companies: int,
        duplicate_rate: float = 0.15,
    ) -> Collections:
        data: Collections = {name: [] for name in (COMPANIES, CONTACTS, DEALS, ACTIVITIES, CONVERSATIONS)}
        if companies > 0:
            self._companies(data, companies, duplicate_rate)
        if contacts > 0:
            self._contacts(data, contacts, duplicate_rate)
        self._dependents(data)
        return data

    def _companies(self, data: Collections, size: int, duplicate_rate: float) -> None:
        unique_count = max(1, min(int(size * (1.0 - duplicate_rate)), size))
        records = data[COMPANIES]
        for i in range(unique_count):
            stem = f"{self._rng.choice(_COMPANY_STEMS)} {_ordinal_word(i)}"
            slug = stem.lower().replace(" ", "")
            suffix = self._rng.choice(_COMPANY_SUFFIXES)
            records.append(
                {
                    "id": f"co_{i:06d}",
                    "name": f"{stem} {suffix}".strip(),
                    "domain": f"{slug}.com",
                    "website": f"https://www.{slug}.com/",
                    "phone": f"020 7{i % 1000000:06d}",
                }
            )

        while len(records) < size:
            source = self._rng.choice(records[:unique_count])
            attrs = dict(source, id=f"co_{len(records):06d}")
            self._company_variant(attrs)
            records.append(attrs)

    def _contacts(self, data: Collections, size: int, duplicate_rate: float) -> None:
        unique_count = max(1, min(int(size * (1.0 - duplicate_rate)), size))
        companies = data[COMPANIES]
        records = data[CONTACTS]
        for i in range(unique_count):
            first_name = self._rng.choice(_FIRST_NAMES)
            last_name = self._rng.choice(_LAST_NAMES)
            company = self._rng.choice(companies) if companies and self._rng.random() < 0.8 else None
            domain = company["domain"] if company else self._rng.choice(_FREE_DOMAINS)
            records.append(
                {
                    "id": f"ct_{i:06d}",
                    "first_name": first_name,
                    "last_name": last_name,
                    "email": f"{first_name}.{last_name}{i % 97}@{domain}".lower(),
                    "phone": f"07{i % 1000000000:09d}",
                    "company_id": company["id"] if company else None,
                }
            )

        while len(records) < size:
            source = self._rng.choice(records[:unique_count])
            attrs = dict(source, id=f"ct_{len(records):06d}")
            self._contact_variant(attrs)
            records.append(attrs)

    def _dependents(self, data: Collections) -> None:
        contacts = data[CONTACTS]
        companies = data[COMPANIES]
        for index, contact in enumerate(contacts):
            if self._rng.random() < 0.5:
                data[ACTIVITIES].append(
                    {
                        "id": f"act_ct_{index:06d}",
                        "subject": "Intro call",
                        "related_to_type": "contact",
                        "related_to_id": contact["id"],
                    }
                )
            if self._rng.random() < 0.3:
                data[CONVERSATIONS].append(
                    {"id": f"conv_{index:06d}", "channel": "sms", "contact_id": contact["id"]}
                )
        for index, company in enumerate(companies):
            members = [c["id"] for c in contacts if c.get("company_id") == company["id"]][:3]
            data[DEALS].append(
                {
                    "id": f"deal_{index:06d}",
                    "title": f"{company['name']} renewal",
                    "company_id": company["id"],
                    "contact_ids": members,
                }
            )
            if self._rng.random() < 0.5:
                data[ACTIVITIES].append(
                    {
                        "id": f"act_co_{index:06d}",
                        "subject": "Quarterly review",
                        "related_to_type": "company",
                        "related_to_id": company["id"],
                    }
                )

    def _contact_variant(self, attrs: dict[str, Any]) -> None:
        mutation = self._rng.choice(["email", "phone", "name", "mixed"])

        if mutation in {"email", "mixed"}:
            email = attrs["email"]
            attrs["email"] = self._rng.choice([email.upper(), f" {email}", email.capitalize()])

        if mutation in {"phone", "mixed"}:
            digits = attrs["phone"]
            attrs["phone"] = self._rng.choice(
                [f"+44 {digits}", f"({digits[:5]}) {digits[5:]}", digits.replace("07", "7", 1)]
            )

        if mutation in {"name", "mixed"}:
            last = attrs["last_name"]
            attrs["last_name"] = self._rng.choice([last.upper(), last.lower(), f"  {last} "])

    def _company_variant(self, attrs: dict[str, Any]) -> None:
        mutation = self._rng.choice(["domain", "name", "mixed"])
        stem = attrs["name"]
        for suffix in _COMPANY_SUFFIXES:
            if suffix and stem.endswith(f" {suffix}"):
                stem = stem[: -len(suffix) - 1]

        if mutation in {"domain", "mixed"}:
            attrs["domain"] = self._rng.choice([f"www.{attrs['domain']}", attrs["domain"].upper()])

        if mutation in {"name", "mixed"}:
            attrs["name"] = self._rng.choice([f"The {stem}", f"{stem}, Inc.", f"{stem} Company", stem.upper()])


def _ordinal_word(index: int) -> str:
    words = ["North", "South", "East", "West", "Central", "Global", "United", "Pacific", "Atlantic"]
    return f"{words[index % len(words)]}{index // len(words) or ''}"
