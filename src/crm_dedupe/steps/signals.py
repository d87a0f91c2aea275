"""Weighted match signals for contacts and companies.

Each entity kind has two signal tables: ``CANDIDATE`` for single-target
lookups reviewed by a person, and ``CLUSTER`` for the unsupervised all-pairs
scan, which uses stricter name thresholds and drops the weak signals.
Confidence is the mean weight of the signals that fired.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from crm_dedupe.models import Company, Contact, MatchResult
from crm_dedupe.schema import EntityKind
from crm_dedupe.steps.normalize import (
    extract_email_domain,
    normalize_company_name,
    normalize_domain,
    normalize_email,
    normalize_name,
    normalize_phone,
    normalize_website,
)
from crm_dedupe.steps.similarity import similarity

MIN_PHONE_DIGITS = 7
FREE_EMAIL_DOMAINS = frozenset({"gmail.com", "yahoo.com", "hotmail.com", "outlook.com"})


class MatchProfile(StrEnum):
    CANDIDATE = "candidate"
    CLUSTER = "cluster"


@dataclass(frozen=True, slots=True)
class SignalHit:
    reason: str
    weight: float


@dataclass(frozen=True, slots=True)
class MatchSignal:
    """A named comparison rule; ``evaluate`` returns a hit or None."""

    name: str
    evaluate: Callable[[Any, Any], SignalHit | None]


def match_entities(left: Any, right: Any, signals: Sequence[MatchSignal]) -> MatchResult:
    reasons: list[str] = []
    total = 0.0
    for signal in signals:
        hit = signal.evaluate(left, right)
        if hit is None:
            continue
        reasons.append(hit.reason)
        total += hit.weight
    confidence = total / len(reasons) if reasons else 0.0
    return MatchResult(reasons=reasons, confidence=confidence)


def signals_for(kind: EntityKind | str, profile: MatchProfile | str) -> tuple[MatchSignal, ...]:
    return _SIGNAL_TABLES[(EntityKind(kind), MatchProfile(profile))]


def _percent(score: float) -> int:
    return int(score * 100 + 0.5)


# Contacts


def _exact_email(left: Contact, right: Contact) -> SignalHit | None:
    left_email = normalize_email(left.email)
    right_email = normalize_email(right.email)
    if left_email and left_email == right_email:
        return SignalHit("Exact email match", 1.0)
    return None


def _phone_overlap(left: Contact, right: Contact) -> SignalHit | None:
    # Substring match tolerates one side carrying a country code.
    left_phone = normalize_phone(left.phone)
    right_phone = normalize_phone(right.phone)
    if len(left_phone) < MIN_PHONE_DIGITS or len(right_phone) < MIN_PHONE_DIGITS:
        return None
    if left_phone in right_phone or right_phone in left_phone:
        return SignalHit("Phone number match", 0.9)
    return None


def _contact_name(
    *,
    threshold: float,
    factor: float,
    describe: Callable[[float], str],
    last_name_fallback: bool,
) -> Callable[[Contact, Contact], SignalHit | None]:
    def evaluate(left: Contact, right: Contact) -> SignalHit | None:
        left_last = normalize_name(left.last_name)
        right_last = normalize_name(right.last_name)
        if not left_last or not right_last:
            return None
        last_sim = similarity(left_last, right_last)
        if last_sim < threshold:
            return None

        left_first = normalize_name(left.first_name)
        right_first = normalize_name(right.first_name)
        has_first_names = bool(left_first and right_first)
        if has_first_names:
            first_sim = similarity(left_first, right_first)
            if first_sim >= threshold:
                average = (first_sim + last_sim) / 2
                return SignalHit(describe(average), average * factor)

        if last_name_fallback and last_sim == 1.0:
            return SignalHit("Same last name", 0.4 if has_first_names else 0.5)
        return None

    return evaluate


def _shared_company_domain(left: Contact, right: Contact) -> SignalHit | None:
    left_email = normalize_email(left.email)
    right_email = normalize_email(right.email)
    if not left_email or not right_email or left_email == right_email:
        return None
    domain = extract_email_domain(left_email)
    if domain and domain == extract_email_domain(right_email) and domain not in FREE_EMAIL_DOMAINS:
        return SignalHit("Same email domain (company)", 0.3)
    return None


# Companies


def _exact_domain(left: Company, right: Company) -> SignalHit | None:
    left_domain = normalize_domain(left.domain)
    if left_domain and left_domain == normalize_domain(right.domain):
        return SignalHit("Exact domain match", 1.0)
    return None


def _company_name(*, threshold: float, exact_reason: str) -> Callable[[Company, Company], SignalHit | None]:
    def evaluate(left: Company, right: Company) -> SignalHit | None:
        left_name = normalize_company_name(left.name)
        right_name = normalize_company_name(right.name)
        if not left_name or not right_name:
            return None
        if left_name == right_name:
            return SignalHit(exact_reason, 0.95)
        score = similarity(left_name, right_name)
        if score >= threshold:
            return SignalHit(f"Similar name ({_percent(score)}% match)", score * 0.8)
        return None

    return evaluate


def _same_website(left: Company, right: Company) -> SignalHit | None:
    left_site = normalize_website(left.website)
    if left_site and left_site == normalize_website(right.website):
        return SignalHit("Same website", 0.9)
    return None


def _same_company_phone(left: Company, right: Company) -> SignalHit | None:
    left_phone = normalize_phone(left.phone)
    right_phone = normalize_phone(right.phone)
    if len(left_phone) >= MIN_PHONE_DIGITS and left_phone == right_phone:
        return SignalHit("Same phone number", 0.7)
    return None


_SIGNAL_TABLES: dict[tuple[EntityKind, MatchProfile], tuple[MatchSignal, ...]] = {
    (EntityKind.CONTACT, MatchProfile.CANDIDATE): (
        MatchSignal("exact_email", _exact_email),
        MatchSignal("phone", _phone_overlap),
        MatchSignal(
            "name",
            _contact_name(
                threshold=0.8,
                factor=0.7,
                describe=lambda score: f"Similar name ({_percent(score)}% match)",
                last_name_fallback=True,
            ),
        ),
        MatchSignal("email_domain", _shared_company_domain),
    ),
    (EntityKind.CONTACT, MatchProfile.CLUSTER): (
        MatchSignal("exact_email", _exact_email),
        MatchSignal("phone", _phone_overlap),
        MatchSignal(
            "name",
            _contact_name(
                threshold=0.9,
                factor=0.8,
                describe=lambda score: "Very similar name",
                last_name_fallback=False,
            ),
        ),
    ),
    (EntityKind.COMPANY, MatchProfile.CANDIDATE): (
        MatchSignal("exact_domain", _exact_domain),
        MatchSignal("name", _company_name(threshold=0.8, exact_reason="Exact name match (normalized)")),
        MatchSignal("website", _same_website),
        MatchSignal("phone", _same_company_phone),
    ),
    (EntityKind.COMPANY, MatchProfile.CLUSTER): (
        MatchSignal("exact_domain", _exact_domain),
        MatchSignal("name", _company_name(threshold=0.85, exact_reason="Same name")),
    ),
}
