import itertools

import pytest

from crm_dedupe.datasets import ReferenceDatasetGenerator
from crm_dedupe.models import Company, Contact
from crm_dedupe.schema import EntityKind
from crm_dedupe.steps.signals import MatchProfile, match_entities, signals_for

CONTACT_CANDIDATE = signals_for(EntityKind.CONTACT, MatchProfile.CANDIDATE)
CONTACT_CLUSTER = signals_for(EntityKind.CONTACT, MatchProfile.CLUSTER)
COMPANY_CANDIDATE = signals_for(EntityKind.COMPANY, MatchProfile.CANDIDATE)
COMPANY_CLUSTER = signals_for(EntityKind.COMPANY, MatchProfile.CLUSTER)


def test_exact_email_match_ignores_case() -> None:
    left = Contact(id="a", email="Jane@Example.com")
    right = Contact(id="b", email="jane@example.com")

    result = match_entities(left, right, CONTACT_CANDIDATE)

    assert result.reasons == ["Exact email match"]
    assert result.confidence == 1.0


def test_phone_match_tolerates_country_code_prefix() -> None:
    left = Contact(id="a", phone="+1 (555) 123-4567")
    right = Contact(id="b", phone="5551234567")

    result = match_entities(left, right, CONTACT_CANDIDATE)

    assert result.reasons == ["Phone number match"]
    assert result.confidence == pytest.approx(0.9)


def test_short_phone_numbers_never_match() -> None:
    left = Contact(id="a", phone="12-34")
    right = Contact(id="b", phone="1234")

    assert not match_entities(left, right, CONTACT_CANDIDATE).matched


def test_smith_smyth_passes_candidate_threshold_only() -> None:
    left = Contact(id="a", first_name="Jane", last_name="Smith")
    right = Contact(id="b", first_name="Jane", last_name="Smyth")

    candidate = match_entities(left, right, CONTACT_CANDIDATE)
    cluster = match_entities(left, right, CONTACT_CLUSTER)

    assert candidate.reasons == ["Similar name (90% match)"]
    assert candidate.confidence == pytest.approx(0.9 * 0.7)
    assert cluster.reasons == []
    assert cluster.confidence == 0.0


def test_cluster_profile_reports_very_similar_name() -> None:
    left = Contact(id="a", first_name="Jane", last_name="Smith")
    right = Contact(id="b", first_name="jane", last_name=" SMITH ")

    result = match_entities(left, right, CONTACT_CLUSTER)

    assert result.reasons == ["Very similar name"]
    assert result.confidence == pytest.approx(0.8)


def test_same_last_name_fallback_weights() -> None:
    with_first = match_entities(
        Contact(id="a", first_name="Jane", last_name="Smith"),
        Contact(id="b", first_name="Robert", last_name="smith"),
        CONTACT_CANDIDATE,
    )
    without_first = match_entities(
        Contact(id="a", last_name="Smith"),
        Contact(id="b", first_name="Robert", last_name="Smith"),
        CONTACT_CANDIDATE,
    )

    assert with_first.reasons == ["Same last name"]
    assert with_first.confidence == pytest.approx(0.4)
    assert without_first.reasons == ["Same last name"]
    assert without_first.confidence == pytest.approx(0.5)


def test_cluster_profile_has_no_last_name_fallback() -> None:
    result = match_entities(
        Contact(id="a", last_name="Smith"),
        Contact(id="b", last_name="Smith"),
        CONTACT_CLUSTER,
    )
    assert not result.matched


def test_blank_first_names_count_as_missing() -> None:
    candidate = match_entities(
        Contact(id="a", first_name="  ", last_name="Smith"),
        Contact(id="b", first_name=" ", last_name="Smyth"),
        CONTACT_CANDIDATE,
    )
    cluster = match_entities(
        Contact(id="a", first_name=" ", last_name="Smith"),
        Contact(id="b", first_name="  ", last_name="smith"),
        CONTACT_CLUSTER,
    )

    assert not candidate.matched
    assert not cluster.matched


@pytest.mark.parametrize("left,right", [(" ", "  "), ("\t", " "), ("  ", "")])
def test_blank_last_names_never_match(left: str, right: str) -> None:
    result = match_entities(
        Contact(id="a", first_name="Jane", last_name=left),
        Contact(id="b", first_name="Jane", last_name=right),
        CONTACT_CANDIDATE,
    )
    assert not result.matched


def test_blank_first_name_falls_back_to_same_last_name() -> None:
    result = match_entities(
        Contact(id="a", first_name="  ", last_name="Smith"),
        Contact(id="b", first_name="Jane", last_name="Smith"),
        CONTACT_CANDIDATE,
    )

    assert result.reasons == ["Same last name"]
    assert result.confidence == pytest.approx(0.5)


def test_company_email_domain_is_weak_and_candidate_only() -> None:
    left = Contact(id="a", email="ceo@initech.com")
    right = Contact(id="b", email="cfo@initech.com")

    assert match_entities(left, right, CONTACT_CANDIDATE).reasons == ["Same email domain (company)"]
    assert match_entities(left, right, CONTACT_CANDIDATE).confidence == pytest.approx(0.3)
    assert not match_entities(left, right, CONTACT_CLUSTER).matched


def test_free_email_domains_are_ignored() -> None:
    left = Contact(id="a", email="jane@gmail.com")
    right = Contact(id="b", email="bob@gmail.com")

    assert not match_entities(left, right, CONTACT_CANDIDATE).matched


def test_confidence_is_average_of_triggered_weights() -> None:
    left = Contact(id="a", email="jane@example.com", phone="555-123-4567", first_name="Jane", last_name="Smith")
    right = Contact(id="b", email="JANE@example.com", phone="5551234567", first_name="Jane", last_name="Smyth")

    result = match_entities(left, right, CONTACT_CANDIDATE)

    assert result.reasons == ["Exact email match", "Phone number match", "Similar name (90% match)"]
    assert result.confidence == pytest.approx((1.0 + 0.9 + 0.63) / 3)


def test_company_exact_domain_name_and_website() -> None:
    left = Company(id="a", name="Acme Inc", domain="acme.com", website="https://www.acme.com/")
    right = Company(id="b", name="The Acme Company", domain="www.ACME.com", website="http://acme.com")

    candidate = match_entities(left, right, COMPANY_CANDIDATE)
    cluster = match_entities(left, right, COMPANY_CLUSTER)

    assert candidate.reasons == ["Exact domain match", "Exact name match (normalized)", "Same website"]
    assert candidate.confidence == pytest.approx((1.0 + 0.95 + 0.9) / 3)
    assert cluster.reasons == ["Exact domain match", "Same name"]
    assert cluster.confidence == pytest.approx(0.975)


def test_company_name_similarity_thresholds_differ_by_profile() -> None:
    left = Company(id="a", name="Globex")
    right = Company(id="b", name="Glebex")

    candidate = match_entities(left, right, COMPANY_CANDIDATE)

    assert candidate.reasons == ["Similar name (83% match)"]
    assert candidate.confidence == pytest.approx((5 / 6) * 0.8)
    assert not match_entities(left, right, COMPANY_CLUSTER).matched


def test_suffix_only_company_names_keep_their_text() -> None:
    # "Inc" and "Inc." are not reduced to empty names, so they compare as text.
    assert not match_entities(Company(id="a", name="Inc"), Company(id="b", name="Inc."), COMPANY_CANDIDATE).matched

    same = match_entities(Company(id="a", name="Inc"), Company(id="b", name="inc"), COMPANY_CANDIDATE)
    assert same.reasons == ["Exact name match (normalized)"]


def test_company_phone_requires_exact_normalized_match() -> None:
    same = match_entities(
        Company(id="a", phone="020 7946 0000"),
        Company(id="b", phone="(020) 7946-0000"),
        COMPANY_CANDIDATE,
    )
    prefixed = match_entities(
        Company(id="a", phone="+44 20 7946 0000"),
        Company(id="b", phone="20 7946 0000"),
        COMPANY_CANDIDATE,
    )

    assert same.reasons == ["Same phone number"]
    assert same.confidence == pytest.approx(0.7)
    assert not prefixed.matched


def test_no_signal_means_zero_confidence() -> None:
    result = match_entities(Contact(id="a"), Contact(id="b"), CONTACT_CANDIDATE)
    assert result.reasons == []
    assert result.confidence == 0.0


@pytest.mark.parametrize("profile", list(MatchProfile))
def test_match_confidence_is_symmetric(profile: MatchProfile) -> None:
    data = ReferenceDatasetGenerator(seed=3).generate(contacts=40, companies=15, duplicate_rate=0.3)
    contacts = [Contact.from_document(doc) for doc in data["contacts"]]
    companies = [Company.from_document(doc) for doc in data["companies"]]

    for entities, kind in ((contacts, EntityKind.CONTACT), (companies, EntityKind.COMPANY)):
        signals = signals_for(kind, profile)
        for left, right in itertools.combinations(entities, 2):
            forward = match_entities(left, right, signals)
            backward = match_entities(right, left, signals)
            assert forward.confidence == backward.confidence
            assert sorted(forward.reasons) == sorted(backward.reasons)
