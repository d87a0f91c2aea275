import pydantic
import pytest

from crm_dedupe.config import DedupeSettings


def test_defaults_match_lookup_and_cluster_thresholds() -> None:
    settings = DedupeSettings(_env_file=None)

    assert settings.candidate_limit == 10
    assert settings.candidate_min_confidence == 0.5
    assert settings.cluster_limit == 50
    assert settings.cluster_min_confidence == 0.7


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("CRM_DEDUPE_CLUSTER_MIN_CONFIDENCE", "0.8")
    monkeypatch.setenv("CRM_DEDUPE_MAX_SCAN_SIZE", "250")

    settings = DedupeSettings(_env_file=None)

    assert settings.cluster_min_confidence == 0.8
    assert settings.max_scan_size == 250


def test_confidence_must_be_a_probability(monkeypatch) -> None:
    monkeypatch.setenv("CRM_DEDUPE_CANDIDATE_MIN_CONFIDENCE", "1.5")

    with pytest.raises(pydantic.ValidationError):
        DedupeSettings(_env_file=None)
