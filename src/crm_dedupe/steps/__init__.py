from crm_dedupe.steps.candidates import CandidateFinder
from crm_dedupe.steps.clustering import ClusterFinder, cluster_entities
from crm_dedupe.steps.merge import MergeExecutor
from crm_dedupe.steps.signals import MatchProfile, MatchSignal, SignalHit, match_entities, signals_for
from crm_dedupe.steps.similarity import levenshtein, similarity

__all__ = [
    "CandidateFinder",
    "ClusterFinder",
    "cluster_entities",
    "MergeExecutor",
    "MatchProfile",
    "MatchSignal",
    "SignalHit",
    "match_entities",
    "signals_for",
    "levenshtein",
    "similarity",
]
