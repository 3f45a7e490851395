"""
Matching Package

Merchant normalization, feature extraction, rule and learned confidence
scoring, candidate generation, auto-match decisions and match commits.
"""

from .candidates import CandidateGenerator
from .confidence import ConfidenceModel, collect_training_samples
from .datastore import ModelWeightsStore, SkipLedgerStore
from .decider import AutoMatchDecider, AutoMatchResult
from .features import UNKNOWN, MatchFeatures, extract_features
from .models import MatchCandidate, ModelWeights, SkipEvent, TrainingSample
from .normalizer import MerchantAlias, MerchantNormalizer
from .scorer import RuleScorer, blend
from .service import MatchService
from .skip_ledger import SkipLedger

__all__ = [
    "UNKNOWN",
    "AutoMatchDecider",
    "AutoMatchResult",
    "CandidateGenerator",
    "ConfidenceModel",
    "MatchCandidate",
    "MatchFeatures",
    "MatchService",
    "MerchantAlias",
    "MerchantNormalizer",
    "ModelWeights",
    "ModelWeightsStore",
    "RuleScorer",
    "SkipEvent",
    "SkipLedger",
    "SkipLedgerStore",
    "TrainingSample",
    "blend",
    "collect_training_samples",
    "extract_features",
]
