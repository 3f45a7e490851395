#!/usr/bin/env python3
"""
Candidate Generation

Scores every eligible receipt against every eligible charge and keeps the
single best pairing per receipt. The blended confidence combines the rule
bands with the learned model.
"""

import logging

from ..core.config import MatchingConfig
from ..core.models import Charge, Receipt
from .confidence import ConfidenceModel
from .features import IMPUTED_AMOUNT_DIFF, IMPUTED_DATE_DIFF, UNKNOWN, extract_features
from .models import MatchCandidate
from .normalizer import MerchantNormalizer
from .scorer import RuleScorer, blend

logger = logging.getLogger(__name__)


def _tie_break_key(candidate: MatchCandidate) -> tuple:
    f = candidate.features
    amount_diff = IMPUTED_AMOUNT_DIFF if f.amount_diff is UNKNOWN else f.amount_diff
    date_diff = IMPUTED_DATE_DIFF if f.date_diff is UNKNOWN else f.date_diff
    return (-candidate.confidence, amount_diff, date_diff, candidate.charge.id)


def is_eligible_charge(charge: Charge) -> bool:
    """Unmatched charges that still need a receipt."""
    return not charge.is_matched and charge.requires_receipt


class CandidateGenerator:
    """Produces ranked receipt/charge match candidates."""

    def __init__(
        self,
        normalizer: MerchantNormalizer,
        model: ConfidenceModel,
        config: MatchingConfig | None = None,
    ):
        self.normalizer = normalizer
        self.model = model
        self.config = config or MatchingConfig()

    def score_pair(self, receipt: Receipt, charge: Charge) -> MatchCandidate:
        """Blend rule and learned scores for one pairing."""
        features = extract_features(receipt, charge, self.normalizer)
        rule_score, reasons = RuleScorer.score(features)
        learned_score = self.model.score(features)
        confidence = blend(rule_score, learned_score, self.config.rule_weight, self.config.learned_weight)

        logger.debug(
            "Scored receipt %s vs charge %s: rule=%d learned=%d blended=%d",
            receipt.id,
            charge.id,
            rule_score,
            learned_score,
            confidence,
        )
        return MatchCandidate(
            receipt=receipt,
            charge=charge,
            features=features,
            confidence=confidence,
            rule_score=rule_score,
            learned_score=learned_score,
            reasons=reasons,
        )

    def rank(self, receipt: Receipt, charges: list[Charge]) -> list[MatchCandidate]:
        """All eligible charges for one receipt above the inclusion floor, best first."""
        scored = [self.score_pair(receipt, c) for c in charges if is_eligible_charge(c)]
        kept = [c for c in scored if c.confidence > self.config.inclusion_floor]
        return sorted(kept, key=_tie_break_key)

    def generate(self, receipts: list[Receipt], charges: list[Charge]) -> list[MatchCandidate]:
        """
        Best candidate per unmatched receipt, best first overall.

        Receipts need a positive amount to participate.
        """
        eligible_charges = [c for c in charges if is_eligible_charge(c)]
        candidates: list[MatchCandidate] = []

        for receipt in receipts:
            if receipt.is_matched or receipt.amount is None or not receipt.amount.is_positive():
                continue
            ranked = self.rank(receipt, eligible_charges)
            if ranked:
                candidates.append(ranked[0])

        candidates.sort(key=lambda c: (*_tie_break_key(c), c.receipt.id))
        logger.info(
            "Generated %d candidates from %d receipts and %d charges",
            len(candidates),
            len(receipts),
            len(eligible_charges),
        )
        return candidates

    def suggest(self, receipt: Receipt, charges: list[Charge], limit: int | None = None) -> list[MatchCandidate]:
        """Top-N candidate charges for a single receipt."""
        limit = self.config.suggestion_limit if limit is None else limit
        return self.rank(receipt, charges)[:limit]
