#!/usr/bin/env python3
"""
Automatic Match Decisions

Decides whether a receipt's best candidate in its own statement is good
enough to match without a human. The bar depends on how much of the receipt
is known (fewer known fields demand more confidence) and on how often users
have been accepting suggestions lately.
"""

import logging
from dataclasses import dataclass

from ..core.config import MatchingConfig
from ..core.errors import AlreadyMatchedError, NotFoundError
from ..core.models import Charge
from ..storage.repository import Repository
from .candidates import CandidateGenerator
from .confidence import ConfidenceModel
from .features import extract_features
from .models import SkipEvent
from .service import MatchService
from .skip_ledger import SkipLedger

logger = logging.getLogger(__name__)


@dataclass
class AutoMatchResult:
    """Outcome of an auto-match attempt. Not matching is a normal result."""

    matched: bool
    charge: Charge | None = None
    confidence: int = 0
    required_confidence: int = 100
    threshold: int = 100
    reason: str = ""


class AutoMatchDecider:
    """Auto-matches receipts whose best candidate clears the threshold."""

    def __init__(
        self,
        repository: Repository,
        generator: CandidateGenerator,
        model: ConfidenceModel,
        match_service: MatchService,
        skip_ledger: SkipLedger,
        config: MatchingConfig | None = None,
    ):
        self.repository = repository
        self.generator = generator
        self.model = model
        self.match_service = match_service
        self.skip_ledger = skip_ledger
        self.config = config or MatchingConfig()

    def required_confidence(self, known_field_count: int) -> int:
        """Confidence demanded for a receipt with this many known fields."""
        return self.config.required_confidence.get(known_field_count, 100)

    def attempt(self, receipt_id: str) -> AutoMatchResult:
        """
        Try to auto-match a receipt within its assigned statement.

        Raises:
            NotFoundError: If the receipt doesn't exist
        """
        receipt = self.repository.get_receipt(receipt_id)
        if receipt is None:
            raise NotFoundError("Receipt", receipt_id)

        if receipt.is_matched:
            return AutoMatchResult(matched=False, reason="already matched")

        if not receipt.statement_id:
            return AutoMatchResult(matched=False, reason="unassigned")

        known = len(receipt.known_fields())
        required = self.required_confidence(known)
        if known == 0:
            return AutoMatchResult(
                matched=False, required_confidence=required, threshold=required, reason="insufficient data"
            )

        threshold = min(required, self.model.adaptive_threshold())
        pool = self.repository.list_charges(statement_id=receipt.statement_id)
        ranked = self.generator.rank(receipt, pool)
        if not ranked:
            logger.info("No auto-match candidates for receipt %s", receipt_id)
            return AutoMatchResult(
                matched=False, required_confidence=required, threshold=threshold, reason="no candidates"
            )

        best = ranked[0]
        if best.confidence < threshold:
            logger.info(
                "Receipt %s best candidate %s at %d%% is below threshold %d%%",
                receipt_id,
                best.charge.id,
                best.confidence,
                threshold,
            )
            return AutoMatchResult(
                matched=False,
                confidence=best.confidence,
                required_confidence=required,
                threshold=threshold,
                reason="below threshold",
            )

        try:
            _, charge = self.match_service.commit_match(receipt.id, best.charge.id)
        except AlreadyMatchedError as e:
            logger.info("Auto-match of receipt %s lost a race: %s", receipt_id, e)
            return AutoMatchResult(
                matched=False,
                confidence=best.confidence,
                required_confidence=required,
                threshold=threshold,
                reason="conflict",
            )

        logger.info("Auto-matched receipt %s to charge %s at %d%%", receipt_id, charge.id, best.confidence)
        return AutoMatchResult(
            matched=True,
            charge=charge,
            confidence=best.confidence,
            required_confidence=required,
            threshold=threshold,
            reason="auto-matched",
        )

    def reject(self, receipt_id: str, charge_id: str, reason: str | None = None) -> SkipEvent:
        """
        Record that the user declined this pairing.

        Raises:
            NotFoundError: If either id is unknown
        """
        receipt = self.repository.get_receipt(receipt_id)
        if receipt is None:
            raise NotFoundError("Receipt", receipt_id)
        charge = self.repository.get_charge(charge_id)
        if charge is None:
            raise NotFoundError("Charge", charge_id)

        features = extract_features(receipt, charge, self.generator.normalizer)
        return self.skip_ledger.record(receipt_id, charge_id, features, reason=reason)
