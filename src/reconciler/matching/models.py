#!/usr/bin/env python3
"""Data models for match candidates, skip events and model weights."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.models import Charge, Receipt
from .features import MatchFeatures

# Learned parameters, in ModelWeights field order
LEARNED_PARAMETERS = ("amount_diff", "date_diff", "merchant_similarity", "category_match", "bias")


@dataclass
class MatchCandidate:
    """A scored receipt/charge pairing offered for review or auto-match."""

    receipt: Receipt
    charge: Charge
    features: MatchFeatures
    confidence: int
    rule_score: int
    learned_score: int
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "receipt_id": self.receipt.id,
            "charge_id": self.charge.id,
            "confidence": self.confidence,
            "rule_score": self.rule_score,
            "learned_score": self.learned_score,
            "reasons": list(self.reasons),
            "features": self.features.to_dict(),
        }


@dataclass
class SkipEvent:
    """A user rejection of a suggested pairing; negative training data."""

    receipt_id: str
    charge_id: str
    features: MatchFeatures
    skipped_at: datetime
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "receipt_id": self.receipt_id,
            "charge_id": self.charge_id,
            "features": self.features.to_dict(),
            "skipped_at": self.skipped_at.isoformat(),
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SkipEvent":
        return cls(
            receipt_id=data["receipt_id"],
            charge_id=data["charge_id"],
            features=MatchFeatures.from_dict(data.get("features", {})),
            skipped_at=datetime.fromisoformat(data["skipped_at"]),
            reason=data.get("reason"),
        )


@dataclass(frozen=True)
class ModelWeights:
    """
    Logistic-regression weights for the learned confidence score.

    Defaults encode the starting intuition: larger amount and date gaps hurt,
    merchant and category agreement help.
    """

    amount_diff: float = -0.1
    date_diff: float = -0.05
    merchant_similarity: float = 2.0
    category_match: float = 0.5
    bias: float = 0.5

    # Bumped on every retrain
    version: int = 0
    trained_at: datetime | None = None

    def coefficients(self) -> list[float]:
        """Weights in MatchFeatures.as_vector() order, bias excluded."""
        return [self.amount_diff, self.date_diff, self.merchant_similarity, self.category_match]

    def parameters(self) -> dict[str, float]:
        """Learned values by name, without version metadata."""
        return {name: getattr(self, name) for name in LEARNED_PARAMETERS}

    @classmethod
    def from_coefficients(cls, coefficients: list[float], bias: float) -> "ModelWeights":
        amount, date, merchant, category = (float(c) for c in coefficients)
        return cls(
            amount_diff=amount,
            date_diff=date,
            merchant_similarity=merchant,
            category_match=category,
            bias=float(bias),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount_diff": self.amount_diff,
            "date_diff": self.date_diff,
            "merchant_similarity": self.merchant_similarity,
            "category_match": self.category_match,
            "bias": self.bias,
            "version": self.version,
            "trained_at": self.trained_at.isoformat() if self.trained_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelWeights":
        defaults = cls()
        values = {name: float(data.get(name, getattr(defaults, name))) for name in LEARNED_PARAMETERS}
        trained_at = data.get("trained_at")
        return cls(
            **values,
            version=int(data.get("version", 0)),
            trained_at=datetime.fromisoformat(trained_at) if trained_at else None,
        )


@dataclass(frozen=True)
class TrainingSample:
    """One labelled example: features plus 1 (matched) or 0 (skipped)."""

    features: MatchFeatures
    label: int
