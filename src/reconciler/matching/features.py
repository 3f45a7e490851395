#!/usr/bin/env python3
"""
Match Feature Extraction

Turns a (receipt, charge) pair into the four signals every scorer consumes:
amount difference, date difference, merchant similarity and category match.

A receipt field that has not been captured yet yields UNKNOWN rather than a
coerced zero, so "$0.00 difference" never comes from a missing amount. The
linear model needs numbers everywhere, so MatchFeatures.as_vector() imputes
pessimistic values for unknowns.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..core.models import Charge, Receipt

if TYPE_CHECKING:
    from .normalizer import MerchantNormalizer


class Unknown(Enum):
    """Sentinel for a feature whose input field is missing."""

    UNKNOWN = "unknown"

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = Unknown.UNKNOWN

# Imputed values for the linear model
IMPUTED_AMOUNT_DIFF = 100.0
IMPUTED_DATE_DIFF = 7
IMPUTED_MERCHANT_SIMILARITY = 0.0
IMPUTED_CATEGORY_MATCH = 0


@dataclass(frozen=True)
class MatchFeatures:
    """Signals describing how well a receipt lines up with a charge."""

    amount_diff: float | Unknown = UNKNOWN  # dollars
    date_diff: int | Unknown = UNKNOWN  # days
    merchant_similarity: float | Unknown = UNKNOWN  # 0..1
    category_match: int | Unknown = UNKNOWN  # 0 or 1

    def as_vector(self) -> list[float]:
        """Feature vector for ConfidenceModel, unknowns imputed."""
        return [
            float(IMPUTED_AMOUNT_DIFF if self.amount_diff is UNKNOWN else self.amount_diff),
            float(IMPUTED_DATE_DIFF if self.date_diff is UNKNOWN else self.date_diff),
            float(IMPUTED_MERCHANT_SIMILARITY if self.merchant_similarity is UNKNOWN else self.merchant_similarity),
            float(IMPUTED_CATEGORY_MATCH if self.category_match is UNKNOWN else self.category_match),
        ]

    def to_dict(self) -> dict[str, Any]:
        """JSON form; unknown features are stored as null."""
        return {
            "amount_diff": None if self.amount_diff is UNKNOWN else self.amount_diff,
            "date_diff": None if self.date_diff is UNKNOWN else self.date_diff,
            "merchant_similarity": None if self.merchant_similarity is UNKNOWN else self.merchant_similarity,
            "category_match": None if self.category_match is UNKNOWN else self.category_match,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MatchFeatures":
        def value(key: str) -> Any:
            raw = data.get(key)
            return UNKNOWN if raw is None else raw

        return cls(
            amount_diff=value("amount_diff"),
            date_diff=value("date_diff"),
            merchant_similarity=value("merchant_similarity"),
            category_match=value("category_match"),
        )


def extract_features(receipt: Receipt, charge: Charge, normalizer: "MerchantNormalizer") -> MatchFeatures:
    """
    Compute MatchFeatures for a receipt/charge pair.

    Charges are signed; the receipt is compared against the charge's
    magnitude.
    """
    amount_diff: float | Unknown = UNKNOWN
    if receipt.amount is not None:
        amount_diff = round(abs(receipt.amount.to_dollars() - charge.amount.abs().to_dollars()), 2)

    date_diff: int | Unknown = UNKNOWN
    if receipt.date is not None:
        date_diff = receipt.date.days_between(charge.date)

    merchant_similarity: float | Unknown = UNKNOWN
    if receipt.merchant:
        merchant_similarity = normalizer.similarity(receipt.merchant, charge.description)

    category_match: int | Unknown = UNKNOWN
    if receipt.category and charge.category:
        category_match = int(receipt.category.lower() == charge.category.lower())

    return MatchFeatures(
        amount_diff=amount_diff,
        date_diff=date_diff,
        merchant_similarity=merchant_similarity,
        category_match=category_match,
    )
