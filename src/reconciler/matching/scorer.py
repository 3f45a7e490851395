#!/usr/bin/env python3
"""
Rule-Based Match Scoring

Fixed point bands for amount, date and merchant agreement. The rule score is
blended with the learned score so a freshly installed engine behaves sensibly
before it has any training data.
"""

from .features import UNKNOWN, MatchFeatures


class RuleScorer:
    """Point-band scorer (0 to 100)"""

    @staticmethod
    def score(features: MatchFeatures) -> tuple[int, list[str]]:
        """
        Score a pair against the fixed bands.

        Returns:
            (points, reasons) where reasons describe each band that fired
        """
        points = 0
        reasons: list[str] = []

        amount_points, amount_reason = RuleScorer._score_amount(features.amount_diff)
        points += amount_points
        if amount_reason:
            reasons.append(amount_reason)

        date_points, date_reason = RuleScorer._score_date(features.date_diff)
        points += date_points
        if date_reason:
            reasons.append(date_reason)

        merchant_points, merchant_reason = RuleScorer._score_merchant(features.merchant_similarity)
        points += merchant_points
        if merchant_reason:
            reasons.append(merchant_reason)

        return points, reasons

    @staticmethod
    def _score_amount(amount_diff) -> tuple[int, str | None]:
        if amount_diff is UNKNOWN:
            return 0, None
        if amount_diff < 0.01:
            return 50, "Exact amount match"
        elif amount_diff < 1:
            return 30, f"Amount within $1 (${amount_diff:.2f} difference)"
        elif amount_diff < 5:
            return 15, f"Amount within $5 (${amount_diff:.2f} difference)"
        return 0, None

    @staticmethod
    def _score_date(date_diff) -> tuple[int, str | None]:
        if date_diff is UNKNOWN:
            return 0, None
        if date_diff == 0:
            return 25, "Same date"
        elif date_diff <= 1:
            return 15, "Within 1 day"
        elif date_diff <= 3:
            return 8, f"Within 3 days ({date_diff} days apart)"
        return 0, None

    @staticmethod
    def _score_merchant(similarity) -> tuple[int, str | None]:
        if similarity is UNKNOWN:
            return 0, None
        if similarity >= 0.9:
            return 25, "Merchant names match"
        elif similarity >= 0.7:
            return 15, "Merchant names similar"
        elif similarity >= 0.5:
            return 8, "Merchant names partially similar"
        return 0, None


def blend(rule_score: int, learned_score: int, rule_weight: float = 0.4, learned_weight: float = 0.6) -> int:
    """Weighted combination of the rule and learned scores, rounded to an int."""
    return round(rule_weight * rule_score + learned_weight * learned_score)
