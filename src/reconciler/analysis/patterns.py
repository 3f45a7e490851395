#!/usr/bin/env python3
"""
Skip Pattern Analysis

Looks for systematic reasons users reject suggestions: merchant names the
normalizer doesn't reconcile, receipts dated far from their charges, tip- or
tax-sized amount gaps, and categories that disagree between the two sides.
Each finding comes with a recommendation for tuning the matcher.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

import pandas as pd

from ..matching.skip_ledger import SkipLedger
from ..storage.repository import Repository

logger = logging.getLogger(__name__)

SKIP_COLUMNS = [
    "receipt_id",
    "charge_id",
    "skipped_at",
    "amount_diff",
    "date_diff",
    "merchant_similarity",
    "receipt_merchant",
    "charge_description",
    "receipt_category",
    "charge_category",
]

# Thresholds for reporting a pattern
MERCHANT_SIMILARITY_CUTOFF = 0.5
MIN_MERCHANT_MISMATCHES = 10
DATE_OFFSET_DAYS = 7
MIN_DATE_OFFSETS = 10
AMOUNT_VARIANCE_DOLLARS = 5
MIN_AMOUNT_VARIANCES = 15
TIP_RANGE = (1, 10)
MIN_CATEGORY_CONFUSIONS = 3
MIN_MERCHANT_PAIR_SKIPS = 2


@dataclass
class PatternInsight:
    """A recurring rejection pattern with a tuning recommendation."""

    type: str
    description: str
    frequency: int
    recommendation: str
    examples: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class MerchantMismatch:
    """A receipt merchant / charge description pair users keep rejecting."""

    receipt_merchant: str
    charge_description: str
    frequency: int
    avg_amount_diff: float
    avg_date_diff: float


class PatternAnalyzer:
    """Mines the skip ledger for recurring mismatch patterns."""

    def __init__(self, repository: Repository, skip_ledger: SkipLedger):
        self.repository = repository
        self.skip_ledger = skip_ledger

    def skips_dataframe(self, days: int = 30, now: datetime | None = None) -> pd.DataFrame:
        """Skip events from the last `days` days joined with their receipts and charges."""
        since = (now or datetime.now()) - timedelta(days=days)
        rows = []
        for event in self.skip_ledger.events_since(since):
            receipt = self.repository.get_receipt(event.receipt_id)
            charge = self.repository.get_charge(event.charge_id)
            features = event.features.to_dict()
            rows.append(
                {
                    "receipt_id": event.receipt_id,
                    "charge_id": event.charge_id,
                    "skipped_at": event.skipped_at,
                    "amount_diff": features["amount_diff"],
                    "date_diff": features["date_diff"],
                    "merchant_similarity": features["merchant_similarity"],
                    "receipt_merchant": receipt.merchant if receipt else None,
                    "charge_description": charge.description if charge else None,
                    "receipt_category": receipt.category if receipt else None,
                    "charge_category": charge.category if charge else None,
                }
            )

        df = pd.DataFrame(rows, columns=SKIP_COLUMNS)
        for column in ("amount_diff", "date_diff", "merchant_similarity"):
            df[column] = pd.to_numeric(df[column], errors="coerce")
        return df

    def analyze(self, days: int = 30, now: datetime | None = None) -> list[PatternInsight]:
        """Run every pattern check over the trailing window."""
        df = self.skips_dataframe(days=days, now=now)
        if df.empty:
            logger.info("No skip events in the last %d days; nothing to analyze", days)
            return []

        insights: list[PatternInsight] = []
        for check in (
            self._merchant_mismatches,
            self._date_offsets,
            self._amount_variances,
            self._category_confusion,
        ):
            insight = check(df)
            if insight is not None:
                insights.append(insight)

        logger.info("Pattern analysis complete: found %d insights", len(insights))
        return insights

    @staticmethod
    def _merchant_mismatches(df: pd.DataFrame) -> PatternInsight | None:
        mismatches = df[df["merchant_similarity"] < MERCHANT_SIMILARITY_CUTOFF]
        if len(mismatches) <= MIN_MERCHANT_MISMATCHES:
            return None

        examples = [
            {
                "receipt_merchant": row.receipt_merchant,
                "charge_description": row.charge_description,
                "similarity": round(float(row.merchant_similarity), 2),
            }
            for row in mismatches.head(5).itertuples()
            if row.receipt_merchant and row.charge_description
        ]
        return PatternInsight(
            type="merchant_mismatch",
            description="Frequent merchant name mismatches detected",
            frequency=len(mismatches),
            recommendation="Consider adding merchant aliases for these common variations",
            examples=examples,
        )

    @staticmethod
    def _date_offsets(df: pd.DataFrame) -> PatternInsight | None:
        offsets = df[df["date_diff"] > DATE_OFFSET_DAYS]
        if len(offsets) <= MIN_DATE_OFFSETS:
            return None

        counts = offsets.groupby("date_diff").size().sort_values(ascending=False)
        examples = [
            {"days_difference": int(days), "occurrences": int(count)} for days, count in counts.head(5).items()
        ]
        avg_offset = round(float(offsets["date_diff"].mean()))
        return PatternInsight(
            type="date_offset",
            description="Receipts frequently have dates offset from charges",
            frequency=len(offsets),
            recommendation=f"Consider expanding date matching tolerance. Average offset: {avg_offset} days",
            examples=examples,
        )

    @staticmethod
    def _amount_variances(df: pd.DataFrame) -> PatternInsight | None:
        variances = df[df["amount_diff"] > AMOUNT_VARIANCE_DOLLARS]
        if len(variances) <= MIN_AMOUNT_VARIANCES:
            return None

        counts = variances.groupby("amount_diff").size().sort_values(ascending=False)
        low, high = TIP_RANGE
        tip_sized = counts[(counts.index >= low) & (counts.index <= high)]
        if tip_sized.empty:
            return None

        examples = [
            {"amount_difference": f"${diff:.2f}", "occurrences": int(count)} for diff, count in tip_sized.head(5).items()
        ]
        return PatternInsight(
            type="amount_variance",
            description="Frequent amount differences possibly due to tips or taxes",
            frequency=len(variances),
            recommendation="Consider implementing tip/tax detection logic for better matching",
            examples=examples,
        )

    @staticmethod
    def _category_confusion(df: pd.DataFrame) -> PatternInsight | None:
        both = df.dropna(subset=["receipt_category", "charge_category"])
        confused = both[both["receipt_category"] != both["charge_category"]]
        if confused.empty:
            return None

        pairs = confused.groupby(["receipt_category", "charge_category"]).size()
        frequent = pairs[pairs > MIN_CATEGORY_CONFUSIONS].sort_values(ascending=False)
        if frequent.empty:
            return None

        examples = [
            {"from": receipt_cat, "to": charge_cat, "count": int(count)}
            for (receipt_cat, charge_cat), count in frequent.head(5).items()
        ]
        return PatternInsight(
            type="category_confusion",
            description="Categories frequently mismatched between receipts and charges",
            frequency=int(frequent.sum()),
            recommendation="Review category assignment logic or consider category mapping rules",
            examples=examples,
        )

    def problematic_merchants(self, limit: int = 10, days: int = 30, now: datetime | None = None) -> list[MerchantMismatch]:
        """Merchant pairs skipped at least twice, most frequent first."""
        df = self.skips_dataframe(days=days, now=now)
        df = df.dropna(subset=["receipt_merchant", "charge_description"])
        if df.empty:
            return []

        grouped = (
            df.groupby(["receipt_merchant", "charge_description"])
            .agg(
                frequency=("receipt_id", "size"),
                avg_amount_diff=("amount_diff", lambda s: float(s.fillna(0).mean())),
                avg_date_diff=("date_diff", lambda s: float(s.fillna(0).mean())),
            )
            .reset_index()
        )
        grouped = grouped[grouped["frequency"] >= MIN_MERCHANT_PAIR_SKIPS]
        grouped = grouped.sort_values("frequency", ascending=False, kind="stable").head(limit)

        return [
            MerchantMismatch(
                receipt_merchant=row.receipt_merchant,
                charge_description=row.charge_description,
                frequency=int(row.frequency),
                avg_amount_diff=round(row.avg_amount_diff, 2),
                avg_date_diff=round(row.avg_date_diff, 1),
            )
            for row in grouped.itertuples(index=False)
        ]

    def recommendations(self) -> list[str]:
        """Plain-text recommendations from patterns and problem merchants."""
        recommendations = [insight.recommendation for insight in self.analyze()]
        for mismatch in self.problematic_merchants(limit=5):
            if mismatch.frequency > 3:
                recommendations.append(
                    f'Add alias mapping: "{mismatch.receipt_merchant}" -> "{mismatch.charge_description}" '
                    f"({mismatch.frequency} failed matches)"
                )
        return recommendations
