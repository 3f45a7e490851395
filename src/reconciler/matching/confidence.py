#!/usr/bin/env python3
"""
Learned Confidence Model

Logistic regression over MatchFeatures. Scores are probabilities scaled to
0..100. The model retrains from accepted matches (positives) and skipped
suggestions (negatives) with plain full-batch gradient descent, which is all
four features and a few hundred samples need.

Also owns the adaptive auto-match threshold: the more suggestions users
accept, the less confidence auto-matching demands.
"""

import dataclasses
import logging
import math
import threading
from datetime import datetime, timedelta

import numpy as np

from ..core.config import MatchingConfig
from ..core.errors import TrainingInProgressError
from ..storage.repository import Repository
from .datastore import ModelWeightsStore
from .features import MatchFeatures, extract_features
from .models import ModelWeights, TrainingSample
from .normalizer import MerchantNormalizer
from .skip_ledger import SkipLedger

logger = logging.getLogger(__name__)

# Successful matches don't record the similarity they were made at
ASSUMED_MATCH_SIMILARITY = 0.9


def _sigmoid(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


class ConfidenceModel:
    """
    Logistic-regression confidence scorer with online retraining.

    Weights are immutable ModelWeights values; training computes a new value
    and swaps it in, so concurrent score() calls always see a complete set.
    """

    def __init__(
        self,
        config: MatchingConfig | None = None,
        store: ModelWeightsStore | None = None,
        repository: Repository | None = None,
        skip_ledger: SkipLedger | None = None,
        weights: ModelWeights | None = None,
    ):
        self.config = config or MatchingConfig()
        self.store = store
        self.repository = repository
        self.skip_ledger = skip_ledger
        self._training_lock = threading.Lock()

        if weights is not None:
            self._weights = weights
        elif store is not None:
            self._weights = store.load_or_default()
        else:
            self._weights = ModelWeights()

    @property
    def weights(self) -> ModelWeights:
        return self._weights

    def score(self, features: MatchFeatures) -> int:
        """Learned confidence 0..100 for a feature set."""
        w = self._weights
        x = features.as_vector()
        logit = sum(c * v for c, v in zip(w.coefficients(), x)) + w.bias
        return round(100 * _sigmoid(logit))

    def train(self, samples: list[TrainingSample]) -> ModelWeights | None:
        """
        Fit new weights to labelled samples and publish them.

        Returns:
            The new weights, or None when there are too few samples

        Raises:
            TrainingInProgressError: If another train() call is running
        """
        if not self._training_lock.acquire(blocking=False):
            raise TrainingInProgressError("Model training is already in progress")

        try:
            if len(samples) < self.config.min_training_samples:
                logger.info(
                    "Insufficient training data: %d samples (need %d)",
                    len(samples),
                    self.config.min_training_samples,
                )
                return None

            fitted = self._fit(samples, ModelWeights())
            new_weights = dataclasses.replace(
                fitted, version=self._weights.version + 1, trained_at=datetime.now()
            )
            self._weights = new_weights

            if self.store is not None:
                self.store.save(new_weights)

            logger.info(
                "Trained confidence model v%d on %d samples: %s",
                new_weights.version,
                len(samples),
                new_weights.parameters(),
            )
            return new_weights
        finally:
            self._training_lock.release()

    def _fit(self, samples: list[TrainingSample], start: ModelWeights) -> ModelWeights:
        X = np.array([s.features.as_vector() for s in samples], dtype=float)
        y = np.array([s.label for s in samples], dtype=float)
        n = len(samples)

        coefficients = np.array(start.coefficients(), dtype=float)
        bias = start.bias
        learning_rate = self.config.learning_rate

        for _ in range(self.config.training_iterations):
            logits = np.clip(X @ coefficients + bias, -500, 500)
            predictions = 1.0 / (1.0 + np.exp(-logits))
            errors = predictions - y
            coefficients = coefficients - learning_rate * (X.T @ errors) / n
            bias = bias - learning_rate * float(errors.sum()) / n

        return ModelWeights.from_coefficients(coefficients.tolist(), bias)

    def adaptive_threshold(self, now: datetime | None = None) -> int:
        """
        Auto-match threshold from the trailing acceptance rate.

        Acceptance rate is matches / (matches + skips) over the adaptive
        window. No activity yields the default threshold.
        """
        cfg = self.config
        since = (now or datetime.now()) - timedelta(days=cfg.adaptive_window_days)

        matches = len(self.repository.matched_receipts_since(since)) if self.repository is not None else 0
        skips = self.skip_ledger.count_since(since) if self.skip_ledger is not None else 0
        total = matches + skips

        if total == 0:
            return cfg.default_threshold

        acceptance_rate = matches / total
        if acceptance_rate > cfg.aggressive_rate:
            threshold = cfg.aggressive_threshold
        elif acceptance_rate > cfg.balanced_rate:
            threshold = cfg.default_threshold
        else:
            threshold = cfg.conservative_threshold

        logger.debug("Adaptive threshold %d (acceptance %.2f over %d decisions)", threshold, acceptance_rate, total)
        return threshold


def collect_training_samples(
    repository: Repository,
    skip_ledger: SkipLedger,
    days: int = 30,
    limit: int = 100,
    now: datetime | None = None,
    normalizer: MerchantNormalizer | None = None,
) -> list[TrainingSample]:
    """
    Gather labelled samples from the last `days` days.

    Positives are matched pairs (up to `limit`, most recent first) with the
    merchant similarity fixed; negatives are skip events (up to `limit`)
    with the features recorded at skip time.
    """
    normalizer = normalizer or MerchantNormalizer()
    since = (now or datetime.now()) - timedelta(days=days)
    samples: list[TrainingSample] = []

    matched = sorted(
        repository.matched_receipts_since(since),
        key=lambda r: r.updated_at or since,
        reverse=True,
    )[:limit]

    for receipt in matched:
        if receipt.matched_charge_id is None:
            continue
        charge = repository.get_charge(receipt.matched_charge_id)
        if charge is None:
            logger.warning("Matched receipt %s points at missing charge %s", receipt.id, receipt.matched_charge_id)
            continue

        features = dataclasses.replace(
            extract_features(receipt, charge, normalizer), merchant_similarity=ASSUMED_MATCH_SIMILARITY
        )
        samples.append(TrainingSample(features=features, label=1))

    skips = skip_ledger.events_since(since)[-limit:]
    samples.extend(TrainingSample(features=event.features, label=0) for event in skips)

    logger.debug("Collected %d positive and %d negative samples", len(matched), len(skips))
    return samples
