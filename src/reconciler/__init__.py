"""
Receipt Reconciler - Receipt to Credit Card Charge Matching

Matches user-submitted receipts against credit card statement charges,
auto-matching confident pairs and learning from accepted and skipped
suggestions.

Key Features:
- Merchant name normalization with an editable alias table
- Blended rule-based and learned (logistic regression) confidence scores
- Progressive auto-matching as receipt fields arrive
- Adaptive auto-match threshold driven by recent acceptance rate
- Statement-period assignment and export-friendly receipt file paths
- Skip pattern analysis with tuning recommendations

Domain Packages:
- core: Money/date primitives, data models, configuration, errors
- matching: Normalization, scoring, candidates, auto-match, commits
- statements: Statement assignment and file organization
- storage: Repository protocol with in-memory and JSON implementations
- analysis: Skip pattern mining
- cli: Command-line interface

Example Usage:
    from reconciler import ReconciliationService
    from reconciler.storage import InMemoryRepository

    service = ReconciliationService(InMemoryRepository())
    batch = service.get_candidates("2025-08")
"""

__version__ = "0.1.0"
__author__ = "Karl Davis"

# Export core utilities for easy access
from .core.config import Environment, get_config
from .core.models import Charge, Receipt, Statement
from .core.money import Money

# Export key domain functionality
from .matching.normalizer import MerchantNormalizer
from .service import CandidateBatch, ReceiptUpdate, ReconciliationService

__all__ = [
    # Core models
    "Charge",
    "Money",
    "Receipt",
    "Statement",
    # Configuration
    "Environment",
    "get_config",
    # Services
    "CandidateBatch",
    "MerchantNormalizer",
    "ReceiptUpdate",
    "ReconciliationService",
]
