"""
Core Utilities Package

Shared data models, money/date primitives, configuration and error types
used across the matching, statements and storage packages.

This package provides:
- Currency handling with integer cents for precision
- Receipt, Charge and Statement models
- Configuration management for environment-specific settings
- The reconciliation error taxonomy
"""

from .config import (
    Config,
    Environment,
    MatchingConfig,
    StorageConfig,
    get_config,
    reload_config,
)
from .currency import (
    cents_to_dollars_str,
    parse_dollars_to_cents,
    safe_currency_to_cents,
)
from .dates import FinancialDate
from .errors import (
    AlreadyMatchedError,
    FileMoveError,
    NotFoundError,
    ReconciliationError,
    TrainingInProgressError,
)
from .models import (
    Charge,
    ProcessingStatus,
    Receipt,
    ReceiptField,
    Statement,
    validate_statement_periods,
)
from .money import Money

__all__ = [
    "AlreadyMatchedError",
    "Charge",
    # Configuration
    "Config",
    "Environment",
    "FileMoveError",
    "FinancialDate",
    "MatchingConfig",
    "Money",
    "NotFoundError",
    "ProcessingStatus",
    # Data models
    "Receipt",
    "ReceiptField",
    "ReconciliationError",
    "Statement",
    "StorageConfig",
    "TrainingInProgressError",
    # Currency utilities
    "cents_to_dollars_str",
    "get_config",
    "parse_dollars_to_cents",
    "reload_config",
    "safe_currency_to_cents",
    "validate_statement_periods",
]
