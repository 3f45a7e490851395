#!/usr/bin/env python3
"""
Reconciliation Service

Single entry point that wires the matching and statement components around
one repository. The CLI (and any other front end) talks to this class only.
"""

import dataclasses
import logging
from dataclasses import dataclass, field

from .core.config import Config, MatchingConfig
from .core.dates import FinancialDate
from .core.errors import NotFoundError
from .core.models import Charge, ProcessingStatus, Receipt
from .core.money import Money
from .matching.candidates import CandidateGenerator
from .matching.confidence import ConfidenceModel, collect_training_samples
from .matching.datastore import ModelWeightsStore, SkipLedgerStore
from .matching.decider import AutoMatchDecider, AutoMatchResult
from .matching.features import MatchFeatures
from .matching.models import MatchCandidate, ModelWeights, SkipEvent
from .matching.normalizer import MerchantNormalizer
from .matching.service import MatchService
from .matching.skip_ledger import SkipLedger
from .statements.assigner import StatementAssigner
from .statements.organizer import FileMover, FileOrganizer, LocalFileMover, PathOrganizer
from .storage.json_repository import JsonRepository
from .storage.repository import Repository

logger = logging.getLogger(__name__)

UPDATABLE_RECEIPT_FIELDS = {
    "merchant",
    "amount",
    "date",
    "category",
    "file_name",
    "notes",
    "processing_status",
    "needs_manual_review",
}


class _NoOpMover:
    def move(self, source: str | None, destination: str) -> None:
        return None


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_matching_fields(fields: dict) -> dict:
    """
    Strictly parse merchant, amount and date updates.

    None or a blank string clears a field. Anything else must parse, so a
    typo never erases a value that is already known.

    Raises:
        ValueError: If a non-blank value can't be parsed
    """
    parsed = dict(fields)
    for name, parse in (("amount", Money.parse), ("date", FinancialDate.parse)):
        if name not in fields or _is_blank(fields[name]):
            continue
        value = parse(fields[name])
        if value is None:
            raise ValueError(f"Invalid {name}: {fields[name]!r}")
        parsed[name] = value

    merchant = fields.get("merchant")
    if not _is_blank(merchant) and not isinstance(merchant, str):
        raise ValueError(f"Invalid merchant: {merchant!r}")
    return parsed


@dataclass
class CandidateBatch:
    """Best pairings plus the receipt and charge pools they were drawn from."""

    pairs: list[MatchCandidate] = field(default_factory=list)
    receipts: list[Receipt] = field(default_factory=list)
    charges: list[Charge] = field(default_factory=list)


@dataclass
class ReceiptUpdate:
    """Result of a progressive receipt update."""

    receipt: Receipt
    auto_match: AutoMatchResult | None = None

    @property
    def auto_matched(self) -> bool:
        return self.auto_match is not None and self.auto_match.matched


class ReconciliationService:
    """Facade over candidate generation, matching, training and organization."""

    def __init__(
        self,
        repository: Repository,
        normalizer: MerchantNormalizer | None = None,
        skip_ledger: SkipLedger | None = None,
        model: ConfidenceModel | None = None,
        mover: FileMover | None = None,
        paths: PathOrganizer | None = None,
        config: MatchingConfig | None = None,
    ):
        self.config = config or MatchingConfig()
        self.repository = repository
        self.normalizer = normalizer or MerchantNormalizer()
        self.skip_ledger = skip_ledger or SkipLedger()
        self.model = model or ConfidenceModel(
            config=self.config, repository=repository, skip_ledger=self.skip_ledger
        )
        self.organizer = FileOrganizer(repository, mover or _NoOpMover(), paths or PathOrganizer())
        self.matches = MatchService(repository, self.organizer)
        self.assigner = StatementAssigner(repository)
        self.generator = CandidateGenerator(self.normalizer, self.model, self.config)
        self.decider = AutoMatchDecider(
            repository, self.generator, self.model, self.matches, self.skip_ledger, self.config
        )

    @classmethod
    def from_config(cls, config: Config) -> "ReconciliationService":
        """Build a file-backed service from application configuration."""
        storage = config.storage
        repository = JsonRepository(storage.repository_file)

        normalizer = MerchantNormalizer()
        normalizer.load_aliases(storage.aliases_file)

        skip_ledger = SkipLedger(SkipLedgerStore(storage.skip_ledger_file))
        model = ConfidenceModel(
            config=config.matching,
            store=ModelWeightsStore(storage.weights_file),
            repository=repository,
            skip_ledger=skip_ledger,
        )
        return cls(
            repository,
            normalizer=normalizer,
            skip_ledger=skip_ledger,
            model=model,
            mover=LocalFileMover(config.data_dir / "objects"),
            paths=PathOrganizer(storage.inbox_prefix, storage.statements_prefix),
            config=config.matching,
        )

    # Candidates

    def get_candidates(self, statement_id: str, cross_statement: bool = True) -> CandidateBatch:
        """
        Best pairing per unmatched, fully-processed receipt.

        With cross_statement (the default) receipts and charges from every
        statement are considered; otherwise both pools are limited to the
        given statement.

        Raises:
            NotFoundError: If the statement doesn't exist
        """
        if self.repository.get_statement(statement_id) is None:
            raise NotFoundError("Statement", statement_id)

        receipts = [
            r
            for r in self.repository.list_receipts()
            if not r.is_matched
            and r.processing_status == ProcessingStatus.COMPLETED
            and r.amount is not None
            and r.amount.is_positive()
            and (cross_statement or r.statement_id == statement_id)
        ]
        charges = [
            c
            for c in self.repository.list_charges(statement_id=None if cross_statement else statement_id)
            if not c.is_matched
        ]

        pairs = self.generator.generate(receipts, charges)
        return CandidateBatch(pairs=pairs, receipts=receipts, charges=charges)

    def suggest_matches(self, receipt_id: str, limit: int | None = None) -> list[MatchCandidate]:
        """
        Top candidate charges for one receipt, from its statement when assigned.

        Raises:
            NotFoundError: If the receipt doesn't exist
        """
        receipt = self.repository.get_receipt(receipt_id)
        if receipt is None:
            raise NotFoundError("Receipt", receipt_id)
        charges = self.repository.list_charges(statement_id=receipt.statement_id)
        return self.generator.suggest(receipt, charges, limit=limit)

    # Decisions

    def commit_match(self, receipt_id: str, charge_id: str) -> tuple[Receipt, Charge]:
        return self.matches.commit_match(receipt_id, charge_id)

    def unmatch(self, receipt_id: str) -> Receipt:
        return self.matches.unmatch(receipt_id)

    def record_skip(
        self,
        receipt_id: str,
        charge_id: str,
        features: MatchFeatures | None = None,
        reason: str | None = None,
    ) -> SkipEvent | None:
        """
        Record a rejected suggestion. Never raises.

        Features are computed from the current records unless supplied.
        """
        if features is not None:
            return self.skip_ledger.record(receipt_id, charge_id, features, reason=reason)
        try:
            return self.decider.reject(receipt_id, charge_id, reason=reason)
        except NotFoundError as e:
            logger.warning("Skip not recorded: %s", e)
            return None

    def attempt_auto_match(self, receipt_id: str) -> AutoMatchResult:
        return self.decider.attempt(receipt_id)

    def create_charge_from_receipt(self, receipt_id: str, statement_id: str) -> tuple[Receipt, Charge]:
        """Record a non-AMEX charge for the receipt and match the two."""
        return self.matches.create_charge_from_receipt(receipt_id, statement_id)

    # Records

    def delete_receipt(self, receipt_id: str) -> None:
        self.matches.delete_receipt(receipt_id)

    def delete_charge(self, charge_id: str) -> None:
        self.matches.delete_charge(charge_id)

    def toggle_personal_expense(self, charge_id: str) -> Charge:
        return self.matches.toggle_personal_expense(charge_id)

    def toggle_no_receipt_required(self, charge_id: str) -> Charge:
        return self.matches.toggle_no_receipt_required(charge_id)

    def assign_statement(self, receipt_id: str) -> Receipt:
        """Assign the receipt to its statement and move its file accordingly."""
        receipt = self.assigner.assign(receipt_id)
        return self.organizer.organize(receipt)

    # Training

    def train(self) -> ModelWeights | None:
        """Retrain the learned model from recent matches and skips."""
        samples = collect_training_samples(
            self.repository,
            self.skip_ledger,
            days=self.config.training_window_days,
            limit=self.config.training_sample_limit,
            normalizer=self.normalizer,
        )
        return self.model.train(samples)

    def adaptive_threshold(self) -> int:
        return self.model.adaptive_threshold()

    # Progressive matching

    def update_receipt(self, receipt_id: str, **fields) -> ReceiptUpdate:
        """
        Apply new receipt data and match as early as possible.

        Re-assigns the statement when a date is known, tries to auto-match
        when any useful field is known, then organizes the file.

        Raises:
            NotFoundError: If the receipt doesn't exist
            ValueError: If a field isn't updatable, or a merchant, amount or
                date value can't be parsed
        """
        unknown = set(fields) - UPDATABLE_RECEIPT_FIELDS
        if unknown:
            raise ValueError(f"Cannot update receipt field(s): {', '.join(sorted(unknown))}")
        fields = _parse_matching_fields(fields)

        receipt = self.repository.get_receipt(receipt_id)
        if receipt is None:
            raise NotFoundError("Receipt", receipt_id)

        receipt = self.repository.save_receipt(dataclasses.replace(receipt, **fields))
        logger.debug("Updated receipt %s fields: %s", receipt_id, sorted(fields))

        auto_match = None
        if receipt.has_useful_data and not receipt.is_matched:
            if receipt.date is not None:
                receipt = self.assigner.assign(receipt_id)

            if receipt.statement_id:
                auto_match = self.decider.attempt(receipt_id)
                if auto_match.matched:
                    return ReceiptUpdate(receipt=self.repository.get_receipt(receipt_id), auto_match=auto_match)

        receipt = self.organizer.organize(receipt)
        return ReceiptUpdate(receipt=receipt, auto_match=auto_match)
