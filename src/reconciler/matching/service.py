#!/usr/bin/env python3
"""
Match Commit Service

The only code path that writes the receipt<->charge link. Both sides are
updated together under a lock, so two racing commits for the same receipt or
charge can't both succeed.
"""

import logging
import threading
import uuid

from ..core.errors import AlreadyMatchedError, NotFoundError
from ..core.models import Charge, Receipt, ReceiptField
from ..statements.organizer import FileOrganizer
from ..storage.repository import Repository

logger = logging.getLogger(__name__)


class MatchService:
    """Commits, removes and maintains bidirectional matches."""

    def __init__(self, repository: Repository, organizer: FileOrganizer | None = None):
        self.repository = repository
        self.organizer = organizer
        self._lock = threading.Lock()

    def _get_receipt(self, receipt_id: str) -> Receipt:
        receipt = self.repository.get_receipt(receipt_id)
        if receipt is None:
            raise NotFoundError("Receipt", receipt_id)
        return receipt

    def _get_charge(self, charge_id: str) -> Charge:
        charge = self.repository.get_charge(charge_id)
        if charge is None:
            raise NotFoundError("Charge", charge_id)
        return charge

    def _organize(self, receipt: Receipt) -> Receipt:
        if self.organizer is None:
            return receipt
        return self.organizer.organize(receipt)

    def commit_match(self, receipt_id: str, charge_id: str) -> tuple[Receipt, Charge]:
        """
        Link a receipt and a charge.

        The receipt moves to the charge's statement. Committing a pair that is
        already linked to each other is a no-op.

        Raises:
            NotFoundError: If either id is unknown
            AlreadyMatchedError: If either side is linked to something else
        """
        with self._lock:
            receipt = self._get_receipt(receipt_id)
            charge = self._get_charge(charge_id)

            already_linked = (
                receipt.is_matched
                and receipt.matched_charge_id == charge.id
                and charge.is_matched
                and charge.receipt_id == receipt.id
            )
            if not already_linked:
                if receipt.is_matched:
                    raise AlreadyMatchedError("Receipt", receipt.id, receipt.matched_charge_id)
                if charge.is_matched:
                    raise AlreadyMatchedError("Charge", charge.id, charge.receipt_id)

                receipt.is_matched = True
                receipt.matched_charge_id = charge.id
                receipt.statement_id = charge.statement_id
                receipt.needs_manual_review = False
                charge.is_matched = True
                charge.receipt_id = receipt.id

                charge = self.repository.save_charge(charge)
                receipt = self.repository.save_receipt(receipt)
                logger.info("Matched receipt %s to charge %s", receipt.id, charge.id)

        return self._organize(receipt), charge

    def unmatch(self, receipt_id: str) -> Receipt:
        """
        Remove a receipt's match, clearing both sides.

        Raises:
            NotFoundError: If the receipt doesn't exist
        """
        with self._lock:
            receipt = self._get_receipt(receipt_id)
            if not receipt.is_matched and receipt.matched_charge_id is None:
                return receipt

            self._clear_charge_side(receipt.matched_charge_id)
            receipt.is_matched = False
            receipt.matched_charge_id = None
            receipt = self.repository.save_receipt(receipt)
            logger.info("Unmatched receipt %s", receipt.id)

        return self._organize(receipt)

    def delete_receipt(self, receipt_id: str) -> None:
        """
        Delete a receipt, releasing its charge first.

        Raises:
            NotFoundError: If the receipt doesn't exist
        """
        with self._lock:
            receipt = self._get_receipt(receipt_id)
            if receipt.matched_charge_id:
                self._clear_charge_side(receipt.matched_charge_id)
            self.repository.delete_receipt(receipt_id)
        logger.info("Deleted receipt %s", receipt_id)

    def delete_charge(self, charge_id: str) -> None:
        """
        Delete a charge, releasing its receipt first.

        Raises:
            NotFoundError: If the charge doesn't exist
        """
        released = None
        with self._lock:
            charge = self._get_charge(charge_id)
            if charge.receipt_id:
                released = self.repository.get_receipt(charge.receipt_id)
                if released is not None:
                    released.is_matched = False
                    released.matched_charge_id = None
                    released = self.repository.save_receipt(released)
            self.repository.delete_charge(charge_id)
        logger.info("Deleted charge %s", charge_id)

        if released is not None:
            self._organize(released)

    def _clear_charge_side(self, charge_id: str | None) -> None:
        if not charge_id:
            return
        charge = self.repository.get_charge(charge_id)
        if charge is None:
            return
        charge.is_matched = False
        charge.receipt_id = None
        self.repository.save_charge(charge)

    def create_charge_from_receipt(self, receipt_id: str, statement_id: str) -> tuple[Receipt, Charge]:
        """
        Record a non-AMEX charge from a receipt and match them.

        Raises:
            NotFoundError: If the receipt or statement doesn't exist
            AlreadyMatchedError: If the receipt is already matched
            ValueError: If the receipt lacks amount, date or merchant
        """
        with self._lock:
            receipt = self._get_receipt(receipt_id)
            if self.repository.get_statement(statement_id) is None:
                raise NotFoundError("Statement", statement_id)
            if receipt.is_matched:
                raise AlreadyMatchedError("Receipt", receipt.id, receipt.matched_charge_id)

            missing = {ReceiptField.AMOUNT, ReceiptField.DATE, ReceiptField.MERCHANT} - receipt.known_fields()
            if missing:
                names = ", ".join(sorted(f.value for f in missing))
                raise ValueError(f"Receipt {receipt_id} is missing {names}")

            charge = Charge(
                id=str(uuid.uuid4()),
                statement_id=statement_id,
                date=receipt.date,
                description=receipt.merchant,
                amount=receipt.amount,
                category=receipt.category,
                is_matched=True,
                receipt_id=receipt.id,
                is_non_amex=True,
            )
            charge = self.repository.save_charge(charge)

            receipt.is_matched = True
            receipt.matched_charge_id = charge.id
            receipt.statement_id = statement_id
            receipt = self.repository.save_receipt(receipt)
            logger.info("Created non-AMEX charge %s from receipt %s", charge.id, receipt.id)

        return self._organize(receipt), charge

    def toggle_personal_expense(self, charge_id: str) -> Charge:
        """Flip a charge's personal-expense flag (personal charges need no receipt)."""
        with self._lock:
            charge = self._get_charge(charge_id)
            charge.is_personal_expense = not charge.is_personal_expense
            return self.repository.save_charge(charge)

    def toggle_no_receipt_required(self, charge_id: str) -> Charge:
        with self._lock:
            charge = self._get_charge(charge_id)
            charge.no_receipt_required = not charge.no_receipt_required
            return self.repository.save_charge(charge)
