#!/usr/bin/env python3
"""
Statement Assignment

Puts a dated receipt into the statement period that contains its date. A
receipt whose date is corrected later moves to the right period.
"""

import logging

from ..core.errors import NotFoundError
from ..core.models import Receipt, Statement
from ..storage.repository import Repository

logger = logging.getLogger(__name__)


def find_statement(statements: list[Statement], receipt: Receipt) -> Statement | None:
    """First statement (by start date) whose inclusive interval holds the receipt date."""
    if receipt.date is None:
        return None
    for statement in sorted(statements, key=lambda s: s.start_date):
        if statement.contains(receipt.date):
            return statement
    return None


class StatementAssigner:
    """Assigns receipts to statement periods by date."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def assign(self, receipt_id: str) -> Receipt:
        """
        Assign (or re-assign) a receipt to the statement covering its date.

        Receipts without a date are returned unchanged. An unmatched receipt
        dated outside every period loses any previous assignment.

        Raises:
            NotFoundError: If the receipt doesn't exist
        """
        receipt = self.repository.get_receipt(receipt_id)
        if receipt is None:
            raise NotFoundError("Receipt", receipt_id)

        if receipt.date is None:
            return receipt

        statement = find_statement(self.repository.list_statements(), receipt)
        if statement is None:
            logger.debug("No statement period covers receipt %s (date %s)", receipt_id, receipt.date)
            if receipt.statement_id is None or receipt.is_matched:
                return receipt
            logger.info("Unassigning receipt %s from statement %s", receipt_id, receipt.statement_id)
            receipt.statement_id = None
            return self.repository.save_receipt(receipt)

        if receipt.statement_id == statement.id:
            return receipt

        logger.info(
            "Assigning receipt %s to statement %s (was %s)",
            receipt_id,
            statement.period_name,
            receipt.statement_id or "unassigned",
        )
        receipt.statement_id = statement.id
        return self.repository.save_receipt(receipt)
