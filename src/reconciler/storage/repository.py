#!/usr/bin/env python3
"""
Repository Protocol and in-memory implementation.

The persistence layer is an external collaborator: the engine only needs
CRUD plus a few queries by statement, match status and update time. Reads
return copies, so a caller must save() a record for a change to stick, the
same read-then-write contract a database-backed repository has.
"""

import copy
from datetime import datetime
from typing import Protocol

from ..core.models import Charge, Receipt, Statement


class Repository(Protocol):
    """Storage collaborator used by every reconciliation component."""

    def get_receipt(self, receipt_id: str) -> Receipt | None: ...

    def list_receipts(self) -> list[Receipt]: ...

    def save_receipt(self, receipt: Receipt) -> Receipt: ...

    def delete_receipt(self, receipt_id: str) -> bool: ...

    def get_charge(self, charge_id: str) -> Charge | None: ...

    def list_charges(self, statement_id: str | None = None) -> list[Charge]: ...

    def save_charge(self, charge: Charge) -> Charge: ...

    def delete_charge(self, charge_id: str) -> bool: ...

    def get_statement(self, statement_id: str) -> Statement | None: ...

    def list_statements(self) -> list[Statement]: ...

    def save_statement(self, statement: Statement) -> Statement: ...

    def matched_receipts_since(self, since: datetime) -> list[Receipt]: ...


class InMemoryRepository:
    """Dictionary-backed Repository used by tests and the JSON repository."""

    def __init__(self) -> None:
        self._receipts: dict[str, Receipt] = {}
        self._charges: dict[str, Charge] = {}
        self._statements: dict[str, Statement] = {}

    # Receipts

    def get_receipt(self, receipt_id: str) -> Receipt | None:
        receipt = self._receipts.get(receipt_id)
        return copy.deepcopy(receipt) if receipt is not None else None

    def list_receipts(self) -> list[Receipt]:
        return [copy.deepcopy(r) for r in self._receipts.values()]

    def save_receipt(self, receipt: Receipt) -> Receipt:
        now = datetime.now()
        if receipt.created_at is None:
            receipt.created_at = now
        receipt.updated_at = now
        self._receipts[receipt.id] = copy.deepcopy(receipt)
        self._persist()
        return copy.deepcopy(receipt)

    def delete_receipt(self, receipt_id: str) -> bool:
        removed = self._receipts.pop(receipt_id, None) is not None
        if removed:
            self._persist()
        return removed

    # Charges

    def get_charge(self, charge_id: str) -> Charge | None:
        charge = self._charges.get(charge_id)
        return copy.deepcopy(charge) if charge is not None else None

    def list_charges(self, statement_id: str | None = None) -> list[Charge]:
        return [
            copy.deepcopy(c)
            for c in self._charges.values()
            if statement_id is None or c.statement_id == statement_id
        ]

    def save_charge(self, charge: Charge) -> Charge:
        if charge.created_at is None:
            charge.created_at = datetime.now()
        self._charges[charge.id] = copy.deepcopy(charge)
        self._persist()
        return copy.deepcopy(charge)

    def delete_charge(self, charge_id: str) -> bool:
        removed = self._charges.pop(charge_id, None) is not None
        if removed:
            self._persist()
        return removed

    # Statements

    def get_statement(self, statement_id: str) -> Statement | None:
        statement = self._statements.get(statement_id)
        return copy.deepcopy(statement) if statement is not None else None

    def list_statements(self) -> list[Statement]:
        return sorted((copy.deepcopy(s) for s in self._statements.values()), key=lambda s: s.start_date)

    def save_statement(self, statement: Statement) -> Statement:
        self._statements[statement.id] = copy.deepcopy(statement)
        self._persist()
        return copy.deepcopy(statement)

    # Queries

    def matched_receipts_since(self, since: datetime) -> list[Receipt]:
        return [
            copy.deepcopy(r)
            for r in self._receipts.values()
            if r.is_matched and r.updated_at is not None and r.updated_at >= since
        ]

    def _persist(self) -> None:
        """Hook for durable subclasses."""
