#!/usr/bin/env python3
"""
Receipt File Organization

Receipts live in an inbox until they are assigned to a statement, then in a
per-statement Matched/ or Unmatched/ folder under an export-friendly name:

    /objects/statements/<statement>/Matched/2025-08-15_UBER_EATS_$23DOT45_RECEIPT.pdf

PathOrganizer computes the path (pure). FileOrganizer moves the backing
object through an injected FileMover and records the new path.
"""

import logging
import re
import shutil
from pathlib import Path
from typing import Protocol

from ..core.errors import FileMoveError
from ..core.models import Receipt
from ..storage.repository import Repository

logger = logging.getLogger(__name__)

MAX_MERCHANT_LENGTH = 25

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


class PathOrganizer:
    """Computes the organized storage path of a receipt."""

    def __init__(self, inbox_prefix: str = "/objects/Inbox_New", statements_prefix: str = "/objects/statements"):
        self.inbox_prefix = inbox_prefix.rstrip("/")
        self.statements_prefix = statements_prefix.rstrip("/")

    def organized_path(self, receipt: Receipt) -> str:
        """Path for a receipt in its current state. Never raises."""
        if not receipt.statement_id:
            return f"{self.inbox_prefix}/{receipt.file_name}"

        folder = "Matched" if receipt.is_matched else "Unmatched"
        return f"{self.statements_prefix}/{receipt.statement_id}/{folder}/{self.file_name(receipt)}"

    @staticmethod
    def file_name(receipt: Receipt) -> str:
        """DATE_MERCHANT_$AMOUNT_RECEIPT.ext with UNKNOWN_* fallbacks."""
        date_part = receipt.date.to_iso_string() if receipt.date else "UNKNOWN_DATE"

        merchant_part = "UNKNOWN_MERCHANT"
        if receipt.merchant:
            cleaned = _WHITESPACE.sub("_", _NON_ALNUM.sub("", receipt.merchant)).upper()[:MAX_MERCHANT_LENGTH]
            if cleaned:
                merchant_part = cleaned

        amount_part = receipt.amount.to_decimal_str().replace(".", "DOT") if receipt.amount else "UNKNOWN_AMOUNT"

        return f"{date_part}_{merchant_part}_${amount_part}_RECEIPT.{receipt.extension}"


class FileMover(Protocol):
    """Object-storage collaborator that relocates a receipt's file."""

    def move(self, source: str | None, destination: str) -> None:
        """
        Move the object at source to destination.

        Raises:
            FileMoveError: If the object could not be moved
        """
        ...


class LocalFileMover:
    """
    FileMover over a local directory standing in for object storage.

    Object paths ("/objects/...") are resolved under root. A source that
    doesn't exist locally is treated as metadata-only and nothing moves.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, object_path: str) -> Path:
        return self.root / object_path.lstrip("/")

    def move(self, source: str | None, destination: str) -> None:
        if not source:
            return
        src = self._resolve(source)
        if not src.exists():
            logger.debug("No local object at %s; recording path only", src)
            return

        dest = self._resolve(destination)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(src), str(dest))
        except OSError as e:
            raise FileMoveError(f"Failed to move {source} to {destination}: {e}") from e


class FileOrganizer:
    """Keeps each receipt's backing object at its organized path."""

    def __init__(self, repository: Repository, mover: FileMover, paths: PathOrganizer | None = None):
        self.repository = repository
        self.mover = mover
        self.paths = paths or PathOrganizer()

    def organize(self, receipt: Receipt) -> Receipt:
        """
        Move the receipt to its organized path if it isn't there already.

        A mover failure is logged and the receipt keeps its previous path.
        """
        target = self.paths.organized_path(receipt)
        if receipt.organized_path == target:
            return receipt

        source = receipt.organized_path or receipt.file_url
        try:
            self.mover.move(source, target)
        except FileMoveError as e:
            logger.warning("Could not organize receipt %s: %s", receipt.id, e)
            return receipt

        receipt.organized_path = target
        logger.debug("Organized receipt %s at %s", receipt.id, target)
        return self.repository.save_receipt(receipt)
