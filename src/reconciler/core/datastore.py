#!/usr/bin/env python3
"""
DataStore Protocol and single-file JSON store base.

Engine-owned state (model weights, the skip ledger, the JSON repository)
lives in one JSON document per concern. JsonFileStore provides the shared
metadata methods so every store answers the same "what do you hold" questions
for the CLI.
"""

from abc import abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, TypeVar

from .json_utils import read_json, write_json_atomic

T = TypeVar("T")


class DataStore(Protocol[T]):
    """
    Protocol for engine-owned data persistence and metadata queries.

    Type parameter T represents the stored data type (e.g. ModelWeights,
    list of SkipEvents).
    """

    def exists(self) -> bool:
        """Check if data exists in storage."""
        ...

    def load(self) -> T:
        """
        Load data from storage.

        Raises:
            FileNotFoundError: If data doesn't exist
            ValueError: If data is invalid/corrupted
        """
        ...

    def save(self, data: T) -> None:
        """Save data to storage."""
        ...

    def last_modified(self) -> datetime | None:
        """Timestamp of most recent modification, or None if absent."""
        ...

    def summary_text(self) -> str:
        """Brief text description for display in CLI output and logs."""
        ...


class JsonFileStore:
    """
    Base class for stores backed by a single JSON document.

    Subclasses implement item_count() and summary_text(); reads and writes go
    through _read_document/_write_document.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if the backing file exists."""
        return self.path.exists()

    def last_modified(self) -> datetime | None:
        """Get timestamp of the backing file's last modification."""
        if not self.exists():
            return None
        return datetime.fromtimestamp(self.path.stat().st_mtime)

    def age_days(self) -> int | None:
        """
        Get age of data in days since last modification.

        Returns:
            Number of days since last modification, or None if data doesn't exist
        """
        last_mod = self.last_modified()
        if last_mod is None:
            return None
        return (datetime.now() - last_mod).days

    def size_bytes(self) -> int | None:
        """Get size of the backing file in bytes."""
        if not self.exists():
            return None
        return self.path.stat().st_size

    def _read_document(self) -> Any:
        if not self.exists():
            raise FileNotFoundError(f"Store file not found: {self.path}")
        return read_json(self.path)

    def _write_document(self, document: Any) -> None:
        write_json_atomic(self.path, document, default=str)

    @abstractmethod
    def item_count(self) -> int | None:
        """Get count of records held, or None if data doesn't exist."""
        ...

    @abstractmethod
    def summary_text(self) -> str:
        """Get human-readable summary of current data state."""
        ...
