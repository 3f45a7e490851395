"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import tempfile
from pathlib import Path

import pytest

from reconciler.core import config as config_module
from reconciler.core.errors import FileMoveError
from reconciler.core.models import Charge, ProcessingStatus, Receipt, Statement
from reconciler.matching.normalizer import MerchantNormalizer
from reconciler.service import ReconciliationService
from reconciler.storage.repository import InMemoryRepository


class RecordingMover:
    """FileMover that remembers every move instead of touching storage."""

    def __init__(self, fail: bool = False):
        self.moves: list[tuple[str | None, str]] = []
        self.fail = fail

    def move(self, source, destination):
        if self.fail:
            raise FileMoveError(f"cannot move {source}")
        self.moves.append((source, destination))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real data
    monkeypatch.setenv("RECONCILER_ENV", "test")
    monkeypatch.setenv("RECONCILER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("RECONCILER_ALIASES_FILE", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    # Drop any configuration cached by an earlier test
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def normalizer() -> MerchantNormalizer:
    return MerchantNormalizer()


@pytest.fixture
def august() -> Statement:
    return Statement(id="stmt-aug", period_name="2025 - 08 Statement", start_date="2025-08-01", end_date="2025-08-31")


@pytest.fixture
def september() -> Statement:
    return Statement(id="stmt-sep", period_name="2025 - 09 Statement", start_date="2025-09-01", end_date="2025-09-30")


@pytest.fixture
def repository(august, september) -> InMemoryRepository:
    """Repository holding the August and September statements."""
    repo = InMemoryRepository()
    repo.save_statement(august)
    repo.save_statement(september)
    return repo


@pytest.fixture
def uber_charge() -> Charge:
    return Charge(
        id="chg-uber",
        statement_id="stmt-aug",
        date="2025-08-15",
        description="UBER EATS help.uber.com CA",
        amount="23.45",
    )


@pytest.fixture
def make_receipt():
    """Factory for receipts with sensible defaults."""

    def _make(receipt_id: str = "rcpt-1", **fields) -> Receipt:
        fields.setdefault("file_name", f"{receipt_id}.pdf")
        fields.setdefault("processing_status", ProcessingStatus.COMPLETED)
        return Receipt(id=receipt_id, **fields)

    return _make


@pytest.fixture
def mover() -> RecordingMover:
    return RecordingMover()


@pytest.fixture
def failing_mover() -> RecordingMover:
    return RecordingMover(fail=True)


@pytest.fixture
def service(repository, mover) -> ReconciliationService:
    """In-memory ReconciliationService with a recording file mover."""
    return ReconciliationService(repository, mover=mover)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "currency: Tests for currency handling and precision")
    config.addinivalue_line("markers", "matching: Tests for receipt/charge matching")
    config.addinivalue_line("markers", "statements: Tests for statement assignment and file organization")
    config.addinivalue_line("markers", "slow: Tests that take significant time to run")
