"""Shared pytest fixtures for envelopes tests."""

import tempfile
import os
from datetime import date, datetime, UTC
from pathlib import Path
import pytest

from envelopes.store.factories import create_sqlite_storage
from envelopes.store.state import BudgetStore
from envelopes.domain.budget import BudgetService
from envelopes.domain.csv_import import CSVImportService
from envelopes.domain.summary import SummaryService
from envelopes.domain.uploads import CsvUploadService

FULL_MAPPING = {
    "date": "Date",
    "account": "Account",
    "amount": "Amount",
    "currency": "Currency",
    "description": "Description",
    "merchant": "Payee",
    "category": "Category",
    "tags": "Tags",
    "notes": "Memo",
}


@pytest.fixture
def temp_db():
    """Create a temporary storage database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    storage = create_sqlite_storage(database_path=db_path)
    # Store the path for tests that need it
    storage.database_path = db_path
    storage.connect()
    storage.initialize_schema()

    yield storage

    # Cleanup
    storage.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def store(temp_db):
    """Create a BudgetStore with a fixed clock."""
    return BudgetStore(temp_db, clock=lambda: datetime(2024, 3, 31, 12, 0, tzinfo=UTC))


@pytest.fixture
def budget_service(store):
    """Create a BudgetService over the test store."""
    return BudgetService(store)


@pytest.fixture
def import_service(store):
    """Create a CSVImportService over the test store."""
    return CSVImportService(store)


@pytest.fixture
def summary_service(store):
    """Create a SummaryService whose current month is March 2024."""
    return SummaryService(store, today=date(2024, 3, 20))


@pytest.fixture
def upload_service(temp_db):
    """Create a CsvUploadService over the test storage."""
    return CsvUploadService(temp_db)


@pytest.fixture
def full_mapping():
    """Mapping for every column of sample_transactions.csv."""
    return dict(FULL_MAPPING)


@pytest.fixture
def sample_csv_text(fixtures_dir):
    """Text of the sample bank export."""
    return (fixtures_dir / "sample_transactions.csv").read_text(encoding="utf-8")


@pytest.fixture
def imported_sample(import_service, sample_csv_text, full_mapping):
    """Import the sample CSV and return the commit result."""
    return import_service.commit_csv_import(
        csv_text=sample_csv_text,
        mapping=full_mapping,
        filename="sample_transactions.csv",
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
