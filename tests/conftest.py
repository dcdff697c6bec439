"""Shared pytest fixtures for deductit tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from deductit.database.factories import create_sqlite_database
from deductit.domain.anzsic import AnzsicService
from deductit.domain.entities import RawTransaction, TransactionType
from deductit.domain.merchant import MerchantService
from deductit.domain.preferences import PreferenceService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def merchant_service(temp_db):
    """Create a MerchantService with a temporary database."""
    return MerchantService(temp_db)


@pytest.fixture
def anzsic_service(temp_db):
    """Create an AnzsicService with a temporary database."""
    return AnzsicService(temp_db)


@pytest.fixture
def preference_service(temp_db):
    """Create a PreferenceService for a test user."""
    return PreferenceService(temp_db, "user-1")


@pytest.fixture
def seeded_db(temp_db):
    """Temporary database loaded with the default reference data."""
    AnzsicService(temp_db).seed_defaults()
    MerchantService(temp_db).seed_defaults()
    return temp_db


@pytest.fixture
def make_transaction():
    """Build raw transactions with sensible defaults."""

    def _make(
        txn_id="t1",
        description="WOOLWORTHS 1234 SYDNEY",
        amount="-45.67",
        day=date(2024, 7, 1),
        account_id=None,
    ):
        amount = Decimal(amount)
        return RawTransaction(
            id=txn_id,
            date=day,
            description=description,
            amount=amount,
            type=TransactionType.CREDIT if amount > 0 else TransactionType.DEBIT,
            account_id=account_id,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
