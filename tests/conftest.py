"""Shared pytest fixtures for freeboard tests."""

import tempfile
import os
from datetime import date, datetime
from decimal import Decimal
import pytest

from freeboard.database.factories import create_sqlite_database
from freeboard.domain.dashboard import DashboardService
from freeboard.domain.entities import Transaction, TransactionType
from freeboard.domain.metrics import MetricsAggregator
from freeboard.domain.transaction import TransactionService
from freeboard.domain.vat import VatService
from freeboard.utils.cache import TTLCache
from freeboard.utils.clock import FixedClock

USER = "user-1"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """A clock frozen on 15 June 2024 at noon."""
    return FixedClock(datetime(2024, 6, 15, 12, 0, 0))


@pytest.fixture
def vat_service(temp_db, clock):
    """Create a VatService with a temporary database."""
    return VatService(temp_db, clock=clock)


@pytest.fixture
def aggregator(clock):
    """Create a MetricsAggregator on the fixed clock."""
    return MetricsAggregator(clock)


@pytest.fixture
def dashboard_service(temp_db, clock, aggregator):
    """Create a DashboardService with a fresh cache on the fixed clock."""
    return DashboardService(temp_db, cache=TTLCache(ttl_seconds=300, clock=clock), aggregator=aggregator)


@pytest.fixture
def transaction_service(temp_db, vat_service, dashboard_service):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db, vat_service=vat_service, dashboard_service=dashboard_service)


@pytest.fixture
def make_transaction():
    """Build in-memory Transaction entities with sensible defaults."""
    counter = {"next_id": 1}

    def _make(txn_date, amount, type=TransactionType.INCOME, category="Prestation", **kwargs):
        txn_id = kwargs.pop("id", counter["next_id"])
        counter["next_id"] = txn_id + 1
        return Transaction(
            id=txn_id,
            user_id=kwargs.pop("user_id", USER),
            date=txn_date,
            amount=Decimal(str(amount)),
            type=TransactionType(type),
            category=category,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_transactions(transaction_service):
    """Store a few transactions for USER around the fixed clock date."""
    ids = [
        transaction_service.create_transaction(
            user_id=USER, date=date(2024, 6, 3), amount=Decimal("3000"), type="income",
            category="Prestation", description="Audit sécurité", client_name="ACME",
        ),
        transaction_service.create_transaction(
            user_id=USER, date=date(2024, 6, 10), amount=Decimal("500"), type="expense",
            category="Logiciel", description="Licences",
        ),
        transaction_service.create_transaction(
            user_id=USER, date=date(2024, 5, 20), amount=Decimal("2000"), type="income",
            category="Conseil", description="Atelier", client_name="Globex",
        ),
        transaction_service.create_transaction(
            user_id="someone-else", date=date(2024, 6, 5), amount=Decimal("999"), type="income",
            category="Prestation", description="Not mine",
        ),
    ]
    return ids


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
