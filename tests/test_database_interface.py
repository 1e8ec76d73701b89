"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import text

from freeboard.database.sqlalchemy_db import SQLAlchemyDatabase
from freeboard.domain import entities
from freeboard.domain.entities import TransactionFilters, TransactionType
from freeboard.domain.errors import NotFoundError, StoreError, ValidationError

USER = "user-1"


def _add(db, txn_date, amount, type="income", category="Prestation", user_id=USER, **kwargs):
    return db.create_transaction(
        user_id=user_id,
        date=txn_date,
        amount=Decimal(str(amount)),
        type=TransactionType(type),
        category=category,
        **kwargs,
    )


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_transaction_returns_domain_model(self, temp_db):
        """Test that get_transaction returns a domain Transaction entity."""
        txn_id = _add(
            temp_db,
            date(2024, 1, 15),
            "1200.00",
            description="Audit",
            client_name="ACME",
            amount_ht=Decimal("1000"),
            vat_amount=Decimal("200"),
            vat_rate=Decimal("20"),
        )

        txn = temp_db.get_transaction(txn_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.id == txn_id
        assert txn.user_id == USER
        assert txn.date == date(2024, 1, 15)
        assert txn.amount == Decimal("1200.00")
        assert txn.type == TransactionType.INCOME
        assert txn.amount_ht == Decimal("1000")
        assert txn.vat_amount == Decimal("200")
        assert txn.status == "paid"
        assert isinstance(txn.created_at, datetime)

    def test_get_missing_transaction_returns_none(self, temp_db):
        """Test that an unknown ID gives None."""
        assert temp_db.get_transaction(999) is None

    def test_list_transactions_newest_first(self, temp_db):
        """Test ordering by date descending, then by ID descending."""
        first = _add(temp_db, date(2024, 1, 10), 100)
        second = _add(temp_db, date(2024, 3, 1), 200)
        third = _add(temp_db, date(2024, 3, 1), 300)

        page = temp_db.list_transactions(USER, TransactionFilters())

        assert [txn.id for txn in page.items] == [third, second, first]
        assert page.total == 3

    def test_list_transactions_is_scoped_by_user(self, temp_db):
        """Test that other users' transactions are never returned."""
        _add(temp_db, date(2024, 1, 10), 100)
        _add(temp_db, date(2024, 1, 11), 100, user_id="other")

        page = temp_db.list_transactions(USER, TransactionFilters())

        assert page.total == 1
        assert all(txn.user_id == USER for txn in page.items)

    def test_list_transactions_paginates(self, temp_db):
        """Test page and page_size with the unpaged total."""
        for day in range(1, 26):
            _add(temp_db, date(2024, 1, day), day)

        page = temp_db.list_transactions(USER, TransactionFilters(page=3, page_size=10))

        assert page.total == 25
        assert len(page.items) == 5
        assert page.items[0].date == date(2024, 1, 5)

    def test_search_is_case_insensitive_across_fields(self, temp_db):
        """Test search over description, client name and category."""
        by_description = _add(temp_db, date(2024, 1, 1), 10, description="Audit ACME")
        by_client = _add(temp_db, date(2024, 1, 2), 10, client_name="acme corp")
        by_category = _add(temp_db, date(2024, 1, 3), 10, category="Acme fees")
        _add(temp_db, date(2024, 1, 4), 10, description="Other")

        page = temp_db.list_transactions(USER, TransactionFilters(search="AcMe"))

        assert {txn.id for txn in page.items} == {by_description, by_client, by_category}

    def test_search_treats_wildcards_literally(self, temp_db):
        """Test that % and _ in the search text match only themselves."""
        discount = _add(temp_db, date(2024, 1, 1), 10, description="Remise 50%")
        _add(temp_db, date(2024, 1, 2), 10, description="Lot de 500 stylos")
        snake = _add(temp_db, date(2024, 1, 3), 10, description="frais_bancaires")
        _add(temp_db, date(2024, 1, 4), 10, description="fraisXbancaires")

        by_percent = temp_db.list_transactions(USER, TransactionFilters(search="50%"))
        by_underscore = temp_db.list_transactions(USER, TransactionFilters(search="s_b"))

        assert [txn.id for txn in by_percent.items] == [discount]
        assert [txn.id for txn in by_underscore.items] == [snake]

    def test_filters_by_categories_type_and_dates(self, temp_db):
        """Test category-set membership, type and inclusive date bounds."""
        kept = _add(temp_db, date(2024, 2, 1), 10, category="Conseil")
        _add(temp_db, date(2024, 2, 2), 10, type="expense", category="Conseil")
        _add(temp_db, date(2024, 2, 3), 10, category="Formation")
        _add(temp_db, date(2024, 3, 1), 10, category="Conseil")
        edge = _add(temp_db, date(2024, 2, 29), 10, category="Prestation")

        filters = TransactionFilters(
            categories=("Conseil", "Prestation"),
            type=TransactionType.INCOME,
            date_from=date(2024, 2, 1),
            date_to=date(2024, 2, 29),
        )
        page = temp_db.list_transactions(USER, filters)

        assert {txn.id for txn in page.items} == {kept, edge}

    def test_list_all_transactions_ignores_paging(self, temp_db):
        """Test that list_all_transactions returns every match."""
        for day in range(1, 16):
            _add(temp_db, date(2024, 1, day), day)

        transactions = temp_db.list_all_transactions(USER, TransactionFilters(page_size=5))

        assert len(transactions) == 15
        assert transactions[0].date == date(2024, 1, 15)

    def test_update_transaction(self, temp_db):
        """Test partial update returning the stored entity."""
        txn_id = _add(temp_db, date(2024, 1, 1), 100, description="Old")

        updated = temp_db.update_transaction(
            txn_id, {"description": "New", "type": "expense", "amount": Decimal("-50")}
        )

        assert updated.description == "New"
        assert updated.type == TransactionType.EXPENSE
        assert updated.amount == Decimal("-50")
        assert updated.category == "Prestation"

    def test_update_rejects_unknown_fields(self, temp_db):
        """Test that unknown fields are rejected."""
        txn_id = _add(temp_db, date(2024, 1, 1), 100)

        with pytest.raises(ValidationError, match="Unknown transaction field"):
            temp_db.update_transaction(txn_id, {"user_id": "other"})

    def test_update_missing_transaction(self, temp_db):
        """Test that updating an unknown ID raises NotFoundError."""
        with pytest.raises(NotFoundError):
            temp_db.update_transaction(42, {"description": "x"})

    def test_delete_and_bulk_delete(self, temp_db):
        """Test single and bulk deletion."""
        ids = [_add(temp_db, date(2024, 1, day), day) for day in range(1, 5)]

        temp_db.delete_transaction(ids[0])
        deleted = temp_db.bulk_delete_transactions([ids[1], ids[2], 999])

        assert temp_db.get_transaction(ids[0]) is None
        assert deleted == 2
        assert [txn.id for txn in temp_db.list_all_transactions(USER)] == [ids[3]]

    def test_bulk_delete_nothing(self, temp_db):
        """Test that an empty ID list deletes nothing."""
        assert temp_db.bulk_delete_transactions([]) == 0

    def test_list_categories_distinct_sorted(self, temp_db):
        """Test that categories are distinct and sorted."""
        _add(temp_db, date(2024, 1, 1), 10, category="Logiciel")
        _add(temp_db, date(2024, 1, 2), 10, category="Conseil")
        _add(temp_db, date(2024, 1, 3), 10, category="Logiciel")
        _add(temp_db, date(2024, 1, 3), 10, category="Autre", user_id="other")

        assert temp_db.list_categories(USER) == ["Conseil", "Logiciel"]

    def test_transaction_stats(self, temp_db):
        """Test all-time totals with absolute expenses."""
        _add(temp_db, date(2023, 1, 1), 1000)
        _add(temp_db, date(2024, 1, 1), 500)
        _add(temp_db, date(2024, 1, 2), -200, type="expense")

        stats = temp_db.get_transaction_stats(USER)

        assert stats.total_income == Decimal("1500")
        assert stats.total_expenses == Decimal("200")
        assert stats.net_balance == Decimal("1300")
        assert stats.transaction_count == 3

    def test_transaction_stats_are_exact_cents(self, temp_db):
        """Test that summed amounts carry no binary float residue."""
        _add(temp_db, date(2024, 1, 1), "0.10")
        _add(temp_db, date(2024, 1, 2), "0.20")
        _add(temp_db, date(2024, 1, 3), "0.10", type="expense")
        _add(temp_db, date(2024, 1, 4), "0.20", type="expense")

        stats = temp_db.get_transaction_stats(USER)

        assert str(stats.total_income) == "0.30"
        assert str(stats.total_expenses) == "0.30"
        assert stats.net_balance == Decimal("0")

    def test_vat_settings_round_trip(self, temp_db):
        """Test creating then replacing settings on the profile."""
        assert temp_db.get_vat_settings(USER) is None

        temp_db.save_vat_settings(USER, entities.VatSettings(legal_status=entities.LegalStatus.EURL))
        settings = temp_db.get_vat_settings(USER)
        assert isinstance(settings, entities.VatSettings)
        assert settings.legal_status == entities.LegalStatus.EURL

        temp_db.save_vat_settings(
            USER,
            entities.VatSettings(
                vat_regime=entities.VatRegime.REEL_NORMAL,
                current_year_revenue=Decimal("1234.56"),
            ),
        )
        settings = temp_db.get_vat_settings(USER)
        assert settings.vat_regime == entities.VatRegime.REEL_NORMAL
        assert settings.current_year_revenue == Decimal("1234.56")
        assert settings.legal_status is None

    def test_engine_errors_become_store_errors(self, temp_db):
        """Test that SQLAlchemy failures are wrapped in StoreError."""
        session = temp_db._get_session()
        session.execute(text("DROP TABLE transactions"))
        session.commit()

        with pytest.raises(StoreError, match="Could not list transactions"):
            temp_db.list_transactions(USER, TransactionFilters())

    def test_unopenable_database_raises_store_error(self, tmp_path):
        """Test that a database file in a missing directory gives StoreError."""
        with pytest.raises(StoreError, match="Could not open database"):
            SQLAlchemyDatabase(f"sqlite:///{tmp_path / 'missing' / 'books.db'}")
