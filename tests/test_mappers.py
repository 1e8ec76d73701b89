"""Tests for database mappers."""

from datetime import UTC, date, datetime
from decimal import Decimal

from freeboard.database.mappers import (
    apply_vat_settings,
    profile_to_vat_settings,
    transaction_to_domain,
)
from freeboard.database.models import (
    Profile as ORMProfile,
    Transaction as ORMTransaction,
)
from freeboard.domain.entities import (
    LegalStatus,
    Transaction,
    TransactionType,
    VatRegime,
    VatSettings,
)


class TestTransactionMapper:
    """Tests for Transaction mapper."""

    def test_transaction_to_domain(self):
        """Test converting ORM Transaction to domain Transaction."""
        now = datetime.now(UTC)
        orm_transaction = ORMTransaction(
            id=7,
            user_id="user-1",
            date=date(2024, 6, 3),
            amount=Decimal("1200.00"),
            amount_ht=Decimal("1000.00"),
            vat_amount=Decimal("200.00"),
            vat_rate=Decimal("20.00"),
            type="income",
            category="Prestation",
            description="Audit",
            client_name="ACME",
            status="paid",
            invoice_number="F-2024-007",
            payment_method="virement",
            created_at=now,
            updated_at=now,
        )
        domain_transaction = transaction_to_domain(orm_transaction)

        assert isinstance(domain_transaction, Transaction)
        assert domain_transaction.id == 7
        assert domain_transaction.type == TransactionType.INCOME
        assert domain_transaction.amount == Decimal("1200.00")
        assert domain_transaction.vat_amount == Decimal("200.00")
        assert domain_transaction.client_name == "ACME"
        assert domain_transaction.invoice_number == "F-2024-007"
        assert domain_transaction.created_at == now

    def test_transaction_to_domain_optional_fields(self):
        """Test converting ORM Transaction without optional fields."""
        orm_transaction = ORMTransaction(
            id=8,
            user_id="user-1",
            date=date(2024, 6, 10),
            amount=Decimal("49.90"),
            type="expense",
            category="Logiciel",
            status="paid",
        )
        domain_transaction = transaction_to_domain(orm_transaction)

        assert domain_transaction.type == TransactionType.EXPENSE
        assert domain_transaction.description is None
        assert domain_transaction.amount_ht is None
        assert domain_transaction.payment_method is None


class TestProfileMapper:
    """Tests for VAT settings mappers."""

    def test_profile_to_vat_settings(self):
        """Test converting ORM Profile to domain VatSettings."""
        orm_profile = ORMProfile(
            id="user-1",
            legal_status="eurl",
            vat_regime="reel_simplifie",
            vat_regime_start_date=date(2024, 7, 1),
            voluntary_vat_registration=True,
            annual_revenue_threshold=Decimal("91900.00"),
            current_year_revenue=Decimal("12000.00"),
            vat_alerts_enabled=False,
        )
        settings = profile_to_vat_settings(orm_profile)

        assert isinstance(settings, VatSettings)
        assert settings.vat_regime == VatRegime.REEL_SIMPLIFIE
        assert settings.legal_status == LegalStatus.EURL
        assert settings.vat_regime_start_date == date(2024, 7, 1)
        assert settings.voluntary_vat_registration is True
        assert settings.annual_revenue_threshold == Decimal("91900.00")
        assert settings.vat_alerts_enabled is False

    def test_profile_without_legal_status(self):
        orm_profile = ORMProfile(
            id="user-1",
            legal_status=None,
            vat_regime="franchise",
            voluntary_vat_registration=False,
            annual_revenue_threshold=Decimal("36800"),
            current_year_revenue=Decimal("0"),
            vat_alerts_enabled=True,
        )

        assert profile_to_vat_settings(orm_profile).legal_status is None

    def test_apply_vat_settings(self):
        """Test copying domain VatSettings onto an ORM Profile."""
        orm_profile = ORMProfile(id="user-1")
        settings = VatSettings(
            vat_regime=VatRegime.REEL_NORMAL,
            legal_status=LegalStatus.SAS,
            current_year_revenue=Decimal("5000"),
        )

        apply_vat_settings(orm_profile, settings)

        assert orm_profile.vat_regime == "reel_normal"
        assert orm_profile.legal_status == "sas"
        assert orm_profile.current_year_revenue == Decimal("5000")
        assert orm_profile.annual_revenue_threshold == Decimal("36800")
