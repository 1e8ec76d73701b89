"""Mapper functions to convert between domain models and SQLAlchemy models."""

from freeboard.domain import entities as domain
from freeboard.database.models import (
    Profile as ORMProfile,
    Transaction as ORMTransaction,
)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        date=orm_transaction.date,
        amount=orm_transaction.amount,
        type=domain.TransactionType(orm_transaction.type),
        category=orm_transaction.category,
        description=orm_transaction.description,
        client_name=orm_transaction.client_name,
        status=orm_transaction.status,
        amount_ht=orm_transaction.amount_ht,
        vat_amount=orm_transaction.vat_amount,
        vat_rate=orm_transaction.vat_rate,
        invoice_number=orm_transaction.invoice_number,
        payment_method=orm_transaction.payment_method,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )


def profile_to_vat_settings(orm_profile: ORMProfile) -> domain.VatSettings:
    """Convert SQLAlchemy Profile model to domain VatSettings entity."""
    legal_status = None
    if orm_profile.legal_status:
        legal_status = domain.LegalStatus(orm_profile.legal_status)
    return domain.VatSettings(
        vat_regime=domain.VatRegime(orm_profile.vat_regime),
        vat_regime_start_date=orm_profile.vat_regime_start_date,
        voluntary_vat_registration=orm_profile.voluntary_vat_registration,
        annual_revenue_threshold=orm_profile.annual_revenue_threshold,
        current_year_revenue=orm_profile.current_year_revenue,
        vat_alerts_enabled=orm_profile.vat_alerts_enabled,
        legal_status=legal_status,
    )


def apply_vat_settings(orm_profile: ORMProfile, settings: domain.VatSettings) -> None:
    """Copy domain VatSettings onto a SQLAlchemy Profile model."""
    orm_profile.vat_regime = settings.vat_regime.value
    orm_profile.vat_regime_start_date = settings.vat_regime_start_date
    orm_profile.voluntary_vat_registration = settings.voluntary_vat_registration
    orm_profile.annual_revenue_threshold = settings.annual_revenue_threshold
    orm_profile.current_year_revenue = settings.current_year_revenue
    orm_profile.vat_alerts_enabled = settings.vat_alerts_enabled
    orm_profile.legal_status = settings.legal_status.value if settings.legal_status else None
