"""Domain layer for freeboard application.

Services live in their own modules (freeboard.domain.vat, .transaction,
.dashboard, ...) and are imported from there; this package only re-exports
the plain entities and errors.
"""

from freeboard.domain.entities import (
    AlertSeverity,
    DashboardData,
    LegalStatus,
    Transaction,
    TransactionFilters,
    TransactionType,
    VatRegime,
    VatSettings,
)
from freeboard.domain.errors import DomainError, NotFoundError, StoreError, ValidationError

__all__ = [
    "AlertSeverity",
    "DashboardData",
    "LegalStatus",
    "Transaction",
    "TransactionFilters",
    "TransactionType",
    "VatRegime",
    "VatSettings",
    "DomainError",
    "NotFoundError",
    "StoreError",
    "ValidationError",
]
