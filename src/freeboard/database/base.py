"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from freeboard.domain.entities import (
    Transaction,
    TransactionFilters,
    TransactionPage,
    TransactionStats,
    TransactionType,
    VatSettings,
)


class Database(ABC):
    """Abstract record store for freeboard.

    Every query is scoped by user. Errors raised by the underlying engine
    are surfaced as StoreError and never retried.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        date: date,
        amount: Decimal,
        type: TransactionType,
        category: str,
        description: Optional[str] = None,
        client_name: Optional[str] = None,
        status: str = "paid",
        amount_ht: Optional[Decimal] = None,
        vat_amount: Optional[Decimal] = None,
        vat_rate: Optional[Decimal] = None,
        invoice_number: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, fields: dict[str, Any]) -> Transaction:
        """Apply a partial update and return the stored transaction."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def bulk_delete_transactions(self, transaction_ids: list[int]) -> int:
        """Delete several transactions. Returns the number deleted."""
        pass

    @abstractmethod
    def list_transactions(self, user_id: str, filters: TransactionFilters) -> TransactionPage:
        """List one page of a user's transactions, newest date first.

        Args:
            user_id: Owner of the transactions
            filters: Search text, category set, type, date range and paging
        """
        pass

    @abstractmethod
    def list_all_transactions(
        self, user_id: str, filters: Optional[TransactionFilters] = None
    ) -> list[Transaction]:
        """List every matching transaction, newest date first, ignoring paging."""
        pass

    @abstractmethod
    def list_categories(self, user_id: str) -> list[str]:
        """Distinct non-empty categories used by a user, sorted."""
        pass

    @abstractmethod
    def get_transaction_stats(self, user_id: str) -> TransactionStats:
        """All-time income, expense and count totals for a user."""
        pass

    # Profile operations
    @abstractmethod
    def get_vat_settings(self, user_id: str) -> Optional[VatSettings]:
        """Get VAT settings stored on the user's profile."""
        pass

    @abstractmethod
    def save_vat_settings(self, user_id: str, settings: VatSettings) -> None:
        """Create or replace VAT settings on the user's profile."""
        pass
