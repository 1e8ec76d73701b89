"""Transaction domain service."""

import logging
from datetime import date
from typing import Any, Optional

from freeboard.database.base import Database
from freeboard.domain.entities import (
    Transaction as TransactionEntity,
    TransactionFilters,
    TransactionPage,
    TransactionStats,
    TransactionType,
)
from freeboard.domain.errors import (
    NotFoundError,
    ValidationError,
    invalid_choice,
    missing_field,
    transaction_not_found,
)
from freeboard.domain.vat import VAT_RATES, VatService
from freeboard.utils.amount_parser import coerce_decimal

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 500

CLEARABLE_FIELDS = ("description", "client_name", "invoice_number", "payment_method")


class TransactionService:
    """Service for managing transactions.

    Input is validated before any store call. After every write the user's
    cached yearly revenue is recomputed and any dashboard snapshot cached
    for that user is dropped.
    """

    def __init__(self, db: Database, vat_service: Optional[VatService] = None, dashboard_service=None):
        """Initialize transaction service.

        Args:
            db: Database instance
            vat_service: VAT service used to derive HT/VAT amounts (defaults to one on db)
            dashboard_service: Optional DashboardService whose cache is invalidated on writes
        """
        self.db = db
        self.vat_service = vat_service or VatService(db)
        self.dashboard_service = dashboard_service

    def create_transaction(
        self,
        user_id: str,
        date: date,
        amount,
        type: TransactionType | str,
        category: str,
        description: Optional[str] = None,
        client_name: Optional[str] = None,
        status: str = "paid",
        vat_rate=None,
        amount_ht=None,
        vat_amount=None,
        invoice_number: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        When amount_ht and vat_amount are not both given they are derived
        from the user's VAT settings and current yearly revenue.

        Args:
            user_id: Owner of the transaction
            date: Transaction date
            amount: Tax-inclusive amount
            type: income or expense
            category: Free-text category label
            description: Optional description
            client_name: Optional client name
            status: Payment status label
            vat_rate: VAT rate in percent (defaults to the standard rate)
            amount_ht: Optional pre-computed HT amount
            vat_amount: Optional pre-computed VAT amount
            invoice_number: Optional invoice reference
            payment_method: Optional payment method

        Returns:
            Transaction ID

        Raises:
            ValidationError: If a required field is missing or invalid
        """
        if not user_id:
            raise ValidationError(missing_field("user_id"))
        if date is None:
            raise ValidationError(missing_field("date"))
        if amount is None:
            raise ValidationError(missing_field("amount"))
        txn_type = self._validate_type(type)
        category = self._validate_category(category)
        amount = coerce_decimal(amount)
        rate = coerce_decimal(vat_rate if vat_rate is not None else VAT_RATES["standard"])
        if rate < 0:
            raise ValidationError("vat_rate cannot be negative")

        if amount_ht is not None and vat_amount is not None:
            amount_ht = coerce_decimal(amount_ht)
            vat_amount = coerce_decimal(vat_amount)
        else:
            calculation = self.vat_service.calculate_for_user(user_id, amount, rate)
            amount_ht = calculation.amount_ht
            vat_amount = calculation.vat_amount
            # an inapplicable calculation keeps the nominal rate on record
            if calculation.is_vat_applicable:
                rate = calculation.vat_rate

        transaction_id = self.db.create_transaction(
            user_id=user_id,
            date=date,
            amount=amount,
            type=txn_type,
            category=category,
            description=description,
            client_name=client_name,
            status=status or "paid",
            amount_ht=amount_ht,
            vat_amount=vat_amount,
            vat_rate=rate,
            invoice_number=invoice_number,
            payment_method=payment_method,
        )
        logger.info("Created %s transaction %d for %s", txn_type.value, transaction_id, user_id)
        self._after_write(user_id)
        return transaction_id

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int, user_id: Optional[str] = None) -> TransactionEntity:
        """Get transaction by ID or raise NotFoundError.

        When user_id is given, a transaction owned by someone else is
        reported as missing.
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None or (user_id is not None and txn.user_id != user_id):
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def update_transaction(
        self, transaction_id: int, user_id: Optional[str] = None, **fields: Any
    ) -> TransactionEntity:
        """Update transaction fields.

        An empty string clears description, client_name, invoice_number or
        payment_method. When amount or vat_rate changes and amount_ht and
        vat_amount are not both given, they are derived again from the
        owner's VAT settings, as on creation.

        Args:
            transaction_id: Transaction ID to update
            user_id: Optional owner the transaction must belong to
            **fields: Fields to change; None values are ignored

        Returns:
            Updated transaction entity

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If a field value is invalid
        """
        txn = self.require_transaction(transaction_id, user_id)

        changes = {name: value for name, value in fields.items() if value is not None}
        for name in CLEARABLE_FIELDS:
            if name in changes and not str(changes[name]).strip():
                changes[name] = None
        if "type" in changes:
            changes["type"] = self._validate_type(changes["type"])
        if "category" in changes:
            changes["category"] = self._validate_category(changes["category"])
        for money_field in ("amount", "amount_ht", "vat_amount", "vat_rate"):
            if money_field in changes:
                changes[money_field] = coerce_decimal(changes[money_field])
        if changes.get("vat_rate", 0) < 0:
            raise ValidationError("vat_rate cannot be negative")

        if not changes:
            return txn

        split_given = "amount_ht" in changes and "vat_amount" in changes
        if ("amount" in changes or "vat_rate" in changes) and not split_given:
            amount = changes.get("amount", txn.amount)
            rate = changes.get("vat_rate", txn.vat_rate if txn.vat_rate is not None else VAT_RATES["standard"])
            calculation = self.vat_service.calculate_for_user(txn.user_id, amount, rate)
            changes["amount_ht"] = calculation.amount_ht
            changes["vat_amount"] = calculation.vat_amount
            changes["vat_rate"] = rate

        updated = self.db.update_transaction(transaction_id, changes)
        logger.info("Updated transaction %d: %s", transaction_id, ", ".join(sorted(changes)))
        self._after_write(txn.user_id)
        return updated

    def delete_transaction(self, transaction_id: int, user_id: Optional[str] = None) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        txn = self.require_transaction(transaction_id, user_id)
        self.db.delete_transaction(transaction_id)
        logger.info("Deleted transaction %d", transaction_id)
        self._after_write(txn.user_id)

    def bulk_delete_transactions(self, transaction_ids: list[int], user_id: Optional[str] = None) -> int:
        """Delete several transactions; unknown IDs are skipped.

        Args:
            transaction_ids: IDs to delete
            user_id: When given, IDs owned by other users are skipped too

        Returns:
            Number of transactions deleted

        Raises:
            ValidationError: If no ID is given
        """
        if not transaction_ids:
            raise ValidationError("No transaction selected")

        owners = set()
        kept_ids = []
        for transaction_id in transaction_ids:
            txn = self.db.get_transaction(transaction_id)
            if txn is None or (user_id is not None and txn.user_id != user_id):
                continue
            owners.add(txn.user_id)
            kept_ids.append(transaction_id)

        deleted = self.db.bulk_delete_transactions(kept_ids)
        logger.info("Deleted %d of %d selected transactions", deleted, len(transaction_ids))
        for owner in owners:
            self._after_write(owner)
        return deleted

    def list_transactions(
        self, user_id: str, filters: Optional[TransactionFilters] = None
    ) -> TransactionPage:
        """List a page of transactions matching filters.

        Raises:
            ValidationError: If paging or date bounds are invalid
        """
        filters = filters or TransactionFilters()
        if filters.page < 1:
            raise ValidationError("page must be at least 1")
        if not 1 <= filters.page_size <= MAX_PAGE_SIZE:
            raise ValidationError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            raise ValidationError("date_from must not be after date_to")
        return self.db.list_transactions(user_id, filters)

    def get_stats(self, user_id: str) -> TransactionStats:
        """All-time totals for a user."""
        return self.db.get_transaction_stats(user_id)

    def get_categories(self, user_id: str) -> list[str]:
        """Categories the user has already used."""
        return self.db.list_categories(user_id)

    def _after_write(self, user_id: str) -> None:
        self.vat_service.refresh_current_year_revenue(user_id)
        if self.dashboard_service is not None:
            self.dashboard_service.invalidate(user_id)

    @staticmethod
    def _validate_type(value) -> TransactionType:
        try:
            return TransactionType(value)
        except ValueError:
            raise ValidationError(
                invalid_choice("type", value, [member.value for member in TransactionType])
            )

    @staticmethod
    def _validate_category(value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValidationError(missing_field("category"))
        return value.strip()
