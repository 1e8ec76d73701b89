"""VAT rules for French micro-entrepreneurs.

The module-level functions are pure: they only look at their arguments.
VatService adds the store-backed operations (reading and writing the
settings held on the user's profile, recomputing the cached revenue).
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from freeboard.database.base import Database
from freeboard.domain.entities import (
    AlertSeverity,
    LegalStatus,
    TransactionFilters,
    TransactionType,
    VatAlert,
    VatCalculation,
    VatImpact,
    VatRegime,
    VatSettings,
)
from freeboard.domain.errors import ValidationError, invalid_choice
from freeboard.utils.amount_parser import coerce_decimal, round_cents
from freeboard.utils.clock import SystemClock

logger = logging.getLogger(__name__)

# 2024 franchise thresholds, in euros
VAT_THRESHOLDS = {
    "services": Decimal("36800"),
    "goods": Decimal("91900"),
    "mixed": Decimal("36800"),
}

VAT_RATES = {
    "standard": Decimal("20"),
    "reduced": Decimal("10"),
    "super_reduced": Decimal("5.5"),
    "special": Decimal("2.1"),
}

WARNING_THRESHOLD_PERCENT = 80
PREPARATION_THRESHOLD_PERCENT = 90
CRITICAL_THRESHOLD_PERCENT = 100

REAL_REGIMES = (VatRegime.REEL_SIMPLIFIE, VatRegime.REEL_NORMAL)
MICRO_STATUSES = (LegalStatus.MICRO_ENTREPRISE, LegalStatus.AUTO_ENTREPRENEUR)


def is_vat_applicable(settings: VatSettings, current_year_revenue) -> bool:
    """Tell whether VAT must be charged.

    VAT applies under voluntary registration, under either real regime, or
    under the franchise once revenue strictly exceeds the threshold.
    """
    if settings.voluntary_vat_registration:
        return True
    if settings.vat_regime in REAL_REGIMES:
        return True
    if settings.vat_regime == VatRegime.FRANCHISE:
        return coerce_decimal(current_year_revenue) > coerce_decimal(
            settings.annual_revenue_threshold
        )
    return False


def calculate_vat(
    amount,
    settings: VatSettings,
    current_year_revenue,
    vat_rate=VAT_RATES["standard"],
) -> VatCalculation:
    """Split a tax-inclusive amount into its HT and VAT parts.

    Args:
        amount: Tax-inclusive (TTC) amount; negative for expenses
        settings: User VAT settings
        current_year_revenue: Revenue of the current calendar year
        vat_rate: Rate in percent

    Returns:
        VatCalculation. When VAT does not apply the whole amount is HT and
        the reported rate is 0.
    """
    amount = coerce_decimal(amount)
    rate = coerce_decimal(vat_rate)

    if not is_vat_applicable(settings, current_year_revenue):
        return VatCalculation(
            amount_ht=amount,
            vat_amount=Decimal("0"),
            vat_rate=Decimal("0"),
            total_amount=amount,
            is_vat_applicable=False,
            regime_used=settings.vat_regime,
        )

    amount_ht = amount / (1 + rate / 100)
    vat_amount = amount - amount_ht
    return VatCalculation(
        amount_ht=round_cents(amount_ht),
        vat_amount=round_cents(vat_amount),
        vat_rate=rate,
        total_amount=amount,
        is_vat_applicable=True,
        regime_used=settings.vat_regime,
    )


def threshold_percentage(current_year_revenue, threshold) -> float:
    """Revenue as a percentage of the threshold (inf for a zero threshold)."""
    revenue = coerce_decimal(current_year_revenue)
    threshold = coerce_decimal(threshold)
    if threshold <= 0:
        return float("inf") if revenue > 0 else 0.0
    return float(revenue / threshold * 100)


def generate_vat_alerts(settings: VatSettings, current_year_revenue) -> list[VatAlert]:
    """Build threshold alerts for a franchise-regime user.

    At most one alert is produced per severity: a warning from 80 % of the
    threshold up to the threshold itself (reworded as a preparation notice
    from 90 %), and a critical alert once revenue strictly exceeds the
    threshold. Other regimes never get threshold alerts.
    """
    if settings.vat_regime != VatRegime.FRANCHISE:
        return []

    revenue = coerce_decimal(current_year_revenue)
    threshold = coerce_decimal(settings.annual_revenue_threshold)
    percentage = threshold_percentage(revenue, threshold)

    if percentage > CRITICAL_THRESHOLD_PERCENT:
        return [
            VatAlert(
                id="threshold-critical",
                type=AlertSeverity.CRITICAL,
                message="Vous devez passer en régime réel de TVA - Seuil dépassé",
                threshold_percentage=percentage,
                action_required=True,
                recommendation="Contactez votre comptable pour effectuer le changement de régime",
            )
        ]

    if percentage >= PREPARATION_THRESHOLD_PERCENT:
        return [
            VatAlert(
                id="threshold-preparation",
                type=AlertSeverity.WARNING,
                message=(
                    "Préparez le passage en régime TVA - Seuil presque atteint "
                    f"({_format_euros(revenue)}/{_format_euros(threshold)})"
                ),
                threshold_percentage=percentage,
                action_required=False,
                recommendation="Anticipez les démarches administratives nécessaires",
            )
        ]

    if percentage >= WARNING_THRESHOLD_PERCENT:
        return [
            VatAlert(
                id="threshold-warning",
                type=AlertSeverity.WARNING,
                message=(
                    "Attention : Seuil TVA bientôt atteint "
                    f"({_format_euros(revenue)}/{_format_euros(threshold)})"
                ),
                threshold_percentage=percentage,
                action_required=False,
                recommendation="Préparez-vous au passage en régime réel de TVA",
            )
        ]

    return []


def simulate_vat_impact(monthly_revenue, vat_rate=VAT_RATES["standard"]) -> VatImpact:
    """Project the VAT to collect on a monthly revenue once VAT applies.

    The net impact is negative: collected VAT is owed to the State and
    reduces the cash the freelancer keeps.
    """
    monthly_revenue = coerce_decimal(monthly_revenue)
    rate = coerce_decimal(vat_rate)
    monthly_ht = monthly_revenue / (1 + rate / 100)
    monthly_vat = monthly_revenue - monthly_ht
    return VatImpact(
        monthly_vat_to_collect=round_cents(monthly_vat),
        annual_vat_to_collect=round_cents(monthly_vat * 12),
        net_impact_monthly=round_cents(-monthly_vat),
        net_impact_annual=round_cents(-monthly_vat * 12),
    )


def get_recommended_vat_regime(legal_status: LegalStatus, annual_revenue) -> VatRegime:
    """Suggest a VAT regime for a legal status and yearly revenue."""
    if legal_status in MICRO_STATUSES:
        if coerce_decimal(annual_revenue) > VAT_THRESHOLDS["services"]:
            return VatRegime.REEL_SIMPLIFIE
        return VatRegime.FRANCHISE
    return VatRegime.REEL_SIMPLIFIE


def vat_provision(revenue, vat_rate=VAT_RATES["standard"]) -> Decimal:
    """Amount to set aside for VAT on a revenue figure."""
    return round_cents(coerce_decimal(revenue) * coerce_decimal(vat_rate) / 100)


def _format_euros(value: Decimal) -> str:
    # French grouping: spaces between thousands, no decimals
    return f"{round(value):,}".replace(",", " ") + "€"


SETTINGS_FIELDS = {
    "vat_regime",
    "vat_regime_start_date",
    "voluntary_vat_registration",
    "annual_revenue_threshold",
    "current_year_revenue",
    "vat_alerts_enabled",
    "legal_status",
}


class VatService:
    """Service for VAT settings and store-backed VAT computations."""

    def __init__(self, db: Database, clock=None):
        """Initialize VAT service.

        Args:
            db: Database instance
            clock: Object with a today() method (defaults to SystemClock)
        """
        self.db = db
        self.clock = clock or SystemClock()

    def get_settings(self, user_id: str) -> VatSettings:
        """Return the user's VAT settings, or the defaults if none are stored."""
        settings = self.db.get_vat_settings(user_id)
        return settings if settings is not None else VatSettings()

    def update_settings(self, user_id: str, **changes) -> VatSettings:
        """Apply a partial update to the user's VAT settings.

        Raises:
            ValidationError: If a field is unknown or a value is invalid
        """
        unknown = set(changes) - SETTINGS_FIELDS
        if unknown:
            raise ValidationError(f"Unknown VAT setting(s): {', '.join(sorted(unknown))}")

        if "vat_regime" in changes:
            changes["vat_regime"] = _to_enum(VatRegime, "vat_regime", changes["vat_regime"])
        if changes.get("legal_status") is not None:
            changes["legal_status"] = _to_enum(LegalStatus, "legal_status", changes["legal_status"])
        for money_field in ("annual_revenue_threshold", "current_year_revenue"):
            if money_field in changes:
                changes[money_field] = coerce_decimal(changes[money_field])
        if "annual_revenue_threshold" in changes and changes["annual_revenue_threshold"] <= 0:
            raise ValidationError("annual_revenue_threshold must be positive")

        settings = replace(self.get_settings(user_id), **changes)
        self.db.save_vat_settings(user_id, settings)
        logger.info("Updated VAT settings for %s: %s", user_id, ", ".join(sorted(changes)))
        return settings

    def calculate_current_year_revenue(self, user_id: str, year: Optional[int] = None) -> Decimal:
        """Sum income amounts dated within the given (default: current) year."""
        year = year or self.clock.today().year
        filters = TransactionFilters(
            type=TransactionType.INCOME,
            date_from=date(year, 1, 1),
            date_to=date(year, 12, 31),
        )
        transactions = self.db.list_all_transactions(user_id, filters)
        return sum((txn.amount for txn in transactions), Decimal("0"))

    def refresh_current_year_revenue(self, user_id: str) -> Decimal:
        """Recompute the cached current_year_revenue and store it."""
        revenue = self.calculate_current_year_revenue(user_id)
        settings = replace(self.get_settings(user_id), current_year_revenue=revenue)
        self.db.save_vat_settings(user_id, settings)
        logger.debug("Current year revenue for %s is now %s", user_id, revenue)
        return revenue

    def alerts_for_user(self, user_id: str) -> list[VatAlert]:
        """Threshold alerts for a user, honoring vat_alerts_enabled."""
        settings = self.get_settings(user_id)
        if not settings.vat_alerts_enabled:
            return []
        revenue = self.calculate_current_year_revenue(user_id)
        return generate_vat_alerts(settings, revenue)

    def calculate_for_user(self, user_id: str, amount, vat_rate=VAT_RATES["standard"]) -> VatCalculation:
        """calculate_vat using the user's settings and live yearly revenue."""
        settings = self.get_settings(user_id)
        revenue = self.calculate_current_year_revenue(user_id)
        return calculate_vat(amount, settings, revenue, vat_rate)


def _to_enum(enum_cls, field_name: str, value):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(invalid_choice(field_name, value, [member.value for member in enum_cls]))
