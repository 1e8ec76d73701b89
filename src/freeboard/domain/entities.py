"""Domain model entities for freeboard.

These are pure data classes representing business concepts, independent of
database schema. Stored amounts are Decimal; derived ratios are float.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Optional


class TransactionType(StrEnum):
    """Classification of a financial movement."""

    INCOME = "income"
    EXPENSE = "expense"


class VatRegime(StrEnum):
    """French VAT regimes."""

    FRANCHISE = "franchise"
    REEL_SIMPLIFIE = "reel_simplifie"
    REEL_NORMAL = "reel_normal"


class LegalStatus(StrEnum):
    """French legal entity forms."""

    MICRO_ENTREPRISE = "micro-entreprise"
    AUTO_ENTREPRENEUR = "auto-entrepreneur"
    EIRL = "eirl"
    EURL = "eurl"
    SARL = "sarl"
    SAS = "sas"
    SASU = "sasu"
    SA = "sa"


class AlertSeverity(StrEnum):
    """Severity levels shared by VAT and dashboard alerts."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    CRITICAL = "critical"
    ERROR = "error"


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    user_id: str
    date: date
    amount: Decimal
    type: TransactionType
    category: str
    description: Optional[str] = None
    client_name: Optional[str] = None
    status: str = "paid"
    amount_ht: Optional[Decimal] = None
    vat_amount: Optional[Decimal] = None
    vat_rate: Optional[Decimal] = None
    invoice_number: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class VatSettings:
    """Per-user VAT settings, stored alongside the profile."""

    vat_regime: VatRegime = VatRegime.FRANCHISE
    vat_regime_start_date: Optional[date] = None
    voluntary_vat_registration: bool = False
    annual_revenue_threshold: Decimal = Decimal("36800")
    current_year_revenue: Decimal = Decimal("0")
    vat_alerts_enabled: bool = True
    legal_status: Optional[LegalStatus] = None


@dataclass(frozen=True)
class TransactionFilters:
    """Filters accepted by the transaction store."""

    search: Optional[str] = None
    categories: tuple[str, ...] = ()
    type: Optional[TransactionType] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class TransactionPage:
    """One page of transactions plus the total number of matches."""

    items: tuple[Transaction, ...]
    total: int


@dataclass(frozen=True)
class TransactionStats:
    """All-time totals for a user."""

    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    transaction_count: int


@dataclass(frozen=True)
class VatCalculation:
    """Result of splitting an amount into HT and VAT parts."""

    amount_ht: Decimal
    vat_amount: Decimal
    vat_rate: Decimal
    total_amount: Decimal
    is_vat_applicable: bool
    regime_used: VatRegime


@dataclass(frozen=True)
class VatAlert:
    """Alert about the franchise threshold."""

    id: str
    type: AlertSeverity
    message: str
    threshold_percentage: float
    action_required: bool
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class VatImpact:
    """Projected VAT cost of leaving the franchise regime."""

    monthly_vat_to_collect: Decimal
    annual_vat_to_collect: Decimal
    net_impact_monthly: Decimal
    net_impact_annual: Decimal


@dataclass(frozen=True)
class DashboardAlert:
    """Business alert shown on the dashboard."""

    id: str
    type: AlertSeverity
    title: str
    message: str
    action_required: bool


@dataclass(frozen=True)
class Kpis:
    """Key figures for the current month and year."""

    total_revenue: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")
    revenue_growth: float = 0.0
    expense_growth: float = 0.0
    total_vat_collected: Decimal = Decimal("0")
    total_vat_to_pay: Decimal = Decimal("0")
    cash_flow_days: int = 0
    average_monthly_revenue: Decimal = Decimal("0")


@dataclass(frozen=True)
class VatMetrics:
    """Progress towards the VAT threshold."""

    current_year_revenue: Decimal
    vat_threshold: Decimal
    vat_progress: float
    next_declaration_date: date
    declaration_type: str
    vat_to_pay: Decimal


@dataclass(frozen=True)
class MonthlyEntry:
    """Totals for one calendar month."""

    month: str
    label: str
    revenue: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    vat_collected: Decimal = Decimal("0")
    net_cash_flow: Decimal = Decimal("0")


@dataclass(frozen=True)
class CategoryShare:
    """Share of a category in the current month's volume."""

    category: str
    amount: Decimal
    percentage: float
    type: TransactionType


@dataclass(frozen=True)
class DashboardData:
    """Snapshot recomputed from transactions and VAT settings."""

    kpis: Kpis
    vat_metrics: VatMetrics
    alerts: tuple[DashboardAlert, ...] = ()
    recent_transactions: tuple[Transaction, ...] = ()
    monthly_data: tuple[MonthlyEntry, ...] = ()
    category_breakdown: tuple[CategoryShare, ...] = ()


@dataclass(frozen=True)
class BusinessInsights:
    """Revenue outlook projected from a monthly series."""

    recent_growth: float
    trend: str
    next_month_revenue: Decimal
    yearly_projection: Decimal
    half_year_growth: float
    activity_change: float
    margin: float
    alerts: tuple[DashboardAlert, ...] = ()


@dataclass(frozen=True)
class TaxMetrics:
    """Tax estimates for each regime over a set of monthly totals."""

    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal
    micro_bnc: Decimal
    micro_bic: Decimal
    reel_is: Decimal
    reel_ir: Decimal
    cotisations_sociales: Decimal


@dataclass(frozen=True)
class TaxScenario:
    """One tax regime option with its estimated cost."""

    id: str
    name: str
    description: str
    estimated_tax: Decimal
    provisions: Decimal
    savings: Decimal
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class TaxEvent:
    """Dated fiscal deadline."""

    id: str
    title: str
    date: date
    type: str
    status: str
    description: str
    days_until: int
    amount: Optional[Decimal] = None


@dataclass(frozen=True)
class ReportBundle:
    """Input of the report exporters."""

    period: str
    report_type: str
    kpis: Kpis
    transactions: tuple[Transaction, ...] = ()
    category_breakdown: tuple[CategoryShare, ...] = field(default_factory=tuple)
