"""Dashboard metrics aggregation."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from freeboard.domain.entities import (
    AlertSeverity,
    CategoryShare,
    DashboardAlert,
    DashboardData,
    Kpis,
    MonthlyEntry,
    Transaction,
    TransactionType,
    VatMetrics,
    VatSettings,
)
from freeboard.domain.vat import threshold_percentage
from freeboard.utils.amount_parser import round_cents
from freeboard.utils.clock import SystemClock

MONTH_LABELS = (
    "janv.",
    "févr.",
    "mars",
    "avr.",
    "mai",
    "juin",
    "juil.",
    "août",
    "sept.",
    "oct.",
    "nov.",
    "déc.",
)

SERIES_LENGTH = 12
RECENT_LIMIT = 5
VAT_TO_PAY_RATIO = Decimal("0.8")

VAT_ALERT_PERCENT = 90
LOW_CASH_FLOW_DAYS = 30
WATCH_CASH_FLOW_DAYS = 60
GROWTH_ALERT_PERCENT = 20

ZERO = Decimal("0")


def month_key(year: int, month: int) -> str:
    """Return the YYYY-MM key of a month."""
    return f"{year:04d}-{month:02d}"


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move a (year, month) pair by offset months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def growth_rate(current: Decimal, previous: Decimal) -> float:
    """Percentage change from previous to current; 0 when there is no base."""
    if previous <= 0:
        return 0.0
    return float((current - previous) / previous * 100)


def cash_flow_days(revenue: Decimal, expenses: Decimal) -> int:
    """Days of runway the month's surplus buys at the month's expense rate.

    Expenses below 1 are floored to 1, so a month with no expenses yields a
    large finite figure rather than an error.
    """
    surplus = max(ZERO, revenue - expenses)
    return int(surplus / max(Decimal("1"), expenses) * 30)


def cash_flow_level(days: int) -> str:
    """Classify cash-flow days as critical, warning or safe."""
    if days < LOW_CASH_FLOW_DAYS:
        return "critical"
    if days < WATCH_CASH_FLOW_DAYS:
        return "warning"
    return "safe"


def next_declaration_date(today: date) -> date:
    """Day 30 of the month following the current quarter."""
    quarter = (today.month - 1) // 3 + 1
    if quarter == 4:
        return date(today.year + 1, 1, 30)
    return date(today.year, quarter * 3 + 1, 30)


def normalize_category(category: Optional[str]) -> str:
    """Grouping key for a free-text category."""
    return (category or "").strip().casefold()


def _income_total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions if t.type == TransactionType.INCOME), ZERO)


def _expense_total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((abs(t.amount) for t in transactions if t.type == TransactionType.EXPENSE), ZERO)


def _vat_collected(transactions: Iterable[Transaction]) -> Decimal:
    return sum(
        (t.vat_amount or ZERO for t in transactions if t.type == TransactionType.INCOME),
        ZERO,
    )


class MetricsAggregator:
    """Fold transactions into a DashboardData snapshot.

    All bucketing is relative to the injected clock's today(), so the same
    transactions and clock always give the same snapshot.
    """

    def __init__(self, clock=None):
        """Initialize the aggregator.

        Args:
            clock: Object with a today() method (defaults to SystemClock)
        """
        self.clock = clock or SystemClock()

    def build(
        self, transactions: Sequence[Transaction], settings: Optional[VatSettings] = None
    ) -> DashboardData:
        """Build a snapshot from a user's transactions.

        Args:
            transactions: Transactions sorted newest date first
            settings: VAT settings supplying the threshold (defaults apply if None)

        Returns:
            DashboardData; the empty snapshot when there are no transactions
        """
        if not transactions:
            return self.empty(settings)

        settings = settings or VatSettings()
        today = self.clock.today()
        by_month = self.group_by_month(transactions)

        current_key = month_key(today.year, today.month)
        previous_key = month_key(*shift_month(today.year, today.month, -1))
        current_month = by_month.get(current_key, [])
        previous_month = by_month.get(previous_key, [])
        current_year = [t for t in transactions if t.date.year == today.year]

        revenue = _income_total(current_month)
        expenses = _expense_total(current_month)
        previous_revenue = _income_total(previous_month)
        previous_expenses = _expense_total(previous_month)

        year_revenue = _income_total(current_year)
        vat_collected = _vat_collected(current_year)
        vat_to_pay = round_cents(vat_collected * VAT_TO_PAY_RATIO)

        kpis = Kpis(
            total_revenue=revenue,
            total_expenses=expenses,
            net_profit=revenue - expenses,
            revenue_growth=growth_rate(revenue, previous_revenue),
            expense_growth=growth_rate(expenses, previous_expenses),
            total_vat_collected=vat_collected,
            total_vat_to_pay=vat_to_pay,
            cash_flow_days=cash_flow_days(revenue, expenses),
            average_monthly_revenue=round_cents(year_revenue / today.month),
        )
        vat_metrics = self.build_vat_metrics(year_revenue, settings, vat_to_pay)

        return DashboardData(
            kpis=kpis,
            vat_metrics=vat_metrics,
            alerts=tuple(self.build_alerts(kpis, vat_metrics)),
            recent_transactions=tuple(transactions[:RECENT_LIMIT]),
            monthly_data=tuple(self.build_monthly_series(by_month)),
            category_breakdown=tuple(self.build_category_breakdown(current_month)),
        )

    def empty(self, settings: Optional[VatSettings] = None) -> DashboardData:
        """All-zero snapshot with a zero-filled monthly series and no alerts."""
        settings = settings or VatSettings()
        return DashboardData(
            kpis=Kpis(),
            vat_metrics=self.build_vat_metrics(ZERO, settings, ZERO),
            monthly_data=tuple(self.build_monthly_series({})),
        )

    def group_by_month(self, transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
        """Group transactions by YYYY-MM key, keeping input order."""
        grouped: dict[str, list[Transaction]] = {}
        for txn in transactions:
            grouped.setdefault(month_key(txn.date.year, txn.date.month), []).append(txn)
        return grouped

    def build_monthly_series(self, by_month: dict[str, list[Transaction]]) -> list[MonthlyEntry]:
        """Trailing twelve months ending with the current one, oldest first."""
        today = self.clock.today()
        series = []
        for offset in range(SERIES_LENGTH - 1, -1, -1):
            year, month = shift_month(today.year, today.month, -offset)
            month_transactions = by_month.get(month_key(year, month), [])
            revenue = _income_total(month_transactions)
            expenses = _expense_total(month_transactions)
            series.append(
                MonthlyEntry(
                    month=month_key(year, month),
                    label=MONTH_LABELS[month - 1],
                    revenue=revenue,
                    expenses=expenses,
                    vat_collected=_vat_collected(month_transactions),
                    net_cash_flow=revenue - expenses,
                )
            )
        return series

    def build_category_breakdown(self, transactions: Iterable[Transaction]) -> list[CategoryShare]:
        """Share of each category in the summed absolute amounts.

        Categories differing only by case or surrounding whitespace are merged;
        the first spelling seen is kept as the label, along with the type of
        the first transaction seen in the group.
        """
        totals: dict[str, list] = {}
        for txn in transactions:
            key = normalize_category(txn.category)
            if key not in totals:
                totals[key] = [txn.category.strip(), ZERO, txn.type]
            totals[key][1] += abs(txn.amount)

        grand_total = sum((entry[1] for entry in totals.values()), ZERO)
        shares = [
            CategoryShare(
                category=label,
                amount=amount,
                percentage=float(amount / grand_total * 100) if grand_total > 0 else 0.0,
                type=txn_type,
            )
            for label, amount, txn_type in totals.values()
        ]
        return sorted(shares, key=lambda share: share.amount, reverse=True)

    def summarize(self, transactions: Sequence[Transaction]) -> Kpis:
        """Totals over an arbitrary set of transactions, for reports.

        Growth and cash-flow figures only make sense month over month and
        are left at zero.
        """
        revenue = _income_total(transactions)
        expenses = _expense_total(transactions)
        vat_collected = _vat_collected(transactions)
        return Kpis(
            total_revenue=revenue,
            total_expenses=expenses,
            net_profit=revenue - expenses,
            total_vat_collected=vat_collected,
            total_vat_to_pay=round_cents(vat_collected * VAT_TO_PAY_RATIO),
        )

    def build_vat_metrics(self, year_revenue: Decimal, settings: VatSettings, vat_to_pay: Decimal) -> VatMetrics:
        threshold = settings.annual_revenue_threshold
        return VatMetrics(
            current_year_revenue=year_revenue,
            vat_threshold=threshold,
            vat_progress=min(100.0, threshold_percentage(year_revenue, threshold)),
            next_declaration_date=next_declaration_date(self.clock.today()),
            declaration_type="TVA trimestrielle" if year_revenue > threshold else "Micro-entreprise",
            vat_to_pay=vat_to_pay,
        )

    def build_alerts(self, kpis: Kpis, vat_metrics: VatMetrics) -> list[DashboardAlert]:
        """Independent business alerts; several may fire together."""
        alerts = []

        percentage = threshold_percentage(vat_metrics.current_year_revenue, vat_metrics.vat_threshold)
        if percentage >= VAT_ALERT_PERCENT:
            alerts.append(
                DashboardAlert(
                    id="vat-threshold",
                    type=AlertSeverity.WARNING,
                    title="Seuil TVA approché",
                    message=(
                        f"Vous approchez du seuil de {vat_metrics.vat_threshold:.0f}€. "
                        "Préparez-vous au régime TVA."
                    ),
                    action_required=True,
                )
            )

        if kpis.cash_flow_days < LOW_CASH_FLOW_DAYS:
            alerts.append(
                DashboardAlert(
                    id="cash-flow",
                    type=AlertSeverity.ERROR,
                    title="Trésorerie faible",
                    message=f"Seulement {kpis.cash_flow_days} jours de trésorerie restants.",
                    action_required=True,
                )
            )

        if kpis.revenue_growth >= GROWTH_ALERT_PERCENT:
            alerts.append(
                DashboardAlert(
                    id="growth",
                    type=AlertSeverity.SUCCESS,
                    title="Croissance excellente",
                    message=f"Revenus en hausse de {kpis.revenue_growth:.1f}% ce mois !",
                    action_required=False,
                )
            )

        return alerts
