"""Revenue outlook and activity alerts over a monthly series.

Trend-following projections for planning, not forecasts with error bars:
the recent three-month average is extrapolated at the growth seen between
the first and last of those months.
"""

from decimal import Decimal
from typing import Sequence

from freeboard.domain.entities import AlertSeverity, BusinessInsights, DashboardAlert, MonthlyEntry
from freeboard.domain.metrics import growth_rate
from freeboard.utils.amount_parser import round_cents

RECENT_MONTHS = 3
TREND_PERCENT = 5
ACTIVITY_DROP_PERCENT = -10
LOW_MARGIN_PERCENT = 50
HIGH_EXPENSE_RATIO_PERCENT = 40

ZERO = Decimal("0")


def _average_revenue(entries: Sequence[MonthlyEntry]) -> Decimal:
    if not entries:
        return ZERO
    return sum((entry.revenue for entry in entries), ZERO) / len(entries)


def trend_of(growth: float) -> str:
    """up above +5 %, down below -5 %, stable in between."""
    if growth > TREND_PERCENT:
        return "up"
    if growth < -TREND_PERCENT:
        return "down"
    return "stable"


def build_insights(monthly_data: Sequence[MonthlyEntry]) -> BusinessInsights:
    """Project revenue and flag activity changes.

    Args:
        monthly_data: Monthly totals, oldest first (usually twelve months)

    Returns:
        BusinessInsights; growth figures are 0 wherever their base month or
        period has no revenue
    """
    monthly_data = list(monthly_data)
    recent = monthly_data[-RECENT_MONTHS:]
    previous = monthly_data[-2 * RECENT_MONTHS:-RECENT_MONTHS]

    recent_average = _average_revenue(recent)
    recent_growth = growth_rate(recent[-1].revenue, recent[0].revenue) if recent else 0.0
    # avg * (1 + growth) == avg * last / first
    factor = recent[-1].revenue / recent[0].revenue if recent and recent[0].revenue > 0 else Decimal("1")

    half = len(monthly_data) // 2
    first_half = sum((entry.revenue for entry in monthly_data[:half]), ZERO)
    second_half = sum((entry.revenue for entry in monthly_data[half:]), ZERO)

    revenue = sum((entry.revenue for entry in monthly_data), ZERO)
    expenses = sum((entry.expenses for entry in monthly_data), ZERO)
    margin = float((revenue - expenses) / revenue * 100) if revenue > 0 else 0.0
    activity_change = growth_rate(recent_average, _average_revenue(previous))

    alerts = []
    if activity_change < ACTIVITY_DROP_PERCENT:
        alerts.append(
            DashboardAlert(
                id="activity-decline",
                type=AlertSeverity.WARNING,
                title="Baisse d'activité détectée",
                message=f"Vos revenus ont diminué de {abs(activity_change):.1f}% sur les 3 derniers mois",
                action_required=True,
            )
        )
    if revenue > 0 and margin < LOW_MARGIN_PERCENT:
        alerts.append(
            DashboardAlert(
                id="low-margin",
                type=AlertSeverity.ERROR,
                title="Marge bénéficiaire critique",
                message=f"Votre marge est de {margin:.1f}%, sous le seuil de {LOW_MARGIN_PERCENT}%",
                action_required=True,
            )
        )
    if revenue > 0 and expenses / revenue * 100 > HIGH_EXPENSE_RATIO_PERCENT:
        alerts.append(
            DashboardAlert(
                id="high-expenses",
                type=AlertSeverity.WARNING,
                title="Dépenses élevées",
                message=f"Vos dépenses représentent plus de {HIGH_EXPENSE_RATIO_PERCENT}% de vos revenus",
                action_required=False,
            )
        )

    return BusinessInsights(
        recent_growth=recent_growth,
        trend=trend_of(recent_growth),
        next_month_revenue=round_cents(recent_average * factor),
        yearly_projection=round_cents(recent_average * 12 * factor),
        half_year_growth=growth_rate(second_half, first_half),
        activity_change=activity_change,
        margin=margin,
        alerts=tuple(alerts),
    )
