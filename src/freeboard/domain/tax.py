"""Tax planning estimates and fiscal calendar.

Rough estimates for comparing regimes, not tax advice: each regime applies a
flat rate to yearly revenue or net income.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from freeboard.domain.entities import MonthlyEntry, TaxEvent, TaxMetrics, TaxScenario
from freeboard.utils.amount_parser import round_cents

MICRO_BNC_RATE = Decimal("0.22")
MICRO_BIC_RATE = Decimal("0.12")
REEL_IS_RATE = Decimal("0.15")
REEL_IR_RATE = Decimal("0.30")
COTISATIONS_RATE = Decimal("0.45")

PROVISION_RATE = Decimal("0.25")
FIRST_INSTALLMENT_RATE = Decimal("0.33")
BALANCE_RATE = Decimal("0.67")

QUARTERLY_DUE_DAYS = 7
ANNUAL_DUE_DAYS = 30


def compute_tax_metrics(monthly_data: Iterable[MonthlyEntry]) -> TaxMetrics:
    """Estimate taxes under each regime from a monthly series."""
    monthly_data = list(monthly_data)
    revenue = sum((entry.revenue for entry in monthly_data), Decimal("0"))
    expenses = sum((entry.expenses for entry in monthly_data), Decimal("0"))
    net_income = revenue - expenses

    return TaxMetrics(
        total_revenue=revenue,
        total_expenses=expenses,
        net_income=net_income,
        micro_bnc=round_cents(revenue * MICRO_BNC_RATE),
        micro_bic=round_cents(revenue * MICRO_BIC_RATE),
        reel_is=round_cents(net_income * REEL_IS_RATE),
        reel_ir=round_cents(net_income * REEL_IR_RATE),
        cotisations_sociales=round_cents(revenue * COTISATIONS_RATE),
    )


def _scenario(id, name, description, estimated_tax, compared_to, recommendations) -> TaxScenario:
    return TaxScenario(
        id=id,
        name=name,
        description=description,
        estimated_tax=estimated_tax,
        provisions=round_cents(estimated_tax * PROVISION_RATE),
        savings=max(Decimal("0"), compared_to - estimated_tax),
        recommendations=tuple(recommendations),
    )


def build_tax_scenarios(metrics: TaxMetrics) -> list[TaxScenario]:
    """Compare the micro regimes, the real IR regime and an EURL at IS.

    Micro regimes report savings against the real IR estimate; the others
    report savings against micro BNC.
    """
    reel_ir_total = metrics.reel_ir + metrics.cotisations_sociales
    return [
        _scenario(
            "micro-bnc",
            "Micro-entreprise BNC",
            "Régime micro-social simplifié (prestations de services)",
            metrics.micro_bnc,
            metrics.reel_ir,
            [
                "Idéal pour un CA < 77 700€",
                "Comptabilité simplifiée",
                "Abattement forfaitaire de 34%",
                "Pas de récupération de TVA",
            ],
        ),
        _scenario(
            "micro-bic",
            "Micro-entreprise BIC",
            "Régime micro-social simplifié (vente/négoce)",
            metrics.micro_bic,
            metrics.reel_ir,
            [
                "Pour activités commerciales",
                "Abattement forfaitaire de 71%",
                "Seuil de CA plus élevé",
                "Simplicité administrative",
            ],
        ),
        _scenario(
            "reel-ir",
            "Régime réel - IR",
            "Entreprise individuelle au régime réel",
            reel_ir_total,
            metrics.micro_bnc,
            [
                "Déduction des charges réelles",
                "Récupération de TVA possible",
                "Comptabilité complète requise",
                "Optimisation fiscale avancée",
            ],
        ),
        _scenario(
            "eurl-is",
            "EURL à l'IS",
            "Société unipersonnelle à l'impôt sur les sociétés",
            metrics.reel_is,
            metrics.micro_bnc,
            [
                "Taux d'IS avantageux (15% puis 25%)",
                "Optimisation rémunération/dividendes",
                "Protection du patrimoine personnel",
                "Formalités plus complexes",
            ],
        ),
    ]


def event_status(days_until: int, due_window: int) -> str:
    """completed when past, due within the window, upcoming otherwise."""
    if days_until < 0:
        return "completed"
    if days_until <= due_window:
        return "due"
    return "upcoming"


def build_tax_calendar(year: int, metrics: TaxMetrics, today: date) -> list[TaxEvent]:
    """Fiscal deadlines for a tax year, soonest first.

    Args:
        year: Tax year
        metrics: Estimates used for provision and payment amounts
        today: Reference date for days_until and status

    Returns:
        TaxEvent list sorted by days_until
    """
    events = []

    quarterly = [
        (date(year, 4, 30), "Déclaration TVA Q1"),
        (date(year, 7, 31), "Déclaration TVA Q2"),
        (date(year, 10, 31), "Déclaration TVA Q3"),
        (date(year + 1, 1, 31), "Déclaration TVA Q4"),
    ]
    for index, (event_date, title) in enumerate(quarterly, start=1):
        days_until = (event_date - today).days
        events.append(
            TaxEvent(
                id=f"tva-q{index}",
                title=title,
                date=event_date,
                type="declaration",
                status=event_status(days_until, QUARTERLY_DUE_DAYS),
                description="Déclaration de TVA trimestrielle",
                days_until=days_until,
            )
        )

    annual = [
        (date(year + 1, 5, 31), f"Déclaration revenus {year}", "declaration", None,
         "Déclaration d'impôt sur le revenu"),
        (date(year, 12, 31), f"Provisions fiscales {year}", "provision",
         round_cents(metrics.micro_bnc * PROVISION_RATE), "Constitution des provisions pour impôts"),
        (date(year + 1, 2, 15), "Acompte provisionnel", "payment",
         round_cents(metrics.micro_bnc * FIRST_INSTALLMENT_RATE), "Premier acompte provisionnel"),
        (date(year + 1, 5, 15), f"Solde impôt {year}", "payment",
         round_cents(metrics.micro_bnc * BALANCE_RATE), "Solde de l'impôt sur le revenu"),
    ]
    for index, (event_date, title, event_type, amount, description) in enumerate(annual):
        days_until = (event_date - today).days
        events.append(
            TaxEvent(
                id=f"annual-{index}",
                title=title,
                date=event_date,
                type=event_type,
                status=event_status(days_until, ANNUAL_DUE_DAYS),
                description=description,
                days_until=days_until,
                amount=amount,
            )
        )

    return sorted(events, key=lambda event: event.days_until)
