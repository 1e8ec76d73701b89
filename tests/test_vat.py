"""Tests for the VAT rule engine and VatService."""

from datetime import date
from decimal import Decimal

import pytest

from freeboard.domain.entities import AlertSeverity, LegalStatus, VatRegime, VatSettings
from freeboard.domain.errors import ValidationError
from freeboard.domain.vat import (
    VAT_RATES,
    calculate_vat,
    generate_vat_alerts,
    get_recommended_vat_regime,
    is_vat_applicable,
    simulate_vat_impact,
    threshold_percentage,
    vat_provision,
)

USER = "user-1"

FRANCHISE = VatSettings()


def test_franchise_exactly_at_threshold_is_not_applicable():
    """Revenue equal to the threshold keeps the franchise."""
    assert is_vat_applicable(FRANCHISE, Decimal("36800.00")) is False


def test_franchise_above_threshold_is_applicable():
    """One cent over the threshold makes VAT applicable."""
    assert is_vat_applicable(FRANCHISE, Decimal("36800.01")) is True


def test_real_regimes_always_applicable():
    """Real regimes charge VAT whatever the revenue."""
    for regime in (VatRegime.REEL_SIMPLIFIE, VatRegime.REEL_NORMAL):
        assert is_vat_applicable(VatSettings(vat_regime=regime), 0) is True


def test_voluntary_registration_is_applicable():
    """Voluntary registration applies VAT under the franchise."""
    settings = VatSettings(voluntary_vat_registration=True)
    assert is_vat_applicable(settings, 0) is True


def test_calculate_vat_not_applicable():
    """When VAT does not apply the whole amount is HT."""
    result = calculate_vat(Decimal("1200"), FRANCHISE, Decimal("1000"))

    assert result.is_vat_applicable is False
    assert result.amount_ht == Decimal("1200")
    assert result.vat_amount == Decimal("0")
    assert result.vat_rate == Decimal("0")
    assert result.total_amount == Decimal("1200")
    assert result.regime_used == VatRegime.FRANCHISE


def test_calculate_vat_applicable_standard_rate():
    """1200 TTC at 20% splits into 1000 HT and 200 VAT."""
    settings = VatSettings(vat_regime=VatRegime.REEL_SIMPLIFIE)
    result = calculate_vat(Decimal("1200"), settings, 0)

    assert result.is_vat_applicable is True
    assert result.amount_ht == Decimal("1000.00")
    assert result.vat_amount == Decimal("200.00")
    assert result.vat_rate == Decimal("20")


def test_calculate_vat_rounds_half_up():
    """Each part is rounded to the cent."""
    settings = VatSettings(vat_regime=VatRegime.REEL_NORMAL)
    result = calculate_vat(Decimal("100"), settings, 0, vat_rate=Decimal("5.5"))

    assert result.amount_ht == Decimal("94.79")
    assert result.vat_amount == Decimal("5.21")


def test_calculate_vat_keeps_sign_of_expenses():
    """Negative amounts stay negative in both parts."""
    settings = VatSettings(vat_regime=VatRegime.REEL_NORMAL)
    result = calculate_vat(Decimal("-120"), settings, 0)

    assert result.amount_ht == Decimal("-100.00")
    assert result.vat_amount == Decimal("-20.00")


@pytest.mark.parametrize("revenue", ["36800.01", "36801", "40000", "91900", "250000", "1000000"])
def test_franchise_stays_applicable_above_threshold(revenue):
    """Any revenue over the threshold makes VAT applicable."""
    assert is_vat_applicable(FRANCHISE, Decimal(revenue)) is True


@pytest.mark.parametrize("revenue", ["0", "1", "18400", "36799.99", "36800"])
def test_franchise_not_applicable_up_to_threshold(revenue):
    """Revenue at or under the threshold keeps the franchise."""
    assert is_vat_applicable(FRANCHISE, Decimal(revenue)) is False


@pytest.mark.parametrize("rate", list(VAT_RATES.values()))
@pytest.mark.parametrize("amount", ["0.01", "0.99", "1", "33.33", "99.99", "1234.56", "-49.90", "100000"])
def test_vat_parts_add_up_to_amount(amount, rate):
    """HT plus VAT gives back the tax-inclusive amount to the cent."""
    settings = VatSettings(vat_regime=VatRegime.REEL_SIMPLIFIE)
    result = calculate_vat(Decimal(amount), settings, 0, vat_rate=rate)

    assert abs(result.amount_ht + result.vat_amount - Decimal(amount)) <= Decimal("0.01")
    assert result.vat_rate == rate


def test_no_alerts_below_80_percent():
    """Revenue under 80% of the threshold raises nothing."""
    assert generate_vat_alerts(FRANCHISE, Decimal("29000")) == []


def test_single_warning_between_80_and_90_percent():
    """One warning without action required."""
    alerts = generate_vat_alerts(FRANCHISE, Decimal("30000"))

    assert len(alerts) == 1
    assert alerts[0].type == AlertSeverity.WARNING
    assert alerts[0].action_required is False
    assert alerts[0].threshold_percentage == pytest.approx(81.52, abs=0.01)
    assert alerts[0].recommendation


def test_single_preparation_warning_from_90_percent():
    """From 90% the single warning becomes a preparation notice."""
    alerts = generate_vat_alerts(FRANCHISE, Decimal("34000"))

    assert [alert.id for alert in alerts] == ["threshold-preparation"]
    assert alerts[0].type == AlertSeverity.WARNING
    assert "Préparez" in alerts[0].message


def test_no_critical_alert_exactly_at_threshold():
    """Revenue equal to the threshold is still a warning."""
    alerts = generate_vat_alerts(FRANCHISE, Decimal("36800.00"))

    assert all(alert.type != AlertSeverity.CRITICAL for alert in alerts)
    assert len(alerts) == 1


def test_critical_alert_above_threshold():
    """Exactly one critical alert once revenue exceeds the threshold."""
    alerts = generate_vat_alerts(FRANCHISE, Decimal("36800.01"))

    assert len(alerts) == 1
    assert alerts[0].type == AlertSeverity.CRITICAL
    assert alerts[0].action_required is True


def test_no_alerts_under_real_regime():
    """Real regimes never get threshold alerts."""
    settings = VatSettings(vat_regime=VatRegime.REEL_NORMAL)
    assert generate_vat_alerts(settings, Decimal("1000000")) == []


def test_threshold_percentage_zero_threshold():
    """A zero threshold gives infinity for positive revenue and 0 otherwise."""
    assert threshold_percentage(100, 0) == float("inf")
    assert threshold_percentage(0, 0) == 0.0


def test_simulate_vat_impact():
    """1200 per month at 20% means 200 VAT per month and 2400 per year."""
    impact = simulate_vat_impact(Decimal("1200"))

    assert impact.monthly_vat_to_collect == Decimal("200.00")
    assert impact.annual_vat_to_collect == Decimal("2400.00")
    assert impact.net_impact_monthly == Decimal("-200.00")
    assert impact.net_impact_annual == Decimal("-2400.00")


def test_recommended_regime():
    """Micro statuses keep the franchise below the services threshold."""
    assert get_recommended_vat_regime(LegalStatus.MICRO_ENTREPRISE, 30000) == VatRegime.FRANCHISE
    assert get_recommended_vat_regime(LegalStatus.AUTO_ENTREPRENEUR, 40000) == VatRegime.REEL_SIMPLIFIE
    assert get_recommended_vat_regime(LegalStatus.SASU, 10000) == VatRegime.REEL_SIMPLIFIE


def test_vat_provision():
    """Provision is the rate applied to the revenue."""
    assert vat_provision(Decimal("1000")) == Decimal("200.00")
    assert vat_provision(Decimal("1000"), Decimal("5.5")) == Decimal("55.00")


def test_service_returns_defaults_without_profile(vat_service):
    """A user with no stored profile gets default settings."""
    settings = vat_service.get_settings(USER)

    assert settings.vat_regime == VatRegime.FRANCHISE
    assert settings.annual_revenue_threshold == Decimal("36800")
    assert settings.vat_alerts_enabled is True


def test_service_update_settings(vat_service):
    """Partial updates are persisted and coerced to enums."""
    vat_service.update_settings(
        USER,
        vat_regime="reel_simplifie",
        legal_status="micro-entreprise",
        vat_regime_start_date=date(2024, 7, 1),
    )
    settings = vat_service.get_settings(USER)

    assert settings.vat_regime == VatRegime.REEL_SIMPLIFIE
    assert settings.legal_status == LegalStatus.MICRO_ENTREPRISE
    assert settings.vat_regime_start_date == date(2024, 7, 1)
    assert settings.vat_alerts_enabled is True


def test_service_update_rejects_unknown_field(vat_service):
    """Unknown setting names are rejected before any write."""
    with pytest.raises(ValidationError, match="Unknown VAT setting"):
        vat_service.update_settings(USER, vat_number="FR123")


def test_service_update_rejects_invalid_regime(vat_service):
    """Regimes outside the enum are rejected."""
    with pytest.raises(ValidationError, match="Invalid vat_regime"):
        vat_service.update_settings(USER, vat_regime="forfait")


def test_service_update_rejects_non_positive_threshold(vat_service):
    """A threshold must be positive."""
    with pytest.raises(ValidationError):
        vat_service.update_settings(USER, annual_revenue_threshold=0)


def test_revenue_counts_current_year_income_only(vat_service, transaction_service):
    """Expenses and other years are left out of the yearly revenue."""
    transaction_service.create_transaction(USER, date(2024, 2, 1), Decimal("1000"), "income", "Prestation")
    transaction_service.create_transaction(USER, date(2024, 3, 1), Decimal("300"), "expense", "Logiciel")
    transaction_service.create_transaction(USER, date(2023, 12, 31), Decimal("5000"), "income", "Prestation")

    assert vat_service.calculate_current_year_revenue(USER) == Decimal("1000")
    assert vat_service.calculate_current_year_revenue(USER, year=2023) == Decimal("5000")


def test_alerts_for_user_respects_disabled_alerts(vat_service, transaction_service):
    """Disabling alerts silences threshold alerts."""
    transaction_service.create_transaction(USER, date(2024, 2, 1), Decimal("40000"), "income", "Prestation")
    assert len(vat_service.alerts_for_user(USER)) == 1

    vat_service.update_settings(USER, vat_alerts_enabled=False)
    assert vat_service.alerts_for_user(USER) == []
