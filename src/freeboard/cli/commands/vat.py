"""VAT settings and simulation commands."""

import click
from freeboard.cli.error_handling import handle_domain_error
from freeboard.domain.entities import LegalStatus, VatRegime
from freeboard.domain.errors import DomainError
from freeboard.domain.export import format_currency
from freeboard.domain.vat import (
    VAT_RATES,
    VatService,
    get_recommended_vat_regime,
    is_vat_applicable,
    simulate_vat_impact,
    threshold_percentage,
    vat_provision,
)
from freeboard.utils.amount_parser import parse_amount
from freeboard.utils.date_parser import parse_date


@click.group()
def vat_group():
    """Manage VAT settings and follow the franchise threshold."""
    pass


@vat_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show the current VAT settings."""
    service = VatService(ctx.obj["db"])
    try:
        settings = service.get_settings(ctx.obj["user"])
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Regime:              {settings.vat_regime.value}")
    if settings.vat_regime_start_date:
        click.echo(f"Regime start:        {settings.vat_regime_start_date}")
    click.echo(f"Legal status:        {settings.legal_status.value if settings.legal_status else '-'}")
    click.echo(f"Voluntary VAT:       {'yes' if settings.voluntary_vat_registration else 'no'}")
    click.echo(f"Threshold:           {format_currency(settings.annual_revenue_threshold)}")
    click.echo(f"Current year revenue:{format_currency(settings.current_year_revenue):>17}")
    click.echo(f"Alerts:              {'on' if settings.vat_alerts_enabled else 'off'}")


@vat_group.command("set")
@click.option("--regime", type=click.Choice([r.value for r in VatRegime]), help="VAT regime")
@click.option("--start-date", help="Date the regime applies from")
@click.option("--legal-status", type=click.Choice([s.value for s in LegalStatus]), help="Legal status")
@click.option("--voluntary/--no-voluntary", default=None, help="Voluntary VAT registration")
@click.option("--threshold", help="Franchise threshold in euros")
@click.option("--alerts/--no-alerts", default=None, help="Enable threshold alerts")
@click.pass_context
def set_settings(
    ctx,
    regime: str | None,
    start_date: str | None,
    legal_status: str | None,
    voluntary: bool | None,
    threshold: str | None,
    alerts: bool | None,
):
    """Update VAT settings.

    Examples:
        freeboard vat set --regime reel_simplifie --start-date 2024-07-01
        freeboard vat set --threshold 91900 --legal-status micro-entreprise
    """
    changes = {}
    if regime is not None:
        changes["vat_regime"] = regime
    if start_date is not None:
        try:
            changes["vat_regime_start_date"] = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    if legal_status is not None:
        changes["legal_status"] = legal_status
    if voluntary is not None:
        changes["voluntary_vat_registration"] = voluntary
    if threshold is not None:
        try:
            changes["annual_revenue_threshold"] = parse_amount(threshold)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    if alerts is not None:
        changes["vat_alerts_enabled"] = alerts

    if not changes:
        click.echo("Nothing to update.")
        return

    service = VatService(ctx.obj["db"])
    try:
        service.update_settings(ctx.obj["user"], **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("VAT settings updated")


@vat_group.command("check")
@click.pass_context
def check_threshold(ctx):
    """Check whether VAT applies and list threshold alerts."""
    service = VatService(ctx.obj["db"])
    user = ctx.obj["user"]
    try:
        settings = service.get_settings(user)
        revenue = service.calculate_current_year_revenue(user)
        alerts = service.alerts_for_user(user)
    except DomainError as e:
        handle_domain_error(ctx, e)

    percentage = threshold_percentage(revenue, settings.annual_revenue_threshold)
    click.echo(
        f"Revenue this year: {format_currency(revenue)} "
        f"({percentage:.1f}% of {format_currency(settings.annual_revenue_threshold)})"
    )
    applicable = is_vat_applicable(settings, revenue)
    click.echo(f"VAT applicable: {'yes' if applicable else 'no'}")
    if applicable:
        click.echo(f"VAT to provision on this revenue: {format_currency(vat_provision(revenue))}")

    if not alerts:
        click.echo("No alert.")
        return
    for alert in alerts:
        click.echo(f"[{alert.type.value.upper()}] {alert.message}")
        if alert.recommendation:
            click.echo(f"    -> {alert.recommendation}")


@vat_group.command("simulate")
@click.argument("monthly_revenue")
@click.option(
    "--rate",
    type=click.Choice(sorted(VAT_RATES)),
    default="standard",
    show_default=True,
    help="VAT rate to apply",
)
@click.pass_context
def simulate(ctx, monthly_revenue: str, rate: str):
    """Project the VAT to collect on a monthly revenue once VAT applies.

    Examples:
        freeboard vat simulate 3500
        freeboard vat simulate 3500 --rate reduced
    """
    try:
        revenue = parse_amount(monthly_revenue)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    impact = simulate_vat_impact(revenue, VAT_RATES[rate])
    click.echo(f"Rate: {VAT_RATES[rate]}%")
    click.echo(f"VAT to collect per month: {format_currency(impact.monthly_vat_to_collect)}")
    click.echo(f"VAT to collect per year:  {format_currency(impact.annual_vat_to_collect)}")
    click.echo(f"Net impact per month:     {format_currency(impact.net_impact_monthly)}")
    click.echo(f"Net impact per year:      {format_currency(impact.net_impact_annual)}")


@vat_group.command("recommend")
@click.option("--legal-status", type=click.Choice([s.value for s in LegalStatus]), help="Legal status (defaults to settings)")
@click.option("--revenue", help="Yearly revenue (defaults to this year's revenue)")
@click.pass_context
def recommend(ctx, legal_status: str | None, revenue: str | None):
    """Suggest a VAT regime for a legal status and yearly revenue."""
    service = VatService(ctx.obj["db"])
    user = ctx.obj["user"]

    try:
        if legal_status is None:
            settings = service.get_settings(user)
            if settings.legal_status is None:
                click.echo("Error: No legal status set; pass --legal-status or run 'vat set'", err=True)
                ctx.exit(1)
            legal_status = settings.legal_status.value
        annual_revenue = (
            parse_amount(revenue) if revenue is not None else service.calculate_current_year_revenue(user)
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    regime = get_recommended_vat_regime(LegalStatus(legal_status), annual_revenue)
    click.echo(f"Recommended regime for {legal_status} at {format_currency(annual_revenue)}: {regime.value}")


def register_commands(cli: click.Group) -> None:
    """Register VAT commands with main CLI."""
    cli.add_command(vat_group, name="vat")
