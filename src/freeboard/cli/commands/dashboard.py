"""Dashboard command."""

import click
from freeboard.domain.dashboard import DashboardService
from freeboard.domain.entities import DashboardData
from freeboard.domain.export import format_currency, format_french_date
from freeboard.domain.insights import build_insights
from freeboard.domain.metrics import cash_flow_level

BAR_WIDTH = 30


def _bar(value, maximum) -> str:
    if maximum <= 0:
        return ""
    return "#" * int(BAR_WIDTH * value / maximum)


def display_dashboard(data: DashboardData, months: bool = True) -> None:
    """Print a dashboard snapshot."""
    kpis = data.kpis
    vat = data.vat_metrics

    click.echo("\n=== This month ===")
    click.echo(f"Revenue:           {format_currency(kpis.total_revenue):>16}  ({kpis.revenue_growth:+.1f}%)")
    click.echo(f"Expenses:          {format_currency(kpis.total_expenses):>16}  ({kpis.expense_growth:+.1f}%)")
    click.echo(f"Net profit:        {format_currency(kpis.net_profit):>16}")
    click.echo(f"Cash flow:         {kpis.cash_flow_days:>14} d  [{cash_flow_level(kpis.cash_flow_days)}]")

    click.echo("\n=== This year ===")
    click.echo(f"Revenue:           {format_currency(vat.current_year_revenue):>16}")
    click.echo(f"Monthly average:   {format_currency(kpis.average_monthly_revenue):>16}")
    click.echo(f"VAT collected:     {format_currency(kpis.total_vat_collected):>16}")
    click.echo(f"VAT to pay (est.): {format_currency(kpis.total_vat_to_pay):>16}")
    click.echo(
        f"VAT threshold:     {vat.vat_progress:>14.1f} %  of {format_currency(vat.vat_threshold)}"
    )
    click.echo(f"Regime:            {vat.declaration_type:>16}")
    click.echo(f"Next declaration:  {format_french_date(vat.next_declaration_date):>16}")

    if data.alerts:
        click.echo("\n=== Alerts ===")
        for alert in data.alerts:
            click.echo(f"[{alert.type.value.upper()}] {alert.title}: {alert.message}")

    insights = build_insights(data.monthly_data)
    if any(entry.revenue > 0 for entry in data.monthly_data):
        click.echo("\n=== Outlook ===")
        click.echo(f"Next month (est.):  {format_currency(insights.next_month_revenue):>16}  [{insights.trend}]")
        click.echo(f"12-month projection:{format_currency(insights.yearly_projection):>16}")
        click.echo(f"3-month trend:      {insights.recent_growth:>+14.1f} %")
        click.echo(f"Half-year growth:   {insights.half_year_growth:>+14.1f} %")
        click.echo(f"Margin (12 months): {insights.margin:>14.1f} %")
        for alert in insights.alerts:
            click.echo(f"[{alert.type.value.upper()}] {alert.title}: {alert.message}")

    if months:
        click.echo("\n=== Last 12 months ===")
        peak = max((max(entry.revenue, entry.expenses) for entry in data.monthly_data), default=0)
        for entry in data.monthly_data:
            click.echo(
                f"{entry.month} {entry.label:<6} {entry.revenue:>12,.2f} {entry.expenses:>12,.2f}  "
                f"{_bar(entry.revenue, peak)}"
            )

    if data.category_breakdown:
        click.echo("\n=== Categories this month ===")
        for share in data.category_breakdown:
            click.echo(f"{share.category[:24]:<24} {share.amount:>12,.2f} {share.percentage:>6.1f}%")

    if data.recent_transactions:
        click.echo("\n=== Recent transactions ===")
        for txn in data.recent_transactions:
            click.echo(
                f"{txn.id:<6} {str(txn.date):<12} {txn.amount:>12,.2f} {txn.category[:20]:<20} "
                f"{(txn.client_name or txn.description or '')[:30]}"
            )


@click.command("dashboard")
@click.option("--refresh", is_flag=True, help="Ignore the cached snapshot")
@click.option("--no-months", is_flag=True, help="Hide the monthly series")
@click.pass_context
def show_dashboard(ctx, refresh: bool, no_months: bool):
    """Show KPIs, VAT threshold progress and alerts.

    Examples:
        freeboard dashboard
        freeboard --user alice dashboard --refresh
    """
    service = DashboardService(ctx.obj["db"], cache=ctx.obj["cache"])
    data = service.get_dashboard(ctx.obj["user"], force_refresh=refresh)
    display_dashboard(data, months=not no_months)


def register_commands(cli):
    """Register dashboard command with main CLI."""
    cli.add_command(show_dashboard)
