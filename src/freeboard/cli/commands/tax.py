"""Tax planning command."""

import click
from freeboard.domain.dashboard import DashboardService
from freeboard.domain.export import format_currency, format_french_date
from freeboard.domain.tax import build_tax_calendar, build_tax_scenarios, compute_tax_metrics

UPCOMING_LIMIT = 5


@click.command("tax")
@click.option("--year", type=int, help="Tax year for the calendar (defaults to the current year)")
@click.option("--all-events", is_flag=True, help="Include past deadlines")
@click.pass_context
def show_tax_plan(ctx, year: int | None, all_events: bool):
    """Compare tax regimes over the last 12 months and list fiscal deadlines.

    Examples:
        freeboard tax
        freeboard tax --year 2024 --all-events
    """
    service = DashboardService(ctx.obj["db"], cache=ctx.obj["cache"])
    data = service.get_dashboard(ctx.obj["user"])
    today = service.aggregator.clock.today()
    year = year or today.year

    metrics = compute_tax_metrics(data.monthly_data)
    click.echo(f"Revenue (12 months):  {format_currency(metrics.total_revenue):>16}")
    click.echo(f"Expenses (12 months): {format_currency(metrics.total_expenses):>16}")
    click.echo(f"Net income:           {format_currency(metrics.net_income):>16}")

    click.echo("\n=== Scenarios ===")
    for scenario in build_tax_scenarios(metrics):
        click.echo(f"\n{scenario.name} ({scenario.id})")
        click.echo(f"  {scenario.description}")
        click.echo(f"  Estimated tax:     {format_currency(scenario.estimated_tax)}")
        click.echo(f"  Provisions (25%):  {format_currency(scenario.provisions)}")
        if scenario.savings > 0:
            click.echo(f"  Savings:           {format_currency(scenario.savings)}")
        for recommendation in scenario.recommendations:
            click.echo(f"    - {recommendation}")

    events = build_tax_calendar(year, metrics, today)
    if not all_events:
        events = [event for event in events if event.status != "completed"][:UPCOMING_LIMIT]

    click.echo("\n=== Fiscal calendar ===")
    if not events:
        click.echo("No upcoming deadline.")
    for event in events:
        when = f"in {event.days_until}d" if event.days_until > 0 else (
            "today" if event.days_until == 0 else "past"
        )
        line = f"{format_french_date(event.date)}  [{event.status:<9}] {event.title} ({when})"
        if event.amount:
            line += f" ~ {format_currency(event.amount)}"
        click.echo(line)


def register_commands(cli):
    """Register tax command with main CLI."""
    cli.add_command(show_tax_plan)
