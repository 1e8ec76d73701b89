"""Export commands."""

import click
from freeboard.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from freeboard.cli.error_handling import handle_domain_error
from freeboard.domain.entities import ReportBundle, TransactionFilters, TransactionType
from freeboard.domain.errors import DomainError
from freeboard.domain.export import CSV_DELIMITERS, ExportFormatter
from freeboard.domain.metrics import MetricsAggregator


def _fetch(ctx, filters: TransactionFilters):
    db = ctx.obj["db"]
    try:
        return db.list_all_transactions(ctx.obj["user"], filters)
    except DomainError as e:
        handle_domain_error(ctx, e)


def _write(ctx, output: str, content: str, count: int) -> None:
    with click.open_file(output, "w", encoding="utf-8") as f:
        f.write(content)
    if output != "-":
        click.echo(f"Exported {count} transaction(s) to {output}", err=True)


def _filter_options(func):
    func = period_options(func)
    func = click.option("--end-date", help="End date (YYYY-MM-DD or DD/MM/YYYY)")(func)
    func = click.option("--start-date", help="Start date (YYYY-MM-DD or DD/MM/YYYY)")(func)
    func = click.option(
        "--type", "txn_type", type=click.Choice([t.value for t in TransactionType]), help="Income or expense"
    )(func)
    func = click.option("--category", "categories", multiple=True, help="Category label (repeatable)")(func)
    func = click.option("--search", help="Text to look for in description, client or category")(func)
    return func


def _build_filters(ctx, search, categories, txn_type, start_date, end_date, period_kwargs) -> TransactionFilters:
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(period_kwargs),
    )
    return TransactionFilters(
        search=search,
        categories=categories,
        type=TransactionType(txn_type) if txn_type else None,
        date_from=start,
        date_to=end,
    )


@click.group()
def export_group():
    """Export transactions and reports."""
    pass


@export_group.command("csv")
@_filter_options
@click.option("--delimiter", type=click.Choice(CSV_DELIMITERS), default=";", show_default=True)
@click.option("--output", "-o", default="-", help="Output file ('-' for stdout)")
@click.pass_context
def export_csv(ctx, search, categories, txn_type, start_date, end_date, delimiter, output, **period_kwargs):
    """Export transactions as CSV with a summary block.

    Examples:
        freeboard export csv --this-year -o transactions.csv
    """
    filters = _build_filters(ctx, search, categories, txn_type, start_date, end_date, period_kwargs)
    transactions = _fetch(ctx, filters)
    try:
        content = ExportFormatter().generate_csv_content(transactions, delimiter=delimiter)
    except DomainError as e:
        handle_domain_error(ctx, e)
    _write(ctx, output, content, len(transactions))


@export_group.command("html")
@_filter_options
@click.option("--output", "-o", default="-", help="Output file ('-' for stdout)")
@click.pass_context
def export_html(ctx, search, categories, txn_type, start_date, end_date, output, **period_kwargs):
    """Export transactions as a printable HTML page.

    Open the file in a browser and print it to PDF.
    """
    filters = _build_filters(ctx, search, categories, txn_type, start_date, end_date, period_kwargs)
    transactions = _fetch(ctx, filters)
    content = ExportFormatter().generate_html_content(transactions, filters=filters)
    _write(ctx, output, content, len(transactions))


@export_group.command("report")
@period_options
@click.option("--start-date", help="Start date (YYYY-MM-DD or DD/MM/YYYY)")
@click.option("--end-date", help="End date (YYYY-MM-DD or DD/MM/YYYY)")
@click.option("--name", "report_type", default="mensuel", show_default=True, help="Report name")
@click.option("--format", "report_format", type=click.Choice(["text", "csv"]), default="text", show_default=True)
@click.option("--output", "-o", default="-", help="Output file ('-' for stdout)")
@click.pass_context
def export_report(ctx, start_date, end_date, report_type, report_format, output, **period_kwargs):
    """Export a period report with key figures and category breakdown.

    Defaults to the current month.

    Examples:
        freeboard export report --last-quarter --name trimestriel
        freeboard export report --this-year --format csv -o rapport.csv
    """
    aggregator = MetricsAggregator()
    today = aggregator.clock.today()
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(period_kwargs),
        default_range=(today.replace(day=1), today),
    )
    transactions = _fetch(ctx, TransactionFilters(date_from=start, date_to=end))

    period = f"{start or '...'}_{end or '...'}"
    bundle = ReportBundle(
        period=period,
        report_type=report_type,
        kpis=aggregator.summarize(transactions),
        transactions=tuple(transactions),
        category_breakdown=tuple(aggregator.build_category_breakdown(transactions)),
    )

    formatter = ExportFormatter(clock=aggregator.clock)
    if report_format == "csv":
        content = formatter.generate_report_csv(bundle)
    else:
        content = formatter.generate_report_text(bundle)
    _write(ctx, output, content, len(transactions))


def register_commands(cli: click.Group) -> None:
    """Register export commands with main CLI."""
    cli.add_command(export_group, name="export")
