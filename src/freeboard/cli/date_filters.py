"""CLI helpers for date range resolution."""

from datetime import date

import click

from freeboard.utils.date_parser import get_date_range, parse_date


def period_options(func):
    """Attach the --this-month ... --last-12-months flags to a command."""
    flags = [
        ("--last-12-months", "Use the last twelve months, starting on the 1st, up to today"),
        ("--last-year", "Use last calendar year"),
        ("--this-year", "Use current calendar year up to today"),
        ("--last-quarter", "Use last calendar quarter"),
        ("--this-quarter", "Use current quarter up to today"),
        ("--last-month", "Use last calendar month"),
        ("--this-month", "Use current month up to today"),
    ]
    for flag, help_text in flags:
        func = click.option(flag, is_flag=True, help=help_text)(func)
    return func


def period_flags_from(kwargs: dict) -> dict[str, bool]:
    """Pop the period flags out of a command's keyword arguments."""
    names = ("this_month", "last_month", "this_quarter", "last_quarter", "this_year", "last_year", "last_12_months")
    return {name.replace("_", "-"): kwargs.pop(name, False) for name in names}


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
    today: date | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        click.echo(
            "Error: Only one period option (--this-month, --last-month, --this-quarter, --last-quarter, --this-year, --last-year, --last-12-months) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    start = None
    end = None

    if period_count == 1:
        for period, is_set in period_flags.items():
            if is_set:
                start, end = get_date_range(period, today=today)
                break
    else:
        if start_date:
            try:
                start = parse_date(start_date, today=today)
            except ValueError as e:
                click.echo(f"Error: Invalid start date: {e}", err=True)
                ctx.exit(1)

        if end_date:
            try:
                end = parse_date(end_date, today=today)
            except ValueError as e:
                click.echo(f"Error: Invalid end date: {e}", err=True)
                ctx.exit(1)

        if start is None and end is None and default_range is not None:
            start, end = default_range

    return start, end
