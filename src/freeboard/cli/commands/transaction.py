"""Transaction management commands."""

import click
from freeboard.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from freeboard.cli.error_handling import handle_domain_error
from freeboard.domain.entities import TransactionFilters, TransactionType
from freeboard.domain.errors import DomainError
from freeboard.domain.transaction import TransactionService
from freeboard.utils.date_parser import parse_date
from freeboard.utils.amount_parser import parse_amount


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("edit")
@click.argument("transaction_id", type=int)
@click.option("--date", help="Transaction date (YYYY-MM-DD, DD/MM/YYYY or relative like 'today')")
@click.option("--amount", help="Amount including VAT")
@click.option("--amount-ht", help="Amount excluding VAT")
@click.option("--vat-amount", help="VAT part of the amount")
@click.option("--vat-rate", type=float, help="VAT rate in percent")
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]), help="Income or expense")
@click.option("--category", help="Category label")
@click.option("--description", help="Transaction description (empty string clears it)")
@click.option("--client", help="Client name (empty string clears it)")
@click.option("--status", help="Payment status")
@click.option("--invoice", help="Invoice number (empty string clears it)")
@click.option("--payment-method", help="Payment method (empty string clears it)")
@click.pass_context
def edit_transaction(
    ctx,
    transaction_id: int,
    date: str | None,
    amount: str | None,
    amount_ht: str | None,
    vat_amount: str | None,
    vat_rate: float | None,
    txn_type: str | None,
    category: str | None,
    description: str | None,
    client: str | None,
    status: str | None,
    invoice: str | None,
    payment_method: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. A new amount or rate
    recomputes the HT and VAT parts unless both are given.

    Examples:
        freeboard transaction edit 1 --amount 1500
        freeboard transaction edit 1 --category Conseil --status pending
        freeboard transaction edit 1 --client ""
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    # Parse date if provided
    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    # Parse amounts if provided
    amounts = {}
    for name, raw in (("amount", amount), ("amount_ht", amount_ht), ("vat_amount", vat_amount)):
        if raw is None:
            continue
        try:
            amounts[name] = parse_amount(raw)
        except ValueError as e:
            click.echo(f"Error: Invalid {name.replace('_', ' ')} format: {e}", err=True)
            ctx.exit(1)

    try:
        transaction_service.update_transaction(
            transaction_id,
            user_id=ctx.obj["user"],
            date=txn_date,
            vat_rate=vat_rate,
            type=txn_type,
            category=category,
            description=description,
            client_name=client,
            status=status,
            invoice_number=invoice,
            payment_method=payment_method,
            **amounts,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--search", help="Text to look for in description, client or category")
@click.option("--category", "categories", multiple=True, help="Category label (repeatable)")
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]), help="Income or expense")
@click.option("--start-date", help="Start date (YYYY-MM-DD or DD/MM/YYYY)")
@click.option("--end-date", help="End date (YYYY-MM-DD or DD/MM/YYYY)")
@period_options
@click.option("--page", type=int, default=1, show_default=True, help="Page number")
@click.option("--page-size", type=int, default=20, show_default=True, help="Transactions per page")
@click.option("--verbose", "-v", is_flag=True, help="Show all columns including VAT, invoice and payment method")
@click.pass_context
def list_transactions(
    ctx,
    search: str | None,
    categories: tuple[str, ...],
    txn_type: str | None,
    start_date: str | None,
    end_date: str | None,
    page: int,
    page_size: int,
    verbose: bool,
    **period_kwargs,
):
    """View transactions with optional filters, newest first.

    Examples:
        freeboard transaction list --this-month
        freeboard transaction list --search acme --type income
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(period_kwargs),
    )

    filters = TransactionFilters(
        search=search,
        categories=categories,
        type=TransactionType(txn_type) if txn_type else None,
        date_from=start,
        date_to=end,
        page=page,
        page_size=page_size,
    )
    try:
        result = service.list_transactions(ctx.obj["user"], filters)
    except DomainError as e:
        handle_domain_error(ctx, e)

    transactions = result.items
    if not transactions:
        click.echo("No transactions found.")
        return

    last_page = max(1, -(-result.total // page_size))
    click.echo(f"\nFound {result.total} transaction(s), page {page}/{last_page}:")

    if verbose:
        click.echo("=" * 100)
        for txn in transactions:
            click.echo(f"\nTransaction ID: {txn.id}")
            click.echo(f"  Date: {txn.date}")
            click.echo(f"  Type: {txn.type.value}")
            click.echo(f"  Amount: {txn.amount:,.2f} €")
            if txn.amount_ht is not None:
                click.echo(f"  HT: {txn.amount_ht:,.2f} €")
            if txn.vat_amount is not None:
                click.echo(f"  VAT: {txn.vat_amount:,.2f} € ({txn.vat_rate}%)")
            click.echo(f"  Category: {txn.category}")
            if txn.description:
                click.echo(f"  Description: {txn.description}")
            if txn.client_name:
                click.echo(f"  Client: {txn.client_name}")
            click.echo(f"  Status: {txn.status}")
            if txn.invoice_number:
                click.echo(f"  Invoice: {txn.invoice_number}")
            if txn.payment_method:
                click.echo(f"  Payment method: {txn.payment_method}")
            click.echo("-" * 100)
    else:
        # Compact mode: show key columns in a table
        click.echo("-" * 100)
        click.echo(
            f"{'ID':<6} {'Date':<12} {'Type':<8} {'Amount':>12} {'Category':<20} {'Client':<18} {'Description':<20}"
        )
        click.echo("-" * 100)
        for txn in transactions:
            amount_str = f"{txn.amount:,.2f}"
            click.echo(
                f"{txn.id:<6} {str(txn.date):<12} {txn.type.value:<8} {amount_str:>12} "
                f"{txn.category[:20]:<20} {(txn.client_name or '')[:18]:<18} {(txn.description or '')[:20]:<20}"
            )

    # Show page totals
    total_income = sum(txn.amount for txn in transactions if txn.type == TransactionType.INCOME)
    total_expenses = sum(abs(txn.amount) for txn in transactions if txn.type == TransactionType.EXPENSE)
    click.echo("-" * 100)
    click.echo(
        f"{'PAGE':<6} Income: {total_income:,.2f} € | "
        f"Expenses: {total_expenses:,.2f} € | Count: {len(transactions)}"
    )


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        freeboard transaction delete 1
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    try:
        transaction_service.require_transaction(transaction_id, ctx.obj["user"])
    except DomainError as e:
        handle_domain_error(ctx, e)

    # Confirm deletion
    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        transaction_service.delete_transaction(transaction_id, ctx.obj["user"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("delete-many")
@click.argument("transaction_ids", type=int, nargs=-1, required=True)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transactions(ctx, transaction_ids: tuple[int, ...], yes: bool) -> None:
    """Delete several transactions at once.

    Examples:
        freeboard transaction delete-many 3 4 7
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    count = len(transaction_ids)
    if not yes and not click.confirm(f"Are you sure you want to delete {count} transaction(s)?"):
        click.echo("Deletion cancelled.")
        return

    try:
        deleted = transaction_service.bulk_delete_transactions(list(transaction_ids), ctx.obj["user"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {deleted} transaction(s)")


@transaction_group.command("categories")
@click.pass_context
def list_categories(ctx) -> None:
    """List the categories already used."""
    service = TransactionService(ctx.obj["db"])
    categories = service.get_categories(ctx.obj["user"])
    if not categories:
        click.echo("No categories yet.")
        return
    for category in categories:
        click.echo(category)


@transaction_group.command("stats")
@click.pass_context
def show_stats(ctx) -> None:
    """Show all-time totals."""
    service = TransactionService(ctx.obj["db"])
    try:
        stats = service.get_stats(ctx.obj["user"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Income:       {stats.total_income:>14,.2f} €")
    click.echo(f"Expenses:     {stats.total_expenses:>14,.2f} €")
    click.echo(f"Net balance:  {stats.net_balance:>14,.2f} €")
    click.echo(f"Transactions: {stats.transaction_count:>14}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
