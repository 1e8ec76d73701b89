"""Add transaction command."""

import click
from freeboard.cli.error_handling import handle_domain_error
from freeboard.domain.entities import TransactionType
from freeboard.domain.errors import DomainError
from freeboard.domain.transaction import TransactionService
from freeboard.utils.date_parser import parse_date
from freeboard.utils.amount_parser import parse_amount


@click.command("add")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD, DD/MM/YYYY or relative like 'today', 'hier')",
)
@click.option("--amount", required=True, help="Amount including VAT (e.g., 1200, 1 200,50)")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType]),
    default=TransactionType.INCOME.value,
    show_default=True,
    help="Income or expense",
)
@click.option("--category", required=True, help="Category label (e.g., 'Prestation', 'Logiciel')")
@click.option("--description", help="Transaction description")
@click.option("--client", help="Client name (income only)")
@click.option("--status", default="paid", show_default=True, help="Payment status")
@click.option("--vat-rate", type=float, help="VAT rate in percent (default 20)")
@click.option("--invoice", help="Invoice number")
@click.option("--payment-method", help="Payment method")
@click.pass_context
def add_transaction(
    ctx,
    date: str,
    amount: str,
    txn_type: str,
    category: str,
    description: str | None,
    client: str | None,
    status: str,
    vat_rate: float | None,
    invoice: str | None,
    payment_method: str | None,
):
    """Add a transaction manually.

    HT and VAT amounts are derived from your VAT settings.

    Examples:
        freeboard add --amount 1200 --category Prestation --client "ACME" --description "Audit"
        freeboard add --date 2024-01-15 --amount 49.90 --type expense --category Logiciel
    """
    db = ctx.obj["db"]
    user = ctx.obj["user"]
    transaction_service = TransactionService(db)

    # Parse date
    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    # Parse amount
    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    if client and txn_type == TransactionType.EXPENSE.value:
        click.echo("Warning: --client is ignored for expenses", err=True)
        client = None

    try:
        transaction_id = transaction_service.create_transaction(
            user_id=user,
            date=txn_date,
            amount=txn_amount,
            type=txn_type,
            category=category,
            description=description,
            client_name=client,
            status=status,
            vat_rate=vat_rate,
            invoice_number=invoice,
            payment_method=payment_method,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    txn = transaction_service.get_transaction(transaction_id)
    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Type: {txn.type.value}")
    click.echo(f"  Amount: {txn.amount:,.2f} €")
    click.echo(f"  HT: {txn.amount_ht:,.2f} €  VAT: {txn.vat_amount:,.2f} € ({txn.vat_rate}%)")
    click.echo(f"  Category: {txn.category}")
    if description:
        click.echo(f"  Description: {description}")
    if client:
        click.echo(f"  Client: {client}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
