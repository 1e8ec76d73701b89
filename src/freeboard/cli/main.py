"""Main CLI entry point."""

import logging

import click
from freeboard.cli.error_handling import handle_domain_error
from freeboard.database.factories import create_sqlite_database
from freeboard.domain.errors import StoreError
from freeboard.utils.cache import TTLCache

# Import and register all commands at module level
from freeboard.cli.commands import (
    add,
    transaction,
    dashboard,
    vat,
    tax,
    export,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FREEBOARD_DB_PATH environment variable)",
    envvar="FREEBOARD_DB_PATH",
)
@click.option(
    "--user",
    default="default",
    show_default=True,
    help="User whose data to work on (overrides FREEBOARD_USER environment variable)",
    envvar="FREEBOARD_USER",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, user: str, verbose: bool):
    """Freeboard - Finance dashboard for French micro-entrepreneurs.

    Record revenue and expenses, follow the VAT franchise threshold,
    compare tax regimes and export your books.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            db = create_sqlite_database(database_path=db_path)
            db.connect()
            db.initialize_schema()
        except StoreError as e:
            handle_domain_error(ctx, e)
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)
    ctx.obj["user"] = user
    # one invocation runs one command, so the cache only lives that long
    ctx.obj["cache"] = TTLCache()


# Register all commands
add.register_commands(cli)
transaction.register_commands(cli)
dashboard.register_commands(cli)
vat.register_commands(cli)
tax.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
