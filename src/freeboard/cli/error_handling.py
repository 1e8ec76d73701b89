"""CLI error handling helpers."""

import logging

import click

from freeboard.domain.errors import DomainError, StoreError

logger = logging.getLogger(__name__)

STORE_HINT = "Check --db-path (or FREEBOARD_DB_PATH) and that the file is readable and writable."


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Store failures are not the user's input being wrong, so they get their
    own wording and a pointer to the database location.
    """
    if isinstance(error, StoreError):
        logger.debug("Store failure reported to the user", exc_info=error)
        click.echo(f"Error: the database could not be used ({error})", err=True)
        click.echo(STORE_HINT, err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
