"""Rendering of domain errors for CLI commands."""

import logging

import click

from envelopes.domain.errors import DomainError, NotFoundError

logger = logging.getLogger(__name__)

# Top-level command -> where to look up what exists
_NOT_FOUND_HINTS = {
    "categorize": "List uncategorized transactions with 'envelopes summary uncategorized'.",
    "import": "List stored uploads with 'envelopes upload list'.",
    "upload": "List stored uploads with 'envelopes upload list'.",
}


def handle_domain_error(ctx: click.Context, error: DomainError) -> None:
    """Print a domain error to stderr and exit with status 1.

    Missing records come with a hint on how to list the existing ones.
    """
    logger.debug("%s failed: %r", ctx.command_path, error)
    click.echo(f"Error: {error}", err=True)

    if isinstance(error, NotFoundError):
        root = ctx.find_root()
        command = root.invoked_subcommand if root is not ctx else ctx.info_name
        hint = _NOT_FOUND_HINTS.get(command or "")
        if hint:
            click.echo(hint, err=True)
    ctx.exit(1)
