"""Main CLI entry point."""

import logging

import click
from envelopes.store.factories import create_sqlite_storage
from envelopes.store.state import BudgetStore

# Import and register all commands at module level
from envelopes.cli.commands import (
    import_cmd,
    upload,
    budget,
    summary,
    settings,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides ENVELOPES_DB_PATH environment variable)",
    envvar="ENVELOPES_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Envelopes - local-first envelope budgeting.

    Import bank CSV exports, assign transactions to envelopes, set monthly
    budgets and review where the money went.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    # Open storage only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        storage = create_sqlite_storage(database_path=db_path)
        storage.connect()
        storage.initialize_schema()
        ctx.obj["storage"] = storage
        ctx.obj["store"] = BudgetStore(storage)
        ctx.call_on_close(storage.disconnect)


# Register all commands
import_cmd.register_commands(cli)
upload.register_commands(cli)
budget.register_commands(cli)
summary.register_commands(cli)
settings.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
