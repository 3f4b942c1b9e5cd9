"""Settings commands."""

import click


@click.group()
def settings_group():
    """Show or change budget defaults."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show current defaults."""
    settings = ctx.obj["store"].get().settings
    click.echo(f"Default currency:     {settings.default_currency_code}")
    click.echo(f"Default account type: {settings.default_account_type}")


@settings_group.command("set-currency")
@click.argument("code")
@click.pass_context
def set_currency(ctx, code: str):
    """Set the currency used for rows without a currency column."""
    store = ctx.obj["store"]
    store.set_default_currency_code(code)
    click.echo(f"Default currency set to {store.get().settings.default_currency_code}")


@settings_group.command("set-account-type")
@click.argument("account_type")
@click.pass_context
def set_account_type(ctx, account_type: str):
    """Set the type given to accounts created by imports."""
    store = ctx.obj["store"]
    store.set_default_account_type(account_type)
    click.echo(f"Default account type set to {store.get().settings.default_account_type}")


@settings_group.command("reset")
@click.confirmation_option(prompt="Delete all budget data?")
@click.pass_context
def reset_state(ctx):
    """Delete all budget data and restore default settings."""
    ctx.obj["store"].reset()
    click.echo("Budget data reset.")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
