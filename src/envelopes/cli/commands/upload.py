"""Stored CSV upload commands."""

from pathlib import Path

import click
from envelopes.cli.error_handling import handle_domain_error
from envelopes.domain.errors import DomainError
from envelopes.domain.uploads import CsvUploadService


@click.group()
def upload_group():
    """Manage stored CSV uploads."""
    pass


@upload_group.command("save")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def save_upload(ctx, csv_file: str):
    """Store a CSV file for a later import."""
    service = CsvUploadService(ctx.obj["storage"])
    path = Path(csv_file)
    try:
        info = service.save_upload(
            filename=path.name, text=path.read_text(encoding="utf-8-sig")
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Stored '{info.filename}' ({info.size_chars} chars) as {info.key}")


@upload_group.command("list")
@click.pass_context
def list_uploads(ctx):
    """List stored uploads."""
    uploads = CsvUploadService(ctx.obj["storage"]).list_uploads()
    if not uploads:
        click.echo("No stored uploads.")
        return
    for info in uploads:
        click.echo(f"{info.key}  {info.filename}  {info.size_chars} chars  {info.created_at}")


@upload_group.command("show")
@click.argument("key")
@click.pass_context
def show_upload(ctx, key: str):
    """Print the text of a stored upload."""
    try:
        record = CsvUploadService(ctx.obj["storage"]).get_upload(key)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(record.text, nl=False)


@upload_group.command("delete")
@click.argument("key")
@click.pass_context
def delete_upload(ctx, key: str):
    """Delete a stored upload."""
    CsvUploadService(ctx.obj["storage"]).delete_upload(key)
    click.echo(f"Deleted {key}")


def register_commands(cli):
    """Register upload commands with main CLI."""
    cli.add_command(upload_group, name="upload")
