"""CSV preview and import commands."""

from pathlib import Path

import click
from envelopes.cli.error_handling import handle_domain_error
from envelopes.domain.csv_import import CSVImportService, MAPPING_FIELDS
from envelopes.domain.errors import DomainError
from envelopes.domain.uploads import CsvUploadService


def parse_mapping_options(options: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated ``field=Header`` options into a mapping.

    Raises:
        click.BadParameter: If an option is malformed or names an unknown field
    """
    mapping = {}
    for option in options:
        field, sep, header = option.partition("=")
        field = field.strip().lower()
        if not sep or not field:
            raise click.BadParameter(
                f"'{option}' is not in field=Header form", param_hint="--map"
            )
        if field not in MAPPING_FIELDS:
            raise click.BadParameter(
                f"Unknown field '{field}'. Fields: {', '.join(MAPPING_FIELDS)}",
                param_hint="--map",
            )
        mapping[field] = header.strip()
    return mapping


def _read_csv_file(csv_file: str) -> str:
    # utf-8-sig drops the byte order mark some banks write
    return Path(csv_file).read_text(encoding="utf-8-sig")


@click.command("preview")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def preview_csv(ctx, csv_file: str):
    """Show headers, suggested mapping and sample rows of a CSV file."""
    service = CSVImportService(ctx.obj["store"])
    preview = service.preview_csv_import(_read_csv_file(csv_file))

    click.echo(f"\nRows: {preview.row_count}")
    click.echo(f"Headers: {', '.join(preview.headers)}")
    click.echo("\nSuggested mapping:")
    for field in MAPPING_FIELDS:
        header = preview.suggested_mapping.get(field)
        click.echo(f"  {field:<12} {header if header else '-'}")

    if preview.sample_rows:
        click.echo("\nSample rows:")
        for row in preview.sample_rows:
            click.echo("  " + " | ".join(row.values()))


@click.command("import")
@click.argument("csv_file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--upload", "upload_key", help="Import a stored upload instead of a file")
@click.option(
    "--map",
    "map_options",
    multiple=True,
    help="Column for a field, e.g. --map 'date=Posted Date' (repeatable)",
)
@click.option(
    "--no-auto-map",
    is_flag=True,
    help="Use only --map options instead of starting from the suggested mapping",
)
@click.option("--currency", help="Currency code for rows without a currency column")
@click.option(
    "--show-errors",
    default=10,
    show_default=True,
    type=click.IntRange(min=0),
    help="Number of failed rows to print with their raw values",
)
@click.pass_context
def import_csv(
    ctx,
    csv_file: str | None,
    upload_key: str | None,
    map_options: tuple[str, ...],
    no_auto_map: bool,
    currency: str | None,
    show_errors: int,
):
    """Import transactions from a CSV file or a stored upload.

    The mapping starts from the suggested one and --map options override it.

    Examples:
        envelopes import bank.csv
        envelopes import bank.csv --map "account=Card" --currency EUR
    """
    if (csv_file is None) == (upload_key is None):
        click.echo("Error: Provide either CSV_FILE or --upload (not both).", err=True)
        ctx.exit(1)

    store = ctx.obj["store"]
    service = CSVImportService(store)

    try:
        if upload_key is not None:
            upload_record = CsvUploadService(ctx.obj["storage"]).get_upload(upload_key)
            csv_text, filename = upload_record.text, upload_record.filename
        else:
            csv_text, filename = _read_csv_file(csv_file), Path(csv_file).name
    except DomainError as e:
        handle_domain_error(ctx, e)

    mapping = {} if no_auto_map else service.preview_csv_import(csv_text).suggested_mapping
    mapping.update(parse_mapping_options(map_options))

    result = service.commit_csv_import(
        csv_text=csv_text,
        mapping=mapping,
        filename=filename,
        default_currency_code=currency.upper() if currency else None,
    )

    click.echo("\nImport complete:")
    click.echo(f"  Rows: {result.total_rows}")
    click.echo(f"  Succeeded: {result.success_rows}")
    click.echo(f"  Failed: {result.failed_rows}")
    created = result.created
    click.echo(
        f"  Created: {created.transactions} transactions, {created.accounts} accounts, "
        f"{created.merchants} merchants, {created.categories} categories, {created.tags} tags"
    )

    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors[:show_errors]:
            location = f"Row {error.row_number}" if error.row_number else "Import"
            click.echo(f"    {location}: {error.message}", err=True)
            if error.raw_row is not None:
                click.echo(f"      {','.join(error.raw_row)}", err=True)
        hidden = len(result.errors) - show_errors
        if hidden > 0:
            click.echo(f"    ... and {hidden} more", err=True)

    # A rejected mapping means nothing was imported
    if any(error.row_number == 0 for error in result.errors):
        ctx.exit(1)


def register_commands(cli):
    """Register preview and import commands with main CLI."""
    cli.add_command(preview_csv)
    cli.add_command(import_csv)
