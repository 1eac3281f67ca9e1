"""CSV import/export commands for TradeJournal CLI."""

from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.markup import escape
from rich.panel import Panel

from tradejournal.cli.common import console, get_config, get_service, print_error


def default_export_filename(account_name: str) -> str:
    """File name used when exporting without an explicit path."""
    import re

    safe_name = re.sub(r"[^a-z0-9]", "_", account_name, flags=re.IGNORECASE).lower()
    return f"{safe_name}_journal_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"


@click.command(name="export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.option(
    "--row-numbers/--no-row-numbers",
    default=None,
    help="Prefix rows with a 1-based rowNumber column.",
)
@click.option("--stdout", "to_stdout", is_flag=True, default=False, help="Write the CSV to standard output.")
@click.pass_context
def export_csv(ctx: click.Context, path: Optional[Path], row_numbers: Optional[bool], to_stdout: bool) -> None:
    """Export the journal to a CSV file.

    Without PATH, a file named after the account and the current time is
    written to the working directory.

    \b
    Examples:
      tradejournal export
      tradejournal export journal.csv --row-numbers
      tradejournal export --stdout > journal.csv
    """
    config = get_config(ctx)
    if row_numbers is None:
        row_numbers = bool(config.get("export", {}).get("include_row_numbers", False))

    service = get_service(ctx)
    data = service.get_data()

    if not data.entries:
        print_error("No entries to export.", title="Export Failed")
        raise SystemExit(1)

    text = service.export_csv(include_row_numbers=row_numbers)

    if to_stdout:
        click.echo(text)
        return

    path = path or Path(default_export_filename(data.account_name))
    path.write_text(text, encoding="utf-8")

    console.print(Panel(
        f"Exported {len(data.entries)} entries to [cyan]{escape(str(path))}[/cyan]",
        title="[bold green]Export Successful[/bold green]",
        border_style="green",
    ))


@click.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def import_csv(ctx: click.Context, path: Path, yes: bool) -> None:
    """Import a CSV file, replacing the account's entries.

    The account name and initial balance are taken from the file. Rows
    that cannot be read are skipped and reported.

    \b
    Examples:
      tradejournal import journal.csv
    """
    from tradejournal.io.csv_codec import JournalImportError

    if not yes:
        click.confirm("Replace all existing entries with the imported file?", abort=True)

    service = get_service(ctx)

    try:
        result = service.import_csv(path.read_bytes())
    except (JournalImportError, OSError) as e:
        print_error(f"Could not parse CSV file. Please check format.\n\n{e}", title="Import Failed")
        raise SystemExit(1)

    data = result.data
    text = (
        f"Account:  [bold]{escape(data.account_name)}[/bold]\n"
        f"Balance:  {data.initial_balance:,.2f}\n"
        f"Imported: {len(data.entries)} entries\n"
        f"Skipped:  {result.skipped_rows} rows\n"
        f"Warnings: {result.warning_count}"
    )
    border = "yellow" if result.warnings else "green"

    console.print(Panel(
        text,
        title=f"[bold {border}]Import Complete[/bold {border}]",
        border_style=border,
    ))
