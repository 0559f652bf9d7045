"""
Command-line interface for pdf-packet.
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeRemainingColumn
from rich.table import Table

from pdf_packet import __version__
from pdf_packet.config import STATUS_LABELS, label_for
from pdf_packet.exceptions import PDFPacketException
from pdf_packet.orchestrator import RunOrchestrator
from pdf_packet.renderers import FileRenderer, SofficeConverter
from pdf_packet.reporter import StatusReporter
from pdf_packet.sinks import DirectorySink
from pdf_packet.stores.base import ERROR_COLUMN, LABEL_COLUMN, SOURCE_ID_COLUMN, STATUS_COLUMN
from pdf_packet.stores.workbook import WorkbookStore
from pdf_packet.types import ItemStatus, RunStatus
from pdf_packet.utils import cell_text, get_logger, normalize_key

console = Console()

WORKBOOK_ENVVAR = "PDF_PACKET_WORKBOOK"

# Extra seconds the orchestrator waits past the converter's own timeout.
RENDER_TIMEOUT_GRACE = 30.0

_STATUS_STYLES = {
    ItemStatus.SUCCESS: "green",
    ItemStatus.ERROR: "red",
    ItemStatus.SKIPPED: "yellow",
    RunStatus.COMPLETE: "green",
    RunStatus.ERROR: "red",
    RunStatus.RUNNING: "cyan",
}


def _open_store(workbook):
    try:
        return WorkbookStore(workbook)
    except PDFPacketException as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


def _styled(value):
    text = cell_text(value)
    style = _STATUS_STYLES.get(text)
    return f"[{style}]{text}[/{style}]" if style else text


def _print_report(report):
    summary_table = Table(title="Run Summary", show_header=False)
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")

    summary_table.add_row("Status", _styled(report.status))
    summary_table.add_row("Total Documents", str(report.total))
    summary_table.add_row("✓ Merged", f"[green]{report.succeeded}[/green]")
    summary_table.add_row("✗ Render Failed", f"[red]{report.render_failed}[/red]")
    summary_table.add_row("✗ Merge Failed", f"[red]{report.merge_failed}[/red]")
    summary_table.add_row("Pages", str(report.page_count))
    if report.output_location:
        summary_table.add_row("Output", report.output_location)
    if report.error:
        summary_table.add_row("Error", f"[red]{report.error}[/red]")

    console.print()
    console.print(summary_table)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    pdf-packet - Render documents to PDF and merge them into one packet.
    """
    pass


@cli.command(name="run")
@click.argument('workbook', envvar=WORKBOOK_ENVVAR, type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--source-dir', '-s',
    required=True,
    help='Directory the document ids are resolved against',
    type=click.Path(exists=True, file_okay=False)
)
@click.option(
    '--output-root', '-o',
    default=None,
    help='Base directory for a relative Output Folder ID (defaults to the workbook directory)',
    type=click.Path(file_okay=False)
)
@click.option(
    '--workers', '-w',
    default=1,
    show_default=True,
    help='Number of documents rendered concurrently',
    type=click.IntRange(min=1)
)
@click.option(
    '--timeout', '-t',
    default=None,
    help='Seconds allowed for converting one document (the converter process is killed after this)',
    type=click.FloatRange(min=0, min_open=True)
)
@click.option(
    '--soffice',
    default=None,
    help='Path to the LibreOffice executable used for non-PDF documents',
    type=str
)
@click.option(
    '--linearize',
    is_flag=True,
    help='Linearize the merged PDF with qpdf when available'
)
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
def run(workbook, source_dir, output_root, workers, timeout, soffice, linearize, verbose):
    """
    Render every listed document and merge them into one PDF.

    Examples:

        pdf-packet run packet.xlsx --source-dir ./documents

        pdf-packet run packet.xlsx -s ./documents -w 4 --timeout 60
    """
    get_logger("pdf_packet", logging.DEBUG if verbose else logging.WARNING)

    store = _open_store(workbook)
    renderer = FileRenderer(source_dir, converter=SofficeConverter(soffice, timeout=timeout or 120.0))
    sink = DirectorySink(output_root or store.path.parent)

    console.print(f"\n[bold cyan]Running packet from:[/bold cyan] {store.path}")

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=console
    ) as progress:
        task = progress.add_task("Rendering documents", total=None)

        def update_progress(label, current, total):
            progress.update(task, total=total, completed=current, description=f"Rendered: {label}")

        orchestrator = RunOrchestrator(
            store,
            renderer,
            sink,
            workers=workers,
            render_timeout=timeout + RENDER_TIMEOUT_GRACE if timeout else None,
            linearize=linearize,
            progress_callback=update_progress,
        )
        try:
            report = orchestrator.run()
        except PDFPacketException as e:
            progress.stop()
            console.print(f"\n[bold red]✗ Error:[/bold red] {e}")
            if e.report is not None:
                _print_report(e.report)
            console.print()
            sys.exit(1)

    _print_report(report)
    if report.failed:
        console.print(
            f"\n[bold yellow]⚠ {report.failed} document(s) were left out; "
            "see the Documents sheet for details[/bold yellow]"
        )
    console.print(f"\n[bold green]✓ Packet created:[/bold green] {report.output_location}\n")


@cli.command(name="reset")
@click.argument('workbook', envvar=WORKBOOK_ENVVAR, type=click.Path(exists=True, dir_okay=False))
def reset(workbook):
    """
    Clear every document status and reset the run fields.

    Example:

        pdf-packet reset packet.xlsx
    """
    store = _open_store(workbook)
    if not StatusReporter(store).reset():
        console.print("[bold red]✗ Error:[/bold red] Status could not be fully reset")
        sys.exit(1)
    console.print(f"[bold green]✓ Status reset:[/bold green] {store.path}")


@cli.command(name="init")
@click.argument('workbook', envvar=WORKBOOK_ENVVAR, type=click.Path(dir_okay=False))
@click.option('--output-folder', default="", help='Initial Output Folder ID', type=str)
@click.option('--pdf-name', default="", help='Initial PDF Name', type=str)
@click.option('--force', is_flag=True, help='Overwrite an existing workbook')
def init(workbook, output_folder, pdf_name, force):
    """
    Create a workbook with Config and Documents sheets.

    Example:

        pdf-packet init packet.xlsx --output-folder out --pdf-name packet
    """
    try:
        if Path(workbook).exists() and not force:
            console.print(
                f"[bold red]✗ Error:[/bold red] {workbook} already exists (use --force to overwrite)"
            )
            sys.exit(1)

        store = WorkbookStore.create_template(
            workbook,
            settings={"outputFolderId": output_folder, "pdfName": pdf_name},
        )
    except OSError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)

    console.print(f"[bold green]✓ Workbook created:[/bold green] {store.path}")


@cli.command(name="status")
@click.argument('workbook', envvar=WORKBOOK_ENVVAR, type=click.Path(exists=True, dir_okay=False))
def status(workbook):
    """
    Show the run fields and per-document status of a workbook.

    Example:

        pdf-packet status packet.xlsx
    """
    store = _open_store(workbook)
    settings = {normalize_key(key): value for key, value in store.read_settings().items()}

    run_table = Table(title="Run Status", show_header=False)
    run_table.add_column("Field", style="cyan", no_wrap=True)
    run_table.add_column("Value")
    for key in STATUS_LABELS:
        run_table.add_row(label_for(key), _styled(settings.get(normalize_key(key))))

    rows_table = Table(title="Documents")
    rows_table.add_column("Row", style="cyan", width=4)
    rows_table.add_column("Name", style="green")
    rows_table.add_column("Document ID")
    rows_table.add_column("Status")
    rows_table.add_column("Error", style="red")
    for row_index, row in enumerate(store.read_rows()[1:], start=2):
        padded = list(row) + [None] * max(0, ERROR_COLUMN - len(row))
        rows_table.add_row(
            str(row_index),
            cell_text(padded[LABEL_COLUMN - 1]),
            cell_text(padded[SOURCE_ID_COLUMN - 1]),
            _styled(padded[STATUS_COLUMN - 1]),
            cell_text(padded[ERROR_COLUMN - 1]),
        )

    console.print()
    console.print(run_table)
    console.print(rows_table)
    console.print()


if __name__ == '__main__':
    cli()
