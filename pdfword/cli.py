"""
Command-line interface for pdfword.
"""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from pdfword import __version__
from pdfword.config import load_settings
from pdfword.exceptions import PdfWordError
from pdfword.pipeline import ConversionPipeline
from pdfword.tools import compress_pdf_bytes, merge_pdf_bytes
from pdfword.utils import configure_logging, docx_filename

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option('--log-level', default=None, help='Logging level (defaults to PDFWORD_LOG_LEVEL)')
def cli(log_level):
    """
    pdfword - Rebuild PDF text as Word documents.
    """
    configure_logging(log_level or load_settings().log_level)


@cli.command()
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--output', '-o',
    default=None,
    help='Output DOCX path (defaults to the input name with a .docx suffix)',
    type=click.Path(dir_okay=False, path_type=Path)
)
def convert(input_pdf, output):
    """
    Convert a PDF into a Word document.

    Examples:

        pdfword convert notes.pdf

        pdfword convert notes.pdf -o out/notes.docx
    """
    destination = output or input_pdf.with_name(docx_filename(input_pdf.name))
    try:
        with console.status("[bold cyan]Converting...[/bold cyan]"):
            result = ConversionPipeline().run(input_pdf.read_bytes())
    except PdfWordError as exc:
        console.print(f"[bold red]✗ Error:[/bold red] {exc}")
        sys.exit(1)

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(result.content)

    table = Table(title="Conversion Summary", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Input", input_pdf.name)
    table.add_row("Output", str(destination))
    table.add_row("Pages", str(result.page_count))
    table.add_row("Paragraphs", str(result.paragraph_count))
    if result.skipped_fragments:
        table.add_row("Skipped fragments", str(result.skipped_fragments))
    console.print(table)
    console.print("[bold green]✓ Conversion completed[/bold green]")


@cli.command()
@click.argument('input_pdfs', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', required=True, help='Merged PDF path', type=click.Path(dir_okay=False, path_type=Path))
def merge(input_pdfs, output):
    """
    Merge two or more PDFs in the given order.
    """
    try:
        payload = merge_pdf_bytes(path.read_bytes() for path in input_pdfs)
    except PdfWordError as exc:
        console.print(f"[bold red]✗ Error:[/bold red] {exc}")
        sys.exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(payload)
    console.print(f"[bold green]✓ Merged {len(input_pdfs)} files into {output}[/bold green]")


@cli.command()
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', required=True, help='Compressed PDF path', type=click.Path(dir_okay=False, path_type=Path))
def compress(input_pdf, output):
    """
    Rewrite a PDF with compressed content streams.
    """
    data = input_pdf.read_bytes()
    try:
        payload = compress_pdf_bytes(data)
    except PdfWordError as exc:
        console.print(f"[bold red]✗ Error:[/bold red] {exc}")
        sys.exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(payload)
    console.print(f"[bold green]✓ Wrote {output}[/bold green] [dim]({len(data)} → {len(payload)} bytes)[/dim]")


def main():
    cli()


if __name__ == '__main__':
    main()
