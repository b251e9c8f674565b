"""
Command-line interface for pdfannotx.
"""

import json
import logging
import os
import sys

import click
from rich.console import Console
from rich.table import Table

from pdfannotx.config import INTENTS, DecodeOptions
from pdfannotx.document import AnnotationDocument
from pdfannotx.exceptions import PDFAnnotXException
from pdfannotx.types import FieldDescriptor, LinkPayload, PopupPayload
from pdfannotx.utils import get_logger, to_jsonable

console = Console()


def _configure_logging(verbose):
    logger = get_logger("pdfannotx")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _format_rect(rect):
    return ", ".join(f"{value:g}" for value in rect)


def _describe(record):
    payload = record.payload
    if isinstance(payload, FieldDescriptor):
        kind = payload.form_element_type.value if payload.form_element_type else payload.field_type or "?"
        return f"{kind} {payload.full_name}"
    if isinstance(payload, LinkPayload):
        if payload.url:
            return payload.url
        if payload.action:
            return f"named: {payload.action}"
        return f"dest: {payload.dest}" if payload.dest is not None else ""
    if isinstance(payload, PopupPayload):
        return f"parent: {payload.parent_id}"
    contents = getattr(payload, "contents", "")
    return contents[:60]


def _field_state(descriptor):
    properties = descriptor.properties
    selected = getattr(properties, "selected", None)
    if selected is not None:
        return "checked" if selected else "unchecked"
    return descriptor.field_value


def _open(input_pdf, password, **options):
    return AnnotationDocument(input_pdf, password, options=DecodeOptions(**options))


@click.group()
@click.version_option(version="1.0.0")
@click.option('--verbose', '-v', is_flag=True, help='Show debug diagnostics')
def cli(verbose):
    """
    pdfannotx - Decode PDF annotations and AcroForm fields.
    """
    _configure_logging(verbose)


@cli.command(name="annotations")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--page', '-p', type=int, default=None, help='Only decode this page (1-indexed)')
@click.option(
    '--intent',
    type=click.Choice(INTENTS),
    default='display',
    help='Only list annotations visible for this render intent',
)
@click.option('--json', 'as_json', is_flag=True, help='Print records as JSON')
@click.option('--password', default=None, help='Password for encrypted PDFs')
def list_annotations(input_pdf, page, intent, as_json, password):
    """
    List the annotations of a PDF file.

    Examples:

        pdfannotx annotations form.pdf

        pdfannotx annotations form.pdf --page 2 --intent print --json
    """
    try:
        page_numbers = [page - 1] if page is not None else None
        document = _open(input_pdf, password, page_numbers=page_numbers, intent=intent)
        results = document.decode_all()

        visible = {
            index: [
                record for record in result.records
                if (record.viewable if intent == 'display' else record.printable)
            ]
            for index, result in results.items()
        }

        if as_json:
            payload = {
                str(index + 1): [to_jsonable(record) for record in records]
                for index, records in visible.items()
            }
            console.print_json(json.dumps(payload))
            return

        table = Table(title=f"Annotations in {os.path.basename(input_pdf)}")
        table.add_column("Page", style="cyan", justify="right")
        table.add_column("Id", style="cyan")
        table.add_column("Subtype", style="green")
        table.add_column("Rect")
        table.add_column("Details")

        total = 0
        for index, records in visible.items():
            for record in records:
                total += 1
                table.add_row(
                    str(index + 1),
                    record.id,
                    record.subtype_name or record.subtype.value,
                    _format_rect(record.rect),
                    _describe(record),
                )

        console.print(table)
        console.print(f"[dim]{total} annotation(s) on {len(visible)} page(s)[/dim]")

    except PDFAnnotXException as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


@cli.command(name="fields")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--json', 'as_json', is_flag=True, help='Print field descriptors as JSON')
@click.option('--password', default=None, help='Password for encrypted PDFs')
def list_fields(input_pdf, as_json, password):
    """
    List the AcroForm fields of a PDF file.

    Example:

        pdfannotx fields form.pdf --json
    """
    try:
        document = _open(input_pdf, password)
        records = document.fields()

        if as_json:
            payload = [
                {"id": record.id, **to_jsonable(record.form_field)}
                for record in records
            ]
            console.print_json(json.dumps(payload))
            return

        if not records:
            console.print("[yellow]No form fields found.[/yellow]")
            return

        table = Table(title=f"Form fields in {os.path.basename(input_pdf)}")
        table.add_column("Name", style="cyan")
        table.add_column("Type", style="green")
        table.add_column("Value")
        table.add_column("Required", justify="center")
        table.add_column("Read-only", justify="center")

        for record in records:
            descriptor = record.form_field
            element_type = descriptor.form_element_type
            table.add_row(
                descriptor.full_name,
                element_type.value if element_type else descriptor.field_type,
                _field_state(descriptor),
                "✓" if descriptor.required else "",
                "✓" if descriptor.read_only else "",
            )

        console.print(table)

    except PDFAnnotXException as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


@cli.command(name="scripts")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--raw', is_flag=True, help='Keep the original JavaScript instead of translating it')
@click.option('--password', default=None, help='Password for encrypted PDFs')
def show_scripts(input_pdf, raw, password):
    """
    Print the event-listener scripts bound to annotations.

    Example:

        pdfannotx scripts form.pdf
    """
    try:
        document = _open(input_pdf, password, translate_scripts=not raw)
        bindings = document.scripts()

        if not bindings.scripts:
            console.print("[yellow]No scripts found.[/yellow]")
            return

        for element_id, text in bindings.scripts.items():
            console.print(f"[bold cyan]{bindings.script_id(element_id)}[/bold cyan]")
            console.print(text, markup=False, highlight=False, soft_wrap=True)

    except PDFAnnotXException as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


if __name__ == '__main__':
    cli()
