# gguf_header/reporting/console.py
"""
Console reporting for header inspection results.
"""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from gguf_header.analysis.base import InspectionReport
from gguf_header.model_formats.gguf.gguf import Header, Value, ValueType

console = Console()

PREVIEW_WIDTH = 70
ARRAY_PREVIEW_ITEMS = 3


def _type_label(value: Value) -> str:
    if value.type is ValueType.ARRAY:
        return f"ARRAY[{value.element_type.name}]"
    return value.type.name


def format_value(value: Value, *, full: bool = False) -> str:
    """Readable one-line rendering of a Value, truncated unless ``full``."""
    if value.type is ValueType.ARRAY:
        items = value.data if full else value.data[:ARRAY_PREVIEW_ITEMS]
        more = ", ..." if len(value.data) > len(items) else ""
        inner = ", ".join(format_value(v, full=full) for v in items)
        text = f"[{inner}{more}] (n={len(value.data)})"
    elif value.type is ValueType.STRING:
        text = repr(value.data)
    elif value.type in (ValueType.FLOAT32, ValueType.FLOAT64):
        text = f"{value.data:.6g}"
    else:
        text = str(value.data)

    if not full and len(text) > PREVIEW_WIDTH:
        text = text[: PREVIEW_WIDTH - 3] + "..."
    return text


def render_summary(rep: InspectionReport) -> None:
    """Render a high-level summary table."""
    t = Table(title="GGUF Header Summary", box=box.SIMPLE_HEAVY)
    t.add_column("Field", style="bold")
    t.add_column("Value")
    t.add_row("Path", escape(rep.file_path))
    t.add_row("Size (bytes)", str(rep.file_size))
    t.add_row("SHA-256", rep.sha256_hex)
    if rep.header is not None:
        t.add_row("Version", str(rep.header.version))
        t.add_row("Tensor Count", str(rep.header.tensor_count))
        t.add_row("Metadata Count", str(rep.header.metadata_count))
        t.add_row("Header Size (bytes)", str(rep.header_size))
        if rep.header.architecture:
            t.add_row("Architecture", escape(rep.header.architecture))
    console.print(t)


def render_metadata(header: Header, *, full: bool = False) -> None:
    """Render metadata entries in file order."""
    table = Table(title="Metadata", box=box.ROUNDED, title_style="bold magenta")
    table.add_column("Index", justify="right", style="dim")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Type", style="yellow")
    table.add_column("Value", style="white", overflow="fold")

    for index, e in enumerate(header.metadata, start=1):
        table.add_row(
            str(index),
            escape(e.key),
            _type_label(e.value),
            escape(format_value(e.value, full=full)),
        )

    console.print(table)


def render_error(rep: InspectionReport) -> None:
    console.print(
        Panel(
            f"[bold red]{rep.error_kind}[/bold red]: {escape(rep.error)}",
            title="Header decode failed",
            border_style="red",
            expand=False,
        )
    )


def render_report(rep: InspectionReport, *, full: bool = False) -> None:
    """Renders the full console report for one inspected file."""
    render_summary(rep)
    if rep.error is not None:
        render_error(rep)
    elif rep.header is not None and rep.header.metadata:
        render_metadata(rep.header, full=full)
