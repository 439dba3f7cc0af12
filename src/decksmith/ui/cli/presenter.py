"""Rich-aware presenters for CLI output."""

from __future__ import annotations

from rich import box
from rich.table import Table

from decksmith.api import ExportResult
from decksmith.core.formats import ExportType

from .state import CLIState


def present_export_types(state: CLIState, default: str | None = None) -> None:
    """Print the supported export types as a table."""
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Type")
    table.add_column("Extensions")
    table.add_column("Description")
    for export_type in ExportType:
        label = export_type.value
        if export_type.value == default:
            label = f"{label} (default)"
        extensions = ", ".join(f".{ext}" for ext in export_type.extensions)
        table.add_row(label, extensions, export_type.description)
    state.console.print(table)


def present_export_summary(state: CLIState, result: ExportResult) -> None:
    """Report where the exported deck was written and how it was staged."""
    via = ""
    if result.proxied:
        proxy = state.last_event("proxy_start")
        port = f" on port {proxy['port']}" if proxy else ""
        via = f" via workspace proxy{port}"
    state.console.print(
        f"[green]Exported[/] {result.export_type.description} to {result.output}{via}",
        highlight=False,
    )
    staged = state.last_event("work_file")
    if staged is not None:
        state.console.print(
            f"[dim]Rendered from a temporary copy ({staged['strategy']}), since removed.[/]",
            highlight=False,
        )


__all__ = ["present_export_summary", "present_export_types"]
