"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
RENDERING_PANEL = "Rendering"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

InputArgument = Annotated[
    str | None,
    typer.Argument(
        metavar="INPUT",
        help=(
            "Slide deck to export. Use '-' to read an untitled document from stdin. "
            "With a .zip workspace, the path of the deck inside the archive."
        ),
        show_default=False,
    ),
]

WorkspaceOption = Annotated[
    Path | None,
    typer.Option(
        "--workspace",
        "-w",
        help="Workspace folder (directory) or virtual workspace (.zip archive).",
        exists=True,
        file_okay=True,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="Settings file (YAML). Defaults to decksmith.yml in the workspace.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output file. The export type is inferred from its extension.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

ExportTypeOption = Annotated[
    str | None,
    typer.Option(
        "--type",
        "-t",
        help="Export type used when --output is omitted (html, pdf, pptx, png, jpeg).",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

OpenOption = Annotated[
    bool,
    typer.Option(
        "--open/--no-open",
        help="Open the exported file with the default application.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

ThemeOption = Annotated[
    list[str] | None,
    typer.Option(
        "--theme",
        help="Theme stylesheet path or URL. Repeat to add several themes.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

ChromePathOption = Annotated[
    str | None,
    typer.Option(
        "--chrome-path",
        help="Chrome or Chromium-based browser used for PDF, PPTX and image exports.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

HtmlOption = Annotated[
    bool | None,
    typer.Option(
        "--html/--no-html",
        help="Allow raw HTML elements in slide Markdown.",
        show_default=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

BreaksOption = Annotated[
    str | None,
    typer.Option(
        "--breaks",
        help="Line-break rendering: on, off or inherit.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

RendererOption = Annotated[
    str | None,
    typer.Option(
        "--renderer",
        help="Renderer command line (default: marp).",
        rich_help_panel=RENDERING_PANEL,
    ),
]
