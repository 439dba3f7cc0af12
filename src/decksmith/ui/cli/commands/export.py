"""Implementation of the primary ``decksmith`` CLI command."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any

import click
import typer

from decksmith.api import default_output_path, export_document
from decksmith.core.config import ExportSettings, load_settings
from decksmith.core.exceptions import DecksmithError
from decksmith.core.formats import ExportType

from .._options import (
    DIAGNOSTICS_PANEL,
    INPUTS_PANEL,
    BreaksOption,
    ChromePathOption,
    ConfigOption,
    ExportTypeOption,
    HtmlOption,
    InputArgument,
    OpenOption,
    OutputOption,
    RendererOption,
    ThemeOption,
    WorkspaceOption,
)
from ..diagnostics import CliEmitter
from ..presenter import present_export_summary, present_export_types
from ..state import emit_error, set_cli_state
from ..utils import load_input


ITEM_CONTINUE_TO_EXPORT = "Continue to export..."


def _launch(path: Path) -> None:
    click.launch(str(path))


def _settings_overrides(
    settings: ExportSettings,
    *,
    themes: list[str] | None,
    chrome_path: str | None,
    html: bool | None,
    breaks: str | None,
    renderer: str | None,
) -> dict[str, Any]:
    return {
        "themes": [*settings.themes, *themes] if themes else None,
        "chrome_path": chrome_path,
        "enable_html": html,
        "breaks": breaks,
        "renderer_command": renderer,
    }


def _resolve_output(
    output: Path | None,
    type_option: str | None,
    settings: ExportSettings,
    default_path: Callable[[ExportType], Path],
) -> Path:
    if type_option is not None:
        try:
            requested = ExportType.parse(type_option)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--type") from exc
    else:
        requested = ExportType.parse(settings.export_type)

    if output is None:
        return default_path(requested)
    if not output.suffix:
        return output.with_suffix(requested.default_suffix)
    if type_option is not None and output.suffix.lower().lstrip(".") not in requested.extensions:
        raise typer.BadParameter(
            f"Output '{output}' does not match export type '{requested.value}'.",
            param_hint="--type",
        )
    return output


def export(
    ctx: typer.Context,
    input_arg: InputArgument = None,
    output: OutputOption = None,
    type_option: ExportTypeOption = None,
    workspace: WorkspaceOption = None,
    config: ConfigOption = None,
    themes: ThemeOption = None,
    chrome_path: ChromePathOption = None,
    html: HtmlOption = None,
    breaks: BreaksOption = None,
    renderer: RendererOption = None,
    open_output: OpenOption = True,
    assume_yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Export non-Markdown documents without asking for confirmation.",
            rich_help_panel=INPUTS_PANEL,
        ),
    ] = False,
    list_types: Annotated[
        bool,
        typer.Option(
            "--list-types",
            help="List supported export types and exit.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Show full tracebacks when an unexpected error occurs.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
) -> None:
    """Export a slide deck to HTML, PDF, PPTX, PNG or JPEG."""
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)

    if list_types:
        default_type = None
        try:
            default_type = load_settings(config, [Path.cwd()]).export_type
        except DecksmithError as exc:
            emit_error(str(exc), exception=exc)
        present_export_types(state, default=default_type)
        raise typer.Exit()

    if input_arg is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    loaded = load_input(input_arg, workspace)
    document = loaded.document

    try:
        settings = load_settings(config, loaded.search_dirs)
        settings = settings.merged(
            _settings_overrides(
                settings,
                themes=themes,
                chrome_path=chrome_path,
                html=html,
                breaks=breaks,
                renderer=renderer,
            )
        )
    except DecksmithError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if not document.is_markdown and not assume_yes:
        typer.confirm(
            f"The current document is not a Markdown document. {ITEM_CONTINUE_TO_EXPORT}",
            abort=True,
        )

    target = _resolve_output(
        output,
        type_option,
        settings,
        lambda export_type: default_output_path(document, export_type, loaded.output_dir),
    )

    emitter = CliEmitter(state)
    try:
        with state.err_console.status(f"Exporting slide deck to {target}..."):
            result = export_document(
                document,
                target,
                settings,
                loaded.workspace,
                opener=_launch if open_output else None,
                emitter=emitter,
            )
    except DecksmithError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    present_export_summary(state, result)


__all__ = ["ITEM_CONTINUE_TO_EXPORT", "export"]
