"""Pipeline diagnostics rendered through the CLI state."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from decksmith.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


class CliEmitter:
    """Emitter handed to :func:`decksmith.api.export_document` by the CLI.

    Warnings are always shown. Errors are only echoed with ``-v`` because the
    command prints the classified failure itself. Events are kept on the state
    for the export summary and printed with ``-v``.
    """

    def __init__(self, state: CLIState | None = None) -> None:
        self._state = state or get_cli_state()

    @property
    def debug_enabled(self) -> bool:
        return self._state.debug

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if self._state.verbosity >= 1:
            emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self._state.record(name, payload)
        if self._state.verbosity >= 1:
            message = format_event_message(name, payload)
            if message:
                render_message("info", message)


__all__ = ["CliEmitter"]
