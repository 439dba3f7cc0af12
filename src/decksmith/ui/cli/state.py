"""Per-invocation CLI state: verbosity, consoles and the events seen during an export."""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
import sys
from typing import Any

import click
from rich.console import Console
from rich.text import Text

from decksmith.core.exceptions import exception_hint, exception_messages


@dataclass(slots=True)
class CLIState:
    """Options shared by the command and the diagnostics it emits."""

    verbosity: int = 0
    debug: bool = False
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    # Rebuilt on every access to follow sys.stdout and sys.stderr swaps.
    @property
    def console(self) -> Console:
        return Console(file=sys.stdout, highlight=False)

    @property
    def err_console(self) -> Console:
        return Console(file=sys.stderr, highlight=False)

    def record(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))

    def last_event(self, name: str) -> dict[str, Any] | None:
        """Return the payload of the most recent ``name`` event, if any."""
        for event_name, payload in reversed(self.events):
            if event_name == name:
                return payload
        return None


_CURRENT: ContextVar[CLIState | None] = ContextVar("decksmith_cli_state", default=None)


def set_cli_state(
    ctx: click.Context | None = None, *, verbosity: int = 0, debug: bool = False
) -> CLIState:
    """Start the state of one invocation and make it the current one."""
    state = ctx.ensure_object(CLIState) if ctx is not None else CLIState()
    state.verbosity = max(0, verbosity)
    state.debug = debug
    _CURRENT.set(state)
    return state


def get_cli_state() -> CLIState:
    """Return the state of the running invocation, or a default one."""
    ctx = click.get_current_context(silent=True)
    if ctx is not None:
        state = ctx.find_object(CLIState)
        if state is not None:
            return state
    state = _CURRENT.get()
    if state is None:
        state = set_cli_state()
    return state


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
) -> None:
    """Print a diagnostic line to stderr; causes are added with ``-v`` and ``-vv``."""
    state = get_cli_state()
    if level == "info":
        state.err_console.print(Text(message, style="dim"))
        return

    style = "red" if level == "error" else "yellow"
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))
    if exception is not None and state.verbosity >= 1:
        if state.verbosity >= 2:
            causes = exception_messages(exception)
        else:
            hint = exception_hint(exception)
            causes = [hint] if hint else []
        for cause in causes:
            if cause not in message:
                text.append(f"\n  caused by: {cause}", style=style)
        text.append(f"\n  type: {type(exception).__name__}", style=style)
    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether full tracebacks were requested."""
    state = _CURRENT.get()
    return state is not None and state.debug


__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]
