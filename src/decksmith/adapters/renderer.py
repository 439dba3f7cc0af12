"""Invocation of the external slide renderer (Marp CLI compatible)."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
import os
from pathlib import Path
import re
import subprocess
import sys
import threading
from typing import Any

from decksmith.core.diagnostics import DiagnosticEmitter, ensure_emitter
from decksmith.core.exceptions import BrowserNotFoundError, RendererExitError


BROWSER_PATH_ENV = "CHROME_PATH"
DEFAULT_RENDERER_COMMAND = ("marp",)
BASE_URL_FLAG = "--base-url"

_ENVIRON_LOCK = threading.Lock()

_BROWSER_NOT_FOUND_RE = re.compile(
    r"you have to install google chrome"
    r"|no suitable browser"
    r"|could not find (?:any )?(?:chrome|chromium|browser)"
    r"|browser (?:was )?not found",
    re.IGNORECASE,
)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


@contextmanager
def browser_path_override(browser_path: str | None) -> Iterator[dict[str, str]]:
    """Apply the browser path to the process environment for one invocation.

    The override is held under a process-wide lock and the previous value is
    restored (or the variable removed) on every exit path. Yields a snapshot of
    the environment to hand to the renderer process.
    """
    with _ENVIRON_LOCK:
        previous = os.environ.get(BROWSER_PATH_ENV)
        value = browser_path or previous
        try:
            if value:
                os.environ[BROWSER_PATH_ENV] = value
            yield dict(os.environ)
        finally:
            if previous is None:
                os.environ.pop(BROWSER_PATH_ENV, None)
            else:
                os.environ[BROWSER_PATH_ENV] = previous


def browser_install_hint(platform: str | None = None) -> str:
    """Return the installation guidance shown when no browser was found."""
    platform = platform or sys.platform
    chromium = " or Chromium (https://www.chromium.org/)" if platform.startswith("linux") else ""
    return (
        f"It requires to install Google Chrome (https://www.google.com/chrome/){chromium} "
        "for exporting. Set 'chrome_path' to use a browser installed in a custom location."
    )


def is_browser_not_found(output: str) -> bool:
    return bool(_BROWSER_NOT_FOUND_RE.search(output))


class RendererInvoker:
    """Run the renderer command and classify its outcome."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_RENDERER_COMMAND,
        *,
        runner: Runner | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        if not command:
            raise ValueError("Renderer command must not be empty.")
        self.command = list(command)
        self._runner = runner
        self._emitter = ensure_emitter(emitter)

    def build_argv(
        self,
        config_path: Path | str,
        input_path: Path | str,
        output_path: Path | str,
        *,
        base_url: str | None = None,
    ) -> list[str]:
        argv = [*self.command, "-c", str(config_path), str(input_path), "-o", str(output_path)]
        if base_url:
            argv.extend([BASE_URL_FLAG, base_url])
        return argv

    def invoke(
        self,
        config_path: Path | str,
        input_path: Path | str,
        output_path: Path | str,
        *,
        base_url: str | None = None,
        browser_path: str | None = None,
    ) -> None:
        argv = self.build_argv(config_path, input_path, output_path, base_url=base_url)
        self._emitter.event("renderer_invoke", {"argv": argv})

        runner = self._runner or subprocess.run
        with browser_path_override(browser_path) as env:
            try:
                result = runner(argv, check=False, capture_output=True, text=True, env=env)
            except OSError as exc:
                self._emitter.error(f"Failed to execute renderer '{argv[0]}'", exc)
                raise

        if result.returncode == 0:
            return

        output = "\n".join(part for part in (result.stderr, result.stdout) if part).strip()
        if is_browser_not_found(output):
            error: Exception = BrowserNotFoundError(browser_install_hint())
        else:
            error = RendererExitError(result.returncode, _last_line(output))
        self._emitter.error(f"Renderer failed with exit code {result.returncode}", error)
        raise error


def _last_line(output: str) -> str | None:
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    return lines[-1] if lines else None


def invoke_renderer(
    config_path: Path | str,
    input_path: Path | str,
    output_path: Path | str,
    *,
    base_url: str | None = None,
    browser_path: str | None = None,
    command: Sequence[str] = DEFAULT_RENDERER_COMMAND,
    **kwargs: Any,
) -> None:
    """Convenience wrapper around :class:`RendererInvoker`."""
    RendererInvoker(command, **kwargs).invoke(
        config_path,
        input_path,
        output_path,
        base_url=base_url,
        browser_path=browser_path,
    )


__all__ = [
    "BASE_URL_FLAG",
    "BROWSER_PATH_ENV",
    "DEFAULT_RENDERER_COMMAND",
    "RendererInvoker",
    "browser_install_hint",
    "browser_path_override",
    "invoke_renderer",
    "is_browser_not_found",
]
