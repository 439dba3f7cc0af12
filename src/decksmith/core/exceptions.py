"""Exception hierarchy for the slide export pipeline."""

from __future__ import annotations

from collections.abc import Sequence


class DecksmithError(RuntimeError):
    """Base exception for export failures."""


class MaterializationError(DecksmithError):
    """Raised when a document cannot be written to any work file location."""


class ReleaseError(DecksmithError):
    """Raised when one or more work file releases failed."""

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self.errors = list(errors)
        details = "; ".join(f"{type(err).__name__}: {err}" for err in self.errors)
        noun = "release" if len(self.errors) == 1 else "releases"
        super().__init__(f"{len(self.errors)} work file {noun} failed: {details}")


class ThemeResolutionError(DecksmithError):
    """Raised when a configured theme cannot be classified or fetched."""


class SettingsError(DecksmithError):
    """Raised when export settings cannot be loaded or validated."""


class ProxyServerError(DecksmithError):
    """Raised when the workspace proxy server cannot be started."""


class UnsupportedExportTypeError(DecksmithError):
    """Raised when the output path does not map onto a known export type."""


class RendererError(DecksmithError):
    """Base class for classified renderer failures."""


class BrowserNotFoundError(RendererError):
    """Raised when the renderer cannot locate a headless browser."""


class RendererExitError(RendererError):
    """Raised when the renderer exits with a non-zero status."""

    def __init__(self, exit_code: int, detail: str | None = None) -> None:
        self.exit_code = exit_code
        self.detail = detail
        message = f"Renderer exited with unexpected error (exit code {exit_code})."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class ExportError(DecksmithError):
    """User-facing export failure carrying a single readable message."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "BrowserNotFoundError",
    "DecksmithError",
    "ExportError",
    "MaterializationError",
    "ProxyServerError",
    "ReleaseError",
    "RendererError",
    "RendererExitError",
    "SettingsError",
    "ThemeResolutionError",
    "UnsupportedExportTypeError",
    "exception_hint",
    "exception_messages",
]
