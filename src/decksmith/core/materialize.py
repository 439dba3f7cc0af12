"""Materialize documents into files the external renderer can read."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
import logging
from pathlib import Path
import tempfile
import uuid

from .diagnostics import DiagnosticEmitter, ensure_emitter
from .documents import UNTITLED_SCHEME, Document, Workspace, workspace_folder_for
from .exceptions import MaterializationError
from .workfile import ScopedWorkFile, write_new_file


logger = logging.getLogger(__name__)

WORK_FILE_PREFIX = ".decksmith-tmp-"


@dataclass(frozen=True, slots=True)
class TempFileStrategy:
    """Candidate directory for a temporary copy of a document."""

    name: str
    locate: Callable[[Document, Workspace | None], Path | None]


def _same_directory(document: Document, _workspace: Workspace | None) -> Path | None:
    uri = document.uri
    if uri.is_file or uri.scheme == UNTITLED_SCHEME:
        path = uri.fs_path
        if path.is_absolute():
            return path.parent
    return None


def _workspace_root(document: Document, workspace: Workspace | None) -> Path | None:
    folder = workspace_folder_for(workspace, document.uri)
    if folder is not None and folder.uri.is_file:
        return folder.uri.fs_path
    return None


def _temp_directory(_document: Document, _workspace: Workspace | None) -> Path | None:
    return Path(tempfile.gettempdir())


DEFAULT_STRATEGIES: tuple[TempFileStrategy, ...] = (
    TempFileStrategy("same-directory", _same_directory),
    TempFileStrategy("workspace-root", _workspace_root),
    TempFileStrategy("temp-directory", _temp_directory),
)


def work_file_name() -> str:
    """Return a collision-resistant name for a temporary document copy."""
    return f"{WORK_FILE_PREFIX}{uuid.uuid4().hex}.md"


def materialize(
    document: Document,
    workspace: Workspace | None = None,
    *,
    strategies: Sequence[TempFileStrategy] = DEFAULT_STRATEGIES,
    emitter: DiagnosticEmitter | None = None,
) -> ScopedWorkFile:
    """Return a work file holding the current text of ``document``.

    Clean documents backed by a real file are used in place. Anything else is
    written to the first writable candidate directory; the returned work file
    deletes that copy on release.
    """
    emitter = ensure_emitter(emitter)

    if document.uri.is_file and not document.is_dirty:
        return ScopedWorkFile.borrowed(document.uri.fs_path)

    try:
        data = document.text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise MaterializationError(f"Document {document.uri} cannot be encoded as UTF-8.") from exc
    filename = work_file_name()
    last_error: OSError | None = None

    for strategy in strategies:
        directory = strategy.locate(document, workspace)
        if directory is None:
            continue
        target = directory / filename
        try:
            write_new_file(target, data)
        except OSError as exc:
            last_error = exc
            logger.debug("Skipping %s work file at %s: %s", strategy.name, target, exc)
            continue
        emitter.event("work_file", {"path": str(target), "strategy": strategy.name})
        return ScopedWorkFile.owned(target)

    message = f"Unable to write a temporary copy of {document.uri} to any location."
    if last_error is None:
        raise MaterializationError(message)
    raise MaterializationError(message) from last_error


__all__ = [
    "DEFAULT_STRATEGIES",
    "WORK_FILE_PREFIX",
    "TempFileStrategy",
    "materialize",
    "work_file_name",
]
