"""Auxiliary helpers used by CLI commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import sys
from typing import TextIO
import zipfile

import typer

from decksmith.core.documents import (
    Document,
    DocumentUri,
    Workspace,
    WorkspaceFolder,
    language_for,
)


STDIN_SENTINEL = "-"


@dataclass(slots=True)
class LoadedInput:
    """Document and workspace resolved from command-line arguments."""

    document: Document
    workspace: Workspace | None
    output_dir: Path
    search_dirs: list[Path] = field(default_factory=list)


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def _load_stdin(stream: TextIO, workspace_dir: Path | None) -> LoadedInput:
    text = stream.read()
    document = Document(uri=DocumentUri.untitled(), text=text, is_dirty=True)
    search_dirs = [workspace_dir] if workspace_dir else []
    search_dirs.append(Path.cwd())
    return LoadedInput(document, None, Path.cwd(), search_dirs)


def _load_archive_member(member: str, archive: Path) -> LoadedInput:
    try:
        folder = WorkspaceFolder.from_archive(archive)
    except zipfile.BadZipFile as exc:
        raise typer.BadParameter(f"'{archive}' is not a valid zip archive.") from exc

    relative = member.strip().lstrip("/")
    try:
        raw = folder.fs.read_bytes(relative)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"'{relative}' does not exist in '{archive.name}'.") from exc

    document = Document(
        uri=folder.uri.with_path(f"/{relative}"),
        text=raw.decode("utf-8"),
        language_id=language_for(relative),
    )
    return LoadedInput(document, Workspace.of([folder]), archive.parent, [archive.parent])


def _load_file(path_arg: str, workspace_dir: Path | None) -> LoadedInput:
    path = Path(path_arg).expanduser().resolve()
    if not path.is_file():
        raise typer.BadParameter(f"Input file '{path_arg}' does not exist.")
    document = Document.from_path(path)

    root = workspace_dir
    if root is None and _is_within(path, Path.cwd().resolve()):
        root = Path.cwd().resolve()
    workspace = Workspace.of([WorkspaceFolder.from_directory(root)]) if root else None

    search_dirs = [root] if root else []
    search_dirs.append(path.parent)
    return LoadedInput(document, workspace, path.parent, search_dirs)


def load_input(
    input_arg: str,
    workspace_path: Path | None = None,
    *,
    stdin: TextIO | None = None,
) -> LoadedInput:
    """Resolve the document to export and the workspace it belongs to."""
    archive: Path | None = None
    workspace_dir: Path | None = None
    if workspace_path is not None:
        if workspace_path.is_dir():
            workspace_dir = workspace_path
        elif workspace_path.suffix.lower() == ".zip":
            archive = workspace_path
        else:
            raise typer.BadParameter("Workspace must be a directory or a .zip archive.")

    if input_arg == STDIN_SENTINEL:
        return _load_stdin(stdin or sys.stdin, workspace_dir)
    if archive is not None:
        return _load_archive_member(input_arg, archive)
    return _load_file(input_arg, workspace_dir)


__all__ = ["STDIN_SENTINEL", "LoadedInput", "load_input"]
