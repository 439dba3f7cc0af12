"""Core building blocks of the slide export pipeline."""

from __future__ import annotations

from .config import ExportSettings, load_settings
from .documents import Document, DocumentUri, Workspace, WorkspaceFolder
from .exceptions import DecksmithError
from .formats import ExportType
from .materialize import materialize
from .render_config import RenderConfig, build_config_file
from .themes import resolve_themes
from .workfile import ScopedWorkFile


__all__ = [
    "DecksmithError",
    "Document",
    "DocumentUri",
    "ExportSettings",
    "ExportType",
    "RenderConfig",
    "ScopedWorkFile",
    "Workspace",
    "WorkspaceFolder",
    "build_config_file",
    "load_settings",
    "materialize",
    "resolve_themes",
]
