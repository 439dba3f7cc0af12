"""Primary public API for decksmith."""

from __future__ import annotations

from decksmith.adapters.proxy import WorkspaceProxyServer, create_workspace_proxy_server
from decksmith.adapters.renderer import RendererInvoker, browser_path_override
from decksmith.api import ExportResult, default_output_path, export_document
from decksmith.core.config import ExportSettings, load_settings
from decksmith.core.documents import (
    Document,
    DocumentUri,
    LocalFileSystem,
    MemoryFileSystem,
    Workspace,
    WorkspaceFolder,
    ZipFileSystem,
)
from decksmith.core.exceptions import (
    BrowserNotFoundError,
    DecksmithError,
    ExportError,
    MaterializationError,
    ProxyServerError,
    ReleaseError,
    RendererError,
    RendererExitError,
)
from decksmith.core.formats import ExportType
from decksmith.core.materialize import materialize
from decksmith.core.render_config import RenderConfig, build_config_file
from decksmith.core.themes import resolve_themes
from decksmith.core.workfile import ScopedWorkFile
from decksmith.version import get_version


__version__ = get_version()

__all__ = [
    "BrowserNotFoundError",
    "DecksmithError",
    "Document",
    "DocumentUri",
    "ExportError",
    "ExportResult",
    "ExportSettings",
    "ExportType",
    "LocalFileSystem",
    "MaterializationError",
    "MemoryFileSystem",
    "ProxyServerError",
    "ReleaseError",
    "RenderConfig",
    "RendererError",
    "RendererExitError",
    "RendererInvoker",
    "ScopedWorkFile",
    "Workspace",
    "WorkspaceFolder",
    "WorkspaceProxyServer",
    "ZipFileSystem",
    "__version__",
    "browser_path_override",
    "build_config_file",
    "create_workspace_proxy_server",
    "default_output_path",
    "export_document",
    "get_version",
    "load_settings",
    "materialize",
    "resolve_themes",
]
