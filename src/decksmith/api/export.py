"""Export orchestration: stage a document, run the renderer, clean up."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from decksmith.adapters.proxy import WorkspaceProxyServer, create_workspace_proxy_server
from decksmith.adapters.renderer import RendererInvoker
from decksmith.core.config import ExportSettings
from decksmith.core.diagnostics import DiagnosticEmitter, ensure_emitter
from decksmith.core.documents import (
    FILE_SCHEME,
    UNTITLED_SCHEME,
    Document,
    Workspace,
    workspace_folder_for,
)
from decksmith.core.exceptions import ExportError, ReleaseError, RendererError
from decksmith.core.formats import ExportType
from decksmith.core.materialize import materialize
from decksmith.core.render_config import build_config_file
from decksmith.core.workfile import ScopedWorkFile


_LOCAL_SCHEMES = {FILE_SCHEME, UNTITLED_SCHEME}

ProxyFactory = Callable[..., WorkspaceProxyServer]
Opener = Callable[[Path], object]


@dataclass(slots=True)
class ExportResult:
    """Outcome of a successful export."""

    output: Path
    export_type: ExportType
    base_url: str | None = None

    @property
    def proxied(self) -> bool:
        return self.base_url is not None


def should_use_proxy(document: Document, export_type: ExportType) -> bool:
    """Decide whether the renderer needs the workspace proxy for ``document``.

    Documents on the local file system (or untitled ones) are left to the
    renderer's own file access; only browser-backed formats fetch resources.
    """
    return export_type.requires_browser and document.uri.scheme not in _LOCAL_SCHEMES


def default_output_path(
    document: Document, export_type: ExportType, directory: Path | None = None
) -> Path:
    """Return the document path with the export type's extension."""
    stem = PurePosixPath(document.uri.path).stem or "slides"
    if directory is None:
        directory = document.uri.fs_path.parent if document.uri.is_file else Path.cwd()
    return directory / f"{stem}{export_type.default_suffix}"


def format_export_failure(exc: BaseException) -> str:
    """Return the single user-facing message for a failed export."""
    if isinstance(exc, RendererError):
        return f"Failure to export. {exc}"
    return f"Failure to export: [{type(exc).__name__}] {exc}"


def _release_reporting(work_file: ScopedWorkFile, emitter: DiagnosticEmitter) -> None:
    try:
        work_file.release()
    except ReleaseError as exc:
        emitter.warning(f"Failed to clean up {work_file.path}: {exc}", exc)


def export_document(
    document: Document,
    output: Path | str,
    settings: ExportSettings | None = None,
    workspace: Workspace | None = None,
    *,
    invoker: RendererInvoker | None = None,
    opener: Opener | None = None,
    proxy_factory: ProxyFactory = create_workspace_proxy_server,
    emitter: DiagnosticEmitter | None = None,
) -> ExportResult:
    """Export ``document`` to ``output`` through the external renderer.

    Every work file and the proxy server are released before this function
    returns or raises, in reverse order of creation. Materialization and proxy
    start-up failures propagate unchanged; failures while building the config
    or running the renderer are wrapped into :class:`ExportError`.
    """
    emitter = ensure_emitter(emitter)
    settings = settings or ExportSettings()
    target = Path(output).expanduser().resolve()
    export_type = ExportType.from_path(target)
    invoker = invoker or RendererInvoker(settings.renderer_argv, emitter=emitter)
    base_url: str | None = None

    with ExitStack() as stack:
        if should_use_proxy(document, export_type):
            folder = workspace_folder_for(workspace, document.uri)
            if folder is not None:
                proxy = proxy_factory(folder, emitter=emitter)
                stack.callback(proxy.dispose)
                base_url = proxy.base_url_for(document.uri)

        work_file = materialize(document, workspace, emitter=emitter)
        stack.callback(_release_reporting, work_file, emitter)

        try:
            config_file = build_config_file(
                document,
                settings,
                workspace,
                allow_local_files=base_url is None,
                emitter=emitter,
            )
            stack.callback(_release_reporting, config_file, emitter)
            invoker.invoke(
                config_file.path,
                work_file.path,
                target,
                base_url=base_url,
                browser_path=settings.chrome_path or None,
            )
        except Exception as exc:
            raise ExportError(format_export_failure(exc)) from exc

    if opener is not None:
        opener(target)
    return ExportResult(output=target, export_type=export_type, base_url=base_url)


__all__ = [
    "ExportResult",
    "ExportType",
    "default_output_path",
    "export_document",
    "format_export_failure",
    "should_use_proxy",
]
