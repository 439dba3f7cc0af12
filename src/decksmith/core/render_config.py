"""Renderer configuration files."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import json
from pathlib import Path
import tempfile
from typing import Any
import uuid

from .config import ExportSettings
from .diagnostics import DiagnosticEmitter, ensure_emitter
from .documents import Document, Workspace, workspace_folder_for
from .themes import resolve_themes
from .workfile import ScopedWorkFile, release_all, write_new_file


CONFIG_FILE_PREFIX = ".decksmith-cli-conf-"
METADATA_KEY = "decksmith"

ThemeResolver = Callable[..., list[ScopedWorkFile]]


@dataclass(slots=True)
class RenderConfig:
    """Options serialized for the external renderer."""

    allow_local_files: bool = True
    html: bool | None = None
    extension_attrs: bool | None = None
    breaks: bool = True
    theme_files: list[ScopedWorkFile] = field(default_factory=list)

    @property
    def theme_set(self) -> list[str]:
        return [str(work_file.path) for work_file in self.theme_files]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"allowLocalFiles": self.allow_local_files}
        if self.html is not None:
            payload["html"] = self.html
        if self.extension_attrs is not None:
            payload["extensionAttrs"] = self.extension_attrs
        payload["options"] = {"markdown": {"breaks": self.breaks}}
        payload["themeSet"] = self.theme_set
        payload[METADATA_KEY] = {"themeFiles": self.theme_set}
        return payload


def theme_base_folder(document: Document, workspace: Workspace | None) -> Path | None:
    """Return the folder relative theme paths resolve against."""
    folder = workspace_folder_for(workspace, document.uri)
    if folder is not None and folder.uri.is_file:
        return folder.uri.fs_path
    if document.uri.is_file:
        return document.uri.fs_path.parent
    return None


def render_options(
    document: Document,
    settings: ExportSettings,
    workspace: Workspace | None = None,
    *,
    allow_local_files: bool = True,
    resolver: ThemeResolver = resolve_themes,
    emitter: DiagnosticEmitter | None = None,
) -> RenderConfig:
    """Assemble the renderer options, resolving themes along the way."""
    theme_files = resolver(
        settings.themes,
        theme_base_folder(document, workspace),
        timeout=settings.fetch_timeout,
        emitter=emitter,
    )
    return RenderConfig(
        allow_local_files=allow_local_files,
        html=settings.enable_html or None,
        extension_attrs=settings.enable_extension_attrs or None,
        breaks=settings.resolve_breaks(),
        theme_files=theme_files,
    )


def write_config_file(config: RenderConfig, directory: Path | None = None) -> ScopedWorkFile:
    """Serialize ``config``; the work file owns the theme files as children."""
    target_dir = directory or Path(tempfile.gettempdir())
    target = target_dir / f"{CONFIG_FILE_PREFIX}{uuid.uuid4().hex}.json"
    write_new_file(target, json.dumps(config.to_dict()).encode("utf-8"))
    return ScopedWorkFile.owned(target, children=config.theme_files)


def build_config_file(
    document: Document,
    settings: ExportSettings,
    workspace: Workspace | None = None,
    *,
    allow_local_files: bool = True,
    resolver: ThemeResolver = resolve_themes,
    emitter: DiagnosticEmitter | None = None,
) -> ScopedWorkFile:
    """Build the renderer config file for ``document``."""
    emitter = ensure_emitter(emitter)
    config = render_options(
        document,
        settings,
        workspace,
        allow_local_files=allow_local_files,
        resolver=resolver,
        emitter=emitter,
    )
    try:
        return write_config_file(config)
    except Exception:
        release_all(config.theme_files)
        raise


__all__ = [
    "CONFIG_FILE_PREFIX",
    "METADATA_KEY",
    "RenderConfig",
    "build_config_file",
    "render_options",
    "theme_base_folder",
    "write_config_file",
]
