"""Documents, workspace folders, and the file systems backing them."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
import posixpath
from typing import Protocol, runtime_checkable
import zipfile


FILE_SCHEME = "file"
UNTITLED_SCHEME = "untitled"

_MARKDOWN_SUFFIXES = {
    ".md",
    ".markdown",
    ".mdown",
    ".mkd",
    ".mkdown",
    ".mdtxt",
    ".marp",
}


@dataclass(frozen=True, slots=True)
class DocumentUri:
    """Scheme-qualified document location."""

    scheme: str
    path: str

    @classmethod
    def file(cls, path: Path | str) -> DocumentUri:
        resolved = Path(path).expanduser().resolve()
        return cls(FILE_SCHEME, resolved.as_posix())

    @classmethod
    def untitled(cls, name: str = "Untitled-1") -> DocumentUri:
        return cls(UNTITLED_SCHEME, name)

    @property
    def fs_path(self) -> Path:
        """Return the path as a local filesystem path."""
        return Path(self.path)

    @property
    def is_file(self) -> bool:
        return self.scheme == FILE_SCHEME

    def with_path(self, path: str) -> DocumentUri:
        return DocumentUri(self.scheme, path)

    def __str__(self) -> str:
        return f"{self.scheme}:{self.path}"


def language_for(path: str | Path) -> str:
    """Return the language identifier inferred from a file suffix."""
    suffix = PurePosixPath(str(path)).suffix.lower()
    return "markdown" if suffix in _MARKDOWN_SUFFIXES else "plaintext"


@dataclass(slots=True)
class Document:
    """Text document handed to the export pipeline."""

    uri: DocumentUri
    text: str
    is_dirty: bool = False
    language_id: str = "markdown"

    @classmethod
    def from_path(cls, path: Path | str, *, encoding: str = "utf-8") -> Document:
        uri = DocumentUri.file(path)
        text = uri.fs_path.read_text(encoding=encoding)
        return cls(uri=uri, text=text, language_id=language_for(uri.path))

    @property
    def is_markdown(self) -> bool:
        return self.language_id == "markdown"


@runtime_checkable
class WorkspaceFileSystem(Protocol):
    """Read-only access to files addressed relative to a workspace root."""

    def read_bytes(self, relative: str) -> bytes: ...


def _normalise_relative(relative: str) -> str:
    cleaned = posixpath.normpath("/" + relative.lstrip("/")).lstrip("/")
    return "" if cleaned == "." else cleaned


class LocalFileSystem:
    """Workspace file system backed by a local directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def read_bytes(self, relative: str) -> bytes:
        target = (self.root / _normalise_relative(relative)).resolve()
        if target != self.root and self.root not in target.parents:
            raise FileNotFoundError(relative)
        if not target.is_file():
            raise FileNotFoundError(relative)
        return target.read_bytes()


class ZipFileSystem:
    """Workspace file system reading members of a zip archive."""

    def __init__(self, archive: Path | str) -> None:
        self.archive = Path(archive).resolve()
        with zipfile.ZipFile(self.archive) as handle:
            self._members = {
                name.rstrip("/"): name for name in handle.namelist() if not name.endswith("/")
            }

    @property
    def members(self) -> list[str]:
        return sorted(self._members)

    def read_bytes(self, relative: str) -> bytes:
        member = self._members.get(_normalise_relative(relative))
        if member is None:
            raise FileNotFoundError(relative)
        with zipfile.ZipFile(self.archive) as handle:
            return handle.read(member)


class MemoryFileSystem:
    """Workspace file system holding its entries in memory."""

    def __init__(self, entries: Mapping[str, bytes | str] | None = None) -> None:
        self._entries: dict[str, bytes] = {}
        for name, content in (entries or {}).items():
            self.write(name, content)

    def write(self, relative: str, content: bytes | str) -> None:
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        self._entries[_normalise_relative(relative)] = data

    def read_bytes(self, relative: str) -> bytes:
        try:
            return self._entries[_normalise_relative(relative)]
        except KeyError as exc:
            raise FileNotFoundError(relative) from exc


@dataclass(slots=True)
class WorkspaceFolder:
    """Root directory associated with a project."""

    name: str
    uri: DocumentUri
    fs: WorkspaceFileSystem

    @classmethod
    def from_directory(cls, directory: Path | str, *, name: str | None = None) -> WorkspaceFolder:
        root = Path(directory).expanduser().resolve()
        return cls(name=name or root.name, uri=DocumentUri.file(root), fs=LocalFileSystem(root))

    @classmethod
    def from_archive(cls, archive: Path | str, *, scheme: str = "zip") -> WorkspaceFolder:
        path = Path(archive).expanduser().resolve()
        return cls(name=path.stem, uri=DocumentUri(scheme, "/"), fs=ZipFileSystem(path))

    def relative_path(self, uri: DocumentUri) -> str | None:
        """Return ``uri`` relative to this folder, or ``None`` when outside."""
        if uri.scheme != self.uri.scheme:
            return None
        root = self.uri.path.rstrip("/")
        candidate = posixpath.normpath(uri.path) if uri.path else uri.path
        if candidate == root or (root == "" and candidate == "/"):
            return ""
        prefix = f"{root}/"
        if not candidate.startswith(prefix):
            return None
        return candidate[len(prefix) :]


@dataclass(slots=True)
class Workspace:
    """Set of workspace folders known to the host environment."""

    folders: Sequence[WorkspaceFolder] = field(default_factory=list)

    @classmethod
    def of(cls, folders: Iterable[WorkspaceFolder]) -> Workspace:
        return cls(list(folders))

    def get_workspace_folder(self, uri: DocumentUri) -> WorkspaceFolder | None:
        """Return the innermost folder containing ``uri``."""
        best: WorkspaceFolder | None = None
        for folder in self.folders:
            if folder.relative_path(uri) is None:
                continue
            if best is None or len(folder.uri.path) > len(best.uri.path):
                best = folder
        return best


def workspace_folder_for(
    workspace: Workspace | None, uri: DocumentUri
) -> WorkspaceFolder | None:
    """Look up the folder for ``uri`` when a workspace is available."""
    if workspace is None:
        return None
    return workspace.get_workspace_folder(uri)


__all__ = [
    "FILE_SCHEME",
    "UNTITLED_SCHEME",
    "Document",
    "DocumentUri",
    "LocalFileSystem",
    "MemoryFileSystem",
    "Workspace",
    "WorkspaceFileSystem",
    "WorkspaceFolder",
    "ZipFileSystem",
    "language_for",
    "workspace_folder_for",
]
