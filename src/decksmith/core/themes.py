"""Resolve configured themes into files the renderer can load."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import re
import tempfile
from urllib.parse import unquote, urlparse
import uuid

import requests

from .diagnostics import DiagnosticEmitter, ensure_emitter
from .exceptions import ThemeResolutionError
from .workfile import ScopedWorkFile, write_new_file


THEME_FILE_PREFIX = ".decksmith-cli-theme-"
MAX_FETCH_WORKERS = 8

_SCHEME_RE = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]+):")
_REMOTE_SCHEMES = {"http", "https"}


class ThemeKind(str, Enum):
    FILE = "file"
    REMOTE = "remote"


@dataclass(frozen=True, slots=True)
class ThemeReference:
    """Configured theme classified by its location prefix."""

    kind: ThemeKind
    location: str


@dataclass(frozen=True, slots=True)
class ResolvedTheme:
    """Theme ready to be handed to the renderer."""

    kind: ThemeKind
    path: Path
    content: bytes | None = None


Fetcher = Callable[[str, float], bytes]


def classify_theme(reference: str) -> ThemeReference:
    """Classify a theme by URL scheme; filesystem existence is not consulted."""
    value = reference.strip()
    if not value:
        raise ThemeResolutionError("Empty theme reference.")
    match = _SCHEME_RE.match(value)
    if match is None:
        return ThemeReference(ThemeKind.FILE, value)
    scheme = match.group("scheme").lower()
    if scheme in _REMOTE_SCHEMES:
        return ThemeReference(ThemeKind.REMOTE, value)
    if scheme == "file":
        return ThemeReference(ThemeKind.FILE, unquote(urlparse(value).path))
    raise ThemeResolutionError(f"Unsupported theme scheme '{scheme}' in '{reference}'.")


def fetch_remote_theme(url: str, timeout: float) -> bytes:
    """Download a remote stylesheet."""
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def _resolve_local(reference: ThemeReference, base_folder: Path | None) -> ResolvedTheme:
    path = Path(reference.location).expanduser()
    if not path.is_absolute():
        if base_folder is None:
            raise ThemeResolutionError(
                f"Cannot resolve relative theme '{reference.location}' without a base folder."
            )
        path = base_folder / path
    if not path.is_file():
        raise ThemeResolutionError(f"Theme file '{path}' does not exist.")
    return ResolvedTheme(ThemeKind.FILE, path)


def _resolve_remote(reference: ThemeReference, fetcher: Fetcher, timeout: float) -> ResolvedTheme:
    try:
        content = fetcher(reference.location, timeout)
    except requests.RequestException as exc:
        raise ThemeResolutionError(f"Failed to fetch theme '{reference.location}': {exc}") from exc
    target = Path(tempfile.gettempdir()) / f"{THEME_FILE_PREFIX}{uuid.uuid4().hex}.css"
    write_new_file(target, content)
    return ResolvedTheme(ThemeKind.REMOTE, target, content)


def _to_work_file(theme: ResolvedTheme) -> ScopedWorkFile:
    if theme.kind is ThemeKind.REMOTE:
        return ScopedWorkFile.owned(theme.path)
    return ScopedWorkFile.borrowed(theme.path)


def resolve_themes(
    references: Sequence[str],
    base_folder: Path | None,
    *,
    fetcher: Fetcher = fetch_remote_theme,
    timeout: float = 30.0,
    emitter: DiagnosticEmitter | None = None,
) -> list[ScopedWorkFile]:
    """Resolve every theme, dropping (and reporting) the ones that fail.

    Remote themes are fetched concurrently. The result preserves the order of
    ``references`` minus the failed entries.
    """
    emitter = ensure_emitter(emitter)
    if not references:
        return []

    def _resolve(reference: str) -> ResolvedTheme:
        classified = classify_theme(reference)
        if classified.kind is ThemeKind.REMOTE:
            emitter.event("theme_fetch", {"url": classified.location})
            return _resolve_remote(classified, fetcher, timeout)
        return _resolve_local(classified, base_folder)

    work_files: list[ScopedWorkFile] = []
    workers = max(1, min(MAX_FETCH_WORKERS, len(references)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="decksmith-theme") as pool:
        futures = [(reference, pool.submit(_resolve, reference)) for reference in references]
        for reference, future in futures:
            try:
                theme = future.result()
            except Exception as exc:
                emitter.warning(f"Skipping theme '{reference}': {exc}", exc)
                continue
            work_files.append(_to_work_file(theme))
    return work_files


__all__ = [
    "THEME_FILE_PREFIX",
    "ResolvedTheme",
    "ThemeKind",
    "ThemeReference",
    "classify_theme",
    "fetch_remote_theme",
    "resolve_themes",
]
