from __future__ import annotations

import logging
from pathlib import Path
import tempfile
import threading

import pytest
import requests

from decksmith.core import themes as themes_mod
from decksmith.core.exceptions import ThemeResolutionError
from decksmith.core.themes import (
    THEME_FILE_PREFIX,
    ThemeKind,
    classify_theme,
    resolve_themes,
)


@pytest.fixture
def temp_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    root = tmp_path / "os-tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


class _Recorder:
    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.events: list[tuple[str, dict]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def event(self, name: str, payload) -> None:
        self.events.append((name, dict(payload)))


@pytest.mark.parametrize(
    ("reference", "kind", "location"),
    [
        ("themes/corp.css", ThemeKind.FILE, "themes/corp.css"),
        ("/abs/theme.css", ThemeKind.FILE, "/abs/theme.css"),
        ("C:\\themes\\corp.css", ThemeKind.FILE, "C:\\themes\\corp.css"),
        ("file:///srv/themes/a%20b.css", ThemeKind.FILE, "/srv/themes/a b.css"),
        ("https://example.com/dark.css", ThemeKind.REMOTE, "https://example.com/dark.css"),
        ("HTTP://example.com/x.css", ThemeKind.REMOTE, "HTTP://example.com/x.css"),
    ],
)
def test_classify_theme(reference: str, kind: ThemeKind, location: str) -> None:
    classified = classify_theme(reference)

    assert classified.kind is kind
    assert classified.location == location


def test_classify_rejects_unknown_scheme() -> None:
    with pytest.raises(ThemeResolutionError):
        classify_theme("ftp://example.com/theme.css")


def test_local_themes_are_borrowed(tmp_path: Path) -> None:
    theme = tmp_path / "themes" / "corp.css"
    theme.parent.mkdir()
    theme.write_text("/* @theme corp */", encoding="utf-8")

    work_files = resolve_themes(["themes/corp.css"], tmp_path)

    assert [work_file.path for work_file in work_files] == [theme]
    work_files[0].release()
    assert theme.exists()


def test_remote_theme_written_to_temp_and_released(temp_root: Path) -> None:
    recorder = _Recorder()

    def fetcher(url: str, timeout: float) -> bytes:
        assert timeout == 5.0
        return b"/* @theme remote */"

    work_files = resolve_themes(
        ["https://example.com/remote.css"], None, fetcher=fetcher, timeout=5.0, emitter=recorder
    )

    assert len(work_files) == 1
    path = work_files[0].path
    assert path.parent == temp_root
    assert path.name.startswith(THEME_FILE_PREFIX)
    assert path.read_bytes() == b"/* @theme remote */"
    assert recorder.events == [("theme_fetch", {"url": "https://example.com/remote.css"})]

    work_files[0].release()
    assert not path.exists()


def test_one_failing_fetch_is_dropped_and_logged(
    tmp_path: Path, temp_root: Path, caplog: pytest.LogCaptureFixture
) -> None:
    local = tmp_path / "local.css"
    local.write_text("/* local */", encoding="utf-8")

    def fetcher(url: str, timeout: float) -> bytes:
        if "broken" in url:
            raise requests.ConnectionError("connection refused")
        return b"/* ok */"

    references = [
        "local.css",
        "https://example.com/broken.css",
        "https://example.com/ok.css",
    ]
    with caplog.at_level(logging.WARNING):
        work_files = resolve_themes(references, tmp_path, fetcher=fetcher)

    assert len(work_files) == len(references) - 1
    assert work_files[0].path == local
    assert work_files[1].path.read_bytes() == b"/* ok */"
    assert "broken.css" in caplog.text
    for work_file in work_files:
        work_file.release()


def test_missing_and_unresolvable_themes_are_dropped(tmp_path: Path) -> None:
    recorder = _Recorder()

    work_files = resolve_themes(["missing.css", "ftp://example.com/a.css"], tmp_path, emitter=recorder)
    assert work_files == []
    assert len(recorder.warnings) == 2

    assert resolve_themes(["relative.css"], None, emitter=recorder) == []


def test_remote_fetches_run_concurrently(temp_root: Path) -> None:
    barrier = threading.Barrier(2, timeout=5)

    def fetcher(url: str, timeout: float) -> bytes:
        barrier.wait()
        return url.encode()

    work_files = resolve_themes(
        ["https://example.com/a.css", "https://example.com/b.css"], None, fetcher=fetcher
    )

    assert [work_file.path.read_bytes() for work_file in work_files] == [
        b"https://example.com/a.css",
        b"https://example.com/b.css",
    ]
    for work_file in work_files:
        work_file.release()


def test_fetch_remote_theme_raises_for_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    class _Response:
        content = b""

        def raise_for_status(self) -> None:
            raise requests.HTTPError("404 Client Error")

    monkeypatch.setattr(themes_mod.requests, "get", lambda url, timeout: _Response())

    with pytest.raises(requests.HTTPError):
        themes_mod.fetch_remote_theme("https://example.com/missing.css", 1.0)


def test_remote_theme_partial_write_leaves_no_file(fill_disk, temp_root: Path) -> None:
    fill_disk(temp_root)

    work_files = resolve_themes(
        ["https://example.com/remote.css"], None, fetcher=lambda url, timeout: b"/* remote */"
    )

    assert work_files == []
    assert list(temp_root.iterdir()) == []
