from __future__ import annotations

import json
from pathlib import Path
import tempfile

import pytest

from decksmith.core.config import ExportSettings
from decksmith.core.documents import Document, DocumentUri, Workspace, WorkspaceFolder
from decksmith.core.exceptions import ReleaseError
from decksmith.core.render_config import (
    CONFIG_FILE_PREFIX,
    build_config_file,
    render_options,
    theme_base_folder,
)
from decksmith.core.workfile import ScopedWorkFile


@pytest.fixture
def temp_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    root = tmp_path / "os-tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


def _document(tmp_path: Path) -> Document:
    source = tmp_path / "deck.md"
    source.write_text("# Deck", encoding="utf-8")
    return Document.from_path(source)


def _no_themes(references, base_folder, **kwargs):
    return []


def test_config_file_contents(tmp_path: Path, temp_root: Path) -> None:
    settings = ExportSettings(enable_html=True, breaks="off")
    theme = tmp_path / "corp.css"
    theme.write_text("/* corp */", encoding="utf-8")

    def resolver(references, base_folder, **kwargs):
        return [ScopedWorkFile.borrowed(theme)]

    work_file = build_config_file(_document(tmp_path), settings, resolver=resolver)

    assert work_file.path.parent == temp_root
    assert work_file.path.name.startswith(CONFIG_FILE_PREFIX)
    payload = json.loads(work_file.path.read_text(encoding="utf-8"))
    assert payload == {
        "allowLocalFiles": True,
        "html": True,
        "options": {"markdown": {"breaks": False}},
        "themeSet": [str(theme)],
        "decksmith": {"themeFiles": [str(theme)]},
    }
    work_file.release()
    assert not work_file.path.exists()
    assert theme.exists()


@pytest.mark.parametrize(
    ("mode", "inherited", "expected"),
    [("on", False, True), ("off", True, False), ("inherit", True, True), ("inherit", False, False)],
)
def test_breaks_resolution(tmp_path: Path, mode: str, inherited: bool, expected: bool) -> None:
    settings = ExportSettings(breaks=mode, markdown_preview_breaks=inherited)

    config = render_options(_document(tmp_path), settings, resolver=_no_themes)

    assert config.breaks is expected
    assert config.html is None
    assert config.extension_attrs is None


def test_allow_local_files_flag(tmp_path: Path) -> None:
    config = render_options(
        _document(tmp_path), ExportSettings(), allow_local_files=False, resolver=_no_themes
    )

    assert config.to_dict()["allowLocalFiles"] is False


def test_theme_base_folder_prefers_workspace(tmp_path: Path) -> None:
    nested = tmp_path / "talks"
    nested.mkdir()
    source = nested / "deck.md"
    source.write_text("# Deck", encoding="utf-8")
    document = Document.from_path(source)
    workspace = Workspace.of([WorkspaceFolder.from_directory(tmp_path)])

    assert theme_base_folder(document, workspace) == tmp_path.resolve()
    assert theme_base_folder(document, None) == nested.resolve()
    assert theme_base_folder(Document(DocumentUri.untitled(), ""), None) is None


def test_release_deletes_config_and_every_theme(tmp_path: Path, temp_root: Path) -> None:
    remote_paths = [temp_root / "one.css", temp_root / "two.css"]
    for path in remote_paths:
        path.write_text("/* remote */", encoding="utf-8")

    def _locked() -> None:
        raise PermissionError("theme locked")

    def resolver(references, base_folder, **kwargs):
        return [
            ScopedWorkFile.owned(remote_paths[0]),
            ScopedWorkFile(temp_root / "locked.css", _locked),
            ScopedWorkFile.owned(remote_paths[1]),
        ]

    work_file = build_config_file(_document(tmp_path), ExportSettings(), resolver=resolver)

    with pytest.raises(ReleaseError) as excinfo:
        work_file.release()

    assert len(excinfo.value.errors) == 1
    assert not work_file.path.exists()
    assert not any(path.exists() for path in remote_paths)


def test_settings_themes_are_resolved_against_workspace(tmp_path: Path, temp_root: Path) -> None:
    theme = tmp_path / "themes" / "corp.css"
    theme.parent.mkdir()
    theme.write_text("/* @theme corp */", encoding="utf-8")
    document = _document(tmp_path)
    workspace = Workspace.of([WorkspaceFolder.from_directory(tmp_path)])
    settings = ExportSettings(themes=["themes/corp.css", "themes/missing.css"])

    work_file = build_config_file(document, settings, workspace)

    payload = json.loads(work_file.path.read_text(encoding="utf-8"))
    assert payload["themeSet"] == [str(theme.resolve())]
    work_file.release()


def test_failed_config_write_cleans_up_config_and_themes(
    fill_disk, tmp_path: Path, temp_root: Path
) -> None:
    fetched = tmp_path / "fetched"
    fetched.mkdir()
    remote = fetched / "remote.css"
    remote.write_text("/* remote */", encoding="utf-8")

    def resolver(references, base_folder, **kwargs):
        return [ScopedWorkFile.owned(remote)]

    fill_disk(temp_root)

    with pytest.raises(OSError):
        build_config_file(_document(tmp_path), ExportSettings(), resolver=resolver)

    assert list(temp_root.iterdir()) == []
    assert not remote.exists()
