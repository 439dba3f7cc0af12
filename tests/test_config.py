from __future__ import annotations

from pathlib import Path

import pytest

from decksmith.core.config import ExportSettings, find_settings_file, load_settings
from decksmith.core.exceptions import SettingsError


def test_defaults_without_settings_file(tmp_path: Path) -> None:
    settings = load_settings(search_dirs=[tmp_path])

    assert settings == ExportSettings()
    assert settings.breaks == "on"
    assert settings.export_type == "pdf"
    assert settings.renderer_argv == ["marp"]


def test_load_settings_from_search_dirs(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (second / ".decksmith.yml").write_text(
        "breaks: inherit\n"
        "export_type: jpg\n"
        "themes:\n  - themes/corp.css\n"
        "renderer_command: npx @marp-team/marp-cli\n",
        encoding="utf-8",
    )

    assert find_settings_file([first, second]) == second / ".decksmith.yml"
    settings = load_settings(search_dirs=[first, second])

    assert settings.breaks == "inherit"
    assert settings.export_type == "jpeg"
    assert settings.themes == ["themes/corp.css"]
    assert settings.renderer_argv == ["npx", "@marp-team/marp-cli"]


@pytest.mark.parametrize(
    "content",
    [
        "unknown_key: 1\n",
        "breaks: sometimes\n",
        "export_type: gif\n",
        "- just\n- a list\n",
        "renderer_command: '  '\n",
        "themes: [unterminated\n",
    ],
)
def test_invalid_settings_raise(tmp_path: Path, content: str) -> None:
    path = tmp_path / "decksmith.yml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SettingsError):
        load_settings(path)


def test_empty_settings_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "decksmith.yml"
    path.write_text("", encoding="utf-8")

    assert load_settings(path) == ExportSettings()


def test_merged_ignores_none_overrides() -> None:
    settings = ExportSettings(chrome_path="/opt/chrome", enable_html=True)

    merged = settings.merged({"chrome_path": None, "enable_html": False, "breaks": "off"})

    assert merged.chrome_path == "/opt/chrome"
    assert merged.enable_html is False
    assert merged.resolve_breaks() is False
    with pytest.raises(SettingsError):
        settings.merged({"breaks": "maybe"})
