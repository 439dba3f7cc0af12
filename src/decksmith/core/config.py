"""Export settings consumed by the slide export pipeline.

ExportSettings

`breaks` (`"on" | "off" | "inherit"`)
: How line-breaks are rendered in slide Markdown. `inherit` follows
  `markdown_preview_breaks`, `on` renders every newline as `<br>`.

`chrome_path` (`str`)
: Custom path to a Chrome or Chromium-based browser used for PDF, PPTX and
  image exports. When empty the current `CHROME_PATH` environment value is kept
  and the renderer looks for an installed browser itself.

`enable_html` (`bool`)
: Allow raw HTML elements in slide Markdown.

`enable_extension_attrs` (`bool`)
: Enable Markdown extension attributes.

`export_type` (`str`)
: Default export type used when the output path is not given.

`themes` (`list[str]`)
: Theme stylesheets, as paths relative to the workspace (or document) folder
  or as `http(s)` URLs.

`markdown_preview_breaks` (`bool`)
: Inherited line-break mode used when `breaks` is `inherit`.

`renderer_command` (`str`)
: Command line prefix of the external renderer (split with shell rules).

`fetch_timeout` (`float`)
: Timeout in seconds applied to remote theme downloads.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
import shlex
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import SettingsError
from .formats import ExportType


SETTINGS_FILENAMES = ("decksmith.yml", ".decksmith.yml")

BreaksMode = Literal["on", "off", "inherit"]


class ExportSettings(BaseModel):
    """User settings applied to every export."""

    model_config = ConfigDict(extra="forbid")

    breaks: BreaksMode = "on"
    chrome_path: str = ""
    enable_html: bool = False
    enable_extension_attrs: bool = False
    export_type: str = "pdf"
    themes: list[str] = Field(default_factory=list)
    markdown_preview_breaks: bool = False
    renderer_command: str = "marp"
    fetch_timeout: float = Field(default=30.0, gt=0)

    @field_validator("export_type")
    @classmethod
    def _normalise_export_type(cls, value: str) -> str:
        return ExportType.parse(value).value

    @field_validator("renderer_command")
    @classmethod
    def _require_command(cls, value: str) -> str:
        if not shlex.split(value):
            raise ValueError("renderer_command must not be empty")
        return value

    @property
    def renderer_argv(self) -> list[str]:
        return shlex.split(self.renderer_command)

    def resolve_breaks(self) -> bool:
        """Return the effective line-break flag for the renderer."""
        if self.breaks == "off":
            return False
        if self.breaks == "inherit":
            return self.markdown_preview_breaks
        return True

    def merged(self, overrides: Mapping[str, Any]) -> ExportSettings:
        """Return a copy with ``overrides`` applied, ignoring ``None`` values."""
        payload = self.model_dump()
        payload.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return ExportSettings.model_validate(payload)
        except ValidationError as exc:
            raise SettingsError(f"Invalid export settings: {exc}") from exc


def find_settings_file(search_dirs: Iterable[Path]) -> Path | None:
    """Return the first settings file found in ``search_dirs``."""
    for directory in search_dirs:
        for name in SETTINGS_FILENAMES:
            candidate = Path(directory) / name
            if candidate.is_file():
                return candidate
    return None


def load_settings(path: Path | None = None, search_dirs: Iterable[Path] = ()) -> ExportSettings:
    """Load export settings from YAML, falling back to defaults."""
    source = path if path is not None else find_settings_file(search_dirs)
    if source is None:
        return ExportSettings()

    try:
        raw = yaml.safe_load(Path(source).read_text(encoding="utf-8"))
    except OSError as exc:
        raise SettingsError(f"Unable to read settings file '{source}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise SettingsError(f"Settings file '{source}' is not valid YAML: {exc}") from exc

    if raw is None:
        return ExportSettings()
    if not isinstance(raw, Mapping):
        raise SettingsError(f"Settings file '{source}' must contain a mapping.")

    try:
        return ExportSettings.model_validate(dict(raw))
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings in '{source}': {exc}") from exc


__all__ = [
    "SETTINGS_FILENAMES",
    "BreaksMode",
    "ExportSettings",
    "find_settings_file",
    "load_settings",
]
