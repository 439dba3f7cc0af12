"""Export destinations supported by the renderer."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from .exceptions import UnsupportedExportTypeError


class ExportType(str, Enum):
    """Output formats with their recognised file extensions."""

    HTML = "html"
    PDF = "pdf"
    PPTX = "pptx"
    PNG = "png"
    JPEG = "jpeg"

    @property
    def extensions(self) -> tuple[str, ...]:
        return _EXTENSIONS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def default_suffix(self) -> str:
        return f".{self.extensions[0]}"

    @property
    def requires_browser(self) -> bool:
        """Whether the renderer needs a headless browser for this format."""
        return self is not ExportType.HTML

    @classmethod
    def parse(cls, value: str) -> ExportType:
        candidate = value.strip().lower().lstrip(".")
        for member in cls:
            if candidate == member.value or candidate in member.extensions:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown export type '{value}' (expected one of: {choices}).")

    @classmethod
    def from_path(cls, path: Path | str) -> ExportType:
        suffix = Path(path).suffix.lower().lstrip(".")
        for member in cls:
            if suffix in member.extensions:
                return member
        raise UnsupportedExportTypeError(
            f"Cannot export to '{path}': unsupported file extension '.{suffix}'."
            if suffix
            else f"Cannot export to '{path}': the output path has no file extension."
        )


_EXTENSIONS: dict[ExportType, tuple[str, ...]] = {
    ExportType.HTML: ("html",),
    ExportType.PDF: ("pdf",),
    ExportType.PPTX: ("pptx",),
    ExportType.PNG: ("png",),
    ExportType.JPEG: ("jpg", "jpeg"),
}

_DESCRIPTIONS: dict[ExportType, str] = {
    ExportType.HTML: "HTML slide deck",
    ExportType.PDF: "PDF slide deck",
    ExportType.PPTX: "PowerPoint document",
    ExportType.PNG: "PNG image (first slide only)",
    ExportType.JPEG: "JPEG image (first slide only)",
}


__all__ = ["ExportType"]
