"""High-level export API."""

from __future__ import annotations

from .export import (
    ExportResult,
    ExportType,
    default_output_path,
    export_document,
    format_export_failure,
    should_use_proxy,
)


__all__ = [
    "ExportResult",
    "ExportType",
    "default_output_path",
    "export_document",
    "format_export_failure",
    "should_use_proxy",
]
