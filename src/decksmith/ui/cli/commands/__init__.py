"""CLI command implementations exposed via `decksmith.ui.cli`."""

from __future__ import annotations

from .export import export


__all__ = ["export"]
