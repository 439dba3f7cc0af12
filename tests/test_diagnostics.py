from __future__ import annotations

import logging
from pathlib import Path

import pytest

from decksmith.api import ExportResult
from decksmith.core.diagnostics import LoggingEmitter, NullEmitter, format_event_message
from decksmith.core.exceptions import ExportError
from decksmith.core.formats import ExportType
from decksmith.ui.cli.diagnostics import CliEmitter
from decksmith.ui.cli.presenter import present_export_summary
from decksmith.ui.cli.state import emit_error, set_cli_state


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("nothing to see")
        emitter.error("still quiet")
    assert not caplog.records
    emitter.event("ignored", {"value": 1})
    assert emitter.debug_enabled is False


def test_logging_emitter_logs_events(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter()
    with caplog.at_level(logging.INFO, logger="decksmith"):
        emitter.event("renderer_invoke", {"argv": ["marp", "-c", "conf.json"]})
        emitter.error("boom")
    messages = [record.getMessage() for record in caplog.records]
    assert "Execute renderer: marp -c conf.json" in messages
    assert "boom" in messages


@pytest.mark.parametrize(
    ("name", "payload", "expected"),
    [
        ("theme_fetch", {"url": "https://example.com/a.css"}, "Fetching theme: https://example.com/a.css"),
        (
            "proxy_start",
            {"folder": "talk", "port": 8123},
            "Proxy server for the workspace talk has started (port: 8123)",
        ),
        (
            "work_file",
            {"path": "/tmp/x.md", "strategy": "temp-directory"},
            "Materialized document at /tmp/x.md (temp-directory)",
        ),
        ("unknown", {}, None),
    ],
)
def test_format_event_message(name: str, payload: dict, expected: str | None) -> None:
    assert format_event_message(name, payload) == expected


def test_cli_emitter_records_events_quietly(capsys: pytest.CaptureFixture[str]) -> None:
    state = set_cli_state(verbosity=0)
    emitter = CliEmitter(state)

    emitter.error("hidden", None)
    emitter.event("theme_fetch", {"url": "https://example.com/a.css"})
    emitter.warning("Heads up", None)

    captured = capsys.readouterr()
    combined = f"{captured.out}\n{captured.err}"
    assert "hidden" not in combined
    assert "Fetching theme" not in combined
    assert "Heads up" in combined
    assert state.last_event("theme_fetch") == {"url": "https://example.com/a.css"}
    assert state.last_event("proxy_start") is None


def test_cli_emitter_verbose_shows_errors_and_events(capsys: pytest.CaptureFixture[str]) -> None:
    state = set_cli_state(verbosity=1)
    emitter = CliEmitter(state)

    emitter.error("Boom", None)
    emitter.event("proxy_start", {"folder": "talk", "port": 8123})

    captured = capsys.readouterr()
    assert "Boom" in captured.err
    assert "has started (port: 8123)" in captured.err


def test_error_causes_shown_with_verbosity(capsys: pytest.CaptureFixture[str]) -> None:
    try:
        try:
            raise PermissionError("disk is read-only")
        except PermissionError as exc:
            raise ExportError("Failure to export") from exc
    except ExportError as exc:
        error = exc

    set_cli_state(verbosity=0)
    emit_error(str(error), exception=error)
    quiet = capsys.readouterr().err

    set_cli_state(verbosity=1)
    emit_error(str(error), exception=error)
    verbose = capsys.readouterr().err

    assert "disk is read-only" not in quiet
    assert "caused by: disk is read-only" in verbose
    assert "type: ExportError" in verbose


def test_export_summary_uses_recorded_events(capsys: pytest.CaptureFixture[str]) -> None:
    state = set_cli_state()
    state.record("work_file", {"path": "/tmp/x.md", "strategy": "temp-directory"})
    state.record("proxy_start", {"folder": "talk", "port": 8123})
    result = ExportResult(Path("deck.pdf"), ExportType.PDF, "http://127.0.0.1:8123/deck.md")

    present_export_summary(state, result)

    out = capsys.readouterr().out
    assert "via workspace proxy on port 8123" in out
    assert "temporary copy (temp-directory)" in out


def test_export_summary_without_staging(capsys: pytest.CaptureFixture[str]) -> None:
    state = set_cli_state()

    present_export_summary(state, ExportResult(Path("deck.html"), ExportType.HTML))

    out = capsys.readouterr().out
    assert "Exported HTML slide deck to deck.html" in out
    assert "temporary copy" not in out
