# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the diagnostic handler."""

from __future__ import annotations

import io
import threading

import pytest

from errsnip.config import RenderConfig
from errsnip.errors import DiagnosticsAborted, SpanOutOfBoundsError
from errsnip.handler import DiagnosticHandler, HandlerMode
from errsnip.models import Diagnostic, Label
from errsnip.render import GraphicalRenderer
from errsnip.severity import Severity
from errsnip.source import NamedSource


def _handler(mode: HandlerMode = HandlerMode.BUFFERED, **kwargs) -> tuple[DiagnosticHandler, io.StringIO]:
    sink = io.StringIO()
    renderer = GraphicalRenderer(RenderConfig(color=False))
    return DiagnosticHandler(renderer, sink, mode, **kwargs), sink


def test_buffered_handler_drains_in_emission_order() -> None:
    handler, sink = _handler()
    messages = ["first problem", "second problem", "third problem"]
    for message in messages:
        handler.report(Diagnostic(message=message, severity=Severity.WARNING))

    assert sink.getvalue() == ""
    assert len(handler) == 3
    assert handler.drain() == 3

    output = sink.getvalue()
    positions = [output.index(message) for message in messages]
    assert positions == sorted(positions)
    assert len(handler) == 0
    assert handler.drain() == 0


def test_iteration_does_not_mutate_buffer() -> None:
    handler, sink = _handler()
    diagnostics = [Diagnostic(message="a"), Diagnostic(message="b", severity=Severity.INFO)]
    handler.extend(diagnostics)

    assert list(handler) == diagnostics
    assert list(handler) == diagnostics
    assert handler.diagnostics == tuple(diagnostics)
    assert len(handler) == 2
    assert sink.getvalue() == ""


def test_immediate_handler_renders_on_report() -> None:
    handler, sink = _handler(HandlerMode.IMMEDIATE)

    failed = handler.report(Diagnostic(message="now"))

    assert failed is True
    assert "× error: now" in sink.getvalue()
    assert len(handler) == 0


def test_failure_tracking_counts_errors_only() -> None:
    handler, _ = _handler()

    assert handler.report(Diagnostic(message="w", severity=Severity.WARNING)) is False
    assert not handler.has_failed
    assert handler.report(Diagnostic(message="e1")) is True
    assert handler.report(Diagnostic(message="e2")) is True

    assert handler.has_failed
    assert handler.error_count == 2
    assert handler.reported_count == 3

    handler.reset()

    assert not handler.has_failed
    assert handler.error_count == 0
    assert len(handler) == 0


def test_report_and_drain() -> None:
    handler, sink = _handler()
    handler.report(Diagnostic(message="earlier", severity=Severity.NOTE))

    rendered = handler.report_and_drain(Diagnostic(message="later", severity=Severity.HELP))

    assert rendered == 2
    assert sink.getvalue().index("earlier") < sink.getvalue().index("later")


def test_abort_on_error_raises_after_drain() -> None:
    handler, sink = _handler(abort_on_error=True)
    handler.report(Diagnostic(message="one"))
    handler.report(Diagnostic(message="two"))

    with pytest.raises(DiagnosticsAborted) as excinfo:
        handler.drain()

    assert excinfo.value.error_count == 2
    assert sink.getvalue().endswith("aborting due to 2 previous errors\n")
    assert "one" in sink.getvalue() and "two" in sink.getvalue()


def test_abort_on_error_ignores_warnings() -> None:
    handler, _ = _handler(abort_on_error=True)
    handler.report(Diagnostic(message="fine", severity=Severity.WARNING))

    assert handler.drain() == 1


def test_abort_counts_only_errors_of_the_current_drain() -> None:
    handler, sink = _handler(abort_on_error=True)
    handler.report(Diagnostic(message="broken"))
    with pytest.raises(DiagnosticsAborted):
        handler.drain()

    handler.report(Diagnostic(message="later", severity=Severity.WARNING))

    assert handler.drain() == 1
    assert handler.error_count == 1
    assert sink.getvalue().count("aborting due to") == 1


def test_immediate_handler_aborts_once_per_drain() -> None:
    handler, _ = _handler(HandlerMode.IMMEDIATE, abort_on_error=True)
    handler.report(Diagnostic(message="broken"))

    with pytest.raises(DiagnosticsAborted) as excinfo:
        handler.drain()

    assert excinfo.value.error_count == 1
    assert handler.drain() == 0


def test_failed_render_keeps_remaining_diagnostics() -> None:
    handler, _ = _handler()
    source = NamedSource(name="s.txt", content="abc")
    broken = Diagnostic(message="broken", source=source, labels=(Label(span=(0, 50)),))
    handler.report(broken)
    handler.report(Diagnostic(message="after"))

    with pytest.raises(SpanOutOfBoundsError):
        handler.drain()

    assert handler.diagnostics[0] is broken
    assert len(handler) == 2


def test_default_sink_is_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    handler = DiagnosticHandler(GraphicalRenderer(RenderConfig(color=False)), mode=HandlerMode.IMMEDIATE)

    handler.report(Diagnostic(message="to stderr"))

    assert "to stderr" in capsys.readouterr().err


def test_concurrent_reports_are_all_recorded() -> None:
    handler, _ = _handler()

    def worker(offset: int) -> None:
        for index in range(50):
            handler.report(Diagnostic(message=f"{offset}-{index}"))

    threads = [threading.Thread(target=worker, args=(offset,)) for offset in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(handler) == 200
    assert handler.error_count == 200
